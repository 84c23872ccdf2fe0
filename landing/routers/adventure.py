from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from landing.adventure import (
    FALLBACK_ACTION_STORY,
    FALLBACK_START_STORY,
    AdventureError,
    NarrativeBackend,
    continue_adventure,
    start_adventure,
)
from landing.i18n import gettext
from landing.routers.deps import get_backend, request_locale

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/adventure", tags=["adventure"])


class ActionRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    command: str | None = None
    previous_scene: str = Field(default="", alias="previousScene")


def _fallback(message: str, story: str) -> JSONResponse:
    return JSONResponse(
        status_code=500,
        content={"success": False, "error": message, "story": story, "imageUrl": ""},
    )


@router.post("/start")
async def start(request: Request, backend: NarrativeBackend = Depends(get_backend)) -> JSONResponse:
    try:
        scene = await start_adventure(backend)
    except AdventureError as exc:
        logger.error("adventure start failed: %s", exc)
        return _fallback(gettext("adventure.start_failed", request_locale(request)), FALLBACK_START_STORY)
    return JSONResponse(scene.as_dict())


@router.post("/action")
async def action(
    payload: ActionRequest,
    request: Request,
    backend: NarrativeBackend = Depends(get_backend),
) -> JSONResponse:
    locale = request_locale(request)
    command = (payload.command or "").strip()
    if not command:
        return JSONResponse(
            status_code=400,
            content={"success": False, "error": gettext("adventure.command_required", locale)},
        )
    try:
        scene = await continue_adventure(backend, command, payload.previous_scene)
    except AdventureError as exc:
        logger.error("adventure action failed: %s", exc)
        return _fallback(gettext("adventure.action_failed", locale), FALLBACK_ACTION_STORY)
    return JSONResponse(scene.as_dict())
