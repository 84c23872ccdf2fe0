"""Admin API: login, whole-document read/write, publish and the session editor."""

from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from landing.auth import AdminSession, AuthError, AuthNotConfiguredError, SessionRegistry
from landing.config import settings
from landing.content.editor import EditorResult
from landing.content.errors import ContentError
from landing.content.schema import ContentDocument
from landing.content.store import ContentStore
from landing.i18n import gettext
from landing.publish import GitPublisher, PublishError
from landing.routers.deps import (
    content_http_error,
    get_publisher,
    get_sessions,
    get_store,
    request_locale,
    status_for,
)

logger = logging.getLogger("admin")

router = APIRouter(prefix="/api/admin", tags=["admin"])


class LoginRequest(BaseModel):
    password: str = Field(..., description="Admin password")


class ContentWrite(BaseModel):
    language: str = Field(..., min_length=1)
    content: ContentDocument


class LoadRequest(BaseModel):
    language: str = Field(..., min_length=1)


class FieldUpdate(BaseModel):
    path: str = Field(..., min_length=1, description="Dot path such as hero.title")
    value: Any


class ListItemUpdate(BaseModel):
    list_path: str = Field(..., min_length=1)
    index: int
    field: str | None = None
    value: Any


class ListItemAdd(BaseModel):
    list_path: str = Field(..., min_length=1)
    item: Any
    position: int | None = None


class ListItemRemove(BaseModel):
    list_path: str = Field(..., min_length=1)
    index: int


def _extract_token(request: Request) -> str | None:
    header = request.headers.get("Authorization")
    if header:
        scheme, _, value = header.partition(" ")
        return value.strip() if scheme.lower() == "bearer" else header.strip()
    return request.headers.get("X-Admin-Token")


def require_session(request: Request, sessions: SessionRegistry = Depends(get_sessions)) -> AdminSession:
    locale = request_locale(request)
    if not sessions.configured:
        raise HTTPException(status_code=503, detail=gettext("admin.not_configured", locale))
    session = sessions.get(_extract_token(request))
    if session is None:
        raise HTTPException(status_code=401, detail=gettext("admin.unauthorized", locale))
    return session


def _result_response(result: EditorResult, **extra: Any) -> JSONResponse:
    payload = result.as_dict()
    payload.update(extra)
    return JSONResponse(status_code=200 if result.ok else status_for(result.error), content=payload)


@router.post("/login")
def login(payload: LoginRequest, request: Request, sessions: SessionRegistry = Depends(get_sessions)) -> Dict[str, Any]:
    locale = request_locale(request)
    try:
        session = sessions.login(payload.password)
    except AuthNotConfiguredError as exc:
        raise HTTPException(status_code=503, detail=gettext("admin.not_configured", locale)) from exc
    except AuthError as exc:
        raise HTTPException(status_code=401, detail=gettext("admin.login_failed", locale)) from exc
    return {"ok": True, "token": session.token, "expires_at": session.expires_at.isoformat()}


@router.post("/logout")
def logout(request: Request, sessions: SessionRegistry = Depends(get_sessions)) -> Dict[str, Any]:
    return {"ok": sessions.logout(_extract_token(request))}


@router.get("/content")
def read_content(
    lang: str | None = None,
    _: AdminSession = Depends(require_session),
    store: ContentStore = Depends(get_store),
) -> Dict[str, Any]:
    try:
        document = store.read(lang or settings.DEFAULT_LANGUAGE)
    except ContentError as exc:
        raise content_http_error(exc) from exc
    return document.to_dict()


@router.post("/content")
def write_content(
    payload: ContentWrite,
    request: Request,
    _: AdminSession = Depends(require_session),
    store: ContentStore = Depends(get_store),
) -> Dict[str, Any]:
    try:
        store.write(payload.language, payload.content)
    except ContentError as exc:
        raise content_http_error(exc) from exc
    logger.info("content replaced lang=%s", payload.language)
    return {"ok": True, "success": True, "message": gettext("admin.saved", request_locale(request))}


@router.post("/deploy")
def deploy(
    request: Request,
    _: AdminSession = Depends(require_session),
    publisher: GitPublisher = Depends(get_publisher),
) -> Dict[str, Any]:
    try:
        result = publisher.publish()
    except PublishError as exc:
        logger.error("deploy failed: %s", exc)
        raise HTTPException(
            status_code=502,
            detail={
                "error": "publish_failed",
                "message": gettext("admin.publish_failed", request_locale(request)),
                "details": exc.as_dict(),
            },
        ) from exc
    return {"ok": True, "success": True, "message": result.message, "committed": result.committed}


@router.post("/editor/load")
def editor_load(payload: LoadRequest, session: AdminSession = Depends(require_session)) -> JSONResponse:
    result = session.editor.load(payload.language)
    return _result_response(result, language=session.editor.language)


@router.get("/editor")
def editor_state(session: AdminSession = Depends(require_session)) -> Dict[str, Any]:
    editor = session.editor
    try:
        content = editor.snapshot()
    except ContentError as exc:
        raise content_http_error(exc) from exc
    return {"ok": True, "language": editor.language, "dirty": editor.dirty, "content": content}


@router.patch("/editor/field")
def editor_set_field(payload: FieldUpdate, session: AdminSession = Depends(require_session)) -> Dict[str, Any]:
    try:
        value = session.editor.set_field(payload.path, payload.value)
    except ContentError as exc:
        raise content_http_error(exc) from exc
    return {"ok": True, "path": payload.path, "value": value, "dirty": session.editor.dirty}


@router.patch("/editor/list-item")
def editor_set_list_item(payload: ListItemUpdate, session: AdminSession = Depends(require_session)) -> Dict[str, Any]:
    try:
        value = session.editor.set_list_item_field(payload.list_path, payload.index, payload.field, payload.value)
    except ContentError as exc:
        raise content_http_error(exc) from exc
    return {"ok": True, "value": value, "dirty": session.editor.dirty}


@router.post("/editor/list-item")
def editor_add_list_item(payload: ListItemAdd, session: AdminSession = Depends(require_session)) -> Dict[str, Any]:
    try:
        position = session.editor.add_list_item(payload.list_path, payload.item, payload.position)
    except ContentError as exc:
        raise content_http_error(exc) from exc
    return {"ok": True, "position": position, "dirty": session.editor.dirty}


@router.delete("/editor/list-item")
def editor_remove_list_item(
    payload: ListItemRemove,
    session: AdminSession = Depends(require_session),
) -> Dict[str, Any]:
    try:
        removed = session.editor.remove_list_item(payload.list_path, payload.index)
    except ContentError as exc:
        raise content_http_error(exc) from exc
    return {"ok": True, "removed": removed, "dirty": session.editor.dirty}


@router.post("/editor/save")
def editor_save(session: AdminSession = Depends(require_session)) -> JSONResponse:
    return _result_response(session.editor.save())


@router.post("/editor/publish")
def editor_publish(session: AdminSession = Depends(require_session)) -> JSONResponse:
    return _result_response(session.editor.publish())
