from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends

from landing.config import settings
from landing.content.errors import ContentError
from landing.content.store import ContentStore
from landing.routers.deps import content_http_error, get_store

router = APIRouter(prefix="/api", tags=["content"])


@router.get("/content")
def public_content(lang: str | None = None, store: ContentStore = Depends(get_store)) -> Dict[str, Any]:
    """Read-only copy of the site text for the visitor's language."""

    try:
        document = store.read(lang or settings.DEFAULT_LANGUAGE)
    except ContentError as exc:
        raise content_http_error(exc) from exc
    return document.to_dict()


@router.get("/languages")
def languages(store: ContentStore = Depends(get_store)) -> Dict[str, Any]:
    stored = set(store.languages())
    return {
        "default": settings.DEFAULT_LANGUAGE,
        "languages": [code for code in settings.languages if code in stored],
    }
