"""Shared FastAPI dependencies and error mapping for the routers."""

from __future__ import annotations

from fastapi import HTTPException, Request

from landing import i18n
from landing.adventure import NarrativeBackend
from landing.auth import SessionRegistry
from landing.content.errors import (
    ContentCorruptError,
    ContentError,
    ContentNotFoundError,
    ContentPathError,
    ContentStorageError,
    ContentValueError,
    EditorStateError,
    IndexOutOfRangeError,
    InvalidLanguageError,
)
from landing.content.store import ContentStore
from landing.publish import GitPublisher

_STATUS_BY_CODE = {
    ContentNotFoundError.code: 404,
    InvalidLanguageError.code: 400,
    ContentCorruptError.code: 500,
    ContentStorageError.code: 500,
    ContentPathError.code: 422,
    IndexOutOfRangeError.code: 422,
    ContentValueError.code: 422,
    EditorStateError.code: 409,
    "invalid_document": 422,
    "publish_failed": 502,
    "publish_unavailable": 503,
}


def status_for(code: str | None) -> int:
    return _STATUS_BY_CODE.get(code or "", 500)


def content_http_error(exc: ContentError) -> HTTPException:
    return HTTPException(
        status_code=status_for(exc.code),
        detail={"error": exc.code, "message": str(exc)},
    )


def request_locale(request: Request, explicit: str | None = None) -> str:
    if explicit:
        return i18n.resolve_locale(explicit)
    header = request.headers.get("Accept-Language", "")
    first = header.split(",")[0].split(";")[0].strip()
    return i18n.resolve_locale(first or None)


def get_store(request: Request) -> ContentStore:
    return request.app.state.store


def get_publisher(request: Request) -> GitPublisher:
    return request.app.state.publisher


def get_sessions(request: Request) -> SessionRegistry:
    return request.app.state.sessions


def get_backend(request: Request) -> NarrativeBackend:
    return request.app.state.backend
