"""FastAPI application factory for the landing site API."""

from __future__ import annotations

import logging
from typing import Dict

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from landing import __version__
from landing.adventure import NarrativeBackend, get_backend
from landing.auth import SessionRegistry
from landing.config import settings
from landing.content.editor import ContentEditor
from landing.content.store import ContentStore, get_store
from landing.publish import GitPublisher, get_publisher
from landing.routers import admin, adventure, content, leads

logger = logging.getLogger(__name__)


def create_app(
    *,
    store: ContentStore | None = None,
    publisher: GitPublisher | None = None,
    backend: NarrativeBackend | None = None,
    sessions: SessionRegistry | None = None,
) -> FastAPI:
    store = store if store is not None else get_store()
    publisher = publisher if publisher is not None else get_publisher()

    app = FastAPI(title="Landing Site API", version=__version__)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS or ["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.store = store
    app.state.publisher = publisher
    app.state.backend = backend if backend is not None else get_backend()
    if sessions is None:
        sessions = SessionRegistry(lambda: ContentEditor(store, publisher))
    app.state.sessions = sessions

    app.include_router(content.router)
    app.include_router(leads.router)
    app.include_router(adventure.router)
    app.include_router(admin.router)

    @app.get("/health")
    def health() -> Dict[str, str]:
        return {"status": "healthy", "version": __version__}

    logger.info("app created content_dir=%s", store.root)
    return app
