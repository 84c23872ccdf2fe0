"""Server-side admin sessions.

The admin password is checked on the server with a constant-time compare and
exchanged for a random session token. Every store-mutating endpoint resolves
that token again; nothing the client holds is trusted on its own.
"""

from __future__ import annotations

import hmac
import logging
import secrets
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable

from landing.config import settings
from landing.content.editor import ContentEditor

logger = logging.getLogger("admin")


class AuthNotConfiguredError(RuntimeError):
    """Raised when no admin password is configured."""


class AuthError(RuntimeError):
    """Raised when the provided credentials are wrong."""


def verify_password(provided: str | None, expected: str | None = None) -> bool:
    expected = settings.ADMIN_PASSWORD if expected is None else expected
    if not expected:
        raise AuthNotConfiguredError("ADMIN_PASSWORD is not configured")
    if not provided:
        return False
    return hmac.compare_digest(provided.encode("utf-8"), expected.encode("utf-8"))


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class AdminSession:
    token: str
    editor: ContentEditor
    created_at: datetime
    expires_at: datetime

    def expired(self, now: datetime | None = None) -> bool:
        return (now or _utcnow()) >= self.expires_at


class SessionRegistry:
    """In-process session table; each session owns one content editor."""

    def __init__(
        self,
        editor_factory: Callable[[], ContentEditor],
        *,
        ttl: timedelta | None = None,
        password: str | None = None,
    ) -> None:
        self._editor_factory = editor_factory
        self._ttl = ttl or timedelta(minutes=settings.ADMIN_SESSION_TTL_MINUTES)
        self._password = password
        self._sessions: dict[str, AdminSession] = {}
        self._lock = threading.Lock()

    @property
    def configured(self) -> bool:
        expected = settings.ADMIN_PASSWORD if self._password is None else self._password
        return bool(expected)

    def login(self, password: str | None) -> AdminSession:
        if not verify_password(password, self._password):
            logger.warning("admin login rejected")
            raise AuthError("invalid password")
        now = _utcnow()
        session = AdminSession(
            token=secrets.token_urlsafe(32),
            editor=self._editor_factory(),
            created_at=now,
            expires_at=now + self._ttl,
        )
        with self._lock:
            self._purge(now)
            self._sessions[session.token] = session
        logger.info("admin login ok, active sessions=%s", len(self._sessions))
        return session

    def get(self, token: str | None) -> AdminSession | None:
        if not token:
            return None
        now = _utcnow()
        with self._lock:
            self._purge(now)
            session = self._sessions.get(token)
            if session is None:
                return None
            session.expires_at = now + self._ttl
            return session

    def logout(self, token: str | None) -> bool:
        if not token:
            return False
        with self._lock:
            return self._sessions.pop(token, None) is not None

    def __len__(self) -> int:
        with self._lock:
            self._purge(_utcnow())
            return len(self._sessions)

    def _purge(self, now: datetime) -> None:
        for token in [t for t, s in self._sessions.items() if s.expired(now)]:
            del self._sessions[token]


__all__ = [
    "AdminSession",
    "AuthError",
    "AuthNotConfiguredError",
    "SessionRegistry",
    "verify_password",
]
