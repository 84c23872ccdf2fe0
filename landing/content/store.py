"""File-backed content store: one JSON document per language code."""

from __future__ import annotations

import logging
import os
import re
import secrets
import stat
from pathlib import Path

from pydantic import ValidationError

from landing.config import settings
from landing.content.errors import (
    ContentCorruptError,
    ContentNotFoundError,
    ContentStorageError,
    InvalidLanguageError,
)
from landing.content.schema import ContentDocument

logger = logging.getLogger(__name__)

_LANGUAGE_RE = re.compile(r"^[a-z]{2,3}(?:-[a-z0-9]{2,8})?$")


def normalize_language(language: str | None) -> str:
    """Return the canonical code or raise :class:`InvalidLanguageError`."""

    code = (language or "").strip().lower()
    if not _LANGUAGE_RE.match(code):
        raise InvalidLanguageError(language or "")
    return code


class ContentStore:
    """Reads and writes ``<root>/<lang>/<filename>``.

    There is no cache and no locking: every read goes to disk and concurrent
    writers for the same language race, the last rename wins.
    """

    def __init__(self, root: str | Path, filename: str = "common.json") -> None:
        self.root = Path(root)
        self.filename = filename

    @classmethod
    def from_settings(cls) -> "ContentStore":
        return cls(settings.CONTENT_DIR, settings.CONTENT_FILENAME)

    def path_for(self, language: str) -> Path:
        return self.root / normalize_language(language) / self.filename

    def exists(self, language: str) -> bool:
        return self.path_for(language).is_file()

    def languages(self) -> list[str]:
        """Language codes that currently have a stored document."""

        if not self.root.is_dir():
            return []
        codes: list[str] = []
        for child in sorted(self.root.iterdir()):
            if child.is_dir() and _LANGUAGE_RE.match(child.name) and (child / self.filename).is_file():
                codes.append(child.name)
        return codes

    def read(self, language: str) -> ContentDocument:
        code = normalize_language(language)
        path = self.root / code / self.filename
        try:
            raw = path.read_bytes()
        except FileNotFoundError as exc:
            raise ContentNotFoundError(code) from exc
        except IsADirectoryError as exc:
            raise ContentCorruptError(code, f"{path} is a directory") from exc
        except OSError as exc:
            logger.error("content read failed lang=%s path=%s: %s", code, path, exc)
            raise ContentStorageError(code, exc) from exc

        try:
            return ContentDocument.from_json(raw)
        except ValidationError as exc:
            first = exc.errors()[0]
            if first["type"] in ("json_invalid", "json_type"):
                raise ContentCorruptError(code, f"not valid UTF-8 JSON ({first['msg']})") from exc
            location = ".".join(str(part) for part in first["loc"]) or "<document>"
            reason = f"{exc.error_count()} schema error(s), first at {location}: {first['msg']}"
            raise ContentCorruptError(code, reason) from exc

    def write(self, language: str, document: ContentDocument) -> Path:
        """Persist ``document`` for ``language`` atomically and return the path.

        The JSON is written to a temporary file next to the target and moved
        into place with :func:`os.replace`; the previous file survives any
        failure untouched.
        """

        if not isinstance(document, ContentDocument):
            document = ContentDocument.model_validate(document)
        code = normalize_language(language)
        path = self.root / code / self.filename
        payload = document.to_json().encode("utf-8")

        tmp_path: Path | None = None
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = path.with_name(f".{self.filename}.{secrets.token_hex(6)}.tmp")
            # new files follow the umask; a replaced file keeps its previous mode
            with tmp_path.open("xb") as fh:
                fh.write(payload)
                fh.flush()
                os.fsync(fh.fileno())
            if path.exists():
                os.chmod(tmp_path, stat.S_IMODE(path.stat().st_mode))
            os.replace(tmp_path, path)
            tmp_path = None
        except OSError as exc:
            logger.error("content write failed lang=%s path=%s: %s", code, path, exc)
            raise ContentStorageError(code, exc) from exc
        finally:
            if tmp_path is not None:
                try:
                    os.unlink(tmp_path)
                except OSError:
                    logger.warning("could not remove temp file %s", tmp_path)

        logger.info("content saved lang=%s bytes=%s path=%s", code, len(payload), path)
        return path


def get_store() -> ContentStore:
    return ContentStore.from_settings()


__all__ = ["ContentStore", "get_store", "normalize_language"]
