"""Editing buffer for one language's content document."""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from typing import Any, Protocol

from landing.content import paths
from landing.content.errors import (
    ContentError,
    ContentPathError,
    EditorStateError,
    IndexOutOfRangeError,
)
from landing.content.schema import ContentDocument
from landing.content.store import ContentStore
from landing.publish import PublishError

logger = logging.getLogger("admin")


class Publisher(Protocol):
    def publish(self) -> Any: ...


@dataclass(slots=True)
class EditorResult:
    """Outcome reported to the caller of load/save/publish."""

    ok: bool
    message: str
    error: str | None = None
    details: dict[str, Any] = field(default_factory=dict)

    def as_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"ok": self.ok, "message": self.message}
        if self.error:
            payload["error"] = self.error
        if self.details:
            payload["details"] = self.details
        return payload


class ContentEditor:
    def __init__(self, store: ContentStore, publisher: Publisher | None = None) -> None:
        self._store = store
        self._publisher = publisher
        self._language: str | None = None
        self._buffer: dict[str, Any] | None = None
        self._dirty = False
        self._saved = False

    @property
    def language(self) -> str | None:
        return self._language

    @property
    def dirty(self) -> bool:
        return self._dirty

    @property
    def loaded(self) -> bool:
        return self._buffer is not None

    @property
    def document(self) -> ContentDocument:
        return ContentDocument.model_validate(self._require_buffer())

    def snapshot(self) -> dict[str, Any]:
        return copy.deepcopy(self._require_buffer())

    def _require_buffer(self) -> dict[str, Any]:
        if self._buffer is None:
            raise EditorStateError("No document loaded; call load() first")
        return self._buffer

    def _reset(self) -> None:
        self._language = None
        self._buffer = None
        self._dirty = False
        self._saved = False

    def load(self, language: str) -> EditorResult:
        """Make ``language`` the active document, discarding unsaved edits."""

        if self._dirty:
            logger.info("discarding unsaved edits lang=%s", self._language)
        self._reset()
        try:
            document = self._store.read(language)
        except ContentError as exc:
            logger.warning("load failed lang=%s: %s", language, exc)
            return EditorResult(False, str(exc), error=exc.code)
        self._language = self._store.path_for(language).parent.name
        self._buffer = document.to_dict()
        return EditorResult(True, f"Loaded {self._language}")

    def get_field(self, path: str) -> Any:
        return copy.deepcopy(paths.get_value(self._require_buffer(), path))

    def set_field(self, path: str, value: Any) -> Any:
        """Replace the value at dot-separated ``path``; errors leave the buffer intact."""

        coerced = paths.set_value(self._require_buffer(), path, value)
        self._dirty = True
        return coerced

    def _list_path(self, list_path: str) -> paths.ResolvedPath:
        resolved = paths.parse_path(list_path)
        if not resolved.is_list:
            raise ContentPathError(f"{list_path!r} does not address a list")
        return resolved

    def set_list_item_field(
        self,
        list_path: str,
        index: int,
        field_name: str | None,
        value: Any,
    ) -> Any:
        resolved = self._list_path(list_path)
        items = paths.get_value(self._require_buffer(), resolved)
        if isinstance(index, bool) or not isinstance(index, int) or index < 0 or index >= len(items):
            raise IndexOutOfRangeError(resolved.path, index, len(items))
        target = f"{resolved.path}.{index}"
        if field_name:
            target = f"{target}.{field_name}"
        return self.set_field(target, value)

    def replace_list(self, list_path: str, items: list[Any]) -> list[Any]:
        resolved = self._list_path(list_path)
        return self.set_field(resolved.path, items)

    def add_list_item(self, list_path: str, item: Any, position: int | None = None) -> int:
        index = paths.insert_item(self._require_buffer(), list_path, item, position)
        self._dirty = True
        return index

    def remove_list_item(self, list_path: str, index: int) -> Any:
        removed = paths.remove_item(self._require_buffer(), list_path, index)
        self._dirty = True
        return removed

    def save(self) -> EditorResult:
        """Write the whole buffer for the active language."""

        if self._buffer is None or self._language is None:
            return EditorResult(False, "No document loaded", error=EditorStateError.code)
        try:
            document = ContentDocument.model_validate(self._buffer)
            self._store.write(self._language, document)
        except ContentError as exc:
            return EditorResult(False, str(exc), error=exc.code)
        except ValueError as exc:
            return EditorResult(False, str(exc), error="invalid_document")
        self._dirty = False
        self._saved = True
        logger.info("content saved via editor lang=%s", self._language)
        return EditorResult(True, "Changes saved", details={"language": self._language})

    def publish(self) -> EditorResult:
        """Run the publish trigger for the persisted state."""

        if self._publisher is None:
            return EditorResult(False, "Publishing is not configured", error="publish_unavailable")
        if not self._saved or self._dirty:
            return EditorResult(False, "Save the changes before publishing", error=EditorStateError.code)

        try:
            result = self._publisher.publish()
        except PublishError as exc:
            logger.error("publish failed: %s", exc)
            return EditorResult(False, str(exc), error="publish_failed", details=exc.as_dict())
        message = getattr(result, "message", None) or str(result)
        committed = getattr(result, "committed", None)
        details = {"committed": committed} if committed is not None else {}
        return EditorResult(True, message, details=details)


__all__ = ["ContentEditor", "EditorResult", "Publisher"]
