"""Exceptions raised by the content store and the content editor."""

from __future__ import annotations


class ContentError(RuntimeError):
    """Base class for content failures."""

    code = "content_error"


class InvalidLanguageError(ContentError):
    """Raised when a language code cannot address the store."""

    code = "invalid_language"

    def __init__(self, language: str) -> None:
        super().__init__(f"Invalid language code: {language!r}")
        self.language = language


class ContentNotFoundError(ContentError):
    """Raised when no document is stored for the requested language."""

    code = "not_found"

    def __init__(self, language: str) -> None:
        super().__init__(f"Language file not found: {language}")
        self.language = language


class ContentCorruptError(ContentError):
    """Raised when stored bytes do not parse into a content document."""

    code = "corrupt"

    def __init__(self, language: str, reason: str) -> None:
        super().__init__(f"Content for {language!r} is corrupt: {reason}")
        self.language = language
        self.reason = reason


class ContentStorageError(ContentError):
    """Raised when the storage medium fails (permissions, disk, ...)."""

    code = "storage_error"

    def __init__(self, language: str, exc: OSError) -> None:
        super().__init__(f"Storage failure for {language!r}: {exc}")
        self.language = language


class ContentPathError(ContentError):
    """Raised when a path does not address a node of the content schema."""

    code = "invalid_path"


class IndexOutOfRangeError(ContentPathError):
    """Raised when a list position does not exist in the edited document."""

    code = "index_out_of_range"

    def __init__(self, path: str, index: int, length: int) -> None:
        super().__init__(f"Index {index} is out of range for {path!r} (length {length})")
        self.path = path
        self.index = index
        self.length = length


class ContentValueError(ContentError):
    """Raised when a value does not fit the addressed node."""

    code = "invalid_value"


class EditorStateError(ContentError):
    """Raised when the editor is asked to act without a loaded document."""

    code = "editor_state"


__all__ = [
    "ContentError",
    "ContentCorruptError",
    "ContentNotFoundError",
    "ContentPathError",
    "ContentStorageError",
    "ContentValueError",
    "EditorStateError",
    "IndexOutOfRangeError",
    "InvalidLanguageError",
]
