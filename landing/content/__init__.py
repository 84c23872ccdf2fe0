from landing.content.editor import ContentEditor, EditorResult
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
from landing.content.schema import PLAN_KEYS, ContentDocument
from landing.content.store import ContentStore, get_store, normalize_language

__all__ = [
    "PLAN_KEYS",
    "ContentCorruptError",
    "ContentDocument",
    "ContentEditor",
    "ContentError",
    "ContentNotFoundError",
    "ContentPathError",
    "ContentStorageError",
    "ContentStore",
    "ContentValueError",
    "EditorResult",
    "EditorStateError",
    "IndexOutOfRangeError",
    "InvalidLanguageError",
    "get_store",
    "normalize_language",
]
