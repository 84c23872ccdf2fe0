"""Dot-path addressing over the content document schema.

A path such as ``pricing.plans.start.price`` or ``testimonials.items.1.rating``
is resolved against the static :class:`~landing.content.schema.ContentDocument`
schema before it touches any data. Every segment becomes either a
:class:`Key` (a declared model field, including the closed plan keys) or an
:class:`Index` (a position inside an ordered sequence). Paths that leave the
schema are rejected with :class:`ContentPathError`; positions are checked
against the live document and rejected with :class:`IndexOutOfRangeError`.

Values are validated with a pydantic ``TypeAdapter`` built from the addressed
node's annotation, so a leaf only accepts its scalar type and a list node
accepts a whole replacement list.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Annotated, Any, MutableMapping, MutableSequence, Union, get_args, get_origin

from pydantic import BaseModel, TypeAdapter, ValidationError
from pydantic.fields import FieldInfo

from landing.content.errors import ContentPathError, ContentValueError, IndexOutOfRangeError
from landing.content.schema import ContentDocument

WILDCARD = "*"


@dataclass(frozen=True, slots=True)
class Key:
    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True, slots=True)
class Index:
    position: int

    def __str__(self) -> str:
        return str(self.position)


Segment = Union[Key, Index]


def _is_model(annotation: Any) -> bool:
    return isinstance(annotation, type) and issubclass(annotation, BaseModel)


def _is_list(annotation: Any) -> bool:
    return get_origin(annotation) is list


def _field_annotation(field: FieldInfo) -> Any:
    # pydantic moves Annotated metadata (strictness, bounds) into FieldInfo.metadata
    if field.metadata:
        return Annotated[(field.annotation, *field.metadata)]
    return field.annotation


def _item_annotation(annotation: Any) -> Any:
    (item,) = get_args(annotation)
    return item


@dataclass(frozen=True)
class ResolvedPath:
    path: str
    segments: tuple[Segment, ...]
    target: Any

    @property
    def is_list(self) -> bool:
        return _is_list(self.target)

    @property
    def item_target(self) -> Any:
        if not self.is_list:
            raise ContentPathError(f"{self.path!r} does not address a list")
        return _item_annotation(self.target)

    def validate(self, value: Any) -> Any:
        """Return ``value`` coerced to the node's JSON form or raise ContentValueError."""

        return _coerce(self.target, value, self.path)


def _coerce(annotation: Any, value: Any, path: str) -> Any:
    adapter = TypeAdapter(annotation)
    try:
        validated = adapter.validate_python(value)
    except ValidationError as exc:
        errors = "; ".join(
            f"{'.'.join(str(loc) for loc in err['loc']) or path}: {err['msg']}" for err in exc.errors()
        )
        raise ContentValueError(f"Invalid value for {path!r}: {errors}") from exc
    return adapter.dump_python(validated, mode="json")


@lru_cache(maxsize=256)
def parse_path(path: str) -> ResolvedPath:
    """Resolve ``path`` against the document schema."""

    if not isinstance(path, str) or not path.strip():
        raise ContentPathError("Path must be a non-empty string")

    parts = path.strip().split(".")
    annotation: Any = ContentDocument
    segments: list[Segment] = []
    for depth, part in enumerate(parts):
        where = ".".join(parts[:depth]) or "<document>"
        if not part:
            raise ContentPathError(f"Empty segment in path {path!r}")
        if _is_model(annotation):
            field = annotation.model_fields.get(part)
            if field is None:
                raise ContentPathError(f"{where!r} has no field {part!r}")
            segments.append(Key(part))
            annotation = _field_annotation(field)
        elif _is_list(annotation):
            if not (part.isascii() and part.isdigit()):
                raise ContentPathError(f"{where!r} is a list; expected a position, got {part!r}")
            segments.append(Index(int(part)))
            annotation = _item_annotation(annotation)
        else:
            raise ContentPathError(f"{where!r} is a plain value and has no {part!r}")
    return ResolvedPath(path=path.strip(), segments=tuple(segments), target=annotation)


def valid_paths() -> list[str]:
    """Enumerate every addressable path pattern, ``*`` standing for a list position."""

    found: list[str] = []

    def _walk(annotation: Any, prefix: str) -> None:
        if _is_model(annotation):
            for name, field in annotation.model_fields.items():
                path = f"{prefix}.{name}" if prefix else name
                found.append(path)
                _walk(_field_annotation(field), path)
        elif _is_list(annotation):
            path = f"{prefix}.{WILDCARD}"
            found.append(path)
            _walk(_item_annotation(annotation), path)

    _walk(ContentDocument, "")
    return found


def _step(container: Any, segment: Segment, walked: str) -> Any:
    if isinstance(segment, Index):
        if not isinstance(container, MutableSequence):
            raise ContentPathError(f"{walked!r} is not a list in the edited document")
        if segment.position >= len(container):
            raise IndexOutOfRangeError(walked, segment.position, len(container))
        return container[segment.position]
    if not isinstance(container, MutableMapping) or segment.name not in container:
        raise ContentPathError(f"{walked!r} has no field {segment.name!r} in the edited document")
    return container[segment.name]


def _parent(document: MutableMapping[str, Any], resolved: ResolvedPath) -> Any:
    container: Any = document
    walked: list[str] = []
    for segment in resolved.segments[:-1]:
        container = _step(container, segment, ".".join(walked) or "<document>")
        walked.append(str(segment))
    return container


def get_value(document: MutableMapping[str, Any], path: str | ResolvedPath) -> Any:
    resolved = path if isinstance(path, ResolvedPath) else parse_path(path)
    container = _parent(document, resolved)
    parent_path = ".".join(str(s) for s in resolved.segments[:-1]) or "<document>"
    return _step(container, resolved.segments[-1], parent_path)


def set_value(document: MutableMapping[str, Any], path: str | ResolvedPath, value: Any) -> Any:
    """Replace the node at ``path`` in the plain-dict ``document``.

    Validation and position checks happen before any mutation, so a failure
    leaves ``document`` exactly as it was.
    """

    resolved = path if isinstance(path, ResolvedPath) else parse_path(path)
    coerced = resolved.validate(value)
    container = _parent(document, resolved)
    last = resolved.segments[-1]
    parent_path = ".".join(str(s) for s in resolved.segments[:-1]) or "<document>"
    _step(container, last, parent_path)
    if isinstance(last, Index):
        container[last.position] = coerced
    else:
        container[last.name] = coerced
    return coerced


def _live_list(document: MutableMapping[str, Any], list_path: str) -> tuple[ResolvedPath, list[Any]]:
    resolved = parse_path(list_path)
    if not resolved.is_list:
        raise ContentPathError(f"{list_path!r} does not address a list")
    items = get_value(document, resolved)
    if not isinstance(items, list):
        raise ContentPathError(f"{list_path!r} is not a list in the edited document")
    return resolved, items


def insert_item(
    document: MutableMapping[str, Any],
    list_path: str,
    item: Any,
    position: int | None = None,
) -> int:
    """Insert a validated ``item`` into the list at ``list_path`` and return its position."""

    resolved, items = _live_list(document, list_path)
    if position is None:
        position = len(items)
    if position < 0 or position > len(items):
        raise IndexOutOfRangeError(resolved.path, position, len(items))
    coerced = _coerce(resolved.item_target, item, f"{resolved.path}.{position}")
    items.insert(position, coerced)
    return position


def remove_item(document: MutableMapping[str, Any], list_path: str, index: int) -> Any:
    resolved, items = _live_list(document, list_path)
    if index < 0 or index >= len(items):
        raise IndexOutOfRangeError(resolved.path, index, len(items))
    return items.pop(index)


__all__ = [
    "Index",
    "Key",
    "ResolvedPath",
    "Segment",
    "get_value",
    "insert_item",
    "parse_path",
    "remove_item",
    "set_value",
    "valid_paths",
]
