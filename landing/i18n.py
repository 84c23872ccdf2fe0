"""Minimal i18n layer for API messages backed by YAML dictionaries."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping

import yaml

from landing.config import settings

MESSAGES_ROOT = Path(__file__).resolve().parent / "messages"

_CACHE: dict[str, Mapping[str, Any]] = {}


class LocaleError(RuntimeError):
    """Raised when message files cannot be parsed."""


def available_locales() -> set[str]:
    return {path.stem for path in MESSAGES_ROOT.glob("*.yaml")}


def _load_locale(code: str) -> Mapping[str, Any]:
    if code in _CACHE:
        return _CACHE[code]
    path = MESSAGES_ROOT / f"{code}.yaml"
    if not path.exists():
        raise LocaleError(f"Locale file missing: {path}")
    with path.open("r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh) or {}
    if not isinstance(data, Mapping):
        raise LocaleError(f"Locale {code} must contain a mapping")
    _CACHE[code] = data
    return data


def clear_cache() -> None:
    _CACHE.clear()


def resolve_locale(language_code: str | None) -> str:
    """Best message locale for a request language such as ``en-US``."""

    if not language_code:
        return settings.DEFAULT_LANGUAGE
    normalized = language_code.split("-")[0].strip().lower()
    if normalized in available_locales():
        return normalized
    return settings.DEFAULT_LANGUAGE


def gettext(key: str, locale: str | None = None, **params: Any) -> str:
    """Translation for ``key`` in ``locale``, falling back to the default language."""

    locales = [resolve_locale(locale)]
    if settings.DEFAULT_LANGUAGE not in locales:
        locales.append(settings.DEFAULT_LANGUAGE)

    for code in locales:
        try:
            root = _load_locale(code)
        except LocaleError:
            continue
        value = _lookup(key, root)
        if value is not None:
            return value.format(**params) if params else value
    return key


def _lookup(key: str, data: Mapping[str, Any]) -> str | None:
    cursor: Any = data
    for part in (part for part in key.split(".") if part):
        if isinstance(cursor, Mapping) and part in cursor:
            cursor = cursor[part]
        else:
            return None
    return cursor if isinstance(cursor, str) else None
