"""Test configuration helpers."""

from __future__ import annotations

import asyncio
import copy
import json
import shutil
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

SEED_LOCALES = ROOT / "locales"


def pytest_configure(config: pytest.Config) -> None:
    """Register the asyncio marker for the lightweight runner below."""

    config.addinivalue_line("markers", "asyncio: execute the test inside an event loop")


@pytest.hookimpl(tryfirst=True)
def pytest_pyfunc_call(pyfuncitem: pytest.Function) -> bool | None:
    """Execute ``@pytest.mark.asyncio`` tests without requiring pytest-asyncio."""

    marker = pyfuncitem.get_closest_marker("asyncio")
    if marker is None:
        return None

    func = pyfuncitem.obj
    if not asyncio.iscoroutinefunction(func):
        return None

    argnames = pyfuncitem._fixtureinfo.argnames
    kwargs = {name: pyfuncitem.funcargs[name] for name in argnames}
    loop = asyncio.new_event_loop()
    try:
        asyncio.set_event_loop(loop)
        loop.run_until_complete(func(**kwargs))
    finally:
        asyncio.set_event_loop(None)
        loop.close()
    return True


@pytest.fixture
def content_root(tmp_path) -> Path:
    """A private copy of the seed ``locales`` tree."""

    target = tmp_path / "locales"
    shutil.copytree(SEED_LOCALES, target)
    return target


@pytest.fixture
def store(content_root):
    from landing.content.store import ContentStore

    return ContentStore(content_root)


@pytest.fixture
def seed_document() -> dict:
    with (SEED_LOCALES / "ru" / "common.json").open(encoding="utf-8") as fh:
        return json.load(fh)


@pytest.fixture
def make_document(seed_document):
    """Factory returning fresh deep copies of the ru seed document."""

    def _make() -> dict:
        return copy.deepcopy(seed_document)

    return _make
