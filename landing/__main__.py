"""Command line entry point: ``python -m landing <command>``."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Sequence

from landing.config import settings
from landing.content import paths
from landing.content.errors import ContentError
from landing.content.store import ContentStore
from landing.logging_config import setup_logging
from landing.publish import GitPublisher, PublishError

logger = logging.getLogger("landing.cli")


def _leaf_paths(node: object, prefix: str = "") -> set[str]:
    """Concrete paths of a document in dict form, list positions included."""

    if isinstance(node, dict):
        found: set[str] = set()
        for key, value in node.items():
            found |= _leaf_paths(value, f"{prefix}.{key}" if prefix else key)
        return found
    if isinstance(node, list) and node and isinstance(node[0], dict):
        found = set()
        for position, value in enumerate(node):
            found |= _leaf_paths(value, f"{prefix}.{position}")
        return found
    return {prefix}


def check_content(store: ContentStore, languages: Sequence[str]) -> int:
    documents = {}
    failed = False
    for code in languages:
        try:
            documents[code] = store.read(code)
        except ContentError as exc:
            print(f"[error] {code}: {exc}")
            failed = True
            continue
        print(f"[ok] {code}: {store.path_for(code)}")

    if len(documents) > 1:
        shapes = {code: _leaf_paths(doc.to_dict()) for code, doc in documents.items()}
        base_code, base_shape = next(iter(shapes.items()))
        for code, shape in shapes.items():
            for missing in sorted(base_shape - shape):
                print(f"[warn] {code}: missing {missing} (present in {base_code})")
            for extra in sorted(shape - base_shape):
                print(f"[warn] {code}: extra {extra} (absent in {base_code})")
    return 1 if failed else 0


def _cmd_serve(args: argparse.Namespace) -> int:
    import uvicorn

    from landing.server import create_app

    uvicorn.run(create_app(), host=args.host, port=args.port, log_config=None)
    return 0


def _cmd_check(args: argparse.Namespace) -> int:
    store = ContentStore(args.content_dir, settings.CONTENT_FILENAME)
    return check_content(store, args.lang or settings.languages)


def _cmd_paths(_: argparse.Namespace) -> int:
    for path in paths.valid_paths():
        print(path)
    return 0


def _cmd_publish(_: argparse.Namespace) -> int:
    try:
        result = GitPublisher.from_settings().publish()
    except PublishError as exc:
        print(f"[error] {exc}", file=sys.stderr)
        return 1
    print(result.message)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="landing", description="Landing site content tools")
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="run the HTTP API")
    serve.add_argument("--host", default=settings.WEB_HOST)
    serve.add_argument("--port", type=int, default=settings.WEB_PORT)
    serve.set_defaults(func=_cmd_serve)

    check = sub.add_parser("check-content", help="validate stored content documents")
    check.add_argument("--lang", action="append", help="language code (repeatable)")
    check.add_argument("--content-dir", default=settings.CONTENT_DIR)
    check.set_defaults(func=_cmd_check)

    list_paths = sub.add_parser("paths", help="list editable content paths")
    list_paths.set_defaults(func=_cmd_paths)

    publish = sub.add_parser("publish", help="commit and push content changes")
    publish.set_defaults(func=_cmd_publish)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    if args.command in {"serve", "publish"}:
        setup_logging(settings.LOG_DIR, settings.LOG_LEVEL)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
