#!/usr/bin/env python3
"""Query outline, completion and hover results from the command line.

Usage::

    python3 scripts/prodimo_query.py outline Parameter.in
    python3 scripts/prodimo_query.py outline prodimo.log --content-type prodimolog
    python3 scripts/prodimo_query.py complete "0.01   ! " --cursor 9 --keyboard
    python3 scripts/prodimo_query.py hover "0.01   ! Mdisk" --cursor 10
    python3 scripts/prodimo_query.py param Mdisk

Structured JSON output goes to stdout; human messages go to stderr.
Exit status is 2 when the parameter catalog cannot be loaded.
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))

from prodimo_assist.catalog import CatalogLoadError, definition_to_dict
from prodimo_assist.completion import suggestion_to_dict
from prodimo_assist.completion_context import CompletionContext, TriggerKind
from prodimo_assist.config import ServiceConfig
from prodimo_assist.hover import hover_to_dict
from prodimo_assist.io_utils import dump_json
from prodimo_assist.outline import CONTENT_TYPES, content_type_for_path
from prodimo_assist.service import LanguageService
from prodimo_assist.symbols import symbol_to_dict

log = logging.getLogger("prodimo_query")


def _cmd_outline(service: LanguageService, args: argparse.Namespace) -> int:
    path = Path(args.file)
    content_type = args.content_type or content_type_for_path(path.name)
    text = path.read_text(encoding="utf-8", errors="replace")
    symbols = service.outline(text, content_type)
    log.info("%s: %d top-level symbols (%s)", path, len(symbols), content_type)
    dump_json({
        "file": str(path),
        "content_type": content_type,
        "symbols": [symbol_to_dict(s) for s in symbols],
    })
    return 0


def _cmd_complete(service: LanguageService, args: argparse.Namespace) -> int:
    cursor = len(args.line) if args.cursor is None else args.cursor
    if args.trigger and not args.keyboard:
        kind = TriggerKind.CHARACTER_INVOKED
    else:
        kind = TriggerKind.KEYBOARD_INVOKED
    ctx = CompletionContext(args.line, cursor, args.trigger, kind)
    items = service.complete(args.line, cursor, args.trigger, kind)
    dump_json({
        "situation": service.situation(ctx).value,
        "items": [suggestion_to_dict(i) for i in items],
    })
    return 0


def _cmd_hover(service: LanguageService, args: argparse.Namespace) -> int:
    result = service.hover(args.line, args.cursor)
    dump_json({"hover": hover_to_dict(result)})
    return 0 if result is not None else 1


def _cmd_param(service: LanguageService, args: argparse.Namespace) -> int:
    definition = service.catalog.get().lookup(args.name)
    if definition is None:
        print(f"Unknown parameter: {args.name}", file=sys.stderr)
        return 1
    dump_json(definition_to_dict(definition))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Outline, completion and hover for ProDiMo parameter and log files",
    )
    parser.add_argument(
        "--catalog", type=Path, default=None,
        help="Parameter catalog JSON (default: $PRODIMO_PARAMLIST or bundled list)",
    )
    parser.add_argument(
        "--wiki-base-url", default=None,
        help="Base URL for reference links in hover text",
    )
    parser.add_argument("--verbose", "-v", action="store_true")
    sub = parser.add_subparsers(dest="command", required=True)

    p_outline = sub.add_parser("outline", help="Print the outline of a file")
    p_outline.add_argument("file")
    p_outline.add_argument(
        "--content-type", choices=CONTENT_TYPES, default=None,
        help="Override content type (default: inferred from file name)",
    )
    p_outline.set_defaults(func=_cmd_outline)

    p_complete = sub.add_parser("complete", help="Completion items for a line")
    p_complete.add_argument("line")
    p_complete.add_argument(
        "--cursor", type=int, default=None,
        help="Cursor offset in the line (default: end of line)",
    )
    p_complete.add_argument("--trigger", choices=("!", "."), default=None)
    p_complete.add_argument(
        "--keyboard", action="store_true",
        help="Treat a --trigger request as keyboard-invoked (default without --trigger)",
    )
    p_complete.set_defaults(func=_cmd_complete)

    p_hover = sub.add_parser("hover", help="Hover text for a line")
    p_hover.add_argument("line")
    p_hover.add_argument("--cursor", type=int, required=True)
    p_hover.set_defaults(func=_cmd_hover)

    p_param = sub.add_parser("param", help="Print one catalog entry")
    p_param.add_argument("name")
    p_param.set_defaults(func=_cmd_param)

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(message)s",
        stream=sys.stderr,
    )

    config = ServiceConfig.from_env().with_overrides(
        catalog_path=args.catalog,
        wiki_base_url=args.wiki_base_url,
    )
    service = LanguageService(config)
    try:
        return args.func(service, args)
    except CatalogLoadError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
