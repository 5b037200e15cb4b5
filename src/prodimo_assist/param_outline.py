"""Outline extraction for ProDiMo parameter files.

Parameter files group their entries under dash-fenced header lines such as::

    ------ disk structure ------

Each such line becomes one flat ``BLOCK`` symbol. Nothing nests.
"""
from __future__ import annotations

import re

from prodimo_assist.symbols import (
    CancellationToken,
    Range,
    Symbol,
    SymbolKind,
    is_cancelled,
    split_lines,
)

# Dashes, a space, a title with no surrounding whitespace, a space, dashes.
_BLOCK_HEADER_RE = re.compile(r"^-+ (\S(?:.*\S)?) -+$")

BLOCK_DETAIL = "block"


def match_block_header(line: str) -> str | None:
    """Return the block title if *line* is a dash-fenced header."""
    m = _BLOCK_HEADER_RE.match(line)
    return m.group(1) if m else None


def extract_param_outline(
    text: str,
    cancel: CancellationToken | None = None,
) -> list[Symbol]:
    """Scan a parameter file and return its block headers in document order.

    Returns an empty list if *cancel* fires before the scan completes.
    """
    symbols: list[Symbol] = []
    for line_no, line in enumerate(split_lines(text)):
        if is_cancelled(cancel):
            return []
        title = match_block_header(line)
        if title is None:
            continue
        symbols.append(Symbol(
            title=title,
            detail=BLOCK_DETAIL,
            kind=SymbolKind.BLOCK,
            range=Range.of_line(line_no, line),
        ))
    return symbols
