"""Outline symbol types shared by the parameter-file and log-file scanners.

Positions are zero-based ``(line, character)`` pairs, matching what editors
send over the wire. Symbols are plain dataclasses; ``children`` is mutable
only while a scanner is building the tree.
"""
from __future__ import annotations

import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class SymbolKind(str, Enum):
    BLOCK = "block"
    SECTION = "section"
    PHASE = "phase"
    VARIABLE = "variable"


@dataclass(frozen=True, slots=True)
class Position:
    """Zero-based line/character position."""

    line: int
    character: int

    def __post_init__(self) -> None:
        if self.line < 0 or self.character < 0:
            raise ValueError(
                f"position must be non-negative, got ({self.line}, {self.character})",
            )


@dataclass(frozen=True, slots=True)
class Range:
    start: Position
    end: Position

    @classmethod
    def of_line(cls, line_no: int, line: str) -> Range:
        """Range covering one whole line of text."""
        return cls(Position(line_no, 0), Position(line_no, len(line)))

    @classmethod
    def empty(cls, line_no: int = 0) -> Range:
        """Zero-width range at the start of a line."""
        pos = Position(line_no, 0)
        return cls(pos, pos)


@dataclass(slots=True)
class Symbol:
    """A node in a document outline."""

    title: str
    detail: str
    kind: SymbolKind
    range: Range
    children: list[Symbol] = field(default_factory=list)

    def add_child(self, child: Symbol) -> Symbol:
        self.children.append(child)
        return child


class CancellationToken:
    """Cooperative cancellation flag checked by scanners between lines."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


def is_cancelled(token: CancellationToken | None) -> bool:
    return token is not None and token.cancelled


def split_lines(text: str) -> list[str]:
    """Split document text into lines the way editors number them.

    A trailing ``\\r`` is dropped from each line so CRLF documents produce
    the same ranges as LF documents. An empty document has one empty line.
    """
    return [line.rstrip("\r") for line in text.split("\n")]


def position_to_dict(pos: Position) -> dict[str, int]:
    return {"line": pos.line, "character": pos.character}


def range_to_dict(rng: Range) -> dict[str, dict[str, int]]:
    return {"start": position_to_dict(rng.start), "end": position_to_dict(rng.end)}


def symbol_to_dict(symbol: Symbol) -> dict[str, Any]:
    """Serialize a symbol tree to plain JSON-compatible dicts."""
    return {
        "title": symbol.title,
        "detail": symbol.detail,
        "kind": symbol.kind.value,
        "range": range_to_dict(symbol.range),
        "children": [symbol_to_dict(c) for c in symbol.children],
    }
