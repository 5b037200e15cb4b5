"""JSON I/O helpers backed by orjson."""
from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, BinaryIO

import orjson


def load_json(path: Path) -> Any:
    """Load JSON from a file."""
    return orjson.loads(path.read_bytes())


def dump_json(obj: Any, stream: BinaryIO | None = None) -> None:
    """Write indented JSON plus a newline to *stream* (stdout by default)."""
    out = stream if stream is not None else sys.stdout.buffer
    out.write(orjson.dumps(obj, option=orjson.OPT_INDENT_2))
    out.write(b"\n")
