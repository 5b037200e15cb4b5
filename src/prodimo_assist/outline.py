"""Outline dispatch by declared content type."""
from __future__ import annotations

from collections.abc import Callable

from prodimo_assist.log_outline import extract_log_outline
from prodimo_assist.param_outline import extract_param_outline
from prodimo_assist.symbols import CancellationToken, Symbol

PARAM_CONTENT_TYPE = "prodimoparam"
LOG_CONTENT_TYPE = "prodimolog"

_EXTRACTORS: dict[str, Callable[[str, CancellationToken | None], list[Symbol]]] = {
    PARAM_CONTENT_TYPE: extract_param_outline,
    LOG_CONTENT_TYPE: extract_log_outline,
}

CONTENT_TYPES: tuple[str, ...] = tuple(_EXTRACTORS)


class UnknownContentTypeError(ValueError):
    """Raised when an outline is requested for an unsupported content type."""


def extract_outline(
    text: str,
    content_type: str,
    cancel: CancellationToken | None = None,
) -> list[Symbol]:
    extractor = _EXTRACTORS.get(content_type)
    if extractor is None:
        raise UnknownContentTypeError(
            f"Unknown content type {content_type!r}; expected one of {', '.join(CONTENT_TYPES)}"
        )
    return extractor(text, cancel)


def content_type_for_path(name: str) -> str:
    """Guess the content type from a file name: logs end in .log or .out."""
    lower = name.lower()
    if lower.endswith((".log", ".out")):
        return LOG_CONTENT_TYPE
    return PARAM_CONTENT_TYPE
