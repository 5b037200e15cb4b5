"""Hover documentation for parameter names in parameter files."""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

from prodimo_assist.catalog import ParameterCatalog, ParameterDefinition

DEFAULT_WIKI_BASE_URL = "https://prodimo.iwf.oeaw.ac.at/wiki/"

NAME_SEPARATOR = "! "
_TOKEN_RE = re.compile(r"\S+")


@dataclass(frozen=True, slots=True)
class HoverResult:
    markdown: str


def parameter_name_at(line: str, cursor: int) -> str | None:
    """Return the parameter name under *cursor*, if the cursor is on one.

    The name is the first whitespace-delimited token after the single
    ``"! "`` separator on the line; the span is inclusive of its end so a
    cursor resting just after the name still counts.
    """
    parts = line.split(NAME_SEPARATOR)
    if len(parts) != 2:
        return None
    m = _TOKEN_RE.search(parts[1])
    if m is None:
        return None
    offset = len(parts[0]) + len(NAME_SEPARATOR)
    if offset + m.start() <= cursor <= offset + m.end():
        return m.group(0)
    return None


def _reference_link(filename: str, base_url: str) -> str:
    label = filename.removesuffix(".md")
    target = base_url + (label + ".html" if filename.endswith(".md") else filename)
    return f"- [{label}]({target})"


def render_hover(definition: ParameterDefinition, base_url: str = DEFAULT_WIKI_BASE_URL) -> str:
    """Markdown body for a parameter hover.

    The description is inserted verbatim; no Markdown escaping is applied.
    """
    blocks: list[str] = []
    if definition.description:
        blocks.append(definition.description)
    if definition.has_unit:
        blocks.append(f"Unit: {definition.unit}")
    if definition.wiki_references:
        blocks.append("\n".join(
            _reference_link(ref, base_url) for ref in definition.wiki_references
        ))
    return "\n\n".join(blocks)


class HoverResolver:
    def __init__(self, catalog: ParameterCatalog, base_url: str = DEFAULT_WIKI_BASE_URL) -> None:
        self.catalog = catalog
        self.base_url = base_url

    def resolve(self, line_text: str, cursor_offset: int) -> HoverResult | None:
        name = parameter_name_at(line_text, cursor_offset)
        if name is None:
            return None
        definition = self.catalog.lookup(name)
        if definition is None:
            return None
        return HoverResult(markdown=render_hover(definition, self.base_url))


def hover_to_dict(result: HoverResult | None) -> dict[str, Any] | None:
    return None if result is None else {"markdown": result.markdown}
