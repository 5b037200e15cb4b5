"""Build completion suggestions for a resolved trigger situation.

Parameter suggestions are assembled in two steps. The situation-invariant
part (label, base insert text, detail, documentation) is memoized per
``(catalog, situation, generation)``. The end-of-line suffix (unit and
description appended when the cursor is at end of line) depends on the
request and is added for every request, never cached.
"""
from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Any

from prodimo_assist.catalog import ParameterCatalog, ParameterDefinition
from prodimo_assist.completion_context import (
    CompletionContext,
    TriggerSituation,
    resolve_situation,
)


@dataclass(frozen=True, slots=True)
class CompletionSuggestion:
    label: str
    insert_text: str
    detail: str
    documentation: str


BOOLEAN_SUGGESTIONS: tuple[CompletionSuggestion, ...] = (
    CompletionSuggestion(
        label=".true.",
        insert_text="true. ",
        detail="logical",
        documentation="Fortran logical `.true.`",
    ),
    CompletionSuggestion(
        label=".false.",
        insert_text="false.     ",
        detail="logical",
        documentation="Fortran logical `.false.`",
    ),
)

_NAME_PREFIX: dict[TriggerSituation, str] = {
    TriggerSituation.EXPLICIT_BANG: " ",
    TriggerSituation.IMPLICIT_BANG_PRESENT: "! ",
}


@dataclass(frozen=True, slots=True)
class _BaseSuggestion:
    definition: ParameterDefinition
    suggestion: CompletionSuggestion


def parameter_documentation(definition: ParameterDefinition) -> str:
    """Markdown bullet list describing a parameter's type, default and unit."""
    lines = [
        f"- **Type:** {definition.type}",
        f"- **Default:** {definition.default}",
    ]
    if definition.has_unit:
        lines.append(f"- **Unit:** {definition.unit}")
    return "\n".join(lines) + "\n"


def end_of_line_suffix(definition: ParameterDefinition) -> str:
    """Unit and description text appended when completing at end of line."""
    suffix = ""
    if definition.has_unit:
        suffix += "   [" + definition.unit + "] "
    if definition.description.strip():
        suffix += "   : " + definition.description
    return suffix


@lru_cache(maxsize=16)
def _base_suggestions(
    catalog: ParameterCatalog,
    situation: TriggerSituation,
    generation: int,  # noqa: ARG001 -- part of the cache key
) -> tuple[_BaseSuggestion, ...]:
    prefix = _NAME_PREFIX[situation]
    return tuple(
        _BaseSuggestion(
            definition=definition,
            suggestion=CompletionSuggestion(
                label=name,
                insert_text=prefix + name + " ",
                detail=definition.description,
                documentation=parameter_documentation(definition),
            ),
        )
        for name, definition in catalog.entries()
    )


def clear_suggestion_cache() -> None:
    _base_suggestions.cache_clear()


class CompletionListBuilder:
    """Turn a trigger situation into an ordered list of suggestions."""

    def __init__(self, catalog: ParameterCatalog) -> None:
        self.catalog = catalog

    def build(
        self,
        situation: TriggerSituation,
        ctx: CompletionContext,
    ) -> list[CompletionSuggestion]:
        if situation is TriggerSituation.BOOLEAN_LITERAL:
            return list(BOOLEAN_SUGGESTIONS)
        if situation not in _NAME_PREFIX:
            return []

        bases = _base_suggestions(self.catalog, situation, self.catalog.generation)
        if not ctx.at_end_of_line:
            return [b.suggestion for b in bases]
        return [
            CompletionSuggestion(
                label=b.suggestion.label,
                insert_text=b.suggestion.insert_text + end_of_line_suffix(b.definition),
                detail=b.suggestion.detail,
                documentation=b.suggestion.documentation,
            )
            for b in bases
        ]

    def complete(self, ctx: CompletionContext) -> list[CompletionSuggestion]:
        """Resolve the situation for *ctx* and build its suggestions."""
        return self.build(resolve_situation(ctx), ctx)


def suggestion_to_dict(suggestion: CompletionSuggestion) -> dict[str, Any]:
    return {
        "label": suggestion.label,
        "insertText": suggestion.insert_text,
        "detail": suggestion.detail,
        "documentation": suggestion.documentation,
    }
