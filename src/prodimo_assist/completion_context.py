"""Resolve what a completion request at a cursor position is asking for.

In a parameter file a value is followed by ``!`` and the parameter name::

    0.01        ! Mdisk    [Msun]   : disk mass

Completion offers parameter names after a ``!`` and Fortran logical
literals after a ``.``. The decision depends only on the line text, the
cursor offset and how the request was triggered, and is made by walking
``SITUATION_RULES`` top to bottom; the first rule that returns a
situation wins. A line can name at most one parameter, so no suggestions
are offered once a second ``!`` would be involved.
"""
from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum


class TriggerKind(str, Enum):
    KEYBOARD_INVOKED = "keyboard"
    CHARACTER_INVOKED = "character"


class TriggerSituation(str, Enum):
    EXPLICIT_BANG = "explicit_bang"
    IMPLICIT_BANG_PRESENT = "implicit_bang_present"
    BOOLEAN_LITERAL = "boolean_literal"
    NO_COMPLETION = "no_completion"


TRIGGER_CHARACTERS: tuple[str, ...] = ("!", ".")


@dataclass(frozen=True, slots=True)
class CompletionContext:
    """Caller-supplied completion request."""

    line_text: str
    cursor_offset: int
    trigger_char: str | None = None
    trigger_kind: TriggerKind = TriggerKind.KEYBOARD_INVOKED

    def __post_init__(self) -> None:
        if self.trigger_char is not None and self.trigger_char not in TRIGGER_CHARACTERS:
            raise ValueError(f"unsupported trigger character: {self.trigger_char!r}")

    @property
    def offset(self) -> int:
        """Cursor offset clamped into the line."""
        return max(0, min(self.cursor_offset, len(self.line_text)))

    @property
    def before(self) -> str:
        return self.line_text[:self.offset]

    @property
    def after(self) -> str:
        return self.line_text[self.offset:]

    @property
    def last_bang(self) -> int | None:
        idx = self.before.rfind("!")
        return idx if idx >= 0 else None

    @property
    def at_end_of_line(self) -> bool:
        return not self.after.strip()


def _bang_before_last(ctx: CompletionContext) -> bool:
    """True when another ``!`` precedes the last one before the cursor."""
    last = ctx.last_bang
    return last is not None and "!" in ctx.before[:last]


def _lone_bang_before_cursor(ctx: CompletionContext) -> bool:
    last = ctx.last_bang
    return last is not None and not ctx.before[last + 1:].strip()


def _is_bang_request(ctx: CompletionContext) -> bool:
    if ctx.trigger_kind is TriggerKind.CHARACTER_INVOKED:
        return ctx.trigger_char == "!" and ctx.last_bang is not None
    # Keyboard request right after a lone "!" is treated as if "!" was typed.
    return _lone_bang_before_cursor(ctx)


def _rule_boolean_literal(ctx: CompletionContext) -> TriggerSituation | None:
    if ctx.trigger_char != ".":
        return None
    if "!" in ctx.before:
        return TriggerSituation.NO_COMPLETION
    return TriggerSituation.BOOLEAN_LITERAL


def _rule_explicit_bang(ctx: CompletionContext) -> TriggerSituation | None:
    if not _is_bang_request(ctx):
        return None
    if _bang_before_last(ctx) or "!" in ctx.after:
        return TriggerSituation.NO_COMPLETION
    return TriggerSituation.EXPLICIT_BANG


def _rule_implicit_bang(ctx: CompletionContext) -> TriggerSituation | None:
    if ctx.trigger_kind is not TriggerKind.KEYBOARD_INVOKED:
        return None
    if _bang_before_last(ctx):
        return TriggerSituation.NO_COMPLETION
    if ctx.last_bang is not None and "!" in ctx.after:
        # cursor sits between two bangs
        return TriggerSituation.NO_COMPLETION
    return TriggerSituation.IMPLICIT_BANG_PRESENT


def _rule_fallback(_ctx: CompletionContext) -> TriggerSituation | None:
    return TriggerSituation.NO_COMPLETION


SITUATION_RULES: tuple[Callable[[CompletionContext], TriggerSituation | None], ...] = (
    _rule_boolean_literal,
    _rule_explicit_bang,
    _rule_implicit_bang,
    _rule_fallback,
)


def resolve_situation(ctx: CompletionContext) -> TriggerSituation:
    """Map a completion request to the situation that governs its suggestions."""
    for rule in SITUATION_RULES:
        situation = rule(ctx)
        if situation is not None:
            return situation
    return TriggerSituation.NO_COMPLETION
