"""Outline extraction for ProDiMo simulation logs.

A ProDiMo run prints loosely structured progress text. This module rebuilds
a run-phase outline from it in a single forward pass:

    INIT                      (always first, zero-width at line 0)
      INIT_<phase>            one per init phase line
        <system>              "INIT SYS <system> ..." lines under INIT_HEATCOOL
      INIT END                " total INIT CPU time"
    SED
    CHEMISTRY START / END
    CONTINUUM RT START / END
    LINE TRANSFER

Scanning is driven by ``LOG_RULES``, an ordered table of rules. Rules are
grouped; groups are tried in table order and within a group only the first
matching rule fires. The order matters: closing an open section must be
seen before a milestone on the same line can open a new one, and the
heating/cooling system rule must see a hook opened on the same line.

Open sections ("hooks") live in ``ScanState`` for the duration of one scan.
A hook still open at end of input (truncated or crashed run) is left as is.
"""
from __future__ import annotations

import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any

from prodimo_assist.symbols import (
    CancellationToken,
    Range,
    Symbol,
    SymbolKind,
    is_cancelled,
    split_lines,
)


# ---------------------------------------------------------------------------
# Markers
# ---------------------------------------------------------------------------

CHEMISTRY_END_MARKER = " CHEMISTRY AND ENERGY BALANCE DONE"
CONTINUUM_RT_END_MARKER = " CONTINUUM RADIATIVE TRANSFER DONE"

INIT_END_PREFIX = " total INIT CPU time"
SED_PREFIX = " CALCULATING MONOCHROMATIC FACE-ON SED ..."
CHEMISTRY_START_PREFIX = " CHEMISTRY AND ENERGY BALANCE ..."
CONTINUUM_RT_START_PREFIX = " SOLUTION OF CONTINUUM RADIATIVE TRANSFER ..."
LINE_TRANSFER_PREFIX = " Starting line ray-tracing..."

HEATCOOL_PHASE = "INIT_HEATCOOL"

# " INIT_CHEMISTRY: ..." / "INIT_dust_opac ..."
_INIT_PHASE_RE = re.compile(r"^ ?(INIT_[a-z0-9_]+)(?::| )", re.IGNORECASE)

# "   INIT SYS CO ..."
_INIT_SYS_RE = re.compile(r"^ *INIT SYS (\S+?)\s*\.\.\.")

ROOT_TITLE = "INIT"


# ---------------------------------------------------------------------------
# Scan state
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class ScanState:
    """Mutable state carried across one forward pass.

    ``symbols[0]`` is always the root INIT symbol. ``chemistry`` and
    ``continuum_rt`` index open top-level symbols; ``heatcool`` indexes an
    open phase among the root's children.
    """

    symbols: list[Symbol] = field(default_factory=list)
    chemistry: int | None = None
    continuum_rt: int | None = None
    heatcool: int | None = None

    @classmethod
    def start(cls) -> ScanState:
        root = Symbol(
            title=ROOT_TITLE,
            detail="initialisation",
            kind=SymbolKind.SECTION,
            range=Range.empty(0),
        )
        return cls(symbols=[root])

    @property
    def root(self) -> Symbol:
        return self.symbols[0]

    def append_top(self, symbol: Symbol) -> int:
        self.symbols.append(symbol)
        return len(self.symbols) - 1

    def append_phase(self, symbol: Symbol) -> int:
        self.root.children.append(symbol)
        return len(self.root.children) - 1

    def heatcool_symbol(self) -> Symbol | None:
        if self.heatcool is None:
            return None
        return self.root.children[self.heatcool]


# ---------------------------------------------------------------------------
# Rules
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class LogRule:
    """One (predicate, action) pair of the log scanner.

    ``match`` returns a truthy hit (a regex match or ``True``) or a falsy
    value. ``fire`` receives that hit.
    """

    name: str
    group: str
    match: Callable[[ScanState, str], Any]
    fire: Callable[[ScanState, int, str, Any], None]


def _section(title: str, detail: str, line_no: int, line: str) -> Symbol:
    return Symbol(title, detail, SymbolKind.SECTION, Range.of_line(line_no, line))


def _close_chemistry(state: ScanState, line_no: int, line: str, _hit: Any) -> None:
    state.append_top(_section("CHEMISTRY END", "chemistry", line_no, line))
    state.chemistry = None


def _close_continuum_rt(state: ScanState, line_no: int, line: str, _hit: Any) -> None:
    state.append_top(_section("CONTINUUM RT END", "continuum radiative transfer", line_no, line))
    state.continuum_rt = None


def _init_phase(state: ScanState, line_no: int, line: str, hit: re.Match[str]) -> None:
    token = hit.group(1)
    idx = state.append_phase(Symbol(
        title=token,
        detail="init phase",
        kind=SymbolKind.PHASE,
        range=Range.of_line(line_no, line),
    ))
    state.heatcool = idx if token == HEATCOOL_PHASE else None


def _match_heatcool_system(state: ScanState, line: str) -> re.Match[str] | None:
    if state.heatcool is None:
        return None
    return _INIT_SYS_RE.match(line)


def _heatcool_system(state: ScanState, line_no: int, line: str, hit: re.Match[str]) -> None:
    hook = state.heatcool_symbol()
    assert hook is not None
    hook.add_child(Symbol(
        title=hit.group(1),
        detail="heating/cooling system",
        kind=SymbolKind.VARIABLE,
        range=Range.of_line(line_no, line),
    ))


def _prefix(prefix: str) -> Callable[[ScanState, str], bool]:
    def match(_state: ScanState, line: str) -> bool:
        return line.startswith(prefix)
    return match


def _init_end(state: ScanState, line_no: int, line: str, _hit: Any) -> None:
    state.append_phase(Symbol(
        title="INIT END",
        detail="init CPU time",
        kind=SymbolKind.PHASE,
        range=Range.of_line(line_no, line),
    ))


def _sed(state: ScanState, line_no: int, line: str, _hit: Any) -> None:
    state.append_top(_section("SED", "face-on SED", line_no, line))


def _open_chemistry(state: ScanState, line_no: int, line: str, _hit: Any) -> None:
    state.chemistry = state.append_top(
        _section("CHEMISTRY START", "chemistry", line_no, line),
    )


def _open_continuum_rt(state: ScanState, line_no: int, line: str, _hit: Any) -> None:
    state.continuum_rt = state.append_top(
        _section("CONTINUUM RT START", "continuum radiative transfer", line_no, line),
    )


def _line_transfer(state: ScanState, line_no: int, line: str, _hit: Any) -> None:
    state.append_top(_section("LINE TRANSFER", "line ray-tracing", line_no, line))


LOG_RULES: tuple[LogRule, ...] = (
    LogRule(
        "close_chemistry", "close",
        lambda s, line: s.chemistry is not None and line.startswith(CHEMISTRY_END_MARKER),
        _close_chemistry,
    ),
    LogRule(
        "close_continuum_rt", "close",
        lambda s, line: s.continuum_rt is not None and line.startswith(CONTINUUM_RT_END_MARKER),
        _close_continuum_rt,
    ),
    LogRule("init_phase", "init_phase", lambda _s, line: _INIT_PHASE_RE.match(line), _init_phase),
    LogRule("heatcool_system", "heatcool_system", _match_heatcool_system, _heatcool_system),
    LogRule("init_end", "milestone", _prefix(INIT_END_PREFIX), _init_end),
    LogRule("sed", "milestone", _prefix(SED_PREFIX), _sed),
    LogRule("chemistry_start", "milestone", _prefix(CHEMISTRY_START_PREFIX), _open_chemistry),
    LogRule("continuum_rt_start", "milestone", _prefix(CONTINUUM_RT_START_PREFIX), _open_continuum_rt),
    LogRule("line_transfer", "milestone", _prefix(LINE_TRANSFER_PREFIX), _line_transfer),
)


def apply_rules(
    state: ScanState,
    line_no: int,
    line: str,
    rules: Sequence[LogRule] = LOG_RULES,
) -> list[str]:
    """Run one line through *rules*; return the names of the rules that fired."""
    fired_groups: set[str] = set()
    fired: list[str] = []
    for rule in rules:
        if rule.group in fired_groups:
            continue
        hit = rule.match(state, line)
        if not hit:
            continue
        rule.fire(state, line_no, line, hit)
        fired_groups.add(rule.group)
        fired.append(rule.name)
    return fired


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def extract_log_outline(
    text: str,
    cancel: CancellationToken | None = None,
) -> list[Symbol]:
    """Scan a simulation log and return its run-phase outline.

    The first symbol is always the root ``INIT`` symbol, even for empty
    input. Returns an empty list if *cancel* fires mid-scan.
    """
    state = ScanState.start()
    for line_no, line in enumerate(split_lines(text)):
        if is_cancelled(cancel):
            return []
        apply_rules(state, line_no, line)
    return state.symbols
