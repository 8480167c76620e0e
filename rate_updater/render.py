"""
Render a rate table into the host document's embedded fallback block.

The host document (``index.html``) declares three script variables that the
app falls back to when ``data/rates.json`` cannot be fetched::

    let STATE_TAX_RATES = [
      { abbr: "--", name: "-- Select State --", rate: 0 },
      { abbr: "AL", name: "Alabama", rate: 5.0 },
      ...
    ];
    let RATES_LAST_UPDATED = "2025-02-01";
    let RATES_TAX_YEAR = 2025;

Everything here works on strings only; reading and writing the document is
left to ``rate_updater.updater``.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Callable

from rate_updater.errors import MarkerNotFoundError
from rate_updater.table import Rate, RateTable, StateRate

logger = logging.getLogger(__name__)

ARRAY_MARKER = "STATE_TAX_RATES"
UPDATED_MARKER = "RATES_LAST_UPDATED"
YEAR_MARKER = "RATES_TAX_YEAR"

# Shown first in the state dropdown, before the user picks a state.
PLACEHOLDER = StateRate(abbr="--", name="-- Select State --", rate=0)

_KEYWORD = r"\b(?P<keyword>let|const|var)\s+"

# Non-greedy: stop at the first "]" closed by ";" so trailing script is left alone.
ARRAY_PATTERN = re.compile(
    _KEYWORD + ARRAY_MARKER + r"\s*=\s*\[.*?\]\s*;", re.DOTALL
)
UPDATED_PATTERN = re.compile(
    _KEYWORD + UPDATED_MARKER + r'\s*=\s*"(?:[^"\\\n]|\\.)*"\s*;'
)
YEAR_PATTERN = re.compile(_KEYWORD + YEAR_MARKER + r"\s*=\s*\d+\s*;")


# ---------------------------------------------------------------------------
# Entry rendering
# ---------------------------------------------------------------------------


def format_rate(rate: Rate) -> str:
    """
    Render a rate as a script number literal.

    Integral rates always carry one decimal place (``10`` -> ``10.0``) so
    the embedded table reads uniformly; other rates are left as written.
    """
    if isinstance(rate, int) or float(rate).is_integer():
        return f"{int(rate)}.0"
    return str(rate)


def _string_literal(value: str) -> str:
    return json.dumps(value, ensure_ascii=False)


def render_entry(state: StateRate) -> str:
    return (
        f"  {{ abbr: {_string_literal(state.abbr)}, "
        f"name: {_string_literal(state.name)}, "
        f"rate: {format_rate(state.rate)} }}"
    )


def render_block(table: RateTable, keyword: str = "let") -> str:
    """Render the full ``STATE_TAX_RATES`` declaration, placeholder first."""
    # The placeholder keeps its bare ``0`` rather than going through format_rate.
    placeholder = (
        f"  {{ abbr: {_string_literal(PLACEHOLDER.abbr)}, "
        f"name: {_string_literal(PLACEHOLDER.name)}, rate: 0 }}"
    )
    lines = [placeholder] + [render_entry(s) for s in table.states]
    body = ",\n".join(lines)
    return f"{keyword} {ARRAY_MARKER} = [\n{body}\n];"


# ---------------------------------------------------------------------------
# Host document rewriting
# ---------------------------------------------------------------------------


@dataclass
class HostRewrite:
    """Result of rewriting a host document's marker blocks."""

    text: str
    inserted: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class _ScalarMarker:
    name: str
    pattern: re.Pattern
    literal: Callable[[RateTable], str]

    @property
    def declared(self) -> re.Pattern:
        """Any declaration of the name, whatever its value looks like."""
        return re.compile(_KEYWORD + self.name + r"\b")

    def declaration(self, keyword: str, table: RateTable) -> str:
        return f"{keyword} {self.name} = {self.literal(table)};"


_SCALAR_MARKERS = (
    _ScalarMarker(UPDATED_MARKER, UPDATED_PATTERN, lambda t: _string_literal(t.updated)),
    _ScalarMarker(YEAR_MARKER, YEAR_PATTERN, lambda t: str(t.year)),
)


def _line_indent(document: str, pos: int) -> str:
    line_start = document.rfind("\n", 0, pos) + 1
    prefix = document[line_start:pos]
    return prefix if prefix.strip() == "" else ""


def rewrite_host_document(document: str, table: RateTable) -> HostRewrite:
    """
    Replace the rate markers in ``document`` with values from ``table``.

    The ``STATE_TAX_RATES`` block is required; MarkerNotFoundError is raised
    if it is absent. ``RATES_LAST_UPDATED`` and ``RATES_TAX_YEAR`` are
    replaced where found and otherwise inserted on their own lines right
    after the array block. A scalar declaration whose value is not in the
    expected form also raises MarkerNotFoundError rather than being declared
    twice. Declaration keywords are preserved as found.
    """
    match = ARRAY_PATTERN.search(document)
    if match is None:
        raise MarkerNotFoundError(ARRAY_MARKER)

    keyword = match.group("keyword")
    indent = _line_indent(document, match.start())
    head = document[: match.start()]
    tail = document[match.end() :]

    inserted: list[str] = []
    for marker in _SCALAR_MARKERS:

        def _replace(m: re.Match, marker: _ScalarMarker = marker) -> str:
            return marker.declaration(m.group("keyword"), table)

        head, count = marker.pattern.subn(_replace, head, count=1)
        if count == 0:
            tail, count = marker.pattern.subn(_replace, tail, count=1)
        if count == 0 and (marker.declared.search(head) or marker.declared.search(tail)):
            raise MarkerNotFoundError(
                marker.name, reason="is declared but its value could not be parsed"
            )
        if count == 0:
            logger.debug("%s not found; inserting after %s", marker.name, ARRAY_MARKER)
            inserted.append(marker.name)

    extra = "".join(
        f"\n{indent}{marker.declaration(keyword, table)}"
        for marker in _SCALAR_MARKERS
        if marker.name in inserted
    )
    text = head + render_block(table, keyword) + extra + tail
    return HostRewrite(text=text, inserted=inserted)


def apply_rate_table(document: str, table: RateTable) -> str:
    """Return ``document`` with its rate markers rewritten from ``table``."""
    return rewrite_host_document(document, table).text
