"""
State income tax rate table.

The table is authored by hand in ``scripts/rates.json`` once a year (usually
January/February, after the Tax Foundation publishes new figures) and has the
shape::

    {
      "year": 2025,
      "updated": "2025-02-01",
      "states": [{"abbr": "AL", "name": "Alabama", "rate": 5}, ...]
    }

Rates are top marginal percentages; states without an income tax use 0.
Loading and validation are kept apart so ``validate`` can be exercised
without touching the filesystem.
"""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Union

from rate_updater.errors import MissingInputError, ParseError, SchemaError

logger = logging.getLogger(__name__)

# 50 states plus DC; a table with fewer entries is certainly incomplete.
MIN_STATES = 50

Rate = Union[int, float]


@dataclass(frozen=True)
class StateRate:
    """Top income tax rate for a single state."""

    abbr: str
    name: str
    rate: Rate  # percentage, e.g. 4.95 = 4.95%


@dataclass(frozen=True)
class RateTable:
    """A validated rate table. Never mutated after construction."""

    year: int
    updated: str
    states: tuple[StateRate, ...]

    @property
    def state_count(self) -> int:
        return len(self.states)

    def get_state(self, abbr: str) -> Optional[StateRate]:
        """Look up a state by its two-letter code (case-insensitive)."""
        wanted = abbr.upper()
        for state in self.states:
            if state.abbr.upper() == wanted:
                return state
        return None

    def no_income_tax_states(self) -> list[str]:
        """Return codes of states with a zero rate."""
        return [s.abbr for s in self.states if s.rate == 0]

    def highest_rate_states(self, n: int = 10) -> list[StateRate]:
        """Return the N states with the highest rate."""
        return sorted(self.states, key=lambda s: s.rate, reverse=True)[:n]


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


def load_rate_file(path: Path) -> Any:
    """
    Read and parse the maintainer's rate file.

    Raises MissingInputError if the file is absent and ParseError if it is
    not valid JSON. The parsed value is returned unvalidated.
    """
    path = Path(path)
    if not path.exists():
        raise MissingInputError(path)

    logger.debug("Reading rate table from %s", path)
    text = path.read_text(encoding="utf-8")
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise ParseError(path, e.msg, e.lineno, e.colno) from e


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


def _describe(entry: Any) -> str:
    try:
        return json.dumps(entry, ensure_ascii=False)
    except (TypeError, ValueError):
        return repr(entry)


def _invalid_entry(entry: Any, index: int, reason: str) -> SchemaError:
    return SchemaError(
        f"invalid entry #{index} ({reason}): {_describe(entry)}",
        entry=entry,
        index=index,
    )


def _validate_entry(entry: Any, index: int) -> StateRate:
    if not isinstance(entry, dict):
        raise _invalid_entry(entry, index, "expected an object")
    if not entry.get("abbr"):
        raise _invalid_entry(entry, index, "missing abbr")
    if not entry.get("name"):
        raise _invalid_entry(entry, index, "missing name")
    if "rate" not in entry:
        raise _invalid_entry(entry, index, "missing rate")

    rate = entry["rate"]
    # bool is an int subclass; JSON true/false is never a rate
    if isinstance(rate, bool) or not isinstance(rate, (int, float)):
        raise _invalid_entry(entry, index, "rate must be a number")
    if not math.isfinite(rate) or rate < 0:
        raise _invalid_entry(entry, index, "rate must be a non-negative number")

    return StateRate(abbr=str(entry["abbr"]), name=str(entry["name"]), rate=rate)


def validate(data: Any) -> RateTable:
    """
    Check the shape of a parsed rate file and build a RateTable.

    The whole table is checked before anything is returned, so callers can
    rely on a successful result before writing any destination. Raises
    SchemaError on the first problem found.
    """
    if not isinstance(data, dict):
        raise SchemaError(
            "rate table must be an object with { year, updated, states[] }."
        )

    if not data.get("year") or not data.get("updated"):
        raise SchemaError("rate table must have non-empty 'year' and 'updated'.")

    year = data["year"]
    # bool is an int subclass; JSON true is never a year
    if isinstance(year, bool) or not isinstance(year, int) or year < 0:
        raise SchemaError(f"'year' must be a whole number (found {_describe(year)}).")
    if not isinstance(data["updated"], str):
        raise SchemaError(
            f"'updated' must be a date string (found {_describe(data['updated'])})."
        )

    states = data.get("states")
    if not isinstance(states, list) or len(states) < MIN_STATES:
        count = len(states) if isinstance(states, list) else 0
        raise SchemaError(
            f"rate table must have a 'states' list with >= {MIN_STATES} "
            f"entries (found {count})."
        )

    rows: list[StateRate] = []
    seen: dict[str, int] = {}
    for index, entry in enumerate(states):
        row = _validate_entry(entry, index)
        key = row.abbr.upper()
        if key in seen:
            raise _invalid_entry(
                entry, index, f"duplicate abbr, first seen at #{seen[key]}"
            )
        seen[key] = index
        rows.append(row)

    return RateTable(year=year, updated=data["updated"], states=tuple(rows))
