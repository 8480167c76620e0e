"""Shared fixtures: a valid rate table and a temporary app checkout."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from rate_updater.updater import UpdatePaths

STATES: list[tuple[str, str, float]] = [
    ("AL", "Alabama", 5), ("AK", "Alaska", 0), ("AZ", "Arizona", 2.5),
    ("AR", "Arkansas", 3.9), ("CA", "California", 13.3), ("CO", "Colorado", 4.4),
    ("CT", "Connecticut", 6.99), ("DE", "Delaware", 6.6),
    ("DC", "District of Columbia", 10.75), ("FL", "Florida", 0),
    ("GA", "Georgia", 5.39), ("HI", "Hawaii", 11), ("ID", "Idaho", 5.695),
    ("IL", "Illinois", 4.95), ("IN", "Indiana", 3), ("IA", "Iowa", 3.8),
    ("KS", "Kansas", 5.58), ("KY", "Kentucky", 4), ("LA", "Louisiana", 3),
    ("ME", "Maine", 7.15), ("MD", "Maryland", 5.75), ("MA", "Massachusetts", 9),
    ("MI", "Michigan", 4.25), ("MN", "Minnesota", 9.85), ("MS", "Mississippi", 4.4),
    ("MO", "Missouri", 4.7), ("MT", "Montana", 5.9), ("NE", "Nebraska", 5.2),
    ("NV", "Nevada", 0), ("NH", "New Hampshire", 0), ("NJ", "New Jersey", 10.75),
    ("NM", "New Mexico", 5.9), ("NY", "New York", 10.9),
    ("NC", "North Carolina", 4.25), ("ND", "North Dakota", 2.5), ("OH", "Ohio", 3.5),
    ("OK", "Oklahoma", 4.75), ("OR", "Oregon", 9.9), ("PA", "Pennsylvania", 3.07),
    ("RI", "Rhode Island", 5.99), ("SC", "South Carolina", 6.2),
    ("SD", "South Dakota", 0), ("TN", "Tennessee", 0), ("TX", "Texas", 0),
    ("UT", "Utah", 4.55), ("VT", "Vermont", 8.75), ("VA", "Virginia", 5.75),
    ("WA", "Washington", 0), ("WV", "West Virginia", 4.82), ("WI", "Wisconsin", 7.65),
    ("WY", "Wyoming", 0),
]

HOST_TEMPLATE = """<!DOCTYPE html>
<html>
<body>
<select id="state"></select>
<script>
  let STATE_TAX_RATES = [
    { abbr: "--", name: "-- Select State --", rate: 0 },
    { abbr: "AL", name: "Alabama", rate: 4.0 },
  ];
  let RATES_LAST_UPDATED = "2024-01-15";
  let RATES_TAX_YEAR = 2024;

  const BRACKETS = [10, 12, 22];
  function stateRate(abbr) { return STATE_TAX_RATES.find(s => s.abbr === abbr).rate; }
</script>
</body>
</html>
"""


@pytest.fixture
def rate_data() -> dict[str, Any]:
    return {
        "year": 2025,
        "updated": "2025-02-01",
        "states": [
            {"abbr": abbr, "name": name, "rate": rate} for abbr, name, rate in STATES
        ],
    }


@pytest.fixture
def host_document() -> str:
    return HOST_TEMPLATE


def _dump(path: Path, data: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")


@pytest.fixture
def write_rates():
    """Write a (possibly invalid) rate table as JSON."""
    return _dump


@pytest.fixture
def repo(tmp_path: Path, rate_data: dict[str, Any], host_document: str) -> Path:
    """A checkout with scripts/rates.json and index.html, but no data/ yet."""
    paths = UpdatePaths.from_root(tmp_path)
    _dump(paths.source, rate_data)
    paths.host_file.write_text(host_document, encoding="utf-8")
    return tmp_path
