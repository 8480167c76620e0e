"""
State Tax Rate Updater
======================

Maintenance tooling for the state income tax table used by the Roth
Conversion Ladder Optimizer. Validates the hand-edited rate file and
publishes it to the app's deployed data file and embedded fallback.

Modules:
    errors   - Failure taxonomy raised by the updater
    table    - Rate table model, loading and validation
    render   - Embedded fallback block rendering and marker rewriting
    updater  - File-level orchestration of a single update run
    cli      - Command-line interface
"""

__version__ = "1.0.0"

from rate_updater.errors import (
    MarkerNotFoundError,
    MissingInputError,
    ParseError,
    RateUpdateError,
    SchemaError,
)
from rate_updater.table import RateTable, StateRate, load_rate_file, validate
from rate_updater.render import apply_rate_table, format_rate, render_block
from rate_updater.updater import UpdatePaths, UpdateResult, run_update

__all__ = [
    "RateUpdateError",
    "MissingInputError",
    "ParseError",
    "SchemaError",
    "MarkerNotFoundError",
    "RateTable",
    "StateRate",
    "load_rate_file",
    "validate",
    "apply_rate_table",
    "format_rate",
    "render_block",
    "UpdatePaths",
    "UpdateResult",
    "run_update",
]
