"""
Propagate the maintainer's rate table into the app.

Workflow (once a year, typically January/February):

1. Check the Tax Foundation for new rates:
   https://taxfoundation.org/data/all/state/state-income-tax-rates/
2. Edit ``scripts/rates.json`` with any changed values.
3. Run ``python main.py`` (or ``rate-updater``).
4. Commit and push; the app fetches ``data/rates.json`` at runtime and
   falls back to the copy embedded in ``index.html`` when offline.

All file I/O for a run happens in ``run_update``. The input is validated
and the host document is fully rendered in memory before anything is
written.
"""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from rate_updater.errors import MarkerNotFoundError, MissingInputError
from rate_updater.render import rewrite_host_document
from rate_updater.table import RateTable, load_rate_file, validate

logger = logging.getLogger(__name__)

REPO_ROOT = Path(__file__).resolve().parent.parent

SOURCE_NAME = Path("scripts") / "rates.json"
DATA_FILE_NAME = Path("data") / "rates.json"
HOST_FILE_NAME = Path("index.html")

DEFAULT_SOURCE = REPO_ROOT / SOURCE_NAME
DEFAULT_DATA_FILE = REPO_ROOT / DATA_FILE_NAME
DEFAULT_HOST_FILE = REPO_ROOT / HOST_FILE_NAME


@dataclass(frozen=True)
class UpdatePaths:
    """Input and destination files for one run."""

    source: Path = DEFAULT_SOURCE
    data_file: Path = DEFAULT_DATA_FILE
    host_file: Path = DEFAULT_HOST_FILE

    @classmethod
    def from_root(cls, root: Path) -> "UpdatePaths":
        """Standard layout under ``root``."""
        root = Path(root)
        return cls(
            source=root / SOURCE_NAME,
            data_file=root / DATA_FILE_NAME,
            host_file=root / HOST_FILE_NAME,
        )


@dataclass
class UpdateResult:
    """What a run did (or, for a dry run, would have done)."""

    table: RateTable
    host_file: Path
    data_file: Optional[Path] = None
    host_changed: bool = False
    inserted_markers: list[str] = field(default_factory=list)
    dry_run: bool = False

    @property
    def paths_touched(self) -> list[Path]:
        paths = [self.data_file] if self.data_file is not None else []
        return paths + [self.host_file]


def check_source(source: Path = DEFAULT_SOURCE) -> RateTable:
    """Load and validate the rate file without writing anything."""
    return validate(load_rate_file(source))


def _read_document(path: Path) -> str:
    # newline="" keeps CRLF line endings intact through the rewrite
    with open(path, encoding="utf-8", newline="") as f:
        return f.read()


def _write_document(path: Path, text: str) -> None:
    with open(path, "w", encoding="utf-8", newline="") as f:
        f.write(text)


def _copy_data_file(source: Path, destination: Path) -> None:
    destination.parent.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(source, destination)
    logger.debug("Copied %s to %s", source, destination)


def run_update(
    paths: Optional[UpdatePaths] = None,
    *,
    write_data_file: bool = True,
    dry_run: bool = False,
) -> UpdateResult:
    """
    Validate the rate file and rewrite the destinations.

    Raises a RateUpdateError subclass on any problem with the input or the
    host document; in that case no destination has been written. The two
    writes themselves are not atomic as a pair, but re-running with the
    same input converges on the same bytes.
    """
    paths = paths or UpdatePaths()
    table = check_source(paths.source)
    logger.debug("Validated %d states for tax year %s", table.state_count, table.year)

    if not paths.host_file.exists():
        raise MissingInputError(paths.host_file)
    document = _read_document(paths.host_file)
    try:
        rewrite = rewrite_host_document(document, table)
    except MarkerNotFoundError as e:
        raise MarkerNotFoundError(e.marker, paths.host_file, e.reason) from None

    result = UpdateResult(
        table=table,
        host_file=paths.host_file,
        data_file=paths.data_file if write_data_file else None,
        host_changed=rewrite.text != document,
        inserted_markers=rewrite.inserted,
        dry_run=dry_run,
    )
    if dry_run:
        return result

    if write_data_file:
        _copy_data_file(paths.source, paths.data_file)

    if result.host_changed:
        _write_document(paths.host_file, rewrite.text)
        logger.debug("Rewrote %s", paths.host_file)
    else:
        logger.debug("%s already up to date", paths.host_file)

    return result
