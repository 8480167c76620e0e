"""
Error taxonomy for the rate-table updater.

Every failure raised by the library derives from ``RateUpdateError`` so the
CLI can report it and exit non-zero without catching unrelated exceptions.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional


class RateUpdateError(Exception):
    """Base class for all updater failures."""


class MissingInputError(RateUpdateError):
    """A required input file (the rate file or host document) does not exist."""

    def __init__(self, path: Path) -> None:
        super().__init__(f"{path} not found.")
        self.path = path


class ParseError(RateUpdateError):
    """The rate file is not well-formed JSON."""

    def __init__(
        self,
        path: Path,
        reason: str,
        line: Optional[int] = None,
        column: Optional[int] = None,
    ) -> None:
        location = f" (line {line}, column {column})" if line is not None else ""
        super().__init__(f"could not parse {path}{location}: {reason}")
        self.path = path
        self.line = line
        self.column = column


class SchemaError(RateUpdateError):
    """
    The rate table does not have the expected shape.

    Entry-level failures carry the offending record and its position in
    ``states`` so the maintainer can find it.
    """

    def __init__(
        self,
        message: str,
        entry: Any = None,
        index: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.entry = entry
        self.index = index


class MarkerNotFoundError(RateUpdateError):
    """
    The host document lacks a required replacement target.

    Also raised when a declaration is present but its value is not in the
    expected form, since inserting a second one would break the script.
    """

    def __init__(
        self,
        marker: str,
        path: Optional[Path] = None,
        reason: str = "not found",
    ) -> None:
        where = f" in {path}" if path is not None else ""
        super().__init__(f"marker '{marker}' {reason}{where}.")
        self.marker = marker
        self.path = path
        self.reason = reason
