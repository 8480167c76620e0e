"""
Command-line interface for the state tax rate updater.

Provides subcommands for updating the app's rate data, validating the
maintainer's rate file, and viewing the table. ``update`` runs when no
subcommand is given.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from rate_updater.errors import RateUpdateError
from rate_updater.table import RateTable
from rate_updater.updater import (
    DATA_FILE_NAME,
    HOST_FILE_NAME,
    REPO_ROOT,
    SOURCE_NAME,
    UpdatePaths,
    check_source,
    run_update,
)

console = Console()
err_console = Console(stderr=True)

COMMANDS = ("update", "check", "show")


def _configure_logging(verbose: bool) -> None:
    if not verbose:
        return
    logging.basicConfig(
        level=logging.DEBUG,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _resolve_paths(args: argparse.Namespace) -> UpdatePaths:
    root = args.root or REPO_ROOT
    return UpdatePaths(
        source=args.source or root / SOURCE_NAME,
        data_file=args.data_file or root / DATA_FILE_NAME,
        host_file=args.host_file or root / HOST_FILE_NAME,
    )


def _table_facts(table: RateTable) -> str:
    return (
        f"[bold]Tax year:[/bold] {table.year}\n"
        f"[bold]Last updated:[/bold] {escape(table.updated)}\n"
        f"[bold]States:[/bold] {table.state_count}"
    )


# -----------------------------------------------------------------------
# Subcommand: update
# -----------------------------------------------------------------------


def cmd_update(args: argparse.Namespace) -> None:
    """Copy the rate file to the deployed data path and refresh index.html."""
    paths = _resolve_paths(args)
    result = run_update(
        paths,
        write_data_file=not args.no_data_file,
        dry_run=args.dry_run,
    )

    verb = "Would update" if result.dry_run else "Updated"
    if result.data_file is not None:
        action = "Would copy" if result.dry_run else "Copied"
        console.print(
            f"{action} to {escape(str(result.data_file))}",
            soft_wrap=True,
        )
    if result.host_changed:
        console.print(
            f"{verb} {escape(str(result.host_file))} fallback with "
            f"{result.table.state_count} states.",
            soft_wrap=True,
        )
    else:
        console.print(
            f"{escape(str(result.host_file))} already up to date.", soft_wrap=True
        )
    for marker in result.inserted_markers:
        console.print(f"[yellow]Inserted missing {marker} declaration.[/yellow]")

    console.print(
        Panel(
            _table_facts(result.table),
            title="Dry Run" if result.dry_run else "Rates Updated",
            border_style="yellow" if result.dry_run else "green",
        )
    )
    if not result.dry_run:
        console.print("\nCommit and push to deploy.")


# -----------------------------------------------------------------------
# Subcommand: check
# -----------------------------------------------------------------------


def cmd_check(args: argparse.Namespace) -> None:
    """Validate the rate file without writing anything."""
    paths = _resolve_paths(args)
    table = check_source(paths.source)
    console.print(f"{escape(str(paths.source))} is valid.", soft_wrap=True)
    console.print(
        Panel(
            _table_facts(table),
            title="Rate Table",
            border_style="green",
        )
    )


# -----------------------------------------------------------------------
# Subcommand: show
# -----------------------------------------------------------------------


def cmd_show(args: argparse.Namespace) -> None:
    """Display the rate table, or a single state."""
    paths = _resolve_paths(args)
    table = check_source(paths.source)

    if args.state:
        state = table.get_state(args.state)
        if state is None:
            raise RateUpdateError(f"unknown state: {args.state}")
        console.print(
            Panel(
                f"[bold]State:[/bold] {escape(state.name)} ({escape(state.abbr)})\n"
                f"[bold]Rate:[/bold] {state.rate}%\n"
                f"[bold]Tax year:[/bold] {table.year}",
                title=f"{escape(state.name)} Income Tax",
                border_style="cyan",
            )
        )
        return

    out = Table(
        title=f"State Income Tax Rates - {table.year}",
        caption=f"Last updated {escape(table.updated)}",
        box=box.ROUNDED,
    )
    out.add_column("State", style="bold")
    out.add_column("Name")
    out.add_column("Rate", justify="right")

    for state in table.states:
        style = "dim" if state.rate == 0 else ""
        out.add_row(
            escape(state.abbr),
            escape(state.name),
            f"{state.rate}%" if state.rate > 0 else "None",
            style=style,
        )
    console.print(out)

    no_tax = table.no_income_tax_states()
    if no_tax:
        console.print(f"No income tax: {escape(', '.join(no_tax))}")


# -----------------------------------------------------------------------
# Argument parser
# -----------------------------------------------------------------------


def _common_options() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--root",
        type=Path,
        help="Repository root holding scripts/rates.json, data/ and index.html",
    )
    common.add_argument("--source", type=Path, help="Rate file to read")
    common.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    return common


def build_parser() -> argparse.ArgumentParser:
    common = _common_options()
    parser = argparse.ArgumentParser(
        prog="rate-updater",
        description="Update the state income tax rates embedded in the app",
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # update
    update_p = subparsers.add_parser(
        "update", parents=[common], help="Validate and publish the rate table (default)"
    )
    update_p.add_argument("--data-file", type=Path, help="Deployed data file to write")
    update_p.add_argument("--host-file", type=Path, help="Host document to rewrite")
    update_p.add_argument(
        "--no-data-file",
        action="store_true",
        help="Only refresh the embedded fallback",
    )
    update_p.add_argument(
        "--dry-run", "-n", action="store_true", help="Validate and render without writing"
    )
    update_p.set_defaults(func=cmd_update)

    # check
    check_p = subparsers.add_parser("check", parents=[common], help="Validate the rate file")
    check_p.set_defaults(func=cmd_check, data_file=None, host_file=None)

    # show
    show_p = subparsers.add_parser("show", parents=[common], help="View the rate table")
    show_p.add_argument("--state", "-s", help="State code to look up")
    show_p.set_defaults(func=cmd_show, data_file=None, host_file=None)

    return parser


def _with_default_command(argv: list[str]) -> list[str]:
    if any(arg in COMMANDS for arg in argv) or argv in (["-h"], ["--help"]):
        return argv
    return ["update", *argv]


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    argv = list(sys.argv[1:] if argv is None else argv)
    args = parser.parse_args(_with_default_command(argv))
    _configure_logging(args.verbose)

    try:
        args.func(args)
    except (RateUpdateError, OSError) as e:
        err_console.print(f"[red]Error: {escape(str(e))}[/red]", soft_wrap=True)
        return 1
    return 0
