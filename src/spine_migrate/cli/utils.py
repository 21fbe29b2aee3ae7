"""
CLI utility helpers: settings bootstrap and output formatting.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, NoReturn

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from spine_migrate.core.errors import ConfigError, MigrationError
from spine_migrate.core.logging import configure_logging
from spine_migrate.core.settings import MigrateSettings, load_settings
from spine_migrate.migrations.models import LedgerStatus, MigrationFile, RunSummary

console = Console()
err_console = Console(stderr=True)

STATUS_COLUMNS = ("version", "filename", "executed_at", "execution_time_ms", "checksum")


# ── Bootstrap ────────────────────────────────────────────────────────────


def bootstrap(*, migrations_dir: Path | None = None) -> MigrateSettings:
    """Build settings once and configure logging from them."""
    try:
        settings = load_settings(migrations_dir=migrations_dir)
    except ConfigError as e:
        fail(e)

    configure_logging(
        level=settings.log_level,
        json_format=settings.log_format.lower() == "json",
    )
    return settings


def fail(error: Exception) -> NoReturn:
    """Print an error and exit non-zero."""
    if isinstance(error, MigrationError):
        code = type(error).__name__
        message = error.message
    else:
        code = "ERROR"
        message = str(error)
    err_console.print(f"[bold red]Error[/bold red] ({code}): {escape(message)}")
    raise typer.Exit(code=1)


# ── Output helpers ───────────────────────────────────────────────────────


def print_json(payload: Any) -> None:
    console.print_json(json.dumps(payload, default=str))


def output_summary(summary: RunSummary, *, as_json: bool = False) -> None:
    """Render a ``RunSummary``."""
    if as_json:
        print_json(summary.to_dict())
        return

    if summary.dry_run:
        if summary.pending:
            console.print("[bold]Pending migrations[/bold] (dry run, nothing applied):")
            for filename in summary.pending:
                console.print(f"  [cyan]{filename}[/cyan]")
        else:
            console.print("[dim]No pending migrations.[/dim]")
        console.print(f"[dim]{summary.skipped_count} already applied.[/dim]")
        return

    console.print(
        f"[bold green]Migrations complete:[/bold green] "
        f"{summary.applied_count} applied, {summary.skipped_count} skipped"
    )


def output_status(status: LedgerStatus, *, as_json: bool = False) -> None:
    """Render the ledger as a table, or the "no migrations" message."""
    if as_json:
        print_json(status.to_dict())
        return

    if status.message:
        console.print(status.message)
        return

    table = Table(title="Applied Migrations", show_lines=False, pad_edge=False)
    for col in STATUS_COLUMNS:
        table.add_column(col, overflow="fold")
    for entry in status.entries:
        row = entry.to_dict()
        table.add_row(*("" if row[col] is None else str(row[col]) for col in STATUS_COLUMNS))
    console.print(table)


def output_pending(migrations: list[MigrationFile], *, as_json: bool = False) -> None:
    """Render migrations that have not been applied yet."""
    if as_json:
        print_json([{"version": m.version, "filename": m.filename} for m in migrations])
        return

    if not migrations:
        console.print("[dim]No pending migrations.[/dim]")
        return

    table = Table(title="Pending Migrations", show_lines=False, pad_edge=False)
    table.add_column("version")
    table.add_column("filename", overflow="fold")
    for migration in migrations:
        table.add_row(migration.version, migration.filename)
    console.print(table)
