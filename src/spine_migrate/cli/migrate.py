"""
CLI: migration commands.

The same functions back the ``spine-migrate run|status|pending`` group and
the standalone ``run-migrations`` / ``show-status`` entry points.
"""

from __future__ import annotations

from pathlib import Path

import typer

from spine_migrate.cli.utils import bootstrap, fail, output_pending, output_status, output_summary
from spine_migrate.core.errors import MigrationError
from spine_migrate.migrations.runner import MigrationRunner
from spine_migrate.migrations.status import show_status


def run(
    migrations_dir: Path | None = typer.Option(
        None, "--migrations-dir", "-m", help="Directory of .sql migrations"
    ),
    dry_run: bool = typer.Option(False, "--dry-run", help="List pending migrations without applying"),
    json_out: bool = typer.Option(False, "--json", help="JSON output"),
) -> None:
    """Apply pending migrations in version order."""
    settings = bootstrap(migrations_dir=migrations_dir)
    result = MigrationRunner(settings).execute(dry_run=dry_run)
    if result.is_err():
        fail(result.error)
    output_summary(result.unwrap(), as_json=json_out)


def status(
    json_out: bool = typer.Option(False, "--json", help="JSON output"),
) -> None:
    """Show applied migrations from the ledger."""
    settings = bootstrap()
    try:
        ledger_status = show_status(settings)
    except MigrationError as e:
        fail(e)
    output_status(ledger_status, as_json=json_out)


def pending(
    migrations_dir: Path | None = typer.Option(
        None, "--migrations-dir", "-m", help="Directory of .sql migrations"
    ),
    json_out: bool = typer.Option(False, "--json", help="JSON output"),
) -> None:
    """List migrations not yet recorded in the ledger."""
    settings = bootstrap(migrations_dir=migrations_dir)
    try:
        migrations = MigrationRunner(settings).get_pending()
    except MigrationError as e:
        fail(e)
    output_pending(migrations, as_json=json_out)


# ── Standalone entry points ──────────────────────────────────────────────

run_migrations_app = typer.Typer(
    name="run-migrations",
    help="Apply pending SQL migrations.",
    add_completion=False,
)
run_migrations_app.command()(run)

show_status_app = typer.Typer(
    name="show-status",
    help="Show applied SQL migrations.",
    add_completion=False,
)
show_status_app.command()(status)
