"""
Root Typer application for the spine-migrate CLI.
"""

from __future__ import annotations

import typer
from typer import Typer

from spine_migrate.cli import migrate

app = Typer(
    name="spine-migrate",
    help="spine-migrate: versioned SQL schema migrations with drift detection.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        from spine_migrate import __version__

        typer.echo(f"spine-migrate {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """spine-migrate CLI: apply migrations and inspect the ledger."""


# ── Sub-commands ─────────────────────────────────────────────────────────

app.command("run")(migrate.run)
app.command("status")(migrate.status)
app.command("pending")(migrate.pending)
