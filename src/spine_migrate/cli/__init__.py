"""
CLI layer for spine-migrate.

Provides a Typer application whose commands delegate to
``spine_migrate.migrations``. This package handles only terminal transport:
argument parsing, coloured output, table formatting and exit codes.

Entry points::

    spine-migrate --help
    run-migrations
    show-status
"""

from spine_migrate.cli.app import app
from spine_migrate.cli.migrate import run_migrations_app, show_status_app

__all__ = ["app", "run_migrations_app", "show_status_app"]
