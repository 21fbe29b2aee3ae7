"""
spine-migrate: versioned SQL schema migrations with drift detection.

Applies ``<letter><digits>__<description>.sql`` files to PostgreSQL (or
SQLite) exactly once each, in filename order, and records every applied
version with its checksum in ``schema_migrations``.

Quick start::

    from spine_migrate import MigrationRunner, load_settings

    summary = MigrationRunner(load_settings()).run()

Command line::

    run-migrations --migrations-dir database/migrations
    show-status
"""

from spine_migrate.core.settings import MigrateSettings, load_settings
from spine_migrate.migrations import MigrationRunner, RunSummary, StatusReporter, show_status

__version__ = "0.1.0"

__all__ = [
    "MigrateSettings",
    "MigrationRunner",
    "RunSummary",
    "StatusReporter",
    "load_settings",
    "show_status",
    "__version__",
]
