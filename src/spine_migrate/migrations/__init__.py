"""Schema migration runner for spine-migrate.

Manifesto:
    Database schemas must evolve safely across deployments. The runner
    applies versioned ``.sql`` files exactly once, in filename order,
    tracks what ran in ``schema_migrations`` and refuses to continue when
    an already-applied file has been edited.

Modules
-------
models    MigrationFile, LedgerEntry, RunSummary, LedgerStatus, RunState
source    list_migrations() / extract_version()
ledger    VersionLedger (ensure, lookup, record, list_all)
runner    MigrationRunner (run, execute, get_pending)
status    StatusReporter / show_status()

Tags:
    spine-migrate, migrations, schema, database, idempotent, DDL

Doc-Types:
    package-overview
"""

from spine_migrate.migrations.ledger import VersionLedger
from spine_migrate.migrations.models import (
    LedgerEntry,
    LedgerStatus,
    MigrationFile,
    RunState,
    RunSummary,
)
from spine_migrate.migrations.runner import MigrationRunner
from spine_migrate.migrations.source import compute_checksum, extract_version, list_migrations
from spine_migrate.migrations.status import StatusReporter, show_status

__all__ = [
    "LedgerEntry",
    "LedgerStatus",
    "MigrationFile",
    "MigrationRunner",
    "RunState",
    "RunSummary",
    "StatusReporter",
    "VersionLedger",
    "compute_checksum",
    "extract_version",
    "list_migrations",
    "show_status",
]
