"""Status reporter: read-only view of the ledger.

A missing ledger table is the normal state of a fresh database, so it is
reported as "no migrations applied", never as an error. The reporter never
creates the table.
"""

from __future__ import annotations

from spine_migrate.core.connection import dialect_for, open_connection
from spine_migrate.core.dialect import Dialect
from spine_migrate.core.logging import get_logger
from spine_migrate.core.protocols import Connection
from spine_migrate.core.settings import MigrateSettings
from spine_migrate.migrations.ledger import VersionLedger
from spine_migrate.migrations.models import LedgerStatus

logger = get_logger(__name__)


class StatusReporter:
    """Lists applied migrations over an open connection."""

    def __init__(self, conn: Connection, dialect: Dialect) -> None:
        self._ledger = VersionLedger(conn, dialect)

    def report(self) -> LedgerStatus:
        if not self._ledger.exists():
            logger.info("status.no_ledger", table=self._ledger.table)
            return LedgerStatus(ledger_exists=False)
        entries = self._ledger.list_all()
        logger.debug("status.loaded", count=len(entries))
        return LedgerStatus(ledger_exists=True, entries=entries)


def show_status(settings: MigrateSettings) -> LedgerStatus:
    """Open a connection, report the ledger, release the connection."""
    logger.info("status.connecting", target=settings.describe_target())
    with open_connection(settings) as conn:
        return StatusReporter(conn, dialect_for(settings)).report()


__all__ = ["StatusReporter", "show_status"]
