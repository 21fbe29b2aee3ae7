"""Version ledger: durable record of applied migrations.

One row per applied version in ``schema_migrations``. Rows are inserted
once, when a migration succeeds, and never updated or deleted here.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from spine_migrate.core.dialect import Dialect
from spine_migrate.core.errors import DuplicateVersionError, IntegrityError
from spine_migrate.core.logging import get_logger
from spine_migrate.core.protocols import Connection
from spine_migrate.migrations.models import LedgerEntry

logger = get_logger(__name__)

_COLUMNS = "version, filename, executed_at, execution_time_ms, checksum"


def _parse_timestamp(value: Any) -> datetime | None:
    # PostgreSQL returns datetime, SQLite returns 'YYYY-MM-DD HH:MM:SS'
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value))


def _row_to_entry(row: Any) -> LedgerEntry:
    return LedgerEntry(
        version=row["version"],
        filename=row["filename"],
        checksum=row["checksum"],
        execution_time_ms=row["execution_time_ms"],
        executed_at=_parse_timestamp(row["executed_at"]),
    )


class VersionLedger:
    """Reads and appends ledger rows over a ``Connection``.

    Example::

        ledger = VersionLedger(conn, get_dialect("postgresql"))
        ledger.ensure()
        if ledger.lookup("V001") is None:
            ledger.record(LedgerEntry(version="V001", filename="V001__init.sql", checksum=c))
    """

    def __init__(self, conn: Connection, dialect: Dialect) -> None:
        self._conn = conn
        self._dialect = dialect

    @property
    def table(self) -> str:
        return self._dialect.ledger_table

    def ensure(self) -> None:
        """Create the ledger table if it does not exist. Safe on every run."""
        self._conn.execute(self._dialect.create_ledger_table())

    def exists(self) -> bool:
        """Whether the ledger table has been created."""
        self._conn.execute(self._dialect.ledger_exists_query())
        row = self._conn.fetchone()
        return row is not None and row["table_name"] is not None

    def lookup(self, version: str) -> LedgerEntry | None:
        """Return the entry for ``version``, or ``None`` if it was never applied."""
        self._conn.execute(
            f"SELECT {_COLUMNS} FROM {self.table} "
            f"WHERE version = {self._dialect.placeholder(0)} LIMIT 1",
            (version,),
        )
        row = self._conn.fetchone()
        return _row_to_entry(row) if row is not None else None

    def record(self, entry: LedgerEntry) -> None:
        """Append an entry. ``executed_at`` is set by the database.

        Raises:
            DuplicateVersionError: ``entry.version`` is already recorded.
        """
        try:
            self._conn.execute(
                f"INSERT INTO {self.table} (version, filename, execution_time_ms, checksum) "
                f"VALUES ({self._dialect.placeholders(4)})",
                (entry.version, entry.filename, entry.execution_time_ms, entry.checksum),
            )
        except IntegrityError as e:
            raise DuplicateVersionError(entry.version, cause=e).with_context(
                filename=entry.filename
            ) from e
        logger.debug("ledger.recorded", version=entry.version, filename=entry.filename)

    def list_all(self) -> list[LedgerEntry]:
        """All entries ordered by version ascending."""
        self._conn.execute(f"SELECT {_COLUMNS} FROM {self.table} ORDER BY version ASC")
        return [_row_to_entry(row) for row in self._conn.fetchall()]


__all__ = ["VersionLedger"]
