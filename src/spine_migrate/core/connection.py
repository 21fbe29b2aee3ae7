"""Connection factory: open the single database connection a run owns.

Both backends are wrapped so they satisfy the
:class:`~spine_migrate.core.protocols.Connection` protocol and translate
driver exceptions into the spine-migrate hierarchy.

==================  ==============================  ==================
Backend             Driver                          Selected by
==================  ==============================  ==================
``postgres``        psycopg2 (autocommit)           default
``sqlite``          sqlite3 (autocommit)            ``MIGRATE_DATABASE_BACKEND=sqlite``
==================  ==============================  ==================

Usage
-----
::

    from spine_migrate.core.connection import open_connection

    with open_connection(settings) as conn:
        conn.execute("SELECT 1")
        conn.fetchone()
    # connection released here, on success and on failure

Both wrappers run in autocommit mode. A migration body sent through
``execute_script`` is a single round trip on PostgreSQL, which the server
runs as one implicit transaction.
"""

from __future__ import annotations

import re
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

import psycopg2
import psycopg2.extras

from spine_migrate.core import errors
from spine_migrate.core.dialect import Dialect, get_dialect
from spine_migrate.core.logging import get_logger
from spine_migrate.core.protocols import Connection
from spine_migrate.core.settings import MigrateSettings

logger = get_logger(__name__)


# ── PostgreSQL ───────────────────────────────────────────────────────────


class PostgresConnection:
    """Adapter: psycopg2 connection → ``Connection`` protocol.

    Rows come back as dicts (``RealDictCursor``). One cursor is kept so
    ``execute`` / ``fetchone`` / ``fetchall`` share a result set.
    """

    def __init__(self, raw: Any) -> None:
        self._conn = raw
        self._conn.autocommit = True
        self._cursor = raw.cursor(cursor_factory=psycopg2.extras.RealDictCursor)

    def execute(self, sql: str, params: tuple = ()) -> Any:
        # No params means no %-interpolation, so literal % in SQL survives
        try:
            self._cursor.execute(sql, params or None)
        except psycopg2.IntegrityError as e:
            raise errors.IntegrityError(str(e).strip(), cause=e) from e
        except psycopg2.Error as e:
            raise errors.QueryError(str(e).strip(), cause=e) from e
        return self._cursor

    def execute_script(self, sql: str) -> None:
        self.execute(sql)

    def fetchone(self) -> Any:
        return self._cursor.fetchone()

    def fetchall(self) -> list:
        return self._cursor.fetchall()

    def commit(self) -> None:
        self._conn.commit()

    def rollback(self) -> None:
        self._conn.rollback()

    def close(self) -> None:
        self._cursor.close()
        self._conn.close()

    @property
    def raw(self) -> Any:
        """Access the underlying psycopg2 connection."""
        return self._conn

    def __repr__(self) -> str:
        return f"PostgresConnection({self._conn!r})"


# ── SQLite ───────────────────────────────────────────────────────────────


# Transaction control at the start of a statement. The BEGIN opening a
# trigger body has no semicolon and does not match.
_OWN_TRANSACTION = re.compile(
    r"^\s*(BEGIN(\s+(DEFERRED|IMMEDIATE|EXCLUSIVE))?(\s+TRANSACTION)?|COMMIT(\s+TRANSACTION)?|END\s+TRANSACTION)\s*;",
    re.IGNORECASE | re.MULTILINE,
)


class SqliteConnection:
    """Adapter: ``sqlite3.Connection`` → ``Connection`` protocol.

    Opened with ``isolation_level=None`` so statements commit as they run,
    matching the PostgreSQL wrapper.
    """

    def __init__(self, path: str = ":memory:") -> None:
        self._conn = sqlite3.connect(path, isolation_level=None)
        self._conn.row_factory = sqlite3.Row
        self._cursor = self._conn.cursor()

    def execute(self, sql: str, params: tuple = ()) -> Any:
        try:
            self._cursor.execute(sql, params)
        except sqlite3.IntegrityError as e:
            raise errors.IntegrityError(str(e), cause=e) from e
        except sqlite3.Error as e:
            raise errors.QueryError(str(e), cause=e) from e
        return self._cursor

    def execute_script(self, sql: str) -> None:
        """Run a multi-statement script as one unit.

        Scripts without their own ``BEGIN`` / ``COMMIT`` are wrapped in a
        transaction, so a failing statement leaves none of the earlier ones
        applied. ``VACUUM`` cannot run inside a migration.
        """
        if not _OWN_TRANSACTION.search(sql):
            sql = f"BEGIN;\n{sql}\n;\nCOMMIT;"
        try:
            self._cursor.executescript(sql)
        except sqlite3.IntegrityError as e:
            self._rollback_open_transaction()
            raise errors.IntegrityError(str(e), cause=e) from e
        except sqlite3.Error as e:
            self._rollback_open_transaction()
            raise errors.QueryError(str(e), cause=e) from e

    def fetchone(self) -> Any:
        return self._cursor.fetchone()

    def fetchall(self) -> list:
        return self._cursor.fetchall()

    def commit(self) -> None:
        self._conn.commit()

    def rollback(self) -> None:
        self._conn.rollback()

    def close(self) -> None:
        self._conn.close()

    def _rollback_open_transaction(self) -> None:
        # A script with its own BEGIN may stop mid-transaction
        if self._conn.in_transaction:
            self._conn.rollback()

    @property
    def raw(self) -> sqlite3.Connection:
        """Access the underlying ``sqlite3.Connection`` (e.g. for pragmas)."""
        return self._conn

    def __repr__(self) -> str:
        return f"SqliteConnection({self._conn!r})"


# ── Factory ──────────────────────────────────────────────────────────────


def _connect_postgres(settings: MigrateSettings) -> Connection:
    try:
        raw = psycopg2.connect(**settings.database.connect_kwargs())
    except psycopg2.Error as e:
        raise errors.ConnectionError(
            f"Failed to connect to PostgreSQL at {settings.database.describe()}: {str(e).strip()}",
            cause=e,
        ) from e
    return PostgresConnection(raw)


def _connect_sqlite(settings: MigrateSettings) -> Connection:
    path = Path(settings.sqlite_path)
    try:
        if str(path) != ":memory:":
            path.parent.mkdir(parents=True, exist_ok=True)
        return SqliteConnection(str(path))
    except (sqlite3.Error, OSError) as e:
        raise errors.ConnectionError(
            f"Failed to open SQLite database at {path}: {e}",
            cause=e,
        ) from e


def connect(settings: MigrateSettings) -> Connection:
    """Open a connection for the configured backend.

    Raises:
        ConnectionError: The database cannot be reached.
    """
    if settings.is_sqlite:
        return _connect_sqlite(settings)
    return _connect_postgres(settings)


def dialect_for(settings: MigrateSettings) -> Dialect:
    """The SQL dialect matching the configured backend."""
    return get_dialect(settings.database_backend.value)


def release(conn: Connection) -> None:
    """Close a connection, best effort.

    A failing close is logged and dropped so it never replaces the error
    that ended the run.
    """
    try:
        conn.close()
    except Exception as e:  # noqa: BLE001
        logger.warning("connection.close_failed", error=str(e))


@contextmanager
def open_connection(settings: MigrateSettings) -> Iterator[Connection]:
    """Acquire a connection once and release it exactly once on exit."""
    conn = connect(settings)
    try:
        yield conn
    finally:
        release(conn)


__all__ = [
    "PostgresConnection",
    "SqliteConnection",
    "connect",
    "dialect_for",
    "open_connection",
    "release",
]
