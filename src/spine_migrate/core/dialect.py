"""
SQL dialect abstraction for the migration ledger.

The ledger issues a handful of statements (create, exists, lookup, insert,
list). Their text differs per backend in placeholder style, auto-increment
syntax, timestamp defaults and how table existence is checked. A
``Dialect`` owns those differences so ``VersionLedger`` stays backend
agnostic.

Architecture:
    ::

        Dialect (Protocol)
        ├── SQLiteDialect      ``?`` placeholders, sqlite_master lookup
        └── PostgreSQLDialect  ``%s`` placeholders, to_regclass lookup

        get_dialect("postgresql") → PostgreSQLDialect()

The ledger table name is fixed per dialect: ``public.schema_migrations``
on PostgreSQL so it exists before (and independently of) any application
schema, ``schema_migrations`` on SQLite.

Tags:
    sql, dialect, portability, spine-migrate

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

LEDGER_TABLE_NAME = "schema_migrations"


@runtime_checkable
class Dialect(Protocol):
    """Backend-specific SQL fragments used by the ledger."""

    @property
    def name(self) -> str:
        """Canonical dialect name, e.g. ``'sqlite'``, ``'postgresql'``."""
        ...

    @property
    def ledger_table(self) -> str:
        """Fully qualified ledger table name."""
        ...

    def placeholder(self, index: int) -> str:
        """Single positional placeholder (0-based index)."""
        ...

    def placeholders(self, count: int) -> str:
        """Comma-separated list of ``count`` placeholders."""
        ...

    def create_ledger_table(self) -> str:
        """Idempotent DDL for the ledger table."""
        ...

    def ledger_exists_query(self) -> str:
        """Query whose ``table_name`` column is non-NULL iff the ledger exists.

        May return no row at all when the table is absent.
        """
        ...


class SQLiteDialect:
    """SQLite dialect: ``?`` placeholders, ``CURRENT_TIMESTAMP`` default."""

    @property
    def name(self) -> str:
        return "sqlite"

    @property
    def ledger_table(self) -> str:
        return LEDGER_TABLE_NAME

    def placeholder(self, index: int) -> str:  # noqa: ARG002
        return "?"

    def placeholders(self, count: int) -> str:
        return ", ".join("?" for _ in range(count))

    def create_ledger_table(self) -> str:
        return f"""
            CREATE TABLE IF NOT EXISTS {self.ledger_table} (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                version VARCHAR(10) NOT NULL UNIQUE,
                filename VARCHAR(255) NOT NULL,
                executed_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                execution_time_ms INTEGER,
                checksum TEXT
            )
        """

    def ledger_exists_query(self) -> str:
        return (
            "SELECT name AS table_name FROM sqlite_master "
            f"WHERE type = 'table' AND name = '{LEDGER_TABLE_NAME}'"
        )


class PostgreSQLDialect:
    """PostgreSQL dialect: ``%s`` placeholders (psycopg2), ``NOW()``.

    The ledger lives in ``public`` regardless of ``search_path`` so that
    migrations creating and switching application schemas never hide it.
    """

    @property
    def name(self) -> str:
        return "postgresql"

    @property
    def ledger_table(self) -> str:
        return f"public.{LEDGER_TABLE_NAME}"

    def placeholder(self, index: int) -> str:  # noqa: ARG002
        return "%s"

    def placeholders(self, count: int) -> str:
        return ", ".join("%s" for _ in range(count))

    def create_ledger_table(self) -> str:
        return f"""
            CREATE TABLE IF NOT EXISTS {self.ledger_table} (
                id SERIAL PRIMARY KEY,
                version VARCHAR(10) NOT NULL UNIQUE,
                filename VARCHAR(255) NOT NULL,
                executed_at TIMESTAMP DEFAULT NOW(),
                execution_time_ms INTEGER,
                checksum TEXT
            )
        """

    def ledger_exists_query(self) -> str:
        return f"SELECT to_regclass('{self.ledger_table}') AS table_name"


_DIALECTS: dict[str, Dialect] = {
    "sqlite": SQLiteDialect(),
    "postgresql": PostgreSQLDialect(),
    "postgres": PostgreSQLDialect(),
}


def get_dialect(db_type: str) -> Dialect:
    """Get a dialect by database type name.

    Args:
        db_type: One of ``'sqlite'``, ``'postgresql'``, ``'postgres'``.

    Raises:
        ValueError: If ``db_type`` is not recognised.

    Example:
        >>> get_dialect("postgresql").placeholders(2)
        '%s, %s'
    """
    key = db_type.lower()
    if key not in _DIALECTS:
        raise ValueError(
            f"Unknown dialect '{db_type}'. "
            f"Supported: {sorted(set(_DIALECTS) - {'postgres'})}"
        )
    return _DIALECTS[key]


__all__ = [
    "LEDGER_TABLE_NAME",
    "Dialect",
    "SQLiteDialect",
    "PostgreSQLDialect",
    "get_dialect",
]
