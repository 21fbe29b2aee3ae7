"""
Connection protocol for spine-migrate.

The ledger, runner and status reporter depend on this shape, never on a
driver. ``PostgresConnection`` and ``SqliteConnection`` in
:mod:`spine_migrate.core.connection` implement it; tests can pass any
object with the same methods.

Architecture:
    ::

        Connection Protocol:
        ┌────────────────────────────────────────────────────────┐
        │ execute(sql, params)   → Execute single statement      │
        │ execute_script(sql)    → Execute a multi-statement body│
        │ fetchone()             → Get one result row (mapping)  │
        │ fetchall()             → Get all result rows           │
        │ commit() / rollback()  → Transaction control           │
        │ close()                → Release the connection        │
        └────────────────────────────────────────────────────────┘

Driver errors never leak through the protocol: implementations raise
``IntegrityError`` for constraint violations and ``QueryError`` for any
other rejected statement.

Tags:
    protocol, connection, database, spine-migrate

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Connection(Protocol):
    """Minimal synchronous connection interface used by the migration core."""

    def execute(self, sql: str, params: tuple = ()) -> Any:
        """Execute a single parameterised statement."""
        ...

    def execute_script(self, sql: str) -> None:
        """Execute a migration body, possibly containing several statements."""
        ...

    def fetchone(self) -> Any:
        """Fetch one row of the last result as a mapping, or ``None``."""
        ...

    def fetchall(self) -> list[Any]:
        """Fetch all remaining rows of the last result."""
        ...

    def commit(self) -> None:
        ...

    def rollback(self) -> None:
        ...

    def close(self) -> None:
        ...


__all__ = ["Connection"]
