"""
Shared pytest fixtures for spine-migrate tests.

This module provides:
- Environment isolation (no MIGRATE_* / DB_POSTGRESDB_* leakage from the shell)
- A temporary migrations directory with helpers to write files
- SQLite-backed settings so runner and status tests need no server

Usage:
    def test_something(sqlite_settings, write_migration):
        write_migration("V001__init.sql", "CREATE TABLE t (id INTEGER);")
        MigrationRunner(sqlite_settings).run()
"""

import os
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest

from spine_migrate.core.connection import SqliteConnection
from spine_migrate.core.settings import MigrateSettings


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Strip spine-migrate settings from the environment for every test."""
    for key in list(os.environ):
        if key.startswith(("MIGRATE_", "DB_POSTGRESDB_")):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture()
def migrations_dir(tmp_path: Path) -> Path:
    """Empty migrations directory."""
    d = tmp_path / "migrations"
    d.mkdir()
    return d


@pytest.fixture()
def write_migration(migrations_dir: Path) -> Callable[[str, str], Path]:
    """Write ``name`` with ``sql`` into the migrations directory."""

    def _write(name: str, sql: str) -> Path:
        path = migrations_dir / name
        path.write_bytes(sql.encode("utf-8"))
        return path

    return _write


@pytest.fixture()
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "data" / "ledger.db"


@pytest.fixture()
def sqlite_settings(migrations_dir: Path, db_path: Path) -> MigrateSettings:
    """Settings pointing the runner at a SQLite file and the temp migrations dir."""
    return MigrateSettings(
        database_backend="sqlite",
        sqlite_path=db_path,
        migrations_dir=migrations_dir,
    )


@pytest.fixture()
def inspect_db(db_path: Path) -> Iterator[Callable[[str], list]]:
    """Run a read query against the test database and return all rows."""
    conns: list[SqliteConnection] = []

    def _query(sql: str) -> list:
        db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = SqliteConnection(str(db_path))
        conns.append(conn)
        conn.execute(sql)
        return [tuple(row) for row in conn.fetchall()]

    yield _query

    for conn in conns:
        conn.close()
