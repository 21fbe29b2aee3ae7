"""Tests for VersionLedger over SQLite."""

from datetime import datetime

import pytest

from spine_migrate.core.connection import SqliteConnection
from spine_migrate.core.dialect import SQLiteDialect
from spine_migrate.core.errors import DuplicateVersionError
from spine_migrate.migrations.ledger import VersionLedger
from spine_migrate.migrations.models import LedgerEntry


@pytest.fixture()
def conn():
    c = SqliteConnection()
    yield c
    c.close()


@pytest.fixture()
def ledger(conn):
    return VersionLedger(conn, SQLiteDialect())


class TestEnsure:
    def test_creates_table(self, ledger):
        assert ledger.exists() is False
        ledger.ensure()
        assert ledger.exists() is True

    def test_idempotent(self, ledger):
        ledger.ensure()
        ledger.record(LedgerEntry(version="V001", filename="V001__a.sql", checksum="c1"))
        ledger.ensure()
        assert [e.version for e in ledger.list_all()] == ["V001"]

    def test_table_name(self, ledger):
        assert ledger.table == "schema_migrations"


class TestRecordAndLookup:
    def test_lookup_missing(self, ledger):
        ledger.ensure()
        assert ledger.lookup("V001") is None

    def test_round_trip(self, ledger):
        ledger.ensure()
        ledger.record(
            LedgerEntry(version="V001", filename="V001__a.sql", checksum="abc", execution_time_ms=12)
        )

        entry = ledger.lookup("V001")
        assert entry.version == "V001"
        assert entry.filename == "V001__a.sql"
        assert entry.checksum == "abc"
        assert entry.execution_time_ms == 12
        assert isinstance(entry.executed_at, datetime)

    def test_null_checksum_allowed(self, ledger):
        ledger.ensure()
        ledger.record(LedgerEntry(version="V001", filename="V001__legacy.sql"))
        assert ledger.lookup("V001").checksum is None

    def test_duplicate_version(self, ledger):
        ledger.ensure()
        ledger.record(LedgerEntry(version="V001", filename="V001__a.sql", checksum="c1"))

        with pytest.raises(DuplicateVersionError) as exc_info:
            ledger.record(LedgerEntry(version="V001", filename="V001__again.sql", checksum="c2"))
        assert exc_info.value.version == "V001"
        assert exc_info.value.context.filename == "V001__again.sql"
        assert ledger.lookup("V001").filename == "V001__a.sql"


class TestListAll:
    def test_ordered_by_version(self, ledger):
        ledger.ensure()
        for version in ("V003", "V001", "V002"):
            ledger.record(LedgerEntry(version=version, filename=f"{version}__m.sql", checksum="x"))

        assert [e.version for e in ledger.list_all()] == ["V001", "V002", "V003"]

    def test_empty(self, ledger):
        ledger.ensure()
        assert ledger.list_all() == []


class TestLedgerEntry:
    def test_to_dict(self):
        entry = LedgerEntry(
            version="V001",
            filename="V001__a.sql",
            checksum="abc",
            execution_time_ms=5,
            executed_at=datetime(2024, 1, 2, 3, 4, 5),
        )
        assert entry.to_dict() == {
            "version": "V001",
            "filename": "V001__a.sql",
            "executed_at": "2024-01-02 03:04:05",
            "execution_time_ms": 5,
            "checksum": "abc",
        }
