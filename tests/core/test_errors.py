"""Tests for spine_migrate.core.errors module."""

import pytest

from spine_migrate.core.errors import (
    ChecksumMismatchError,
    ConnectionError,
    DatabaseError,
    DuplicateVersionError,
    ErrorCategory,
    ErrorContext,
    IntegrityError,
    InvalidFilenameError,
    MigrationError,
    MigrationExecutionError,
    MigrationSourceError,
    QueryError,
)


class TestErrorContext:
    """Test ErrorContext dataclass."""

    def test_empty_context(self):
        ctx = ErrorContext()
        assert ctx.version is None
        assert ctx.filename is None
        assert ctx.to_dict() == {}

    def test_only_set_fields_serialized(self):
        ctx = ErrorContext(version="V002", filename="V002__add_col.sql")
        assert ctx.to_dict() == {"version": "V002", "filename": "V002__add_col.sql"}

    def test_metadata_merged(self):
        ctx = ErrorContext(run_id="abc")
        ctx.metadata["directory"] = "/tmp/m"
        assert ctx.to_dict() == {"run_id": "abc", "directory": "/tmp/m"}


class TestMigrationError:
    """Test the base error."""

    def test_defaults(self):
        err = MigrationError("boom")
        assert err.message == "boom"
        assert str(err) == "boom"
        assert err.category == ErrorCategory.INTERNAL
        assert err.cause is None

    def test_cause_is_chained(self):
        original = ValueError("driver said no")
        err = MigrationError("wrapped", cause=original)
        assert err.cause is original
        assert err.__cause__ is original

    def test_with_context_sets_known_fields_and_metadata(self):
        err = MigrationError("boom").with_context(version="V001", table="t")
        assert err.context.version == "V001"
        assert err.context.metadata == {"table": "t"}

    def test_to_dict(self):
        err = MigrationError("boom", cause=RuntimeError("inner")).with_context(filename="V001__a.sql")
        d = err.to_dict()
        assert d["error_type"] == "MigrationError"
        assert d["message"] == "boom"
        assert d["category"] == "INTERNAL"
        assert d["context"] == {"filename": "V001__a.sql"}
        assert d["cause"] == "inner"

    def test_repr(self):
        assert repr(QueryError("bad")) == "QueryError('bad', category=DATABASE)"


class TestHierarchy:
    @pytest.mark.parametrize(
        "cls,category",
        [
            (ConnectionError, ErrorCategory.DATABASE),
            (DatabaseError, ErrorCategory.DATABASE),
            (QueryError, ErrorCategory.DATABASE),
            (IntegrityError, ErrorCategory.DATABASE),
        ],
    )
    def test_database_errors(self, cls, category):
        err = cls("x")
        assert isinstance(err, MigrationError)
        assert err.category == category

    def test_query_and_integrity_are_database_errors(self):
        assert issubclass(QueryError, DatabaseError)
        assert issubclass(IntegrityError, DatabaseError)

    def test_connection_error_is_not_builtin(self):
        import builtins

        assert not issubclass(ConnectionError, builtins.ConnectionError)


class TestInvalidFilenameError:
    def test_default_message_names_file(self):
        err = InvalidFilenameError("bad_name.sql")
        assert err.filename == "bad_name.sql"
        assert "bad_name.sql" in err.message
        assert err.category == ErrorCategory.PARSE
        assert err.context.filename == "bad_name.sql"

    def test_custom_message(self):
        err = InvalidFilenameError("V1__a.sql", "widths differ")
        assert err.message == "widths differ"


class TestMigrationSourceError:
    def test_path_in_message_and_context(self):
        err = MigrationSourceError("/nope")
        assert "/nope" in err.message
        assert err.path == "/nope"
        assert err.to_dict()["context"] == {"path": "/nope"}
        assert err.category == ErrorCategory.SOURCE


class TestChecksumMismatchError:
    def test_fields_and_message(self):
        err = ChecksumMismatchError(
            filename="V001__init.sql",
            prior_filename="V001__init_old.sql",
            prior_checksum="aaa",
            current_checksum="bbb",
            version="V001",
        )
        assert err.category == ErrorCategory.VALIDATION
        assert err.prior_filename == "V001__init_old.sql"
        assert err.message == (
            "Checksum mismatch for V001__init.sql. "
            "Previously applied as V001__init_old.sql with checksum aaa, "
            "current checksum is bbb."
        )
        d = err.to_dict()
        assert d["prior_checksum"] == "aaa"
        assert d["current_checksum"] == "bbb"
        assert d["context"] == {"version": "V001", "filename": "V001__init.sql"}


class TestMigrationExecutionError:
    def test_names_file_and_cause(self):
        cause = QueryError('syntax error at or near "THIS"')
        err = MigrationExecutionError("V002__bad.sql", cause=cause)
        assert err.filename == "V002__bad.sql"
        assert err.cause is cause
        assert err.message.startswith("Migration failed: V002__bad.sql")
        assert "syntax error" in err.message
        assert err.category == ErrorCategory.MIGRATION


class TestDuplicateVersionError:
    def test_names_version(self):
        err = DuplicateVersionError("V003")
        assert err.version == "V003"
        assert "V003" in err.message
        assert err.context.version == "V003"
        assert err.category == ErrorCategory.INTERNAL
