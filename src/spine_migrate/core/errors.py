"""
Structured error types for spine-migrate.

Every failure a migration run can hit is a typed ``MigrationError`` carrying
a category, structured context (version, filename, run id) and the chained
driver exception. All of them are fatal for the run: the runner stops at the
first one, logs ``to_dict()`` and the CLI exits non-zero.

Manifesto:
    - **Typed Error Hierarchy:** One class per failure mode an operator must tell apart
    - **Rich Context:** Errors name the file and version responsible
    - **Error Chaining:** Driver exceptions survive as ``cause``

Architecture:
    ::

        ┌──────────────────────────────────────────────────────────────┐
        │                       MigrationError                          │
        │              (category, context, cause)                       │
        ├──────────────────────────────────────────────────────────────┤
        │                                                               │
        │  ConnectionError        DatabaseError        InvalidFilename  │
        │  (DATABASE)             (DATABASE)           (PARSE)          │
        │                            │                                  │
        │                         QueryError           ChecksumMismatch │
        │                         IntegrityError       (VALIDATION)     │
        │                                                               │
        │  MigrationSourceError   MigrationExecution   DuplicateVersion │
        │  (SOURCE)               (MIGRATION)          (INTERNAL)       │
        └──────────────────────────────────────────────────────────────┘

Guardrails:
    ❌ DON'T: Raise bare ``Exception`` from runner code
    ✅ DO: Raise the MigrationError subclass that names the failure

    ❌ DON'T: Drop the driver exception
    ✅ DO: Pass it as ``cause=`` so it is chained and logged

Tags:
    error-handling, exception-hierarchy, migrations, spine-migrate

Doc-Types:
    - API Reference
    - Error Handling Guide
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """
    Error categories used for log routing.

    Attributes:
        DATABASE: Connection failures, rejected statements
        SOURCE: Migrations directory missing or unreadable
        PARSE: Filename does not follow the naming contract
        VALIDATION: Applied migration content drifted
        MIGRATION: A migration's SQL failed to execute
        CONFIG: Invalid settings
        INTERNAL: Ledger consistency violations, bugs
    """

    DATABASE = "DATABASE"
    SOURCE = "SOURCE"
    PARSE = "PARSE"
    VALIDATION = "VALIDATION"
    MIGRATION = "MIGRATION"
    CONFIG = "CONFIG"
    INTERNAL = "INTERNAL"


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error.

    Only fields that are set appear in ``to_dict()``; anything not covered
    by a typed field goes into ``metadata``.

    Examples:
        >>> ctx = ErrorContext(version="V002", filename="V002__add_col.sql")
        >>> ctx.to_dict()
        {'version': 'V002', 'filename': 'V002__add_col.sql'}
    """

    version: str | None = None
    filename: str | None = None
    run_id: str | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["version", "filename", "run_id"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class MigrationError(Exception):
    """
    Base exception for all spine-migrate errors.

    Subclasses set ``default_category``; every instance carries a message,
    a category, an ``ErrorContext`` and an optional chained ``cause``.

    Examples:
        >>> err = MigrationError("boom").with_context(version="V001")
        >>> err.context.version
        'V001'
        >>> err.to_dict()["error_type"]
        'MigrationError'
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> MigrationError:
        """
        Add context to this error (fluent API).

        Usage:
            raise MigrationError("Failed").with_context(
                version="V003",
                filename="V003__seed.sql",
            )
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key) and key != "metadata":
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
        }

        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict

        if self.cause is not None:
            result["cause"] = str(self.cause)

        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# DATABASE ERRORS
# =============================================================================


class ConnectionError(MigrationError):  # noqa: A001
    """Cannot reach the database. Fatal, never retried by the runner."""

    default_category = ErrorCategory.DATABASE


class DatabaseError(MigrationError):
    """A statement failed against the database."""

    default_category = ErrorCategory.DATABASE


class QueryError(DatabaseError):
    """The database rejected a statement (syntax, missing relation, ...)."""

    pass


class IntegrityError(DatabaseError):
    """A constraint was violated (unique, foreign key, not null)."""

    pass


# =============================================================================
# SOURCE ERRORS
# =============================================================================


class MigrationSourceError(MigrationError):
    """The migrations directory is missing, or a migration file cannot be read."""

    default_category = ErrorCategory.SOURCE

    def __init__(self, path: str, message: str | None = None, **kwargs: Any):
        super().__init__(message or f"Migrations directory not found: {path}", **kwargs)
        self.path = path
        self.context.metadata.setdefault("path", path)


class InvalidFilenameError(MigrationError):
    """A migration file name does not follow ``<letter><digits>__<name>.sql``."""

    default_category = ErrorCategory.PARSE

    def __init__(self, filename: str, message: str | None = None, **kwargs: Any):
        super().__init__(message or f"Invalid migration filename format: {filename}", **kwargs)
        self.filename = filename
        self.context.filename = filename


# =============================================================================
# RUN ERRORS
# =============================================================================


class ChecksumMismatchError(MigrationError):
    """
    An applied migration's file content no longer matches its recorded checksum.

    The run halts on this error before any later file is looked at.
    """

    default_category = ErrorCategory.VALIDATION

    def __init__(
        self,
        *,
        filename: str,
        prior_filename: str,
        prior_checksum: str,
        current_checksum: str,
        version: str | None = None,
        **kwargs: Any,
    ):
        message = (
            f"Checksum mismatch for {filename}. "
            f"Previously applied as {prior_filename} with checksum {prior_checksum}, "
            f"current checksum is {current_checksum}."
        )
        super().__init__(message, **kwargs)
        self.filename = filename
        self.prior_filename = prior_filename
        self.prior_checksum = prior_checksum
        self.current_checksum = current_checksum
        self.context.filename = filename
        self.context.version = version

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["prior_filename"] = self.prior_filename
        result["prior_checksum"] = self.prior_checksum
        result["current_checksum"] = self.current_checksum
        return result


class MigrationExecutionError(MigrationError):
    """The database rejected a migration. No ledger entry is written for it."""

    default_category = ErrorCategory.MIGRATION

    def __init__(self, filename: str, *, cause: Exception | None = None, **kwargs: Any):
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"Migration failed: {filename}{detail}", cause=cause, **kwargs)
        self.filename = filename
        self.context.filename = filename


class DuplicateVersionError(MigrationError):
    """A version was recorded twice. Internal consistency violation."""

    default_category = ErrorCategory.INTERNAL

    def __init__(self, version: str, **kwargs: Any):
        super().__init__(f"Migration version {version} is already recorded in the ledger", **kwargs)
        self.version = version
        self.context.version = version


class ConfigError(MigrationError):
    """Settings are missing or invalid."""

    default_category = ErrorCategory.CONFIG


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "MigrationError",
    "ConnectionError",
    "DatabaseError",
    "QueryError",
    "IntegrityError",
    "MigrationSourceError",
    "InvalidFilenameError",
    "ChecksumMismatchError",
    "MigrationExecutionError",
    "DuplicateVersionError",
    "ConfigError",
]
