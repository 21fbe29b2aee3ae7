"""
Core primitives for spine-migrate: errors, results, settings, logging,
dialects and connections.

The migration modules depend on these; nothing here depends on them.
"""

from spine_migrate.core.errors import (
    ChecksumMismatchError,
    ConfigError,
    ConnectionError,
    DuplicateVersionError,
    InvalidFilenameError,
    MigrationError,
    MigrationExecutionError,
    MigrationSourceError,
)
from spine_migrate.core.result import Err, Ok, Result
from spine_migrate.core.settings import DatabaseSettings, MigrateSettings, load_settings

__all__ = [
    "ChecksumMismatchError",
    "ConfigError",
    "ConnectionError",
    "DuplicateVersionError",
    "InvalidFilenameError",
    "MigrationError",
    "MigrationExecutionError",
    "MigrationSourceError",
    "Err",
    "Ok",
    "Result",
    "DatabaseSettings",
    "MigrateSettings",
    "load_settings",
]
