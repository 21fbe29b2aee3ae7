"""Settings for spine-migrate.

Connection parameters come from the ``DB_POSTGRESDB_*`` environment
variables (or a ``.env`` file); runner options come from ``MIGRATE_*``.
The settings object is built once at process start by ``load_settings()``
and passed explicitly into the runner and status reporter, so no core
module reads the environment on its own.

Manifesto:
    Configuration should be explicit, validated, and environment-driven.

    - **Pydantic validation:** Type-checked at startup, not mid-run
    - **Environment-driven:** Reads from env vars and .env files
    - **Sensible defaults:** Works against a local PostgreSQL out of the box

Examples:
    >>> settings = load_settings(migrations_dir="db/migrations")
    >>> settings.database.port
    5432

Tags:
    settings, configuration, pydantic, environment, spine-migrate

Doc-Types:
    - API Reference
    - Configuration Guide
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import Field, SecretStr, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from spine_migrate.core.errors import ConfigError


class DatabaseBackend(str, Enum):
    """Supported database backends."""

    POSTGRES = "postgres"
    SQLITE = "sqlite"


class DatabaseSettings(BaseSettings):
    """PostgreSQL connection parameters.

    Fields
    ──────
    host      : Server host (``DB_POSTGRESDB_HOST``)
    port      : Server port (``DB_POSTGRESDB_PORT``)
    database  : Database name (``DB_POSTGRESDB_DATABASE``)
    user      : Login role (``DB_POSTGRESDB_USER``)
    password  : Password, no default (``DB_POSTGRESDB_PASSWORD``)
    ssl       : Encrypt without verifying the server certificate
                (``DB_POSTGRESDB_SSL``), for hosted databases with
                managed certificates
    """

    model_config = SettingsConfigDict(
        env_prefix="DB_POSTGRESDB_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    host: str = "localhost"
    port: int = 5432
    database: str = "postgres"
    user: str = "postgres"
    password: SecretStr | None = None
    ssl: bool = False

    @property
    def sslmode(self) -> str | None:
        """libpq ``sslmode``: ``require`` encrypts but skips certificate checks."""
        return "require" if self.ssl else None

    def connect_kwargs(self) -> dict[str, Any]:
        """Keyword arguments for ``psycopg2.connect``."""
        kwargs: dict[str, Any] = {
            "host": self.host,
            "port": self.port,
            "dbname": self.database,
            "user": self.user,
        }
        if self.password is not None:
            kwargs["password"] = self.password.get_secret_value()
        if self.sslmode:
            kwargs["sslmode"] = self.sslmode
        return kwargs

    def describe(self) -> str:
        """``host:port/database`` for log lines. Never includes the password."""
        return f"{self.host}:{self.port}/{self.database}"


class MigrateSettings(BaseSettings):
    """Runner configuration.

    All fields can be set via ``MIGRATE_*`` environment variables (e.g.
    ``MIGRATE_MIGRATIONS_DIR=database/migrations``).
    """

    model_config = SettingsConfigDict(
        env_prefix="MIGRATE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Source ───────────────────────────────────────────────────
    migrations_dir: Path = Field(
        default=Path("database/migrations"),
        description="Directory scanned for <letter><digits>__<name>.sql files",
    )

    # ── Database ─────────────────────────────────────────────────
    database_backend: DatabaseBackend = Field(default=DatabaseBackend.POSTGRES)
    sqlite_path: Path = Field(default=Path("data/spine_migrate.db"))
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)

    # ── Logging ──────────────────────────────────────────────────
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="console")

    @property
    def is_sqlite(self) -> bool:
        return self.database_backend == DatabaseBackend.SQLITE

    def describe_target(self) -> str:
        """Human-readable connection target for log lines."""
        if self.is_sqlite:
            return str(self.sqlite_path)
        return self.database.describe()


def load_settings(**overrides: Any) -> MigrateSettings:
    """Build settings from the environment, applying explicit overrides.

    ``None`` overrides are dropped so CLI options that were not given fall
    through to the environment.

    Raises:
        ConfigError: A value from the environment or an override is invalid.
    """
    values = {key: value for key, value in overrides.items() if value is not None}
    try:
        return MigrateSettings(**values)
    except ValidationError as e:
        raise ConfigError(f"Invalid settings: {e}", cause=e) from e


__all__ = [
    "DatabaseBackend",
    "DatabaseSettings",
    "MigrateSettings",
    "load_settings",
]
