"""Tests for spine_migrate.core.settings."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from spine_migrate.core.errors import ConfigError, ErrorCategory
from spine_migrate.core.settings import (
    DatabaseBackend,
    DatabaseSettings,
    MigrateSettings,
    load_settings,
)


class TestDatabaseSettings:
    def test_defaults(self):
        s = DatabaseSettings()
        assert s.host == "localhost"
        assert s.port == 5432
        assert s.database == "postgres"
        assert s.user == "postgres"
        assert s.password is None
        assert s.ssl is False
        assert s.sslmode is None

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("DB_POSTGRESDB_HOST", "db.internal")
        monkeypatch.setenv("DB_POSTGRESDB_PORT", "6543")
        monkeypatch.setenv("DB_POSTGRESDB_DATABASE", "app")
        monkeypatch.setenv("DB_POSTGRESDB_USER", "migrator")
        monkeypatch.setenv("DB_POSTGRESDB_PASSWORD", "s3cret")
        monkeypatch.setenv("DB_POSTGRESDB_SSL", "true")

        s = DatabaseSettings()
        assert s.host == "db.internal"
        assert s.port == 6543
        assert s.database == "app"
        assert s.user == "migrator"
        assert s.password.get_secret_value() == "s3cret"
        assert s.ssl is True

    def test_ssl_maps_to_require(self):
        assert DatabaseSettings(ssl=True).sslmode == "require"

    def test_connect_kwargs_minimal(self):
        assert DatabaseSettings().connect_kwargs() == {
            "host": "localhost",
            "port": 5432,
            "dbname": "postgres",
            "user": "postgres",
        }

    def test_connect_kwargs_with_password_and_ssl(self):
        kwargs = DatabaseSettings(password="pw", ssl=True).connect_kwargs()
        assert kwargs["password"] == "pw"
        assert kwargs["sslmode"] == "require"

    def test_password_hidden_in_repr_and_describe(self):
        s = DatabaseSettings(password="hunter2", host="h", port=1, database="d")
        assert "hunter2" not in repr(s)
        assert s.describe() == "h:1/d"

    def test_invalid_port_rejected(self, monkeypatch):
        monkeypatch.setenv("DB_POSTGRESDB_PORT", "not-a-port")
        with pytest.raises(ValidationError):
            DatabaseSettings()


class TestMigrateSettings:
    def test_defaults(self):
        s = MigrateSettings()
        assert s.migrations_dir == Path("database/migrations")
        assert s.database_backend == DatabaseBackend.POSTGRES
        assert s.sqlite_path == Path("data/spine_migrate.db")
        assert s.log_level == "INFO"
        assert s.log_format == "console"
        assert s.is_sqlite is False

    def test_env_overrides(self, monkeypatch, tmp_path):
        monkeypatch.setenv("MIGRATE_MIGRATIONS_DIR", str(tmp_path))
        monkeypatch.setenv("MIGRATE_DATABASE_BACKEND", "sqlite")
        monkeypatch.setenv("MIGRATE_SQLITE_PATH", str(tmp_path / "x.db"))
        monkeypatch.setenv("MIGRATE_LOG_LEVEL", "DEBUG")

        s = MigrateSettings()
        assert s.migrations_dir == tmp_path
        assert s.is_sqlite is True
        assert s.sqlite_path == tmp_path / "x.db"
        assert s.log_level == "DEBUG"

    def test_nested_database_reads_its_own_prefix(self, monkeypatch):
        monkeypatch.setenv("DB_POSTGRESDB_HOST", "pg.example")
        assert MigrateSettings().database.host == "pg.example"

    def test_unknown_backend_rejected(self, monkeypatch):
        monkeypatch.setenv("MIGRATE_DATABASE_BACKEND", "oracle")
        with pytest.raises(ValidationError):
            MigrateSettings()

    def test_describe_target(self, tmp_path):
        pg = MigrateSettings()
        assert pg.describe_target() == "localhost:5432/postgres"

        lite = MigrateSettings(database_backend="sqlite", sqlite_path=tmp_path / "l.db")
        assert lite.describe_target() == str(tmp_path / "l.db")


class TestLoadSettings:
    def test_none_overrides_fall_through_to_env(self, monkeypatch):
        monkeypatch.setenv("MIGRATE_MIGRATIONS_DIR", "from/env")
        s = load_settings(migrations_dir=None)
        assert s.migrations_dir == Path("from/env")

    def test_explicit_override_wins(self, monkeypatch):
        monkeypatch.setenv("MIGRATE_MIGRATIONS_DIR", "from/env")
        s = load_settings(migrations_dir=Path("from/cli"))
        assert s.migrations_dir == Path("from/cli")

    def test_invalid_value_raises_config_error(self, monkeypatch):
        monkeypatch.setenv("MIGRATE_DATABASE_BACKEND", "oracle")
        with pytest.raises(ConfigError, match="Invalid settings") as exc_info:
            load_settings()
        assert exc_info.value.category == ErrorCategory.CONFIG
        assert isinstance(exc_info.value.cause, ValidationError)

    def test_invalid_nested_database_value_raises_config_error(self, monkeypatch):
        monkeypatch.setenv("DB_POSTGRESDB_PORT", "not-a-port")
        with pytest.raises(ConfigError):
            load_settings()
