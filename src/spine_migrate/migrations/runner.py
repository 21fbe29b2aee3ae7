"""SQL migration runner.

Applies ``.sql`` files from the migrations directory in filename order,
exactly once each, recording every success in the version ledger and
refusing to continue when an already-applied file has changed.

Each run walks a small state machine::

    CONNECTING → PREPARING_LEDGER → ITERATING → {SKIPPING | APPLYING} → … → DONE
                                  (any step) → FAILED

Every per-file step returns a ``Result``; the loop stops at the first
``Err`` so nothing after a failing or drifted file is looked at.

Concurrent runs against one database are not coordinated. Run a single
instance per deploy or CI job.
"""

from __future__ import annotations

import time
import uuid
from pathlib import Path

from spine_migrate.core.connection import dialect_for, open_connection
from spine_migrate.core.errors import (
    ChecksumMismatchError,
    ConnectionError,
    DatabaseError,
    MigrationError,
    MigrationExecutionError,
    MigrationSourceError,
)
from spine_migrate.core.logging import LogContext, get_logger
from spine_migrate.core.protocols import Connection
from spine_migrate.core.result import Err, Ok, Result, try_result
from spine_migrate.core.settings import MigrateSettings
from spine_migrate.migrations.ledger import VersionLedger
from spine_migrate.migrations.models import LedgerEntry, MigrationFile, RunState, RunSummary
from spine_migrate.migrations.source import list_migrations

logger = get_logger(__name__)


class MigrationRunner:
    """Applies pending migrations from a directory.

    Parameters
    ----------
    settings
        Configuration built once at process start.
    migrations_dir
        Overrides ``settings.migrations_dir``.

    Example::

        from spine_migrate.core.settings import load_settings
        from spine_migrate.migrations import MigrationRunner

        summary = MigrationRunner(load_settings()).run()
        print(f"{summary.applied_count} applied, {summary.skipped_count} skipped")
    """

    def __init__(
        self,
        settings: MigrateSettings,
        *,
        migrations_dir: Path | str | None = None,
    ) -> None:
        self._settings = settings
        self._migrations_dir = Path(migrations_dir) if migrations_dir else Path(settings.migrations_dir)
        self._current: MigrationFile | None = None
        self.state = RunState.CONNECTING

    @property
    def migrations_dir(self) -> Path:
        return self._migrations_dir

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def run(self, *, dry_run: bool = False) -> RunSummary:
        """Apply all pending migrations.

        Raises the ``MigrationError`` that stopped the run.
        """
        return self.execute(dry_run=dry_run).unwrap()

    def execute(self, *, dry_run: bool = False) -> Result[RunSummary]:
        """Apply all pending migrations and return ``Ok(summary)`` or ``Err(error)``.

        With ``dry_run`` nothing is executed or recorded (the ledger table is
        not even created); files that would run are listed in
        ``summary.pending`` and drift is still checked.
        """
        self._current = None
        with LogContext(run_id=uuid.uuid4().hex[:12]):
            result = self._execute(dry_run)
            result.inspect_err(self._log_failure)
        return result

    def get_pending(self) -> list[MigrationFile]:
        """Migrations with no ledger entry. Read-only; does not check drift."""
        migrations = list_migrations(self._migrations_dir)
        with open_connection(self._settings) as conn:
            ledger = VersionLedger(conn, dialect_for(self._settings))
            if not ledger.exists():
                return migrations
            return [m for m in migrations if ledger.lookup(m.version) is None]

    # ------------------------------------------------------------------
    # Run body
    # ------------------------------------------------------------------

    def _execute(self, dry_run: bool) -> Result[RunSummary]:
        self._set_state(RunState.CONNECTING)
        logger.info(
            "migrate.connecting",
            backend=self._settings.database_backend.value,
            target=self._settings.describe_target(),
        )
        try:
            with open_connection(self._settings) as conn:
                return self._run_on(conn, dry_run)
        except ConnectionError as e:
            return Err(e)

    def _run_on(self, conn: Connection, dry_run: bool) -> Result[RunSummary]:
        ledger = VersionLedger(conn, dialect_for(self._settings))

        self._set_state(RunState.PREPARING_LEDGER)
        prepared = try_result(lambda: self._prepare_ledger(ledger, dry_run))
        if prepared.is_err():
            return Err(prepared.error)
        ledger_ready = prepared.unwrap()

        listed = try_result(lambda: list_migrations(self._migrations_dir))
        if listed.is_err():
            return Err(listed.error)

        summary = RunSummary(dry_run=dry_run)
        for migration in listed.unwrap():
            self._set_state(RunState.ITERATING)
            self._current = migration
            with LogContext(version=migration.version):
                step = self._step(
                    conn, ledger, migration, summary, dry_run=dry_run, ledger_ready=ledger_ready
                )
            if step.is_err():
                return Err(step.error)

        self._current = None
        self._set_state(RunState.DONE)
        logger.info(
            "migrate.complete",
            applied=summary.applied_count,
            skipped=summary.skipped_count,
            pending=len(summary.pending) if dry_run else None,
        )
        return Ok(summary)

    def _prepare_ledger(self, ledger: VersionLedger, dry_run: bool) -> bool:
        """Make the ledger usable. Returns whether it can be queried."""
        if dry_run:
            return ledger.exists()
        ledger.ensure()
        logger.info("migrate.ledger_ready", table=ledger.table)
        return True

    def _step(
        self,
        conn: Connection,
        ledger: VersionLedger,
        migration: MigrationFile,
        summary: RunSummary,
        *,
        dry_run: bool,
        ledger_ready: bool,
    ) -> Result[None]:
        loaded = self._load(migration)
        if loaded.is_err():
            return Err(loaded.error)

        prior = None
        if ledger_ready:
            found = try_result(lambda: ledger.lookup(migration.version))
            if found.is_err():
                return Err(found.error)
            prior = found.unwrap()

        if prior is not None:
            checked = self._check_drift(prior, migration)
            if checked.is_ok():
                self._set_state(RunState.SKIPPING)
                summary.skipped.append(migration.filename)
                logger.info("migration.skipped", filename=migration.filename, reason="already applied")
            return checked

        if dry_run:
            summary.pending.append(migration.filename)
            logger.info("migration.pending", filename=migration.filename)
            return Ok(None)

        applied = self._apply(conn, ledger, migration)
        if applied.is_err():
            return Err(applied.error)
        summary.applied.append(migration.filename)
        return Ok(None)

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def _load(self, migration: MigrationFile) -> Result[str]:
        """Read content and checksum up front so read errors name the file."""
        try:
            _ = migration.content
            return Ok(migration.checksum)
        except (OSError, UnicodeDecodeError) as e:
            return Err(
                MigrationSourceError(
                    str(migration.path),
                    f"Cannot read migration {migration.filename}: {e}",
                    cause=e,
                ).with_context(filename=migration.filename, version=migration.version)
            )

    def _check_drift(self, prior: LedgerEntry, migration: MigrationFile) -> Result[None]:
        if prior.checksum and prior.checksum != migration.checksum:
            return Err(
                ChecksumMismatchError(
                    filename=migration.filename,
                    prior_filename=prior.filename,
                    prior_checksum=prior.checksum,
                    current_checksum=migration.checksum,
                    version=migration.version,
                )
            )
        return Ok(None)

    def _apply(
        self, conn: Connection, ledger: VersionLedger, migration: MigrationFile
    ) -> Result[LedgerEntry]:
        self._set_state(RunState.APPLYING)
        logger.info("migration.applying", filename=migration.filename)

        started = time.perf_counter()
        try:
            conn.execute_script(migration.content)
        except DatabaseError as e:
            return Err(
                MigrationExecutionError(migration.filename, cause=e).with_context(
                    version=migration.version
                )
            )
        elapsed_ms = max(0, int(round((time.perf_counter() - started) * 1000)))

        entry = LedgerEntry(
            version=migration.version,
            filename=migration.filename,
            checksum=migration.checksum,
            execution_time_ms=elapsed_ms,
        )
        recorded = try_result(lambda: ledger.record(entry))
        if recorded.is_err():
            return Err(recorded.error)

        logger.info("migration.applied", filename=migration.filename, execution_time_ms=elapsed_ms)
        return Ok(entry)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _set_state(self, state: RunState) -> None:
        self.state = state
        logger.debug("migrate.state", state=state.value)

    def _log_failure(self, error: Exception) -> None:
        self._set_state(RunState.FAILED)
        details = error.to_dict() if isinstance(error, MigrationError) else {"message": str(error)}
        if self._current is not None:
            logger.error("migration.failed", filename=self._current.filename, error=details)
        else:
            logger.error("migration.failed", stage="before processing migration files", error=details)


__all__ = ["MigrationRunner"]
