"""Data model for migration runs.

``MigrationFile`` is discovered fresh on every run, ``LedgerEntry`` mirrors
one row of the ledger table, and ``RunSummary`` / ``LedgerStatus`` are the
ephemeral results handed back to callers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from functools import cached_property
from pathlib import Path
from typing import Any

from spine_migrate.core.hashing import compute_checksum


class RunState(str, Enum):
    """States of one runner invocation."""

    CONNECTING = "connecting"
    PREPARING_LEDGER = "preparing_ledger"
    ITERATING = "iterating"
    SKIPPING = "skipping"
    APPLYING = "applying"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class MigrationFile:
    """A ``.sql`` file found in the migrations directory.

    ``content`` and ``checksum`` are read on first access. Content is decoded
    from the raw bytes as UTF-8 with no newline translation, so the checksum
    is the same on every platform for identical files.
    """

    version: str
    filename: str
    path: Path

    @cached_property
    def content(self) -> str:
        return self.path.read_bytes().decode("utf-8")

    @cached_property
    def checksum(self) -> str:
        return compute_checksum(self.content)


@dataclass(frozen=True)
class LedgerEntry:
    """Record of one applied migration. Written once, never updated."""

    version: str
    filename: str
    checksum: str | None = None
    execution_time_ms: int | None = None
    executed_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "filename": self.filename,
            "executed_at": self.executed_at.isoformat(sep=" ") if self.executed_at else None,
            "execution_time_ms": self.execution_time_ms,
            "checksum": self.checksum,
        }


@dataclass
class RunSummary:
    """Result of a migration run."""

    applied: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    pending: list[str] = field(default_factory=list)
    dry_run: bool = False

    @property
    def applied_count(self) -> int:
        return len(self.applied)

    @property
    def skipped_count(self) -> int:
        return len(self.skipped)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "applied": self.applied_count,
            "skipped": self.skipped_count,
            "applied_files": list(self.applied),
            "skipped_files": list(self.skipped),
        }
        if self.dry_run:
            result["dry_run"] = True
            result["pending_files"] = list(self.pending)
        return result


NO_LEDGER_MESSAGE = "No migrations applied yet (schema_migrations table does not exist)."
EMPTY_LEDGER_MESSAGE = "No migrations applied yet."


@dataclass
class LedgerStatus:
    """Read-only view of the ledger for operators."""

    ledger_exists: bool
    entries: list[LedgerEntry] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.entries

    @property
    def message(self) -> str | None:
        """Operator message when there is nothing to list."""
        if not self.ledger_exists:
            return NO_LEDGER_MESSAGE
        if self.is_empty:
            return EMPTY_LEDGER_MESSAGE
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "ledger_exists": self.ledger_exists,
            "entries": [entry.to_dict() for entry in self.entries],
        }


__all__ = [
    "RunState",
    "MigrationFile",
    "LedgerEntry",
    "RunSummary",
    "LedgerStatus",
    "NO_LEDGER_MESSAGE",
    "EMPTY_LEDGER_MESSAGE",
]
