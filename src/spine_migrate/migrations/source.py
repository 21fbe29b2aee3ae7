"""Migration discovery.

Files are named ``<letter><digits>__<description>.sql``; the upper-cased
``<letter><digits>`` prefix is the version token. Run order is case-insensitive
filename order, which equals numeric version order only because version
tokens are fixed width (``V001`` … ``V999``). Discovery therefore rejects
the whole set, before anything runs, when a name does not parse, when two
files share a version, or when version widths differ.
"""

from __future__ import annotations

import re
from pathlib import Path

from spine_migrate.core.errors import InvalidFilenameError, MigrationSourceError
from spine_migrate.core.hashing import compute_checksum
from spine_migrate.core.logging import get_logger
from spine_migrate.migrations.models import MigrationFile

logger = get_logger(__name__)

MIGRATION_SUFFIX = ".sql"

# Width of the ledger's version column
MAX_VERSION_LENGTH = 10

_VERSION_PATTERN = re.compile(r"^([A-Za-z]\d+)__")


def extract_version(filename: str) -> str:
    """Extract the version token from a migration filename.

    Examples:
        >>> extract_version("V001__create_schema.sql")
        'V001'
        >>> extract_version("v012__add_index.sql")
        'V012'

    Raises:
        InvalidFilenameError: The name does not start with ``<letter><digits>__``,
            or the token is longer than ``MAX_VERSION_LENGTH``.
    """
    match = _VERSION_PATTERN.match(filename)
    if not match:
        raise InvalidFilenameError(filename)
    version = match.group(1).upper()
    if len(version) > MAX_VERSION_LENGTH:
        raise InvalidFilenameError(
            filename,
            f"Version token {version} in {filename} is longer than {MAX_VERSION_LENGTH} characters",
        )
    return version


def _is_migration(path: Path) -> bool:
    return path.is_file() and path.name.lower().endswith(MIGRATION_SUFFIX)


def list_migrations(directory: Path | str) -> list[MigrationFile]:
    """Return every migration in ``directory`` in run order.

    Raises:
        MigrationSourceError: ``directory`` does not exist or is not a directory.
        InvalidFilenameError: A file breaks the naming contract, a version is
            used twice, or version tokens differ in width.
    """
    root = Path(directory)
    if not root.is_dir():
        raise MigrationSourceError(str(root))

    migrations: list[MigrationFile] = []
    seen: dict[str, str] = {}

    # Case-insensitive so v001__a.sql sorts before V002__b.sql
    for path in sorted(root.iterdir(), key=lambda p: (p.name.lower(), p.name)):
        if not _is_migration(path):
            continue

        version = extract_version(path.name)
        if version in seen:
            raise InvalidFilenameError(
                path.name,
                f"Duplicate migration version {version}: {seen[version]} and {path.name}",
            ).with_context(version=version)
        seen[version] = path.name

        migrations.append(MigrationFile(version=version, filename=path.name, path=path.resolve()))

    widths = {len(m.version) for m in migrations}
    if len(widths) > 1:
        first = migrations[0]
        odd = next(m for m in migrations if len(m.version) != len(first.version))
        raise InvalidFilenameError(
            odd.filename,
            f"Version tokens must be fixed width: {first.filename} and {odd.filename} differ",
        ).with_context(version=odd.version)

    logger.debug("migrations.discovered", directory=str(root), count=len(migrations))
    return migrations


__all__ = [
    "MAX_VERSION_LENGTH",
    "MIGRATION_SUFFIX",
    "compute_checksum",
    "extract_version",
    "list_migrations",
]
