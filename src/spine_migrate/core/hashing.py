"""
Deterministic checksums for migration drift detection.

A checksum is recorded in the ledger when a migration is applied and
recomputed on every later run. If the two disagree, the file was edited
after it ran somewhere and the run stops.

Manifesto:
    - **Deterministic:** Same bytes → same checksum on every platform
    - **Fixed encoding:** Content is hashed as UTF-8 bytes
    - **Not a security control:** MD5 is used for change detection only

Examples:
    >>> compute_checksum("CREATE TABLE t (id INT);")
    '4cdcdfd7e16aa90604107cb3ca60e2b7'
    >>> compute_checksum("a") == compute_checksum("a")
    True

Tags:
    hashing, checksum, drift-detection, spine-migrate

Doc-Types:
    - API Reference
"""

import hashlib


def compute_checksum(content: str) -> str:
    """
    Compute the checksum of a migration's content.

    MD5 over the UTF-8 encoding, hex digest. The value matches what
    ``md5(content, 'utf8')`` produces in other tooling, so ledgers written
    by earlier runners keep validating.

    Args:
        content: Raw migration text

    Returns:
        32-char lowercase hex string
    """
    return hashlib.md5(content.encode("utf-8"), usedforsecurity=False).hexdigest()


__all__ = ["compute_checksum"]
