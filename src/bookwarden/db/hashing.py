# ABOUTME: SHA-256 content hashing used as the identity key for deduplication.
# ABOUTME: Reads files in chunks so large EPUBs never load fully into memory.

import hashlib
import string
from pathlib import Path

HASH_LENGTH = 64
_CHUNK_SIZE = 65536  # 64 KB
_HEX_DIGITS = frozenset(string.hexdigits)


def compute_file_hash(path: Path) -> str:
    """Compute the SHA-256 hash of a file.

    Args:
        path: Path to the file to hash.

    Returns:
        Lowercase hex digest string (64 characters).

    Raises:
        FileNotFoundError: If the file does not exist.
    """
    hasher = hashlib.sha256()
    with open(path, "rb") as f:
        while chunk := f.read(_CHUNK_SIZE):
            hasher.update(chunk)
    return hasher.hexdigest()


def is_valid_hash(value: str) -> bool:
    """Whether a string has the shape of a hex SHA-256 digest."""
    return (
        isinstance(value, str)
        and len(value) == HASH_LENGTH
        and all(c in _HEX_DIGITS for c in value)
    )
