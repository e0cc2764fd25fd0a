# ABOUTME: Persisted set of every content hash ever imported into the library.
# ABOUTME: Lets a re-scan recognize files whose book was later removed from the catalog.

import json
import logging
import os
from pathlib import Path

from bookwarden.db.hashing import is_valid_hash

logger = logging.getLogger(__name__)


class InvalidHashError(ValueError):
    """Raised when a value that is not a SHA-256 hex digest is added to the ledger."""


class HashLedger:
    """Append-only set of imported file hashes, stored as ``{"hashes": [...]}``.

    Hashes are never removed, even when the book that owned them is deleted,
    so an identical file offered again is recognized as previously imported.
    """

    def __init__(self, path: Path) -> None:
        self.path = path
        self._hashes: set[str] = set()
        self._loaded_count = 0

    def __contains__(self, file_hash: object) -> bool:
        return isinstance(file_hash, str) and self.is_in(file_hash)

    def __len__(self) -> int:
        return len(self._hashes)

    @property
    def hashes(self) -> frozenset[str]:
        return frozenset(self._hashes)

    def load(self) -> None:
        """Read the ledger file. A missing file is an empty ledger (first run)."""
        if not self.path.exists():
            logger.debug("No hash ledger at %s, starting empty", self.path)
            self._hashes = set()
            self._loaded_count = 0
            return

        data = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        self._hashes = {h for h in data.get("hashes", []) if is_valid_hash(h)}
        self._loaded_count = len(self._hashes)

    def save(self) -> bool:
        """Write the ledger if hashes were added since the last load or save.

        Change detection compares counts only, which is sound because hashes
        are only ever appended.

        Returns:
            True if the file was written.
        """
        if len(self._hashes) == self._loaded_count:
            return False

        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = json.dumps({"hashes": sorted(self._hashes)}, indent=2)
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        tmp_path.write_text(payload, encoding="utf-8")
        os.replace(tmp_path, self.path)
        self._loaded_count = len(self._hashes)
        logger.debug("Saved %d hashes to %s", len(self._hashes), self.path)
        return True

    def is_in(self, file_hash: str) -> bool:
        """Membership test. Malformed hashes are never members."""
        if not is_valid_hash(file_hash):
            return False
        return file_hash.lower() in self._hashes

    def add(self, file_hash: str) -> bool:
        """Insert a hash.

        Returns:
            True if the hash was not already present.

        Raises:
            InvalidHashError: If the value is not a 64-character hex digest.
        """
        if not is_valid_hash(file_hash):
            raise InvalidHashError(f"Invalid hash: {file_hash!r}")
        normalized = file_hash.lower()
        if normalized in self._hashes:
            return False
        self._hashes.add(normalized)
        return True
