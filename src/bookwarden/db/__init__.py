# ABOUTME: Persistence layer for bookwarden: catalog file, hash ledger and search index.
# ABOUTME: Exports the leaf helpers; import store/index modules directly to avoid cycles with core.

from bookwarden.db.hashing import HASH_LENGTH, compute_file_hash, is_valid_hash
from bookwarden.db.ledger import HashLedger, InvalidHashError

__all__ = [
    "HASH_LENGTH",
    "HashLedger",
    "InvalidHashError",
    "compute_file_hash",
    "is_valid_hash",
]
