# ABOUTME: A locked working session over one library: catalog, hash ledger and search index.
# ABOUTME: Saves the catalog first, then syncs the index from the diff, then persists hashes.

import logging

from bookwarden.config import LibraryConfig
from bookwarden.core.collection import Collection
from bookwarden.core.interaction import NonInteractive, UserInteraction
from bookwarden.core.lock import LibraryLock
from bookwarden.db.index import SearchIndex, SearchIndexError
from bookwarden.db.ledger import HashLedger
from bookwarden.db.store import CatalogStore
from bookwarden.metadata.cleaning import AliasTable

logger = logging.getLogger(__name__)


class LibrarySession:
    """Owns all mutable library state for the duration of one command.

    Entering the session acquires the lock and loads the catalog and
    ledger; leaving it closes the index and releases the lock, on every
    exit path. Mutations are made on ``collection`` and persisted with
    ``save``.
    """

    def __init__(
        self,
        config: LibraryConfig,
        *,
        interaction: UserInteraction | None = None,
    ) -> None:
        self.config = config
        self.interaction = interaction or NonInteractive()
        self.lock = LibraryLock(config.lock_file)
        self.ledger = HashLedger(config.hashes_file)
        self.store = CatalogStore(config.database_file)
        self.index = SearchIndex(config.index_file, config.library_root)
        self.collection = Collection()
        self._snapshot = Collection()
        self.author_aliases = AliasTable(config.author_aliases)
        self.tag_aliases = AliasTable(config.tag_aliases)
        self.publisher_aliases = AliasTable(config.publisher_aliases)

    def __enter__(self) -> "LibrarySession":
        self.open()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def open(self) -> None:
        """Acquire the lock and load persisted state.

        Raises:
            LibraryLockedError: If another process holds the lock.
            CatalogError: If the catalog cannot be parsed.
        """
        self.lock.acquire()
        try:
            self.ledger.load()
            self.collection = self.store.load()
        except Exception:
            self.lock.release()
            raise
        self._snapshot = self.collection.snapshot()
        logger.debug("Opened library with %d books", len(self.collection))

    def close(self) -> None:
        self.index.close()
        self.lock.release()

    def save(self) -> bool:
        """Persist the collection and bring the search index up to date.

        Index problems never fail the save: an incremental update that fails
        falls back to a full rebuild, and a failed rebuild is only logged.

        Returns:
            True if the catalog file changed.
        """
        changed = self.store.save(self.collection)
        if changed:
            diff = self.collection.diff(self._snapshot)
            if not diff.is_empty:
                try:
                    self.index.update(diff)
                except SearchIndexError as exc:
                    logger.warning("Search index update failed (%s), rebuilding", exc)
                    self.rebuild_index()
            self._snapshot = self.collection.snapshot()
        return changed

    def register_hash(self, file_hash: str) -> bool:
        """Record an imported hash and persist the ledger.

        Only call after the catalog holding the copy has been saved, so the
        ledger never runs ahead of the catalog.
        """
        added = self.ledger.add(file_hash)
        self.ledger.save()
        return added

    def rebuild_index(self) -> int:
        """Re-derive the whole search index. Failures are logged, not raised."""
        try:
            return self.index.rebuild(self.collection)
        except SearchIndexError as exc:
            logger.error("Search index rebuild failed: %s", exc)
            return 0
