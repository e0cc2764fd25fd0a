# ABOUTME: Derived full-text search index kept in sync with the collection.
# ABOUTME: Applies collection diffs incrementally and can always be rebuilt from scratch.

import logging
import re
import sqlite3
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from pathlib import Path

from bookwarden.core.book import Book
from bookwarden.core.collection import Collection, CollectionDiff
from bookwarden.db.connection import open_index
from bookwarden.db.schema import INDEXED_COLUMNS

logger = logging.getLogger(__name__)

FIELD_ALIASES: dict[str, str] = {
    "author": "authors",
    "tag": "tags",
    "lang": "language",
    "type": "genre",
}

_FIELD_PREFIX_RE = re.compile(r"\b([a-z_]+):")


class SearchIndexError(Exception):
    """Raised when the search index is unreadable or an operation on it fails."""


def rewrite_query(query: str) -> str:
    """Expand field shortcuts such as ``author:`` to index column names."""

    def expand(match: re.Match[str]) -> str:
        name = match.group(1)
        return f"{FIELD_ALIASES.get(name, name)}:"

    return _FIELD_PREFIX_RE.sub(expand, query)


def book_document(book: Book) -> dict[str, str]:
    """Flatten a book into the searchable text columns."""
    meta = book.metadata
    return {
        "title": meta.title,
        "authors": meta.author,
        "year": meta.year or "",
        "language": meta.language or "",
        "series": meta.series_display,
        "tags": " ".join(meta.tags),
        "publisher": meta.publisher or "",
        "description": meta.description or "",
        "category": meta.category or "",
        "genre": meta.genre or "",
        "progress": book.progress.value,
        "review": book.review or "",
    }


class SearchIndex:
    """FTS5 index of the collection, keyed by the full path of each book's main copy."""

    def __init__(self, path: Path, library_root: Path) -> None:
        self.path = path
        self.library_root = library_root
        self._conn: sqlite3.Connection | None = None

    def __enter__(self) -> "SearchIndex":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def conn(self) -> sqlite3.Connection:
        if self._conn is None:
            try:
                self._conn = open_index(self.path)
            except sqlite3.DatabaseError as exc:
                raise SearchIndexError(f"Cannot open index {self.path}: {exc}") from exc
        return self._conn

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def key_for(self, book: Book) -> str | None:
        main = book.main_copy
        if main is None:
            return None
        return str(main.full_path(self.library_root))

    def index(self, key: str, book: Book) -> None:
        """Insert or replace the document stored under ``key``."""
        document = book_document(book)
        columns = ", ".join(("key", "book_id", *INDEXED_COLUMNS))
        placeholders = ", ".join("?" for _ in range(len(INDEXED_COLUMNS) + 2))
        values = [key, book.id, *(document[c] for c in INDEXED_COLUMNS)]
        with _translate_errors("index"):
            self.conn.execute("DELETE FROM books_index WHERE key = ?", (key,))
            self.conn.execute(
                f"INSERT INTO books_index ({columns}) VALUES ({placeholders})", values
            )

    def delete(self, key: str) -> None:
        with _translate_errors("delete"):
            self.conn.execute("DELETE FROM books_index WHERE key = ?", (key,))

    def query(self, text: str) -> list[str]:
        """Keys of documents matching an FTS5 query, best matches first.

        Raises:
            SearchIndexError: If the query is malformed or the index unreadable.
        """
        with _translate_errors("query"):
            cursor = self.conn.execute(
                "SELECT key FROM books_index WHERE books_index MATCH ? ORDER BY rank",
                (rewrite_query(text),),
            )
            return [row["key"] for row in cursor.fetchall()]

    def count(self) -> int:
        with _translate_errors("count"):
            return self.conn.execute("SELECT count(*) FROM books_index").fetchone()[0]

    def keys(self) -> set[str]:
        with _translate_errors("list"):
            cursor = self.conn.execute("SELECT key FROM books_index")
            return {row["key"] for row in cursor.fetchall()}

    def update(self, diff: CollectionDiff) -> None:
        """Apply a collection diff.

        Entries of removed books and of the previous versions of modified
        books are deleted first (a modified book may have been renamed),
        then added and modified books are indexed.

        Raises:
            SearchIndexError: If any step fails; the caller should rebuild.
        """
        with self._transaction("update"):
            for book in [*diff.removed, *diff.previous, *diff.modified]:
                key = self.key_for(book)
                if key is not None:
                    self.delete(key)
            self._add_all([*diff.added, *diff.modified])
        logger.debug("Index updated: %s", diff)

    def rebuild(self, collection: Collection) -> int:
        """Discard the index and re-derive it from the collection.

        Safe regardless of the index's prior state, including a corrupt file.

        Returns:
            Number of indexed books.
        """
        self.close()
        for suffix in ("", "-wal", "-shm"):
            Path(f"{self.path}{suffix}").unlink(missing_ok=True)
        with self._transaction("rebuild"):
            added = self._add_all(collection)
        logger.info("Rebuilt search index with %d books", added)
        return added

    def check(self, collection: Collection) -> int:
        """Index any book missing from the index.

        Returns:
            Number of books that had to be added.
        """
        present = self.keys()
        missing = [b for b in collection if self.key_for(b) not in present]
        with self._transaction("check"):
            self._add_all(missing)
        if missing:
            logger.warning("Added %d books missing from the index", len(missing))
        return len(missing)

    def _add_all(self, books: Iterable[Book]) -> int:
        added = 0
        for book in books:
            key = self.key_for(book)
            if key is None:
                continue
            self.index(key, book)
            added += 1
        return added

    @contextmanager
    def _transaction(self, operation: str) -> Iterator[None]:
        """Run a block in one transaction: commit on success, roll back on failure."""
        conn = self.conn
        with _translate_errors(operation), conn:
            yield


@contextmanager
def _translate_errors(operation: str) -> Iterator[None]:
    try:
        yield
    except sqlite3.Error as exc:
        raise SearchIndexError(f"Index {operation} failed: {exc}") from exc
