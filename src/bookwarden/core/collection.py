# ABOUTME: In-memory collection of Books keyed by id, with lookups and snapshot diffing.
# ABOUTME: The diff between two snapshots drives incremental search index updates.

import copy
import logging
from collections import Counter
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol, runtime_checkable

from bookwarden.core.book import Book
from bookwarden.db.mapping import book_to_dict
from bookwarden.metadata.types import BookMetadata

logger = logging.getLogger(__name__)


class BookNotFoundError(KeyError):
    """Raised when no book in the collection has the requested id."""


@dataclass
class CollectionDiff:
    """Books that differ between an older snapshot and the current collection.

    ``previous`` holds the old version of every modified book, so callers
    can remove entries that were keyed on the book's former state.
    """

    added: list[Book] = field(default_factory=list)
    modified: list[Book] = field(default_factory=list)
    removed: list[Book] = field(default_factory=list)
    previous: list[Book] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.added or self.modified or self.removed)

    def __str__(self) -> str:
        return (
            f"{len(self.added)} added, {len(self.modified)} modified, "
            f"{len(self.removed)} removed"
        )


@runtime_checkable
class BookCollection(Protocol):
    """Operations the import and refresh engines need from a collection."""

    def add(self, book: Book) -> None: ...

    def next_id(self) -> int: ...

    def find_by_id(self, book_id: int) -> Book: ...

    def find_by_hash(self, file_hash: str) -> Book | None: ...

    def find_by_path(self, relative_path: Path) -> Book | None: ...

    def find_by_metadata(self, metadata: BookMetadata) -> Book | None: ...

    def diff(self, old: "Collection") -> CollectionDiff: ...


class Collection:
    """Ordered set of Books keyed by id."""

    def __init__(self, books: Iterable[Book] = ()) -> None:
        self._books: dict[int, Book] = {}
        for book in books:
            self.add(book)

    def __iter__(self) -> Iterator[Book]:
        return iter(sorted(self._books.values(), key=lambda b: b.id))

    def __len__(self) -> int:
        return len(self._books)

    def __contains__(self, book_id: object) -> bool:
        return book_id in self._books

    def add(self, book: Book) -> None:
        """Add a book.

        Raises:
            ValueError: If a book with the same id is already present.
        """
        if book.id in self._books:
            raise ValueError(f"Book id {book.id} already in collection")
        self._books[book.id] = book

    def remove(self, book_id: int) -> Book:
        try:
            return self._books.pop(book_id)
        except KeyError as exc:
            raise BookNotFoundError(book_id) from exc

    def next_id(self) -> int:
        """One more than the highest id in the collection; the first book gets 1."""
        return max(self._books, default=0) + 1

    def find_by_id(self, book_id: int) -> Book:
        try:
            return self._books[book_id]
        except KeyError as exc:
            raise BookNotFoundError(book_id) from exc

    def find_by_hash(self, file_hash: str) -> Book | None:
        for book in self:
            if book.has_hash(file_hash):
                return book
        return None

    def find_by_path(self, relative_path: Path) -> Book | None:
        for book in self:
            if book.has_path(relative_path):
                return book
        return None

    def find_by_metadata(self, metadata: BookMetadata) -> Book | None:
        """First book whose metadata is similar (same ISBN, or same author and title)."""
        for book in self:
            if book.metadata.is_similar(metadata):
                return book
        return None

    def snapshot(self) -> "Collection":
        """Deep copy, used as the baseline for a later diff."""
        return Collection(copy.deepcopy(list(self._books.values())))

    def diff(self, old: "Collection") -> CollectionDiff:
        """Compare this collection against an older snapshot.

        Books are matched by id; a book present in both whose serialized
        record differs counts as modified.
        """
        result = CollectionDiff()
        for book in self:
            if book.id not in old:
                result.added.append(book)
                continue
            previous = old.find_by_id(book.id)
            if book_to_dict(book) != book_to_dict(previous):
                result.modified.append(book)
                result.previous.append(previous)
        result.removed = [book for book in old if book.id not in self]
        logger.debug("Collection diff: %s", result)
        return result

    # Filters

    def filter(self, predicate: Callable[[Book], bool]) -> list[Book]:
        return [book for book in self if predicate(book)]

    def retail(self) -> list[Book]:
        return self.filter(lambda b: b.has_retail)

    def non_retail_only(self) -> list[Book]:
        return self.filter(lambda b: not b.has_retail)

    def incomplete(self) -> list[Book]:
        return self.filter(lambda b: not b.metadata.is_complete)

    def flagged(self) -> list[Book]:
        return self.filter(
            lambda b: any(copy.needs_replacement for _, copy in b.copies())
        )

    # Aggregates

    def authors(self) -> Counter[str]:
        return Counter(author for book in self for author in book.metadata.authors)

    def publishers(self) -> Counter[str]:
        return Counter(b.metadata.publisher for b in self if b.metadata.publisher)

    def tags(self) -> Counter[str]:
        return Counter(tag for book in self for tag in book.metadata.tags)

    def series(self) -> Counter[str]:
        return Counter(b.metadata.series for b in self if b.metadata.series)


SORT_KEYS: dict[str, Callable[[Book], object]] = {
    "id": lambda b: b.id,
    "author": lambda b: (b.metadata.author.casefold(), b.metadata.title.casefold()),
    "title": lambda b: b.metadata.title.casefold(),
    "year": lambda b: (b.metadata.year or "", b.id),
}


def sort_books(books: list[Book], key: str) -> list[Book]:
    """Sort by one of SORT_KEYS.

    Raises:
        ValueError: If the key is unknown.
    """
    if key not in SORT_KEYS:
        raise ValueError(f"Unknown sort key {key!r}")
    return sorted(books, key=SORT_KEYS[key])
