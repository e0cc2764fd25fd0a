# ABOUTME: Book and Copy data model: one logical work owning up to two physical files.
# ABOUTME: A book holds at most one retail copy and at most one non-retail copy.

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from bookwarden.metadata.types import BookMetadata


class Progress(str, Enum):
    """Reading state of a book."""

    UNREAD = "unread"
    READING = "reading"
    READ = "read"
    SHORTLISTED = "shortlisted"


@dataclass
class Copy:
    """One physical file of a work, stored under the library root.

    ``path`` is relative to the library root so the library can be moved.
    """

    path: Path
    hash: str
    needs_replacement: bool = False

    def full_path(self, library_root: Path) -> Path:
        return library_root / self.path

    def exists(self, library_root: Path) -> bool:
        return self.full_path(library_root).is_file()


@dataclass
class Book:
    """A logical work in the collection.

    The id is assigned once and never reused while the book lives; it is the
    key the index and the CLI use to refer to the book.
    """

    id: int
    metadata: BookMetadata
    retail: Copy | None = None
    non_retail: Copy | None = None
    progress: Progress = Progress.UNREAD
    read_date: str | None = None
    rating: int | None = None
    review: str | None = None
    exported: bool = False

    @property
    def has_retail(self) -> bool:
        return self.retail is not None

    @property
    def has_non_retail(self) -> bool:
        return self.non_retail is not None

    @property
    def has_copies(self) -> bool:
        return self.retail is not None or self.non_retail is not None

    @property
    def main_copy(self) -> Copy | None:
        """The copy users read: retail when present, otherwise non-retail."""
        return self.retail if self.retail is not None else self.non_retail

    def copies(self) -> list[tuple[bool, Copy]]:
        """All copies as ``(is_retail, copy)`` pairs, retail first."""
        pairs: list[tuple[bool, Copy]] = []
        if self.retail is not None:
            pairs.append((True, self.retail))
        if self.non_retail is not None:
            pairs.append((False, self.non_retail))
        return pairs

    def get_copy(self, is_retail: bool) -> Copy | None:
        return self.retail if is_retail else self.non_retail

    def set_copy(self, is_retail: bool, copy: Copy | None) -> None:
        if is_retail:
            self.retail = copy
        else:
            self.non_retail = copy

    def has_hash(self, file_hash: str) -> bool:
        return any(copy.hash == file_hash for _, copy in self.copies())

    def has_path(self, relative_path: Path) -> bool:
        return any(copy.path == relative_path for _, copy in self.copies())

    def __str__(self) -> str:
        author = self.metadata.author or "Unknown"
        return f"{self.id}: {author} - {self.metadata.title}"
