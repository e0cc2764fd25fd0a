# ABOUTME: Library integrity check: re-hashes every copy and compares it with the catalog.
# ABOUTME: A changed retail file is an error; a changed non-retail file is only a warning.

import logging
from dataclasses import dataclass, field
from pathlib import Path

from bookwarden.core.book import Book, Copy
from bookwarden.core.collection import Collection
from bookwarden.db.hashing import compute_file_hash

logger = logging.getLogger(__name__)


@dataclass
class CopyIssue:
    """One problem found with one copy."""

    book: Book
    copy: Copy
    is_retail: bool
    problem: str


@dataclass
class VerifyResult:
    """Aggregated results from a verification run."""

    ok: int = 0
    missing: list[CopyIssue] = field(default_factory=list)
    retail_changed: list[CopyIssue] = field(default_factory=list)
    non_retail_changed: list[CopyIssue] = field(default_factory=list)

    @property
    def total_issues(self) -> int:
        return len(self.missing) + len(self.retail_changed) + len(self.non_retail_changed)

    @property
    def has_errors(self) -> bool:
        """Missing files and modified retail copies are errors; the rest are warnings."""
        return bool(self.missing or self.retail_changed)

    def issues(self) -> list[CopyIssue]:
        return [*self.missing, *self.retail_changed, *self.non_retail_changed]


def verify_library(collection: Collection, library_root: Path) -> VerifyResult:
    """Check that every copy exists and still has its cataloged hash.

    Retail copies are supposed to be pristine, so any change to one is an
    error. Non-retail copies may legitimately be edited.
    """
    result = VerifyResult()

    for book in collection:
        for is_retail, copy in book.copies():
            path = copy.full_path(library_root)
            if not path.is_file():
                result.missing.append(CopyIssue(book, copy, is_retail, "Missing file"))
                continue

            if compute_file_hash(path) == copy.hash:
                result.ok += 1
                continue

            if is_retail:
                logger.error("Retail copy %s of %s has changed", copy.path, book)
                result.retail_changed.append(
                    CopyIssue(book, copy, is_retail, "Retail file changed")
                )
            else:
                logger.warning("Non-retail copy %s of %s has changed", copy.path, book)
                result.non_retail_changed.append(
                    CopyIssue(book, copy, is_retail, "Non-retail file changed")
                )

    return result
