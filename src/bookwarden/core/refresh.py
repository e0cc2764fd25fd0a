# ABOUTME: Brings the catalog and the library directory back in line with each other.
# ABOUTME: Adopts stray epubs, drops vanished copies, renames files, and prunes empty folders.

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from bookwarden.core.book import Book
from bookwarden.core.importer import prepare_metadata
from bookwarden.core.naming import FilenameTemplateError, rename_copy
from bookwarden.core.resolver import resolve_copy
from bookwarden.core.scanner import list_epubs
from bookwarden.core.session import LibrarySession
from bookwarden.db.hashing import compute_file_hash
from bookwarden.formats.epub import EpubReadError
from bookwarden.metadata.cleaning import clean_metadata

logger = logging.getLogger(__name__)


@dataclass
class RefreshResult:
    """What a refresh changed."""

    renamed: int = 0
    relocated: int = 0
    adopted: int = 0
    removed_dirs: int = 0
    missing_copies: list[tuple[Book, Path]] = field(default_factory=list)
    deleted_books: list[Book] = field(default_factory=list)
    errors: list[tuple[Path, str]] = field(default_factory=list)
    saved: bool = False


def remove_empty_dirs(root: Path) -> int:
    """Delete empty directories below ``root`` (never ``root`` itself)."""
    removed = 0
    for dirpath, _, _ in os.walk(root, topdown=False):
        path = Path(dirpath)
        if path == root:
            continue
        if not any(path.iterdir()):
            path.rmdir()
            removed += 1
    return removed


def _relocate_copy(
    book: Book, file_hash: str, path: Path, root: Path, result: RefreshResult
) -> None:
    """Point a copy whose file was moved by hand at its new location."""
    for _, copy in book.copies():
        if copy.hash == file_hash and not copy.exists(root):
            logger.info("Found %s of %s at %s", copy.path, book, path)
            copy.path = path.relative_to(root)
            result.relocated += 1
            return
    logger.warning("%s duplicates a cataloged copy, leaving it alone", path)


def _adopt_untracked(session: LibrarySession, result: RefreshResult) -> list[str]:
    """Catalog epubs sitting in the library root that no book knows about.

    Returns:
        Hashes of adopted files, to be recorded once the catalog is saved.
    """
    config = session.config
    root = config.library_root
    adopted_hashes = []
    for path in list_epubs(root):
        if session.collection.find_by_path(path.relative_to(root)) is not None:
            continue
        try:
            file_hash = compute_file_hash(path)
            owner = session.collection.find_by_hash(file_hash)
            if owner is not None:
                _relocate_copy(owner, file_hash, path, root, result)
                continue
            metadata = prepare_metadata(session, path)
            outcome = resolve_copy(
                session.collection,
                session.collection.find_by_metadata(metadata),
                path,
                file_hash,
                False,
                metadata,
                library_root=root,
                template=config.filename_template,
                interaction=session.interaction,
                replace_default=config.replace_flagged,
            )
        except (OSError, EpubReadError, FilenameTemplateError) as exc:
            result.errors.append((path, str(exc)))
            continue
        if outcome.imported:
            logger.info("Adopted untracked file %s", path.name)
            result.adopted += 1
            adopted_hashes.append(file_hash)
    return adopted_hashes


def _refresh_book(session: LibrarySession, book: Book, result: RefreshResult) -> None:
    config = session.config
    clean_metadata(
        book.metadata,
        author_aliases=session.author_aliases,
        tag_aliases=session.tag_aliases,
        publisher_aliases=session.publisher_aliases,
    )
    for is_retail, copy in book.copies():
        if not copy.exists(config.library_root):
            slot = "retail" if is_retail else "non-retail"
            logger.warning("Missing %s copy %s of %s", slot, copy.path, book)
            result.missing_copies.append((book, copy.path))
            book.set_copy(is_retail, None)
            continue
        try:
            if rename_copy(book, is_retail, config.library_root, config.filename_template):
                result.renamed += 1
        except (OSError, FilenameTemplateError) as exc:
            result.errors.append((copy.path, str(exc)))


def refresh_library(session: LibrarySession) -> RefreshResult:
    """Reconcile the library directory with the catalog and save.

    Books left without any copy are removed from the collection.
    """
    result = RefreshResult()
    adopted_hashes = _adopt_untracked(session, result)

    for book in list(session.collection):
        _refresh_book(session, book, result)
        if not book.has_copies:
            logger.warning("Removing %s, it has no copies left", book)
            session.collection.remove(book.id)
            result.deleted_books.append(book)

    result.removed_dirs = remove_empty_dirs(session.config.library_root)
    result.saved = session.save()
    for file_hash in adopted_hashes:
        session.register_hash(file_hash)
    return result
