# ABOUTME: Decides and applies the fate of an incoming file against the work it matches.
# ABOUTME: Creates works, attaches copies, replaces flagged copies, trumps non-retail, or rejects.

import logging
import shutil
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from bookwarden.core.book import Book, Copy
from bookwarden.core.collection import Collection
from bookwarden.core.interaction import NonInteractive, UserInteraction
from bookwarden.core.naming import render_filename, rename_copy, resolve_collision
from bookwarden.metadata.types import BookMetadata

logger = logging.getLogger(__name__)


class Resolution(Enum):
    """Outcome of offering a file to the collection for one slot."""

    CREATE_WORK = "create"
    ATTACH_COPY = "attach"
    REPLACE_RETAIL = "replace-retail"
    REPLACE_NON_RETAIL = "replace-nonretail"
    REJECT_DUPLICATE = "duplicate"
    REJECT_SUPERSEDED = "superseded"
    DECLINED = "declined"

    @property
    def imports(self) -> bool:
        return self in _IMPORTING

    @property
    def is_replacement(self) -> bool:
        return self in (Resolution.REPLACE_RETAIL, Resolution.REPLACE_NON_RETAIL)


_IMPORTING = frozenset(
    {
        Resolution.CREATE_WORK,
        Resolution.ATTACH_COPY,
        Resolution.REPLACE_RETAIL,
        Resolution.REPLACE_NON_RETAIL,
    }
)


@dataclass
class ResolutionResult:
    """What happened to one incoming file."""

    resolution: Resolution
    book: Book | None
    is_retail: bool
    replaced: Copy | None = None
    trumped: Copy | None = None

    @property
    def imported(self) -> bool:
        return self.resolution.imports


def decide(book: Book | None, is_retail: bool) -> Resolution:
    """Pure decision table for an incoming copy.

    Retail always wins: a non-retail file is never added to a work that has
    a retail copy, and a retail file replaces an existing one only when that
    copy was flagged for replacement.
    """
    if book is None:
        return Resolution.CREATE_WORK

    if is_retail:
        if book.retail is None:
            return Resolution.ATTACH_COPY
        if book.retail.needs_replacement:
            return Resolution.REPLACE_RETAIL
        return Resolution.REJECT_DUPLICATE

    if book.retail is not None:
        return Resolution.REJECT_SUPERSEDED
    if book.non_retail is None:
        return Resolution.ATTACH_COPY
    if book.non_retail.needs_replacement:
        return Resolution.REPLACE_NON_RETAIL
    return Resolution.REJECT_DUPLICATE


def _place_in_library(source: Path, library_root: Path, isbn: str | None) -> tuple[Path, bool]:
    """Copy ``source`` into the library root unless it already lives there.

    Returns:
        The relative path inside the library and whether a copy was made.
    """
    root = library_root.resolve()
    resolved = source.resolve()
    if resolved.is_relative_to(root):
        return resolved.relative_to(root), False

    destination = resolve_collision(library_root / source.name, isbn)
    library_root.mkdir(parents=True, exist_ok=True)
    logger.debug("Copying %s to %s", source, destination)
    shutil.copy2(source, destination)
    return destination.relative_to(library_root), True


def _remove_copy_file(copy: Copy, library_root: Path) -> None:
    path = copy.full_path(library_root)
    logger.debug("Removing %s", path)
    path.unlink(missing_ok=True)


def resolve_copy(
    collection: Collection,
    book: Book | None,
    source: Path,
    file_hash: str,
    is_retail: bool,
    metadata: BookMetadata,
    *,
    library_root: Path,
    template: str,
    interaction: UserInteraction | None = None,
    replace_default: bool = False,
) -> ResolutionResult:
    """Apply the decision for one file against its matched work.

    ``book`` is the work the caller matched (by hash, path or metadata
    similarity), or None for a brand-new work built from ``metadata``.
    Replacing a flagged copy is destructive and must be confirmed through
    ``interaction``; non-interactive runs use ``replace_default``.

    The file is placed in the library before any catalog state changes, so
    a failed copy leaves the collection untouched.

    Raises:
        FilenameTemplateError: If the template cannot be rendered.
        OSError: If the file cannot be copied into the library.
    """
    interaction = interaction or NonInteractive()
    slot = "retail" if is_retail else "non-retail"
    resolution = decide(book, is_retail)

    if resolution is Resolution.REJECT_DUPLICATE:
        logger.info("%s already has a %s copy, skipping %s", book, slot, source.name)
        return ResolutionResult(resolution, book, is_retail)
    if resolution is Resolution.REJECT_SUPERSEDED:
        logger.info("%s has a retail copy, ignoring non-retail %s", book, source.name)
        return ResolutionResult(resolution, book, is_retail)

    if resolution.is_replacement:
        question = f"Replace the {slot} copy of {book} (flagged for replacement) with {source.name}?"
        if not interaction.accept(question, default=replace_default):
            logger.info("Replacement of %s copy of %s declined", slot, book)
            return ResolutionResult(Resolution.DECLINED, book, is_retail)

    target = book if book is not None else Book(id=collection.next_id(), metadata=metadata)
    # Render once up front so a bad template fails before any file is touched.
    render_filename(target, template, is_retail)

    relative_path, _ = _place_in_library(source, library_root, metadata.isbn)

    result = ResolutionResult(resolution, target, is_retail)
    if resolution is Resolution.CREATE_WORK:
        collection.add(target)

    existing = target.get_copy(is_retail)
    if existing is not None:
        logger.warning("Replacing %s copy of %s, flagged for replacement", slot, target)
        _remove_copy_file(existing, library_root)
        result.replaced = existing
    if is_retail and target.non_retail is not None:
        logger.warning("Non-retail copy of %s trumped by retail, removing", target)
        _remove_copy_file(target.non_retail, library_root)
        result.trumped = target.non_retail
        target.non_retail = None

    target.set_copy(is_retail, Copy(path=relative_path, hash=file_hash))

    try:
        rename_copy(target, is_retail, library_root, template)
    except OSError as exc:
        logger.warning("Could not rename %s: %s", relative_path, exc)

    logger.info("%s: %s copy %s", resolution.value, slot, target)
    return result
