# ABOUTME: EPUB metadata extraction using ebooklib.
# ABOUTME: Defensive reader that turns any parse failure into EpubReadError.

import logging
import re
from pathlib import Path

from ebooklib import epub

from bookwarden.metadata.isbn import find_isbn
from bookwarden.metadata.types import BookMetadata

logger = logging.getLogger(__name__)

_YEAR_RE = re.compile(r"\b(\d{4})\b")


class EpubReadError(Exception):
    """Raised when an EPUB file cannot be read or parsed."""


def _attribute(attrs: dict[str, str], name: str) -> str | None:
    """Look up an OPF attribute regardless of how its namespace was recorded."""
    for key, value in attrs.items():
        if key == name or key.endswith((f":{name}", f"}}{name}")):
            return value
    return None


def _get_metadata_value(book: epub.EpubBook, namespace: str, name: str) -> str | None:
    """Extract a single metadata value from an EpubBook, or None if missing."""
    values = book.get_metadata(namespace, name)
    if not values:
        return None
    # Metadata entries are tuples of (value, attributes)
    value = values[0][0]
    return str(value).strip() if value else None


def _get_values(book: epub.EpubBook, name: str) -> list[str]:
    return [str(value).strip() for value, _ in book.get_metadata("DC", name) if value]


def _get_identifiers(book: epub.EpubBook) -> dict[str, str]:
    """Extract all identifiers (ISBN, UUID, etc.) keyed by lowercased scheme."""
    identifiers = {}
    for value, attrs in book.get_metadata("DC", "identifier"):
        if not value:
            continue
        scheme = _attribute(attrs or {}, "scheme") or "id"
        identifiers[scheme.lower()] = str(value).strip()
    return identifiers


def _get_year(book: epub.EpubBook) -> str | None:
    """Publication year, preferring a date marked as the publication event."""
    dates = book.get_metadata("DC", "date")
    ordered = sorted(
        dates, key=lambda entry: _attribute(entry[1] or {}, "event") != "publication"
    )
    for value, _ in ordered:
        match = _YEAR_RE.search(str(value or ""))
        if match:
            return match.group(1)
    return None


def _detect_isbn(book: epub.EpubBook, identifiers: dict[str, str]) -> str | None:
    """Find an ISBN among identifiers, trying ISBN-labelled schemes first, then dc:source."""
    labelled = [v for k, v in identifiers.items() if "isbn" in k]
    others = [v for k, v in identifiers.items() if "isbn" not in k]
    return find_isbn(labelled) or find_isbn(others) or find_isbn(_get_values(book, "source"))


def read_epub_metadata(path: Path) -> BookMetadata:
    """Extract metadata from an EPUB file.

    Args:
        path: Path to the EPUB file.

    Returns:
        BookMetadata populated with extracted fields. The title falls back to
        the filename stem when the package has none.

    Raises:
        EpubReadError: If the file cannot be read or parsed.
    """
    if not path.exists():
        raise EpubReadError(f"File not found: {path}")

    try:
        book = epub.read_epub(str(path), options={"ignore_ncx": True})
    except Exception as exc:
        raise EpubReadError(f"Failed to read EPUB: {path}: {exc}") from exc

    title = _get_metadata_value(book, "DC", "title") or path.stem
    identifiers = _get_identifiers(book)
    isbn = _detect_isbn(book, identifiers)
    if isbn is None:
        logger.debug("ISBN not found in %s", path.name)

    return BookMetadata(
        title=title,
        authors=_get_values(book, "creator"),
        year=_get_year(book),
        language=_get_metadata_value(book, "DC", "language"),
        publisher=_get_metadata_value(book, "DC", "publisher"),
        isbn=isbn,
        description=_get_metadata_value(book, "DC", "description"),
        tags=_get_values(book, "subject"),
        identifiers=identifiers,
    )
