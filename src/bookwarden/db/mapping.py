# ABOUTME: Converts Book/Copy/BookMetadata dataclasses to and from catalog JSON records.
# ABOUTME: The record layout here is the on-disk format of the catalog file.

from pathlib import Path
from typing import Any

from bookwarden.core.book import Book, Copy, Progress
from bookwarden.metadata.types import BookMetadata


def copy_to_dict(copy: Copy | None) -> dict[str, Any] | None:
    if copy is None:
        return None
    return {
        "path": copy.path.as_posix(),
        "hash": copy.hash,
        "needs_replacement": copy.needs_replacement,
    }


def dict_to_copy(data: dict[str, Any] | None) -> Copy | None:
    if not data:
        return None
    return Copy(
        path=Path(data["path"]),
        hash=data["hash"],
        needs_replacement=bool(data.get("needs_replacement", False)),
    )


def metadata_to_dict(metadata: BookMetadata) -> dict[str, Any]:
    """Serialize metadata. Keys are always present so records diff cleanly."""
    return {
        "title": metadata.title,
        "authors": list(metadata.authors),
        "year": metadata.year,
        "edition_year": metadata.edition_year,
        "language": metadata.language,
        "publisher": metadata.publisher,
        "isbn": metadata.isbn,
        "description": metadata.description,
        "series": metadata.series,
        "series_index": metadata.series_index,
        "tags": list(metadata.tags),
        "category": metadata.category,
        "genre": metadata.genre,
        "identifiers": dict(sorted(metadata.identifiers.items())),
    }


def dict_to_metadata(data: dict[str, Any]) -> BookMetadata:
    series_index = data.get("series_index")
    return BookMetadata(
        title=data.get("title") or "",
        authors=list(data.get("authors") or []),
        year=data.get("year"),
        edition_year=data.get("edition_year"),
        language=data.get("language"),
        publisher=data.get("publisher"),
        isbn=data.get("isbn"),
        description=data.get("description"),
        series=data.get("series"),
        series_index=float(series_index) if series_index is not None else None,
        tags=list(data.get("tags") or []),
        category=data.get("category"),
        genre=data.get("genre"),
        identifiers=dict(data.get("identifiers") or {}),
    )


def book_to_dict(book: Book) -> dict[str, Any]:
    """Convert a Book into its catalog record."""
    return {
        "id": book.id,
        "retail": copy_to_dict(book.retail),
        "nonretail": copy_to_dict(book.non_retail),
        "metadata": metadata_to_dict(book.metadata),
        "progress": book.progress.value,
        "read_date": book.read_date,
        "rating": book.rating,
        "review": book.review,
        "exported": book.exported,
    }


def dict_to_book(data: dict[str, Any]) -> Book:
    """Convert a catalog record back into a Book.

    Raises:
        KeyError: If the record has no id.
        ValueError: If the progress value is unknown.
    """
    return Book(
        id=int(data["id"]),
        metadata=dict_to_metadata(data.get("metadata") or {}),
        retail=dict_to_copy(data.get("retail")),
        non_retail=dict_to_copy(data.get("nonretail")),
        progress=Progress(data.get("progress") or Progress.UNREAD.value),
        read_date=data.get("read_date"),
        rating=data.get("rating"),
        review=data.get("review"),
        exported=bool(data.get("exported", False)),
    )
