# ABOUTME: Closed set of user-editable metadata fields with per-field validation.
# ABOUTME: Used by `bookwarden set field` and the interactive edit prompt.

import re
from collections.abc import Callable
from enum import Enum
from typing import Any

from bookwarden.metadata.cleaning import clean_tags
from bookwarden.metadata.isbn import InvalidISBNError, clean_isbn
from bookwarden.metadata.types import CATEGORIES, GENRES, BookMetadata

_YEAR_RE = re.compile(r"^\d{4}$")
_LANGUAGE_RE = re.compile(r"^[a-z]{2,3}(-[a-z0-9]{2,8})?$")


class InvalidFieldValueError(ValueError):
    """Raised when a value fails the validation rule of the field it targets."""


class MetadataField(Enum):
    """Every metadata field a user may edit. Attribute names match BookMetadata."""

    TITLE = "title"
    AUTHORS = "authors"
    YEAR = "year"
    EDITION_YEAR = "edition_year"
    LANGUAGE = "language"
    PUBLISHER = "publisher"
    ISBN = "isbn"
    DESCRIPTION = "description"
    SERIES = "series"
    SERIES_INDEX = "series_index"
    TAGS = "tags"
    CATEGORY = "category"
    GENRE = "genre"

    @classmethod
    def from_name(cls, name: str) -> "MetadataField":
        normalized = name.strip().lower().replace("-", "_")
        try:
            return cls(normalized)
        except ValueError as exc:
            valid = ", ".join(f.value for f in cls)
            raise InvalidFieldValueError(
                f"Unknown field {name!r} (expected one of: {valid})"
            ) from exc

    def parse(self, raw: str) -> Any:
        """Validate and convert a raw string into this field's stored value."""
        return _PARSERS[self](raw.strip())


def _required_text(raw: str) -> str:
    if not raw:
        raise InvalidFieldValueError("Value cannot be empty")
    return raw


def _optional_text(raw: str) -> str | None:
    return raw or None


def _comma_list(raw: str) -> list[str]:
    values = [part.strip() for part in raw.split(",") if part.strip()]
    if not values:
        raise InvalidFieldValueError("Expected a comma-separated list")
    return values


def _year(raw: str) -> str | None:
    if not raw:
        return None
    if not _YEAR_RE.match(raw):
        raise InvalidFieldValueError(f"Year must have four digits, got {raw!r}")
    return raw


def _language(raw: str) -> str | None:
    if not raw:
        return None
    lowered = raw.lower()
    if not _LANGUAGE_RE.match(lowered):
        raise InvalidFieldValueError(f"Not a language code: {raw!r}")
    return lowered


def _isbn(raw: str) -> str | None:
    if not raw:
        return None
    try:
        return clean_isbn(raw)
    except InvalidISBNError as exc:
        raise InvalidFieldValueError(str(exc)) from exc


def _series_index(raw: str) -> float | None:
    if not raw:
        return None
    try:
        value = float(raw)
    except ValueError as exc:
        raise InvalidFieldValueError(f"Series index must be a number, got {raw!r}") from exc
    if value < 0:
        raise InvalidFieldValueError("Series index cannot be negative")
    return value


def _tags(raw: str) -> list[str]:
    if not raw:
        return []
    return clean_tags(raw.split(","))


def _choice(options: tuple[str, ...]) -> Callable[[str], str | None]:
    def parse(raw: str) -> str | None:
        if not raw:
            return None
        lowered = raw.lower()
        if lowered not in options:
            raise InvalidFieldValueError(
                f"{raw!r} is not one of: {', '.join(options)}"
            )
        return lowered

    return parse


_PARSERS: dict[MetadataField, Callable[[str], Any]] = {
    MetadataField.TITLE: _required_text,
    MetadataField.AUTHORS: _comma_list,
    MetadataField.YEAR: _year,
    MetadataField.EDITION_YEAR: _year,
    MetadataField.LANGUAGE: _language,
    MetadataField.PUBLISHER: _optional_text,
    MetadataField.ISBN: _isbn,
    MetadataField.DESCRIPTION: _optional_text,
    MetadataField.SERIES: _optional_text,
    MetadataField.SERIES_INDEX: _series_index,
    MetadataField.TAGS: _tags,
    MetadataField.CATEGORY: _choice(CATEGORIES),
    MetadataField.GENRE: _choice(GENRES),
}

assert set(_PARSERS) == set(MetadataField), "every editable field needs a parser"


def get_field(metadata: BookMetadata, field: MetadataField) -> Any:
    return getattr(metadata, field.value)


def set_field(metadata: BookMetadata, field: MetadataField, raw: str) -> Any:
    """Validate ``raw`` for ``field`` and store it on ``metadata``.

    Returns:
        The converted value that was stored.

    Raises:
        InvalidFieldValueError: If the value fails the field's rule.
    """
    value = field.parse(raw)
    setattr(metadata, field.value, value)
    return value


def format_field(metadata: BookMetadata, field: MetadataField) -> str:
    """Render a field's current value as the string a user would type."""
    value = get_field(metadata, field)
    if value is None:
        return ""
    if isinstance(value, list):
        return ", ".join(value)
    if isinstance(value, float):
        return f"{value:g}"
    return str(value)


def parse_rating(raw: str) -> int:
    """Validate a 0-5 star rating."""
    try:
        rating = int(raw)
    except ValueError as exc:
        raise InvalidFieldValueError(f"Rating must be a whole number, got {raw!r}") from exc
    if not 0 <= rating <= 5:
        raise InvalidFieldValueError("Rating must be between 0 and 5")
    return rating
