# ABOUTME: ISBN normalization: strips punctuation, validates checksums, upgrades ISBN-10.
# ABOUTME: All ISBNs stored in the catalog are 13-digit strings produced here.

import re

_NON_ISBN_CHARS = re.compile(r"[^0-9X]")


class InvalidISBNError(ValueError):
    """Raised when a string cannot be read as a valid ISBN-10 or ISBN-13."""


def _isbn10_is_valid(candidate: str) -> bool:
    if len(candidate) != 10 or not candidate[:9].isdigit():
        return False
    if not (candidate[9].isdigit() or candidate[9] == "X"):
        return False
    total = 0
    for position, char in enumerate(candidate):
        value = 10 if char == "X" else int(char)
        total += (10 - position) * value
    return total % 11 == 0


def _isbn13_check_digit(first_twelve: str) -> str:
    total = sum(int(d) * (1 if i % 2 == 0 else 3) for i, d in enumerate(first_twelve))
    return str((10 - total % 10) % 10)


def _isbn13_is_valid(candidate: str) -> bool:
    if len(candidate) != 13 or not candidate.isdigit():
        return False
    return _isbn13_check_digit(candidate[:12]) == candidate[12]


def isbn10_to_isbn13(isbn10: str) -> str:
    """Convert a valid ISBN-10 to its 978-prefixed ISBN-13 form."""
    body = "978" + isbn10[:9]
    return body + _isbn13_check_digit(body)


def clean_isbn(raw: str) -> str:
    """Return the canonical ISBN-13 for a raw ISBN-ish string.

    Separators and prefixes such as ``urn:isbn:`` are dropped. Strings
    longer than 13 characters that start with 978 are truncated to 13,
    which handles identifiers with trailing junk.

    Raises:
        InvalidISBNError: If no valid ISBN can be read from the string.
    """
    candidate = _NON_ISBN_CHARS.sub("", raw.upper())
    if len(candidate) > 13 and candidate.startswith("978"):
        candidate = candidate[:13]

    if _isbn13_is_valid(candidate):
        return candidate
    if _isbn10_is_valid(candidate):
        return isbn10_to_isbn13(candidate)
    raise InvalidISBNError(f"Not a valid ISBN: {raw!r}")


def find_isbn(values: list[str]) -> str | None:
    """Return the first value that cleans to a valid ISBN, or None."""
    for value in values:
        try:
            return clean_isbn(value)
        except InvalidISBNError:
            continue
    return None
