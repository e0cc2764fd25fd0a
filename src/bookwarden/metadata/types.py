# ABOUTME: Core metadata data structures for a logical work in the library.
# ABOUTME: BookMetadata flows from extraction through online enrichment into the catalog.

from dataclasses import dataclass, field

UNKNOWN_AUTHOR = "Unknown"
UNKNOWN_YEAR = "XXXX"

CATEGORIES: tuple[str, ...] = ("fiction", "nonfiction")
GENRES: tuple[str, ...] = (
    "essay",
    "biography",
    "autobiography",
    "novel",
    "shortstory",
    "anthology",
    "poetry",
)


def _normalized(value: str) -> str:
    return " ".join(value.split()).casefold()


@dataclass
class BookMetadata:
    """Bibliographic description of a work, independent of any file.

    Title is the only required field, since even a badly-formed EPUB has
    something we can call a title (its filename, at worst).
    """

    title: str
    authors: list[str] = field(default_factory=list)
    year: str | None = None
    edition_year: str | None = None
    language: str | None = None
    publisher: str | None = None
    isbn: str | None = None
    description: str | None = None
    series: str | None = None
    series_index: float | None = None
    tags: list[str] = field(default_factory=list)
    category: str | None = None
    genre: str | None = None
    identifiers: dict[str, str] = field(default_factory=dict)

    @property
    def author(self) -> str:
        """Convenience property: joined author string for display."""
        return ", ".join(self.authors) if self.authors else ""

    @property
    def series_display(self) -> str:
        if not self.series:
            return ""
        if self.series_index is None:
            return self.series
        return f"{self.series} #{self.series_index:g}"

    def is_similar(self, other: "BookMetadata") -> bool:
        """Whether two descriptions plausibly refer to the same work.

        Equal non-empty ISBNs match outright. Otherwise author and title
        must both be equal, ignoring case and surrounding whitespace.
        """
        if self.isbn and self.isbn == other.isbn:
            return True
        same_author = _normalized(self.author or UNKNOWN_AUTHOR) == _normalized(
            other.author or UNKNOWN_AUTHOR
        )
        return same_author and _normalized(self.title) == _normalized(other.title)

    def missing_fields(self) -> list[str]:
        """Names of the fields a complete record should have but this one lacks."""
        checks = {
            "authors": self.authors,
            "year": self.year,
            "language": self.language,
            "isbn": self.isbn,
            "description": self.description,
            "tags": self.tags,
            "category": self.category,
        }
        return [name for name, value in checks.items() if not value]

    @property
    def is_complete(self) -> bool:
        return not self.missing_fields()
