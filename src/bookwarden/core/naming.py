# ABOUTME: Canonical filenames for library copies, rendered from a user template.
# ABOUTME: Placeholders like $a/$y/$t expand from metadata; retail copies get a [retail] suffix.

import logging
import re
from pathlib import Path

from bookwarden.core.book import Book
from bookwarden.metadata.types import UNKNOWN_AUTHOR, UNKNOWN_YEAR

logger = logging.getLogger(__name__)

EPUB_EXTENSION = ".epub"
RETAIL_SUFFIX = " [retail]"
DEFAULT_TEMPLATE = "$a [$y] $t"

_PLACEHOLDER_RE = re.compile(r"\$([atylispcgr])")
_ILLEGAL_CHARS_RE = re.compile(r'[/\\:*?"<>|]')
_MAX_COLLISION_ATTEMPTS = 10_000


class FilenameTemplateError(ValueError):
    """Raised when a filename template cannot produce a usable name."""


def clean_component(value: str) -> str:
    """Make a metadata value safe to embed in a path component.

    A leading dot is dropped so the file does not become hidden, and path
    separators and characters illegal on common filesystems become dashes.
    """
    value = " ".join(value.split())
    if value.startswith((".", "/")):
        value = value[1:]
    return _ILLEGAL_CHARS_RE.sub("-", value).strip()


def _placeholder_values(book: Book, is_retail: bool) -> dict[str, str]:
    meta = book.metadata
    series = f"[{meta.series_display}]" if meta.series else ""
    return {
        "a": meta.author or UNKNOWN_AUTHOR,
        "y": meta.year or UNKNOWN_YEAR,
        "t": meta.title,
        "l": meta.language or "",
        "i": meta.isbn or "",
        "s": series,
        "p": book.progress.value,
        "c": meta.category or "",
        "g": meta.genre or "",
        "r": "retail" if is_retail else "nonretail",
    }


def render_filename(book: Book, template: str, is_retail: bool) -> Path:
    """Render the relative path (with .epub extension) a copy should have.

    ``/`` in the template itself creates subdirectories; ``/`` inside a
    metadata value never does.

    Raises:
        FilenameTemplateError: If the template is empty or renders to nothing.
    """
    if not template or not template.strip():
        raise FilenameTemplateError("Empty filename template")

    values = _placeholder_values(book, is_retail)
    rendered = _PLACEHOLDER_RE.sub(
        lambda m: clean_component(values[m.group(1)]), template
    )

    parts = [" ".join(part.split()) for part in rendered.split("/")]
    parts = [part.lstrip(".") for part in parts if part.strip(" .")]
    if not parts:
        raise FilenameTemplateError(f"Template {template!r} rendered an empty name")

    name = "/".join(parts)
    if is_retail and "$r" not in template:
        name += RETAIL_SUFFIX
    return Path(name + EPUB_EXTENSION)


def resolve_collision(
    destination: Path, isbn: str | None = None, current: Path | None = None
) -> Path:
    """Find a free path next to ``destination``.

    Tries an ``_<isbn>`` suffix once when an ISBN is known, then ``_1``,
    ``_2`` and so on. A candidate equal to ``current`` counts as free, so a
    file that already carries a suffix keeps it.
    """

    def is_free(candidate: Path) -> bool:
        return candidate == current or not candidate.exists()

    if is_free(destination):
        return destination
    stem, suffix, parent = destination.stem, destination.suffix, destination.parent
    if isbn:
        candidate = parent / f"{stem}_{isbn}{suffix}"
        if is_free(candidate):
            return candidate
    for counter in range(1, _MAX_COLLISION_ATTEMPTS + 1):
        candidate = parent / f"{stem}_{counter}{suffix}"
        if is_free(candidate):
            return candidate
    raise OSError(
        f"Could not find a non-colliding filename after "
        f"{_MAX_COLLISION_ATTEMPTS} attempts: {destination}"
    )


def rename_copy(book: Book, is_retail: bool, library_root: Path, template: str) -> bool:
    """Move a copy to its canonical name and update its stored path.

    Idempotent: nothing touches the filesystem when the copy already has its
    canonical name. A name taken by another file gets a unique suffix.

    Returns:
        True if the file was moved.

    Raises:
        FilenameTemplateError: If the template cannot be rendered.
        OSError: If the move fails.
    """
    copy = book.get_copy(is_retail)
    if copy is None:
        return False

    target = render_filename(book, template, is_retail)
    if copy.path == target:
        return False

    origin = copy.full_path(library_root)
    isbn = book.metadata.isbn if "$i" not in template else None
    destination = resolve_collision(library_root / target, isbn, current=origin)
    if destination == origin:
        return False

    destination.parent.mkdir(parents=True, exist_ok=True)
    logger.info("Renaming %s -> %s", copy.path, destination.relative_to(library_root))
    origin.rename(destination)
    copy.path = destination.relative_to(library_root)
    return True
