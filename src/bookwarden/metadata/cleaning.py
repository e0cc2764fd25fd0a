# ABOUTME: Tidies extracted or fetched metadata before it reaches the catalog.
# ABOUTME: Applies configured author/tag/publisher aliases and strips markup from descriptions.

import html
import logging
import re
from dataclasses import dataclass, field

from bookwarden.metadata.types import BookMetadata

logger = logging.getLogger(__name__)

_TAG_RE = re.compile(r"<[^>]+>")
_BREAK_RE = re.compile(r"<\s*(br|/p|/div)\s*/?\s*>", re.IGNORECASE)
_BLANK_LINES_RE = re.compile(r"\n\s*\n+")


@dataclass
class AliasTable:
    """Maps alternative spellings to a main name, e.g. pen names to an author."""

    aliases: dict[str, list[str]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self._lookup: dict[str, str] = {}
        for main, alternatives in self.aliases.items():
            for alias in alternatives or []:
                self._lookup[alias.casefold()] = main

    def resolve(self, value: str) -> str:
        return self._lookup.get(value.casefold(), value)


def strip_html(text: str) -> str:
    """Reduce an HTML fragment to plain text, keeping paragraph breaks."""
    text = _BREAK_RE.sub("\n", text)
    text = _TAG_RE.sub("", text)
    text = html.unescape(text)
    lines = [" ".join(line.split()) for line in text.splitlines()]
    return _BLANK_LINES_RE.sub("\n", "\n".join(lines)).strip()


def clean_tags(tags: list[str], aliases: AliasTable | None = None) -> list[str]:
    """Lowercase, alias and de-duplicate tags, preserving first-seen order."""
    seen: list[str] = []
    for tag in tags:
        cleaned = " ".join(tag.split()).lower()
        if aliases is not None:
            cleaned = aliases.resolve(cleaned).lower()
        if cleaned and cleaned not in seen:
            seen.append(cleaned)
    return seen


def clean_metadata(
    metadata: BookMetadata,
    *,
    author_aliases: AliasTable | None = None,
    tag_aliases: AliasTable | None = None,
    publisher_aliases: AliasTable | None = None,
) -> BookMetadata:
    """Normalize a BookMetadata in place and return it."""
    metadata.title = " ".join(metadata.title.split())
    authors = [" ".join(a.split()) for a in metadata.authors if a.strip()]
    if author_aliases is not None:
        authors = [author_aliases.resolve(a) for a in authors]
    metadata.authors = list(dict.fromkeys(authors))

    if metadata.publisher:
        publisher = metadata.publisher.strip()
        if publisher_aliases is not None:
            publisher = publisher_aliases.resolve(publisher)
        metadata.publisher = publisher

    if metadata.language:
        metadata.language = metadata.language.strip().lower()

    if metadata.description:
        metadata.description = strip_html(metadata.description)

    metadata.tags = clean_tags(metadata.tags, tag_aliases)
    logger.debug("Cleaned metadata for %r", metadata.title)
    return metadata
