# ABOUTME: Remote bibliographic lookup against the Google Books volumes API.
# ABOUTME: Searches by ISBN, falling back to author and title, and maps the best hit to BookMetadata.

import logging
from typing import Any

from bookwarden.metadata.cleaning import strip_html
from bookwarden.metadata.http import HttpClient, LookupHttpClient, RemoteLookupError
from bookwarden.metadata.isbn import InvalidISBNError, clean_isbn
from bookwarden.metadata.types import BookMetadata

logger = logging.getLogger(__name__)

API_URL = "https://www.googleapis.com/books/v1/volumes"


def build_query(metadata: BookMetadata) -> str:
    """Google Books ``q`` parameter for a work.

    Raises:
        RemoteLookupError: If there is nothing to search for.
    """
    if metadata.isbn:
        return f"isbn:{metadata.isbn}"
    parts = []
    if metadata.authors:
        parts.append(f"inauthor:{metadata.authors[0]}")
    if metadata.title:
        parts.append(f"intitle:{metadata.title}")
    if not parts:
        raise RemoteLookupError("Need at least an ISBN, author or title to search")
    return " ".join(parts)


def _extract_year(published: str | None) -> str | None:
    if not published:
        return None
    year = published.split("-")[0]
    return year if len(year) == 4 and year.isdigit() else None


def _extract_isbn(identifiers: list[dict[str, str]]) -> str | None:
    """Prefer ISBN_13 over ISBN_10; both are normalized to 13 digits."""
    by_type = {entry.get("type"): entry.get("identifier", "") for entry in identifiers}
    for kind in ("ISBN_13", "ISBN_10"):
        if by_type.get(kind):
            try:
                return clean_isbn(by_type[kind])
            except InvalidISBNError:
                continue
    return None


def parse_volume(volume_info: dict[str, Any]) -> BookMetadata:
    """Map a ``volumeInfo`` object onto BookMetadata."""
    title = volume_info.get("title") or ""
    if volume_info.get("subtitle"):
        title = f"{title}: {volume_info['subtitle']}"
    description = volume_info.get("description")
    return BookMetadata(
        title=title,
        authors=list(volume_info.get("authors") or []),
        year=_extract_year(volume_info.get("publishedDate")),
        language=volume_info.get("language"),
        publisher=volume_info.get("publisher"),
        isbn=_extract_isbn(volume_info.get("industryIdentifiers") or []),
        description=strip_html(description) if description else None,
        tags=[c.lower() for c in volume_info.get("categories") or []],
    )


def search_online(
    metadata: BookMetadata,
    api_key: str | None,
    http_client: HttpClient | None = None,
) -> BookMetadata:
    """Look up a work on Google Books.

    Args:
        metadata: Locally read metadata used to build the query.
        api_key: Google Books API key; anonymous requests are heavily throttled.
        http_client: Client to use; a LookupHttpClient is created if omitted.

    Returns:
        Metadata of the best matching volume.

    Raises:
        RemoteLookupError: On request failure or when nothing matched.
    """
    params = {"q": build_query(metadata), "maxResults": "5", "printType": "books"}
    if api_key:
        params["key"] = api_key

    if http_client is not None:
        data = http_client.get(API_URL, params=params)
    else:
        with LookupHttpClient() as client:
            data = client.get(API_URL, params=params)

    items = data.get("items") or []
    if not items:
        raise RemoteLookupError(f"No results for {params['q']!r}")

    remote = parse_volume(items[0].get("volumeInfo") or {})
    logger.debug("Google Books matched %r for %r", remote.title, metadata.title)
    return remote
