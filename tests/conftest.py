# ABOUTME: Shared pytest fixtures for bookwarden tests.
# ABOUTME: Builds real EPUB files with ebooklib and a throwaway library with its configuration.

from collections.abc import Callable, Iterator
from pathlib import Path

import pytest
from ebooklib import epub

from bookwarden.config import LibraryConfig, parse_config
from bookwarden.core.session import LibrarySession

EpubFactory = Callable[..., Path]


def build_epub(
    path: Path,
    *,
    title: str = "The Name of the Rose",
    authors: tuple[str, ...] = ("Umberto Eco",),
    language: str = "en",
    isbn: str | None = None,
    year: str | None = None,
    subjects: tuple[str, ...] = (),
    publisher: str | None = None,
    description: str | None = None,
    body: str = "Content.",
) -> Path:
    """Write a minimal valid EPUB. Different ``body`` values give different hashes."""
    book = epub.EpubBook()
    book.set_identifier(f"id-{title}-{body}")
    book.set_title(title)
    book.set_language(language)
    for author in authors:
        book.add_author(author)
    if isbn:
        book.add_metadata(
            "DC", "identifier", isbn, {"{http://www.idpf.org/2007/opf}scheme": "ISBN"}
        )
    if year:
        book.add_metadata("DC", "date", year)
    for subject in subjects:
        book.add_metadata("DC", "subject", subject)
    if publisher:
        book.add_metadata("DC", "publisher", publisher)
    if description:
        book.add_metadata("DC", "description", description)

    chapter = epub.EpubHtml(title="Chapter 1", file_name="chap01.xhtml", lang=language)
    chapter.content = f"<html><body><h1>Chapter 1</h1><p>{body}</p></body></html>".encode()
    book.add_item(chapter)

    book.toc = [epub.Link("chap01.xhtml", "Chapter 1", "chap01")]
    book.add_item(epub.EpubNcx())
    book.add_item(epub.EpubNav())
    book.spine = ["nav", chapter]

    path.parent.mkdir(parents=True, exist_ok=True)
    epub.write_epub(str(path), book)
    return path


@pytest.fixture
def make_epub(tmp_path: Path) -> EpubFactory:
    """Factory writing EPUBs into tmp_path/incoming by default."""

    def factory(name: str, directory: Path | None = None, **kwargs) -> Path:
        return build_epub((directory or tmp_path / "incoming") / name, **kwargs)

    return factory


@pytest.fixture
def sample_epub(make_epub: EpubFactory) -> Path:
    """A valid EPUB with known metadata."""
    return make_epub(
        "name_of_the_rose.epub",
        isbn="978-0-15-144647-6",
        year="1980-01-01",
        subjects=("Fiction", "Mystery"),
        publisher="Harcourt",
        description="<p>A mystery set in a <b>medieval</b> monastery.</p>",
    )


@pytest.fixture
def corrupt_epub(tmp_path: Path) -> Path:
    """A file with an .epub extension that is not a valid EPUB."""
    filepath = tmp_path / "incoming" / "corrupt.epub"
    filepath.parent.mkdir(parents=True, exist_ok=True)
    filepath.write_text("this is not a valid epub file")
    return filepath


@pytest.fixture
def library_root(tmp_path: Path) -> Path:
    root = tmp_path / "library"
    root.mkdir()
    return root


@pytest.fixture
def config_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "config"
    directory.mkdir()
    return directory


@pytest.fixture
def config(library_root: Path, config_dir: Path) -> LibraryConfig:
    return parse_config(
        {"library_root": str(library_root), "hash_workers": 2},
        config_dir,
    )


@pytest.fixture
def session(config: LibraryConfig) -> Iterator[LibrarySession]:
    with LibrarySession(config) as opened:
        yield opened
