# ABOUTME: Unit tests for the FTS5 search index derived from the collection.
# ABOUTME: Covers field queries, diff-driven updates, rebuild after corruption and gap checks.

from pathlib import Path

import pytest

from bookwarden.core.book import Book, Copy, Progress
from bookwarden.core.collection import Collection
from bookwarden.db.index import SearchIndex, SearchIndexError, rewrite_query
from bookwarden.metadata.types import BookMetadata


def _book(book_id: int, title: str, author: str, **meta) -> Book:
    return Book(
        id=book_id,
        metadata=BookMetadata(title=title, authors=[author], **meta),
        non_retail=Copy(Path(f"{title}.epub"), f"{book_id:064d}"),
    )


@pytest.fixture
def collection() -> Collection:
    return Collection(
        [
            _book(1, "Dune", "Frank Herbert", tags=["science fiction"], year="1965"),
            _book(2, "Emma", "Jane Austen", tags=["romance"], language="en"),
            _book(3, "Ulysses", "James Joyce", description="Dublin, one day."),
        ]
    )


@pytest.fixture
def index(tmp_path: Path, collection: Collection):
    with SearchIndex(tmp_path / "state" / "index.db", tmp_path / "library") as idx:
        idx.rebuild(collection)
        yield idx


class TestRewriteQuery:
    """Search text should be rewritten into a safe full-text query."""

    def test_aliases_expand(self) -> None:
        assert rewrite_query("author:herbert tag:romance") == "authors:herbert tags:romance"

    def test_unknown_prefix_untouched(self) -> None:
        assert rewrite_query("title:dune") == "title:dune"


class TestQuery:
    """SearchIndex queries should return matching book ids."""

    def test_free_text(self, index: SearchIndex, tmp_path: Path) -> None:
        assert index.query("dublin") == [str(tmp_path / "library" / "Ulysses.epub")]

    def test_field_query(self, index: SearchIndex) -> None:
        keys = index.query("author:austen")
        assert len(keys) == 1 and keys[0].endswith("Emma.epub")

    def test_no_match(self, index: SearchIndex) -> None:
        assert index.query("zanzibar") == []

    def test_malformed_query_raises(self, index: SearchIndex) -> None:
        with pytest.raises(SearchIndexError):
            index.query('"unbalanced')

    def test_count_and_keys(self, index: SearchIndex, collection: Collection) -> None:
        assert index.count() == 3
        assert index.keys() == {index.key_for(b) for b in collection}


class TestUpdate:
    """SearchIndex.update should apply a collection diff incrementally."""

    def test_applies_diff(self, index: SearchIndex, collection: Collection) -> None:
        before = collection.snapshot()
        collection.remove(2)
        collection.add(_book(4, "Middlemarch", "George Eliot"))
        dune = collection.find_by_id(1)
        dune.progress = Progress.READING

        index.update(collection.diff(before))

        assert index.count() == 3
        assert index.query("austen") == []
        assert len(index.query("eliot")) == 1
        assert len(index.query("progress:reading")) == 1

    def test_renamed_book_drops_old_key(
        self, index: SearchIndex, collection: Collection
    ) -> None:
        before = collection.snapshot()
        dune = collection.find_by_id(1)
        dune.non_retail.path = Path("Frank Herbert [1965] Dune.epub")

        index.update(collection.diff(before))

        assert index.count() == 3
        assert index.query("herbert") == [index.key_for(dune)]

    def test_book_without_copies_not_indexed(self, tmp_path: Path) -> None:
        bare = Book(id=9, metadata=BookMetadata(title="Ghost"))
        with SearchIndex(tmp_path / "index.db", tmp_path) as idx:
            assert idx.rebuild(Collection([bare])) == 0


class TestRecovery:
    """A broken search index should be detected and rebuilt."""

    def test_rebuild_replaces_corrupt_file(self, tmp_path: Path, collection: Collection) -> None:
        path = tmp_path / "index.db"
        path.write_bytes(b"this is not a database" * 100)
        idx = SearchIndex(path, tmp_path / "library")
        with pytest.raises(SearchIndexError):
            idx.count()

        assert idx.rebuild(collection) == 3
        assert idx.count() == 3
        idx.close()

    def test_check_adds_missing(self, index: SearchIndex, collection: Collection) -> None:
        index.delete(index.key_for(collection.find_by_id(3)))
        assert index.count() == 2

        assert index.check(collection) == 1
        assert index.count() == 3
        assert index.check(collection) == 0
