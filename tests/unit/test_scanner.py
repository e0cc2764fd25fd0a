# ABOUTME: Unit tests for scanning directories for EPUB candidates.
# ABOUTME: Verifies discovery order, parallel hashing and new/imported/missing classification.

from pathlib import Path

import pytest

from bookwarden.core.book import Book, Copy
from bookwarden.core.collection import Collection
from bookwarden.core.scanner import (
    DirectoryNotFoundError,
    list_epubs,
    scan_for_candidates,
)
from bookwarden.db.hashing import compute_file_hash
from bookwarden.db.ledger import HashLedger
from bookwarden.metadata.types import BookMetadata


@pytest.fixture
def source(tmp_path: Path) -> Path:
    root = tmp_path / "source"
    (root / "nested").mkdir(parents=True)
    (root / "b.epub").write_bytes(b"b")
    (root / "a.EPUB").write_bytes(b"a")
    (root / "nested" / "c.epub").write_bytes(b"c")
    (root / "notes.txt").write_text("not a book")
    return root


@pytest.fixture
def ledger(tmp_path: Path) -> HashLedger:
    ledger = HashLedger(tmp_path / "hashes.json")
    ledger.load()
    return ledger


class TestListEpubs:
    """list_epubs should find epub files recursively."""

    def test_finds_epubs_recursively(self, source: Path) -> None:
        names = [p.relative_to(source).as_posix() for p in list_epubs(source)]
        assert names == ["a.EPUB", "b.epub", "nested/c.epub"]

    def test_missing_directory(self, tmp_path: Path) -> None:
        with pytest.raises(DirectoryNotFoundError):
            list_epubs(tmp_path / "nope")


class TestScanForCandidates:
    """scan_for_candidates should classify files against the ledger and collection."""

    def test_all_new(self, source: Path, ledger: HashLedger) -> None:
        result = scan_for_candidates(source, ledger, Collection(), max_workers=2)
        assert len(result.candidates) == 3
        assert len(result.new()) == 3
        assert result.candidates[1].hash == compute_file_hash(source / "b.epub")

    def test_classification(self, source: Path, ledger: HashLedger) -> None:
        hash_b = compute_file_hash(source / "b.epub")
        hash_c = compute_file_hash(source / "nested" / "c.epub")
        ledger.add(hash_b)
        ledger.add(hash_c)
        collection = Collection(
            [Book(id=1, metadata=BookMetadata(title="B"), non_retail=Copy(Path("b.epub"), hash_b))]
        )

        result = scan_for_candidates(source, ledger, collection)

        by_name = {c.path.name: c for c in result.candidates}
        assert by_name["a.EPUB"].is_new
        assert not by_name["b.epub"].is_importable
        assert by_name["c.epub"].is_missing
        assert [c.path.name for c in result.importable()] == ["a.EPUB", "c.epub"]
        assert [c.path.name for c in result.missing()] == ["c.epub"]

    def test_empty_directory(self, tmp_path: Path, ledger: HashLedger) -> None:
        empty = tmp_path / "empty"
        empty.mkdir()
        result = scan_for_candidates(empty, ledger, Collection())
        assert result.candidates == []

    def test_rescan_is_stable(self, source: Path, ledger: HashLedger) -> None:
        """An unchanged directory classifies identically on every scan."""
        ledger.add(compute_file_hash(source / "b.epub"))
        first = scan_for_candidates(source, ledger, Collection(), max_workers=3)
        second = scan_for_candidates(source, ledger, Collection(), max_workers=1)
        assert first.candidates == second.candidates
        assert [c.path.name for c in second.missing()] == ["b.epub"]
