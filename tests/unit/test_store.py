# ABOUTME: Unit tests for JSON catalog persistence and git backups.
# ABOUTME: Verifies change-only saves, round-tripped books, corrupt catalogs and archive commits.

import json
import shutil
import subprocess
from pathlib import Path

import pytest

from bookwarden.core.book import Book, Copy, Progress
from bookwarden.core.collection import Collection
from bookwarden.db.store import BackupError, CatalogError, CatalogStore
from bookwarden.metadata.types import BookMetadata


def _collection() -> Collection:
    book = Book(
        id=1,
        metadata=BookMetadata(
            title="Dune",
            authors=["Frank Herbert"],
            year="1965",
            tags=["science fiction"],
            series="Dune",
            series_index=1.0,
            identifiers={"isbn": "9780441172719"},
        ),
        retail=Copy(Path("Frank Herbert [1965] Dune [retail].epub"), "a" * 64),
        non_retail=Copy(Path("old/Dune.epub"), "b" * 64, needs_replacement=True),
        progress=Progress.READ,
        read_date="2024-03-01",
        rating=4,
        review="Spice.",
    )
    return Collection([book])


class TestLoadSave:
    """CatalogStore should round-trip the collection and skip unchanged saves."""

    def test_missing_file_is_empty(self, tmp_path: Path) -> None:
        assert len(CatalogStore(tmp_path / "none.json").load()) == 0

    def test_empty_file_is_empty(self, tmp_path: Path) -> None:
        path = tmp_path / "catalog.json"
        path.write_text("")
        assert len(CatalogStore(path).load()) == 0

    def test_round_trip(self, tmp_path: Path) -> None:
        store = CatalogStore(tmp_path / "catalog.json")
        original = _collection()
        assert store.save(original) is True

        loaded = store.load()

        book = loaded.find_by_id(1)
        assert book == original.find_by_id(1)
        assert book.non_retail.needs_replacement is True
        assert book.progress is Progress.READ

    def test_file_is_indented_json(self, tmp_path: Path) -> None:
        store = CatalogStore(tmp_path / "catalog.json")
        store.save(_collection())
        text = store.path.read_text()
        assert text.endswith("\n")
        assert '\n    {\n        "id": 1' in text
        assert json.loads(text)[0]["retail"]["hash"] == "a" * 64

    def test_unchanged_save_is_skipped(self, tmp_path: Path) -> None:
        store = CatalogStore(tmp_path / "catalog.json")
        collection = _collection()
        store.save(collection)
        assert store.save(collection) is False

        collection.find_by_id(1).rating = 5
        assert store.save(collection) is True

    def test_no_temp_file_left(self, tmp_path: Path) -> None:
        store = CatalogStore(tmp_path / "catalog.json")
        store.save(_collection())
        assert [p.name for p in tmp_path.iterdir()] == ["catalog.json"]

    def test_invalid_json_raises(self, tmp_path: Path) -> None:
        path = tmp_path / "catalog.json"
        path.write_text("{not json")
        with pytest.raises(CatalogError):
            CatalogStore(path).load()

    def test_invalid_record_raises(self, tmp_path: Path) -> None:
        path = tmp_path / "catalog.json"
        path.write_text('[{"title": "no id"}]')
        with pytest.raises(CatalogError):
            CatalogStore(path).load()


@pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")
class TestBackup:
    """CatalogStore.backup should commit the catalog into a git repository."""

    def _commits(self, archive: Path) -> list[str]:
        out = subprocess.run(
            ["git", "log", "--format=%s"],
            cwd=archive,
            capture_output=True,
            text=True,
            check=True,
        ).stdout
        return out.splitlines()

    def test_creates_repository_and_commit(self, tmp_path: Path) -> None:
        store = CatalogStore(tmp_path / "catalog.json")
        store.save(_collection())
        archive = tmp_path / "archive"

        store.backup(archive)

        assert (archive / ".git").is_dir()
        assert (archive / "catalog.json").read_text() == store.path.read_text()
        assert self._commits(archive) == ["bookwarden automatic backup"]

    def test_one_commit_per_backup(self, tmp_path: Path) -> None:
        store = CatalogStore(tmp_path / "catalog.json")
        collection = _collection()
        store.save(collection)
        archive = tmp_path / "archive"
        store.backup(archive)

        collection.find_by_id(1).rating = 2
        store.save(collection)
        store.backup(archive)

        assert len(self._commits(archive)) == 2

    def test_missing_catalog_raises(self, tmp_path: Path) -> None:
        with pytest.raises(BackupError):
            CatalogStore(tmp_path / "catalog.json").backup(tmp_path / "archive")
