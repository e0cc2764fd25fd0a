# ABOUTME: Whole-document JSON persistence for the collection, plus git-backed backups.
# ABOUTME: Saving is a no-op unless the serialized catalog differs from the file on disk.

import json
import logging
import os
import shutil
import subprocess
from pathlib import Path

from bookwarden.core.collection import Collection
from bookwarden.db.mapping import book_to_dict, dict_to_book

logger = logging.getLogger(__name__)

_BACKUP_MESSAGE = "bookwarden automatic backup"


class CatalogError(Exception):
    """Raised when the catalog file cannot be read or parsed."""


class BackupError(Exception):
    """Raised when the catalog cannot be archived."""


def serialize(collection: Collection) -> str:
    """Render a collection exactly as it is written to disk."""
    records = [book_to_dict(book) for book in collection]
    return json.dumps(records, indent=4, ensure_ascii=False) + "\n"


class CatalogStore:
    """Loads and saves the catalog file."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def load(self) -> Collection:
        """Read the catalog. A missing or empty file is an empty collection.

        Raises:
            CatalogError: If the file is not a valid catalog.
        """
        if not self.path.exists():
            logger.debug("No catalog at %s, starting empty", self.path)
            return Collection()

        text = self.path.read_text(encoding="utf-8")
        if not text.strip():
            return Collection()
        try:
            records = json.loads(text)
            return Collection(dict_to_book(record) for record in records)
        except (json.JSONDecodeError, KeyError, TypeError, ValueError) as exc:
            raise CatalogError(f"Invalid catalog {self.path}: {exc}") from exc

    def save(self, collection: Collection) -> bool:
        """Write the catalog if its serialization changed.

        Returns:
            True if the file was written.
        """
        payload = serialize(collection)
        if self.path.exists() and self.path.read_text(encoding="utf-8") == payload:
            return False

        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        tmp_path.write_text(payload, encoding="utf-8")
        os.replace(tmp_path, self.path)
        logger.debug("Saved %d books to %s", len(collection), self.path)
        return True

    def backup(self, archive_dir: Path) -> None:
        """Snapshot the catalog into a git repository, one commit per call.

        Raises:
            BackupError: If the catalog is missing or git fails.
        """
        if not self.path.exists():
            raise BackupError(f"Nothing to back up, {self.path} does not exist")

        archive_dir.mkdir(parents=True, exist_ok=True)
        shutil.copy2(self.path, archive_dir / self.path.name)

        if not (archive_dir / ".git").exists():
            _git(archive_dir, "init")
        _git(archive_dir, "add", self.path.name)
        _git(
            archive_dir,
            "-c", "user.name=bookwarden",
            "-c", "user.email=bookwarden@localhost",
            "commit", "--allow-empty", "-m", _BACKUP_MESSAGE,
        )
        logger.info("Backed up %s to %s", self.path.name, archive_dir)


def _git(cwd: Path, *args: str) -> str:
    try:
        completed = subprocess.run(
            ["git", *args],
            cwd=cwd,
            capture_output=True,
            text=True,
            check=True,
        )
    except FileNotFoundError as exc:
        raise BackupError("git is not installed") from exc
    except subprocess.CalledProcessError as exc:
        raise BackupError(f"git failed in {cwd}: {exc.stderr.strip()}") from exc
    return completed.stdout
