# ABOUTME: Finds EPUB files under a directory, hashes them in parallel, and classifies them.
# ABOUTME: Each candidate is new, previously imported, or previously imported but now missing.

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path

from bookwarden.core.collection import BookCollection
from bookwarden.db.hashing import compute_file_hash
from bookwarden.db.ledger import HashLedger

logger = logging.getLogger(__name__)

EPUB_EXTENSION = ".epub"
DEFAULT_WORKERS = 8


class DirectoryNotFoundError(FileNotFoundError):
    """Raised when the directory to scan does not exist."""


@dataclass(frozen=True)
class EpubCandidate:
    """A file found by a scan. Never persisted.

    ``imported`` means the hash is in the ledger; ``imported_but_missing``
    means it was imported once but no book in the collection holds it now.
    """

    path: Path
    hash: str
    imported: bool = False
    imported_but_missing: bool = False

    @property
    def is_new(self) -> bool:
        return not self.imported

    @property
    def is_missing(self) -> bool:
        return self.imported and self.imported_but_missing

    @property
    def is_importable(self) -> bool:
        return self.is_new or self.is_missing


@dataclass
class ScanResult:
    """All candidates from one scan, in discovery order."""

    root: Path
    candidates: list[EpubCandidate] = field(default_factory=list)
    errors: list[tuple[Path, str]] = field(default_factory=list)

    def new(self) -> list[EpubCandidate]:
        return [c for c in self.candidates if c.is_new]

    def missing(self) -> list[EpubCandidate]:
        return [c for c in self.candidates if c.is_missing]

    def importable(self) -> list[EpubCandidate]:
        return [c for c in self.candidates if c.is_importable]


def list_epubs(root: Path) -> list[Path]:
    """All EPUB files below ``root``, sorted for a stable discovery order.

    Raises:
        DirectoryNotFoundError: If ``root`` is not an existing directory.
    """
    if not root.is_dir():
        raise DirectoryNotFoundError(f"Directory {root} does not exist")
    return sorted(
        path
        for path in root.rglob("*")
        if path.is_file() and path.suffix.lower() == EPUB_EXTENSION
    )


def classify(
    path: Path, file_hash: str, ledger: HashLedger, collection: BookCollection
) -> EpubCandidate:
    imported = ledger.is_in(file_hash)
    missing = imported and collection.find_by_hash(file_hash) is None
    return EpubCandidate(
        path=path, hash=file_hash, imported=imported, imported_but_missing=missing
    )


def scan_for_candidates(
    root: Path,
    ledger: HashLedger,
    collection: BookCollection,
    *,
    max_workers: int = DEFAULT_WORKERS,
) -> ScanResult:
    """Hash every EPUB under ``root`` with a fixed pool of workers and classify it.

    Hashing runs in parallel; classification only reads the ledger and the
    collection, which must not be mutated while the scan runs. Files that
    cannot be read are logged and reported in ``ScanResult.errors``.

    Raises:
        DirectoryNotFoundError: If ``root`` does not exist.
    """
    paths = list_epubs(root)
    result = ScanResult(root=root)

    def hash_one(path: Path) -> tuple[Path, str | None, str | None]:
        try:
            return path, compute_file_hash(path), None
        except OSError as exc:
            return path, None, str(exc)

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        for path, file_hash, error in executor.map(hash_one, paths):
            if file_hash is None:
                logger.warning("Could not hash %s: %s", path, error)
                result.errors.append((path, error or "unreadable"))
                continue
            result.candidates.append(classify(path, file_hash, ledger, collection))

    logger.info(
        "Scanned %s: %d epubs, %d new, %d missing",
        root,
        len(result.candidates),
        len(result.new()),
        len(result.missing()),
    )
    return result
