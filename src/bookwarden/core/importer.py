# ABOUTME: Import orchestration: turns scan candidates into catalog changes one file at a time.
# ABOUTME: Each successful import saves the catalog (syncing the index) before recording its hash.

import logging
from dataclasses import dataclass, field
from pathlib import Path

from bookwarden.core.naming import FilenameTemplateError
from bookwarden.core.resolver import Resolution, resolve_copy
from bookwarden.core.scanner import (
    EPUB_EXTENSION,
    EpubCandidate,
    ScanResult,
    classify,
    scan_for_candidates,
)
from bookwarden.core.session import LibrarySession
from bookwarden.db.hashing import compute_file_hash
from bookwarden.formats.epub import EpubReadError, read_epub_metadata
from bookwarden.metadata.cleaning import clean_metadata
from bookwarden.metadata.googlebooks import search_online
from bookwarden.metadata.http import HttpClient, RemoteLookupError
from bookwarden.metadata.merge import merge_metadata
from bookwarden.metadata.types import BookMetadata

logger = logging.getLogger(__name__)


@dataclass
class ImportResult:
    """Summary of an import run."""

    added: int = 0
    skipped: int = 0
    errors: int = 0
    error_details: list[tuple[Path, str]] = field(default_factory=list)
    decisions: list[tuple[Path, Resolution]] = field(default_factory=list)

    def count(self, resolution: Resolution) -> int:
        return sum(1 for _, r in self.decisions if r is resolution)

    def record_error(self, path: Path, message: str) -> None:
        logger.warning("Could not import %s: %s", path, message)
        self.errors += 1
        self.error_details.append((path, message))


def collect_candidates(session: LibrarySession, paths: list[Path]) -> ScanResult:
    """Scan directories and hash individual files into one candidate list.

    Raises:
        DirectoryNotFoundError: If a path does not exist.
    """
    combined = ScanResult(root=paths[0] if len(paths) == 1 else Path("."))
    for path in paths:
        if path.is_file():
            if path.suffix.lower() != EPUB_EXTENSION:
                combined.errors.append((path, "not an epub"))
                continue
            try:
                file_hash = compute_file_hash(path)
            except OSError as exc:
                combined.errors.append((path, str(exc)))
                continue
            combined.candidates.append(
                classify(path, file_hash, session.ledger, session.collection)
            )
            continue
        scan = scan_for_candidates(
            path,
            session.ledger,
            session.collection,
            max_workers=session.config.hash_workers,
        )
        combined.candidates.extend(scan.candidates)
        combined.errors.extend(scan.errors)
    return combined


def prepare_metadata(
    session: LibrarySession,
    path: Path,
    *,
    online: bool = False,
    http_client: HttpClient | None = None,
) -> BookMetadata:
    """Read, optionally enrich online, and clean the metadata of one file.

    A failed online lookup is logged and the local metadata is used.

    Raises:
        EpubReadError: If the file cannot be parsed.
    """
    metadata = read_epub_metadata(path)
    if online:
        try:
            remote = search_online(metadata, session.config.api_key, http_client)
        except RemoteLookupError as exc:
            logger.warning("Online lookup failed for %s: %s", path.name, exc)
        else:
            metadata = merge_metadata(metadata, remote, session.interaction)
    return clean_metadata(
        metadata,
        author_aliases=session.author_aliases,
        tag_aliases=session.tag_aliases,
        publisher_aliases=session.publisher_aliases,
    )


def import_candidates(
    session: LibrarySession,
    candidates: list[EpubCandidate],
    *,
    is_retail: bool,
    online: bool | None = None,
    http_client: HttpClient | None = None,
) -> ImportResult:
    """Offer each importable candidate to the collection, in order.

    Candidates that were imported before but are missing from the
    collection are only re-imported after confirmation. Processing is
    sequential: a candidate may match a work created by an earlier one.

    Args:
        session: Open library session.
        candidates: Scan output; non-importable candidates are skipped.
        is_retail: Which slot the files are offered for.
        online: Enrich metadata from Google Books. Defaults to the config.
        http_client: Client for online lookups, mainly for tests.

    Returns:
        ImportResult with counts and the decision taken for every file.
    """
    config = session.config
    use_online = config.online_lookup if online is None else online
    result = ImportResult()

    for index, candidate in enumerate(candidates, start=1):
        logger.debug("[%d/%d] %s", index, len(candidates), candidate.path)
        if not candidate.is_importable:
            result.skipped += 1
            continue

        if candidate.is_missing:
            question = (
                f"{candidate.path.name} was imported before but is no longer "
                "in the library. Import it again?"
            )
            if not session.interaction.accept(question, default=config.import_missing):
                result.skipped += 1
                result.decisions.append((candidate.path, Resolution.DECLINED))
                continue

        if session.collection.find_by_hash(candidate.hash) is not None:
            # Already cataloged, only the ledger entry was lost.
            session.register_hash(candidate.hash)
            result.skipped += 1
            result.decisions.append((candidate.path, Resolution.REJECT_DUPLICATE))
            continue

        try:
            metadata = prepare_metadata(
                session, candidate.path, online=use_online, http_client=http_client
            )
        except EpubReadError as exc:
            result.record_error(candidate.path, str(exc))
            continue

        try:
            outcome = resolve_copy(
                session.collection,
                session.collection.find_by_metadata(metadata),
                candidate.path,
                candidate.hash,
                is_retail,
                metadata,
                library_root=config.library_root,
                template=config.filename_template,
                interaction=session.interaction,
                replace_default=config.replace_flagged,
            )
        except (OSError, FilenameTemplateError) as exc:
            result.record_error(candidate.path, str(exc))
            continue

        result.decisions.append((candidate.path, outcome.resolution))
        if not outcome.imported:
            result.skipped += 1
            continue

        session.save()
        session.register_hash(candidate.hash)
        result.added += 1

    logger.info(
        "Import finished: %d added, %d skipped, %d errors",
        result.added,
        result.skipped,
        result.errors,
    )
    return result
