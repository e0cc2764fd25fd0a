# ABOUTME: YAML configuration for a bookwarden library, loaded with PyYAML.
# ABOUTME: Resolves the library root, state file locations, import sources and aliases.

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from bookwarden.core.naming import DEFAULT_TEMPLATE

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_DIR = Path.home() / ".bookwarden"
DEFAULT_CONFIG_PATH = DEFAULT_CONFIG_DIR / "config.yaml"
API_KEY_ENV = "BOOKWARDEN_API_KEY"

DEFAULT_DATABASE_FILENAME = "bookwarden.json"
DEFAULT_HASH_WORKERS = 8


class ConfigError(Exception):
    """Raised when the configuration file is missing or invalid."""


@dataclass
class LibraryConfig:
    """Resolved configuration. All paths are absolute."""

    library_root: Path
    config_dir: Path
    database_file: Path
    hashes_file: Path
    index_file: Path
    lock_file: Path
    archive_dir: Path
    retail_sources: list[Path] = field(default_factory=list)
    nonretail_sources: list[Path] = field(default_factory=list)
    filename_template: str = DEFAULT_TEMPLATE
    author_aliases: dict[str, list[str]] = field(default_factory=dict)
    tag_aliases: dict[str, list[str]] = field(default_factory=dict)
    publisher_aliases: dict[str, list[str]] = field(default_factory=dict)
    api_key: str | None = None
    online_lookup: bool = False
    hash_workers: int = DEFAULT_HASH_WORKERS
    import_missing: bool = False
    replace_flagged: bool = False

    def sources(self, retail: bool) -> list[Path]:
        return self.retail_sources if retail else self.nonretail_sources


def _path(value: Any, base: Path) -> Path:
    path = Path(str(value)).expanduser()
    return path if path.is_absolute() else base / path


def _path_list(raw: dict[str, Any], key: str, base: Path) -> list[Path]:
    value = raw.get(key) or []
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list):
        raise ConfigError(f"'{key}' must be a list of directories")
    return [_path(v, base) for v in value]


def _aliases(raw: dict[str, Any], key: str) -> dict[str, list[str]]:
    value = raw.get(key) or {}
    if not isinstance(value, dict):
        raise ConfigError(f"'{key}' must map a main name to a list of aliases")
    return {str(main): [str(a) for a in (aliases or [])] for main, aliases in value.items()}


def parse_config(raw: dict[str, Any], config_dir: Path) -> LibraryConfig:
    """Build a LibraryConfig from the parsed YAML mapping.

    Raises:
        ConfigError: If a required key is missing or a value has the wrong shape.
    """
    if not raw.get("library_root"):
        raise ConfigError("'library_root' is required")
    library_root = _path(raw["library_root"], config_dir)

    template = raw.get("filename_template", DEFAULT_TEMPLATE)
    if not isinstance(template, str) or not template.strip():
        raise ConfigError("'filename_template' cannot be empty")

    try:
        hash_workers = int(raw.get("hash_workers", DEFAULT_HASH_WORKERS))
    except (TypeError, ValueError) as exc:
        raise ConfigError("'hash_workers' must be a number") from exc
    if hash_workers < 1:
        raise ConfigError("'hash_workers' must be at least 1")

    return LibraryConfig(
        library_root=library_root,
        config_dir=config_dir,
        database_file=_path(
            raw.get("database_filename", DEFAULT_DATABASE_FILENAME), library_root
        ),
        hashes_file=_path(raw.get("hashes_file", "hashes.json"), config_dir),
        index_file=_path(raw.get("index_file", "index.db"), config_dir),
        lock_file=_path(raw.get("lock_file", "bookwarden.lock"), config_dir),
        archive_dir=_path(raw.get("archive_dir", "archive"), config_dir),
        retail_sources=_path_list(raw, "retail_sources", config_dir),
        nonretail_sources=_path_list(raw, "nonretail_sources", config_dir),
        filename_template=template,
        author_aliases=_aliases(raw, "author_aliases"),
        tag_aliases=_aliases(raw, "tag_aliases"),
        publisher_aliases=_aliases(raw, "publisher_aliases"),
        api_key=raw.get("api_key") or os.environ.get(API_KEY_ENV) or None,
        online_lookup=bool(raw.get("online_lookup", False)),
        hash_workers=hash_workers,
        import_missing=bool(raw.get("import_missing", False)),
        replace_flagged=bool(raw.get("replace_flagged", False)),
    )


def load_config(path: Path | None = None) -> LibraryConfig:
    """Read and validate the YAML configuration file.

    Args:
        path: Config file location. Defaults to ~/.bookwarden/config.yaml.

    Raises:
        ConfigError: If the file is missing, unparsable or invalid.
    """
    config_path = (path or DEFAULT_CONFIG_PATH).expanduser()
    if not config_path.exists():
        raise ConfigError(
            f"No configuration at {config_path}. Create it with at least "
            "'library_root: /path/to/library'."
        )

    try:
        raw = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {config_path}: {exc}") from exc
    if not isinstance(raw, dict):
        raise ConfigError(f"{config_path} must contain a mapping of settings")

    config = parse_config(raw, config_path.parent.resolve())
    logger.debug("Loaded configuration from %s", config_path)
    return config


def check_config(config: LibraryConfig) -> list[str]:
    """Validate paths on disk.

    Returns:
        Warnings about missing import sources.

    Raises:
        ConfigError: If the library root does not exist.
    """
    if not config.library_root.is_dir():
        raise ConfigError(f"Library root {config.library_root} does not exist")

    warnings = []
    for source in [*config.retail_sources, *config.nonretail_sources]:
        if not source.is_dir():
            warnings.append(f"Import source {source} does not exist")
    for warning in warnings:
        logger.warning(warning)
    return warnings
