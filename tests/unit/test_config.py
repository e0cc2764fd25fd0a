# ABOUTME: Unit tests for YAML configuration loading and validation.
# ABOUTME: Checks path resolution, defaults, aliases and error reporting.

from pathlib import Path

import pytest

from bookwarden.config import (
    API_KEY_ENV,
    ConfigError,
    check_config,
    load_config,
    parse_config,
)
from bookwarden.core.naming import DEFAULT_TEMPLATE


def _write_config(directory: Path, text: str) -> Path:
    path = directory / "config.yaml"
    path.write_text(text)
    return path


class TestParseConfig:
    """parse_config should apply defaults and resolve relative paths."""

    def test_defaults(self, tmp_path: Path) -> None:
        config = parse_config({"library_root": "/books"}, tmp_path)
        assert config.library_root == Path("/books")
        assert config.database_file == Path("/books/bookwarden.json")
        assert config.hashes_file == tmp_path / "hashes.json"
        assert config.index_file == tmp_path / "index.db"
        assert config.lock_file == tmp_path / "bookwarden.lock"
        assert config.filename_template == DEFAULT_TEMPLATE
        assert config.online_lookup is False
        assert config.replace_flagged is False

    def test_relative_paths_resolve_against_config_dir(self, tmp_path: Path) -> None:
        config = parse_config(
            {"library_root": "library", "retail_sources": "incoming/retail"}, tmp_path
        )
        assert config.library_root == tmp_path / "library"
        assert config.sources(True) == [tmp_path / "incoming/retail"]
        assert config.sources(False) == []

    def test_aliases(self, tmp_path: Path) -> None:
        config = parse_config(
            {"library_root": "/b", "author_aliases": {"Jane Austen": ["J. Austen"]}},
            tmp_path,
        )
        assert config.author_aliases == {"Jane Austen": ["J. Austen"]}

    def test_missing_root(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="library_root"):
            parse_config({}, tmp_path)

    def test_empty_template(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="filename_template"):
            parse_config({"library_root": "/b", "filename_template": "  "}, tmp_path)

    def test_bad_workers(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError):
            parse_config({"library_root": "/b", "hash_workers": 0}, tmp_path)

    def test_api_key_from_environment(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv(API_KEY_ENV, "secret")
        assert parse_config({"library_root": "/b"}, tmp_path).api_key == "secret"


class TestLoadConfig:
    """load_config should read YAML and reject unusable files."""

    def test_loads_yaml(self, tmp_path: Path) -> None:
        path = _write_config(tmp_path, "library_root: lib\nfilename_template: $t\n")
        config = load_config(path)
        assert config.library_root == tmp_path.resolve() / "lib"
        assert config.filename_template == "$t"

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="No configuration"):
            load_config(tmp_path / "nope.yaml")

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        path = _write_config(tmp_path, "library_root: [unclosed\n")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_config(path)

    def test_not_a_mapping(self, tmp_path: Path) -> None:
        path = _write_config(tmp_path, "- just\n- a list\n")
        with pytest.raises(ConfigError):
            load_config(path)


class TestCheckConfig:
    """check_config should flag settings that would break the library."""

    def test_missing_root_is_fatal(self, tmp_path: Path) -> None:
        config = parse_config({"library_root": "missing"}, tmp_path)
        with pytest.raises(ConfigError):
            check_config(config)

    def test_missing_sources_warn(self, tmp_path: Path) -> None:
        (tmp_path / "library").mkdir()
        config = parse_config(
            {"library_root": "library", "nonretail_sources": ["gone"]}, tmp_path
        )
        warnings = check_config(config)
        assert len(warnings) == 1
        assert "gone" in warnings[0]
