# ABOUTME: End-to-end tests for the `bookwarden import` command.
# ABOUTME: Validates listing, importing from sources and paths, and retail trumping via the CLI.

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from bookwarden.cli import cli
from bookwarden.db.store import CatalogStore


class TestImportCommand:
    """E2E tests for bookwarden import."""

    def test_list_only_does_not_import(self, run_cli, sample_epub: Path, config_dir: Path) -> None:
        """--list shows importable files without touching the library."""
        result = run_cli("import", "nonretail", "--list")

        assert result.exit_code == 0
        assert "1 importable file(s)" in result.output
        assert not (config_dir / "hashes.json").exists()

    def test_import_from_configured_source(
        self, run_cli, sample_epub: Path, library_root: Path
    ) -> None:
        """Without paths, the configured non-retail sources are scanned."""
        result = run_cli("import", "nonretail")

        assert result.exit_code == 0
        assert "1 added" in result.output
        catalog = json.loads((library_root / "bookwarden.json").read_text())
        assert catalog[0]["id"] == 1
        assert catalog[0]["metadata"]["title"] == "The Name of the Rose"

    def test_reimport_is_skipped(self, run_cli, sample_epub: Path) -> None:
        run_cli("import", "nonretail")
        result = run_cli("import", "nonretail")

        assert result.exit_code == 0
        assert "Nothing to import" in result.output

    def test_retail_trumps_non_retail(
        self, run_cli, sample_epub: Path, make_epub, tmp_path: Path, library_root: Path
    ) -> None:
        run_cli("import", "nonretail")
        make_epub(
            "rose.epub",
            directory=tmp_path / "retail",
            isbn="978-0-15-144647-6",
            year="1980",
            body="Retail text.",
        )

        result = run_cli("import", "retail")

        assert result.exit_code == 0
        files = sorted(p.name for p in library_root.glob("*.epub"))
        assert files == ["Umberto Eco [1980] The Name of the Rose [retail].epub"]

    def test_explicit_path(self, run_cli, make_epub, tmp_path: Path) -> None:
        epub = make_epub("emma.epub", directory=tmp_path / "elsewhere", title="Emma")

        result = run_cli("import", "nonretail", str(epub))

        assert result.exit_code == 0
        assert "1 added" in result.output

    def test_corrupt_file_reported(self, run_cli, corrupt_epub: Path) -> None:
        result = run_cli("import", "nonretail")

        assert result.exit_code == 0
        assert "could not be imported" in result.output
        assert "corrupt.epub" in result.output

    def test_no_sources_configured(self, tmp_path: Path, library_root: Path) -> None:
        config_file = tmp_path / "bare.yaml"
        config_file.write_text(f"library_root: {library_root}\n")

        result = CliRunner().invoke(cli, ["--config", str(config_file), "import", "retail"])

        assert result.exit_code == 1
        assert "No retail sources" in result.output

    def test_missing_config(self, tmp_path: Path) -> None:
        result = CliRunner().invoke(
            cli, ["--config", str(tmp_path / "none.yaml"), "import", "retail"]
        )

        assert result.exit_code == 1
        assert "No configuration" in result.output

    def test_catalog_write_failure_is_reported(
        self,
        run_cli,
        sample_epub: Path,
        config_dir: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """A failing catalog write ends in a red message and exit code 1."""

        def failing_save(self, collection) -> bool:
            raise OSError("No space left on device")

        monkeypatch.setattr(CatalogStore, "save", failing_save)

        result = run_cli("import", "nonretail")

        assert result.exit_code == 1
        assert "Could not update the library" in result.output
        assert "No space left on device" in result.output
        assert not (config_dir / "bookwarden.lock").exists()
        assert not (config_dir / "hashes.json").exists()
