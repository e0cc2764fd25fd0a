# ABOUTME: Fixtures for end-to-end CLI tests.
# ABOUTME: Writes a YAML config for a throwaway library and wraps CliRunner invocations.

from collections.abc import Callable
from pathlib import Path

import pytest
import yaml
from click.testing import CliRunner, Result

from bookwarden.cli import cli

RunCli = Callable[..., Result]


@pytest.fixture
def config_file(tmp_path: Path, library_root: Path, config_dir: Path) -> Path:
    path = config_dir / "config.yaml"
    settings = {
        "library_root": str(library_root),
        "nonretail_sources": [str(tmp_path / "incoming")],
        "retail_sources": [str(tmp_path / "retail")],
        "hash_workers": 2,
    }
    path.write_text(yaml.safe_dump(settings))
    return path


@pytest.fixture
def run_cli(config_file: Path) -> RunCli:
    """Invoke the CLI against the test library."""
    runner = CliRunner()

    def run(*args: str) -> Result:
        return runner.invoke(cli, ["--config", str(config_file), *args])

    return run
