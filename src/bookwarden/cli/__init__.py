# ABOUTME: CLI package for bookwarden, built on Click.
# ABOUTME: Defines the root command group, logging setup, and registers subcommands.

import logging
import signal
from pathlib import Path

import click
from rich.logging import RichHandler

from bookwarden.cli.commands import (
    collection_cmd,
    config_cmd,
    edit_cmd,
    import_cmd,
    info_cmd,
    ls_cmd,
    search_cmd,
    stats_cmd,
)
from bookwarden.cli.options import config_option

_LOG_LEVELS = {0: logging.WARNING, 1: logging.INFO}


def _exit_on_sigterm(signum: int, frame: object) -> None:
    # SystemExit unwinds the stack, so open sessions release the library lock.
    raise SystemExit(128 + signum)


def _configure_logging(verbosity: int) -> None:
    logging.basicConfig(
        level=_LOG_LEVELS.get(verbosity, logging.DEBUG),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
        force=True,
    )


@click.group()
@click.version_option(package_name="bookwarden")
@config_option
@click.option("-v", "--verbose", count=True, help="Log more (-vv for debug output).")
@click.pass_context
def cli(ctx: click.Context, config_path: Path | None, verbose: int) -> None:
    """bookwarden - catalog retail and non-retail epubs in one tidy library."""
    ctx.ensure_object(dict)["config_path"] = config_path
    _configure_logging(verbose)
    signal.signal(signal.SIGTERM, _exit_on_sigterm)


cli.add_command(import_cmd.import_command)
cli.add_command(collection_cmd.collection)
cli.add_command(search_cmd.search)
cli.add_command(ls_cmd.ls)
cli.add_command(info_cmd.info)
cli.add_command(stats_cmd.stats)
cli.add_command(edit_cmd.set_group)
cli.add_command(edit_cmd.flag)
cli.add_command(config_cmd.show_config)
