# ABOUTME: Shared Click helpers for bookwarden commands: config loading and library sessions.
# ABOUTME: Turns configuration, lock and catalog failures into red messages and exit code 1.

import sys
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape

from bookwarden.cli.prompts import ClickPrompter
from bookwarden.config import DEFAULT_CONFIG_PATH, ConfigError, LibraryConfig, load_config
from bookwarden.core.collection import BookNotFoundError
from bookwarden.core.book import Book
from bookwarden.core.interaction import NonInteractive, UserInteraction
from bookwarden.core.lock import LibraryLockedError
from bookwarden.core.session import LibrarySession
from bookwarden.db.store import CatalogError

console = Console()

config_option = click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path, dir_okay=False),
    envvar="BOOKWARDEN_CONFIG",
    default=None,
    help=f"Path to configuration file (default: {DEFAULT_CONFIG_PATH})",
)

yes_option = click.option(
    "-y",
    "--yes",
    "assume_defaults",
    is_flag=True,
    default=False,
    help="Never prompt; use the configured defaults for confirmations.",
)


def get_config(ctx: click.Context) -> LibraryConfig:
    """Load the configuration named on the root command, once per invocation."""
    obj = ctx.ensure_object(dict)
    if "config" not in obj:
        try:
            obj["config"] = load_config(obj.get("config_path"))
        except ConfigError as exc:
            console.print(f"[red]{exc}[/red]")
            raise SystemExit(1) from exc
    return obj["config"]


def make_interaction(assume_defaults: bool) -> UserInteraction:
    """Prompt on a terminal, otherwise answer with configured defaults."""
    if assume_defaults or sys.stdin is None or not sys.stdin.isatty():
        return NonInteractive()
    return ClickPrompter(console=console)


@contextmanager
def library_session(
    ctx: click.Context, *, interaction: UserInteraction | None = None
) -> Iterator[LibrarySession]:
    """Open a locked session, exiting with status 1 if that is impossible."""
    config = get_config(ctx)
    session = LibrarySession(config, interaction=interaction)
    try:
        session.open()
    except LibraryLockedError as exc:
        console.print(f"[red]{exc}[/red]")
        raise SystemExit(1) from exc
    except CatalogError as exc:
        console.print(f"[red]{exc}[/red]")
        raise SystemExit(1) from exc
    try:
        yield session
    except (CatalogError, OSError) as exc:
        console.print(f"[red]Could not update the library: {escape(str(exc))}[/red]")
        raise SystemExit(1) from exc
    finally:
        session.close()


def find_book(session: LibrarySession, book_id: int) -> Book:
    """Look up a book by id or exit with status 1."""
    try:
        return session.collection.find_by_id(book_id)
    except BookNotFoundError as exc:
        console.print(f"[red]Book {book_id} not found.[/red]")
        raise SystemExit(1) from exc
