# ABOUTME: The `bookwarden collection` commands for whole-library maintenance.
# ABOUTME: Integrity check, refresh, search index rebuild/check, and catalog backup.

import click
from rich.markup import escape
from rich.table import Table

from bookwarden.cli.options import (
    console,
    get_config,
    library_session,
    make_interaction,
    yes_option,
)
from bookwarden.core.refresh import refresh_library
from bookwarden.core.scanner import DirectoryNotFoundError
from bookwarden.core.verifier import verify_library
from bookwarden.db.index import SearchIndexError
from bookwarden.db.store import BackupError


@click.group("collection")
def collection() -> None:
    """Check, refresh, index and back up the whole library."""


@collection.command("check")
@click.pass_context
def check(ctx: click.Context) -> None:
    """Re-hash every copy and report missing or modified files."""
    with library_session(ctx) as session:
        result = verify_library(session.collection, session.config.library_root)

    if result.total_issues == 0:
        console.print(f"[green]All {result.ok} copies verified.[/green]")
        return

    table = Table()
    table.add_column("ID", style="dim", width=4)
    table.add_column("Title", style="bold")
    table.add_column("File")
    table.add_column("Issue")
    for issue in result.issues():
        style = "yellow" if issue in result.non_retail_changed else "red"
        table.add_row(
            str(issue.book.id),
            issue.book.metadata.title,
            escape(str(issue.copy.path)),
            f"[{style}]{issue.problem}[/{style}]",
        )
    console.print(table)
    console.print(
        f"\n{result.total_issues} issue(s) found, {result.ok} copies verified."
    )
    if result.has_errors:
        raise SystemExit(1)


@collection.command("refresh")
@yes_option
@click.pass_context
def refresh(ctx: click.Context, assume_defaults: bool) -> None:
    """Rename files, drop vanished copies and adopt stray epubs in the library."""
    with library_session(ctx, interaction=make_interaction(assume_defaults)) as session:
        try:
            result = refresh_library(session)
        except DirectoryNotFoundError as exc:
            console.print(f"[red]{exc}[/red]")
            raise SystemExit(1) from exc

    console.print(
        f"{result.renamed} renamed, {result.relocated} relocated, "
        f"{result.adopted} adopted, "
        f"{len(result.missing_copies)} missing copies dropped, "
        f"{len(result.deleted_books)} books removed, "
        f"{result.removed_dirs} empty folders deleted."
    )
    for path, msg in result.errors:
        console.print(f"  [red]{escape(str(path))}:[/red] {escape(msg)}")


@collection.command("rebuild-index")
@click.pass_context
def rebuild_index(ctx: click.Context) -> None:
    """Discard the search index and rebuild it from the catalog."""
    with library_session(ctx) as session:
        try:
            count = session.index.rebuild(session.collection)
        except SearchIndexError as exc:
            console.print(f"[red]{exc}[/red]")
            raise SystemExit(1) from exc
    console.print(f"[green]Indexed {count} book(s).[/green]")


@collection.command("check-index")
@click.pass_context
def check_index(ctx: click.Context) -> None:
    """Add books missing from the search index, rebuilding it if unreadable."""
    with library_session(ctx) as session:
        try:
            added = session.index.check(session.collection)
        except SearchIndexError as exc:
            console.print(f"[yellow]Index unreadable ({exc}), rebuilding.[/yellow]")
            added = session.rebuild_index()
    console.print(f"[green]Index checked, {added} book(s) added.[/green]")


@collection.command("backup")
@click.pass_context
def backup(ctx: click.Context) -> None:
    """Commit a snapshot of the catalog to the archive repository."""
    config = get_config(ctx)
    with library_session(ctx) as session:
        try:
            session.store.backup(config.archive_dir)
        except BackupError as exc:
            console.print(f"[red]{exc}[/red]")
            raise SystemExit(1) from exc
    console.print(f"[green]Catalog backed up to {config.archive_dir}.[/green]")
