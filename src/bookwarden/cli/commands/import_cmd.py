# ABOUTME: The `bookwarden import` command for bringing retail or non-retail epubs into the library.
# ABOUTME: Scans explicit paths or the configured sources, then imports importable candidates.

from pathlib import Path

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
from bookwarden.core.importer import collect_candidates, import_candidates
from bookwarden.core.scanner import DirectoryNotFoundError, ScanResult


def _print_candidates(scan: ScanResult) -> None:
    importable = scan.importable()
    if not importable:
        console.print("[yellow]Nothing to import.[/yellow]")
        return

    table = Table()
    table.add_column("File", style="bold")
    table.add_column("Status")
    for candidate in importable:
        status = "[yellow]previously imported[/yellow]" if candidate.is_missing else "new"
        table.add_row(escape(str(candidate.path)), status)
    console.print(table)
    console.print(f"\n[dim]{len(importable)} importable file(s)[/dim]")


@click.command("import")
@click.argument("source_type", type=click.Choice(["retail", "nonretail"]))
@click.argument("paths", nargs=-1, type=click.Path(exists=True, path_type=Path))
@click.option(
    "-l", "--list", "list_only",
    is_flag=True,
    default=False,
    help="Only list importable files, do not import them.",
)
@click.option(
    "--online/--offline",
    default=None,
    help="Enrich metadata from Google Books (default: from config).",
)
@yes_option
@click.pass_context
def import_command(
    ctx: click.Context,
    source_type: str,
    paths: tuple[Path, ...],
    list_only: bool,
    online: bool | None,
    assume_defaults: bool,
) -> None:
    """Import retail or non-retail epubs from PATHS or the configured sources."""
    is_retail = source_type == "retail"
    config = get_config(ctx)
    sources = list(paths) or config.sources(is_retail)
    if not sources:
        console.print(f"[red]No {source_type} sources configured and no paths given.[/red]")
        raise SystemExit(1)

    with library_session(ctx, interaction=make_interaction(assume_defaults)) as session:
        try:
            scan = collect_candidates(session, sources)
        except DirectoryNotFoundError as exc:
            console.print(f"[red]{exc}[/red]")
            raise SystemExit(1) from exc

        if list_only:
            _print_candidates(scan)
            return

        importable = scan.importable()
        if not importable:
            console.print("[yellow]Nothing to import.[/yellow]")
            return

        console.print(f"Found [bold]{len(importable)}[/bold] importable EPUB file(s)\n")
        result = import_candidates(session, importable, is_retail=is_retail, online=online)

    parts = []
    if result.added:
        parts.append(f"[green]{result.added} added[/green]")
    if result.skipped:
        parts.append(f"[yellow]{result.skipped} skipped[/yellow]")
    if result.errors:
        parts.append(f"[red]{result.errors} error(s)[/red]")
    console.print(", ".join(parts) or "[dim]No changes[/dim]")

    for path, resolution in result.decisions:
        if not resolution.imports:
            console.print(f"  [dim]{escape(path.name)}:[/dim] {resolution.value}")

    errors = [*scan.errors, *result.error_details]
    if errors:
        console.print(f"\n[yellow]{len(errors)} file(s) could not be imported:[/yellow]")
        for path, msg in errors:
            console.print(f"  [dim]{escape(path.name)}:[/dim] {escape(msg)}")
