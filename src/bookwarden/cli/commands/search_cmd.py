# ABOUTME: The `bookwarden search` command for full-text search of the library.
# ABOUTME: Queries the FTS5 index; field shortcuts like author: and tag: are supported.

import click

from bookwarden.cli.commands.listing import books_table
from bookwarden.cli.options import console, library_session
from bookwarden.db.index import SearchIndexError


@click.command("search")
@click.argument("query", nargs=-1, required=True)
@click.pass_context
def search(ctx: click.Context, query: tuple[str, ...]) -> None:
    """Search the library, e.g. `bookwarden search author:tolkien tag:fantasy`."""
    text = " ".join(query)
    with library_session(ctx) as session:
        try:
            session.index.check(session.collection)
        except SearchIndexError:
            session.rebuild_index()

        try:
            keys = session.index.query(text)
        except SearchIndexError as exc:
            console.print(f"[red]Invalid query {text!r}: {exc}[/red]")
            raise SystemExit(1) from exc

        by_key = {session.index.key_for(book): book for book in session.collection}
        results = [by_key[key] for key in keys if key in by_key]

    if not results:
        console.print("[yellow]No results found.[/yellow]")
        return

    console.print(books_table(results))
    console.print(f"\n[dim]{len(results)} result(s)[/dim]")
