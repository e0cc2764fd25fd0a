# ABOUTME: The `bookwarden info` command for displaying everything known about a book.
# ABOUTME: Without an id, prints a short summary of the whole library instead.

import click
from rich.markup import escape
from rich.table import Table

from bookwarden.cli.options import console, find_book, library_session
from bookwarden.core.book import Book, Copy


def _copy_row(copy: Copy | None) -> str:
    if copy is None:
        return "[dim]none[/dim]"
    flag = " [yellow](flagged for replacement)[/yellow]" if copy.needs_replacement else ""
    return f"{escape(str(copy.path))}{flag}"


def _book_table(book: Book) -> Table:
    meta = book.metadata
    table = Table(show_header=False, box=None, pad_edge=False)
    table.add_column("Field", style="bold", width=14)
    table.add_column("Value")

    table.add_row("ID", str(book.id))
    table.add_row("Title", meta.title)
    table.add_row("Author", meta.author or "unknown")
    table.add_row("Year", meta.year or "?")
    if meta.edition_year:
        table.add_row("Edition Year", meta.edition_year)
    table.add_row("Language", meta.language or "?")
    if meta.publisher:
        table.add_row("Publisher", meta.publisher)
    if meta.isbn:
        table.add_row("ISBN", meta.isbn)
    if meta.series:
        table.add_row("Series", meta.series_display)
    if meta.tags:
        table.add_row("Tags", ", ".join(meta.tags))
    if meta.category:
        table.add_row("Category", meta.category)
    if meta.genre:
        table.add_row("Genre", meta.genre)
    if meta.description:
        table.add_row("Description", meta.description)
    table.add_row("Retail", _copy_row(book.retail))
    table.add_row("Non-retail", _copy_row(book.non_retail))
    table.add_row("Progress", book.progress.value)
    if book.read_date:
        table.add_row("Read", book.read_date)
    if book.rating is not None:
        table.add_row("Rating", f"{book.rating}/5")
    if book.review:
        table.add_row("Review", book.review)
    missing = meta.missing_fields()
    if missing:
        table.add_row("Missing", f"[yellow]{', '.join(missing)}[/yellow]")
    return table


@click.command("info")
@click.argument("book_id", type=int, required=False)
@click.pass_context
def info(ctx: click.Context, book_id: int | None) -> None:
    """Show details for book BOOK_ID, or a library summary."""
    with library_session(ctx) as session:
        if book_id is not None:
            console.print(_book_table(find_book(session, book_id)))
            return

        collection = session.collection
        console.print(f"Library root: {session.config.library_root}")
        console.print(f"Books: [bold]{len(collection)}[/bold]")
        console.print(f"  with retail copy: {len(collection.retail())}")
        console.print(f"  non-retail only: {len(collection.non_retail_only())}")
        console.print(f"  incomplete metadata: {len(collection.incomplete())}")
        console.print(f"  flagged for replacement: {len(collection.flagged())}")
        console.print(f"Known hashes: {len(session.ledger)}")
