# ABOUTME: The `bookwarden ls` command for listing books in the catalog.
# ABOUTME: Supports filtering by copy type, completeness and progress, sorting and slicing.

import click

from bookwarden.cli.commands.listing import books_table
from bookwarden.cli.options import console, library_session
from bookwarden.core.book import Progress
from bookwarden.core.collection import SORT_KEYS, sort_books


@click.command("ls")
@click.option(
    "--retail", "only", flag_value="retail", help="Only books with a retail copy."
)
@click.option(
    "--nonretail", "only", flag_value="nonretail", help="Only books without a retail copy."
)
@click.option(
    "--incomplete", "only", flag_value="incomplete", help="Only books with missing metadata."
)
@click.option(
    "--flagged", "only", flag_value="flagged", help="Only books flagged for replacement."
)
@click.option(
    "--progress",
    type=click.Choice([p.value for p in Progress]),
    default=None,
    help="Only books with this reading progress.",
)
@click.option(
    "--sort", "sort_key", type=click.Choice(sorted(SORT_KEYS)), default="id", help="Sort order."
)
@click.option("--first", type=click.IntRange(min=1), default=None, help="Show the first N.")
@click.option("--last", type=click.IntRange(min=1), default=None, help="Show the last N.")
@click.pass_context
def ls(
    ctx: click.Context,
    only: str | None,
    progress: str | None,
    sort_key: str,
    first: int | None,
    last: int | None,
) -> None:
    """List books in the library."""
    with library_session(ctx) as session:
        collection = session.collection
        selections = {
            "retail": collection.retail,
            "nonretail": collection.non_retail_only,
            "incomplete": collection.incomplete,
            "flagged": collection.flagged,
        }
        books = selections[only]() if only else list(collection)

    if progress:
        books = [b for b in books if b.progress.value == progress]
    books = sort_books(books, sort_key)
    if first:
        books = books[:first]
    elif last:
        books = books[-last:]

    if not books:
        console.print("[yellow]No books in the library.[/yellow]")
        return

    console.print(books_table(books))
    console.print(f"\n[dim]{len(books)} book(s)[/dim]")
