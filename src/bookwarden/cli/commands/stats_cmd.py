# ABOUTME: The `bookwarden stats` command for counting books per author, publisher, tag or series.
# ABOUTME: Prints a Rich table sorted by count.

import click
from rich.table import Table

from bookwarden.cli.options import console, library_session


@click.command("stats")
@click.argument(
    "facet", type=click.Choice(["authors", "publishers", "tags", "series"]), default="authors"
)
@click.option("--top", type=click.IntRange(min=1), default=None, help="Only the N largest.")
@click.pass_context
def stats(ctx: click.Context, facet: str, top: int | None) -> None:
    """Count books per author, publisher, tag or series."""
    with library_session(ctx) as session:
        counts = getattr(session.collection, facet)()

    if not counts:
        console.print(f"[yellow]No {facet} in the library.[/yellow]")
        return

    table = Table()
    table.add_column(facet.capitalize(), style="bold")
    table.add_column("Books", justify="right")
    for name, count in counts.most_common(top):
        table.add_row(name, str(count))
    console.print(table)
