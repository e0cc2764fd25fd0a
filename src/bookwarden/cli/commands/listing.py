# ABOUTME: Rich table rendering shared by the listing commands.
# ABOUTME: One row per book with id, author, title, year, copies and progress.

from rich.table import Table

from bookwarden.core.book import Book


def books_table(books: list[Book]) -> Table:
    table = Table()
    table.add_column("ID", style="dim", width=4)
    table.add_column("Author")
    table.add_column("Title", style="bold")
    table.add_column("Year", width=5)
    table.add_column("Copies")
    table.add_column("Progress")

    for book in books:
        copies = []
        if book.retail is not None:
            copies.append("[green]retail[/green]")
        if book.non_retail is not None:
            copies.append("[yellow]non-retail[/yellow]")
        table.add_row(
            str(book.id),
            book.metadata.author or "[dim]unknown[/dim]",
            book.metadata.title,
            book.metadata.year or "?",
            ", ".join(copies),
            book.progress.value,
        )
    return table
