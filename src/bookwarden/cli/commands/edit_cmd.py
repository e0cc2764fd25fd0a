# ABOUTME: Commands that edit a single book: `bookwarden set ...` and `bookwarden flag`.
# ABOUTME: Field edits are validated per field and renamed files follow the new metadata.

import datetime
import logging

import click

from bookwarden.cli.options import console, find_book, library_session
from bookwarden.core.book import Book, Progress
from bookwarden.core.naming import FilenameTemplateError, rename_copy
from bookwarden.core.session import LibrarySession
from bookwarden.metadata.fields import (
    InvalidFieldValueError,
    MetadataField,
    format_field,
    parse_rating,
    set_field,
)

logger = logging.getLogger(__name__)


def _rename_copies(session: LibrarySession, book: Book) -> None:
    config = session.config
    for is_retail, _ in book.copies():
        try:
            rename_copy(book, is_retail, config.library_root, config.filename_template)
        except (OSError, FilenameTemplateError) as exc:
            logger.warning("Could not rename copy of %s: %s", book, exc)


@click.group("set")
def set_group() -> None:
    """Edit metadata, reading progress, rating or review of a book."""


@set_group.command("field")
@click.argument("book_id", type=int)
@click.argument("field_name", metavar="FIELD")
@click.argument("value")
@click.pass_context
def set_metadata_field(ctx: click.Context, book_id: int, field_name: str, value: str) -> None:
    """Set metadata FIELD of book BOOK_ID (lists are comma-separated)."""
    try:
        field = MetadataField.from_name(field_name)
    except InvalidFieldValueError as exc:
        console.print(f"[red]{exc}[/red]")
        raise SystemExit(1) from exc

    with library_session(ctx) as session:
        book = find_book(session, book_id)
        try:
            set_field(book.metadata, field, value)
        except InvalidFieldValueError as exc:
            console.print(f"[red]Invalid {field.value}: {exc}[/red]")
            raise SystemExit(1) from exc
        _rename_copies(session, book)
        session.save()
        console.print(f"[green]{book}: {field.value} = {format_field(book.metadata, field)}[/green]")


@set_group.command("progress")
@click.argument("book_id", type=int)
@click.argument("progress", type=click.Choice([p.value for p in Progress]))
@click.pass_context
def set_progress(ctx: click.Context, book_id: int, progress: str) -> None:
    """Set reading progress of book BOOK_ID."""
    with library_session(ctx) as session:
        book = find_book(session, book_id)
        book.progress = Progress(progress)
        if book.progress is Progress.READ and not book.read_date:
            book.read_date = datetime.date.today().isoformat()
        _rename_copies(session, book)
        session.save()
        console.print(f"[green]{book}: {progress}[/green]")


@set_group.command("rating")
@click.argument("book_id", type=int)
@click.argument("rating")
@click.pass_context
def set_rating(ctx: click.Context, book_id: int, rating: str) -> None:
    """Rate book BOOK_ID from 0 to 5."""
    try:
        value = parse_rating(rating)
    except InvalidFieldValueError as exc:
        console.print(f"[red]{exc}[/red]")
        raise SystemExit(1) from exc

    with library_session(ctx) as session:
        book = find_book(session, book_id)
        book.rating = value
        session.save()
        console.print(f"[green]{book}: rated {value}/5[/green]")


@set_group.command("review")
@click.argument("book_id", type=int)
@click.argument("text")
@click.pass_context
def set_review(ctx: click.Context, book_id: int, text: str) -> None:
    """Attach a short review to book BOOK_ID."""
    with library_session(ctx) as session:
        book = find_book(session, book_id)
        book.review = text.strip() or None
        session.save()
        console.print(f"[green]{book}: review saved[/green]")


@click.command("flag")
@click.argument("book_id", type=int)
@click.option(
    "--retail/--nonretail",
    "is_retail",
    default=None,
    help="Which copy to flag (required).",
)
@click.option("--clear", is_flag=True, default=False, help="Remove the flag instead.")
@click.pass_context
def flag(ctx: click.Context, book_id: int, is_retail: bool | None, clear: bool) -> None:
    """Flag a copy of BOOK_ID so the next import of that kind replaces it."""
    if is_retail is None:
        raise click.UsageError("Choose the copy to flag with --retail or --nonretail.")
    slot = "retail" if is_retail else "non-retail"
    with library_session(ctx) as session:
        book = find_book(session, book_id)
        copy = book.get_copy(is_retail)
        if copy is None:
            console.print(f"[red]{book} has no {slot} copy.[/red]")
            raise SystemExit(1)
        copy.needs_replacement = not clear
        session.save()
    state = "no longer flagged" if clear else "flagged for replacement"
    console.print(f"[green]{slot.capitalize()} copy of {book} {state}.[/green]")
