# ABOUTME: Terminal implementation of the user interaction seam using click prompts.
# ABOUTME: Shows local and remote values side by side in a Rich table when they conflict.

import click
from rich.console import Console
from rich.table import Table


class ClickPrompter:
    """Asks questions on the terminal."""

    def __init__(self, *, console: Console | None = None) -> None:
        self._console = console or Console()

    def accept(self, question: str, default: bool = False) -> bool:
        return click.confirm(question, default=default)

    def choose(self, field_name: str, local: str, remote: str) -> str:
        """Let the user keep the local value, take the remote one, or type another."""
        table = Table(title=f"Conflicting {field_name}", show_header=False)
        table.add_column("#", style="bold", width=3)
        table.add_column("Source", style="dim")
        table.add_column("Value")
        table.add_row("1", "local", local)
        table.add_row("2", "online", remote)
        self._console.print(table)

        choice = click.prompt(
            "Choose [1/2] or [e]dit",
            type=click.Choice(["1", "2", "e"]),
            default="1",
            show_choices=False,
        )
        if choice == "1":
            return local
        if choice == "2":
            return remote
        return self.edit(field_name, local)

    def edit(self, field_name: str, current: str) -> str:
        return click.prompt(f"New {field_name}", default=current, show_default=True)
