# ABOUTME: The `bookwarden config` command for showing the resolved configuration.
# ABOUTME: Also reports missing import sources so setup mistakes surface early.

import click
from rich.table import Table

from bookwarden.cli.options import console, get_config
from bookwarden.config import ConfigError, check_config


@click.command("config")
@click.pass_context
def show_config(ctx: click.Context) -> None:
    """Show the configuration in use and check its paths."""
    config = get_config(ctx)

    table = Table(show_header=False, box=None, pad_edge=False)
    table.add_column("Setting", style="bold", width=20)
    table.add_column("Value")
    table.add_row("Library root", str(config.library_root))
    table.add_row("Catalog", str(config.database_file))
    table.add_row("Known hashes", str(config.hashes_file))
    table.add_row("Search index", str(config.index_file))
    table.add_row("Backups", str(config.archive_dir))
    table.add_row("Filename template", config.filename_template)
    table.add_row("Retail sources", ", ".join(map(str, config.retail_sources)) or "-")
    table.add_row("Non-retail sources", ", ".join(map(str, config.nonretail_sources)) or "-")
    table.add_row("Online lookup", "on" if config.online_lookup else "off")
    table.add_row("API key", "set" if config.api_key else "not set")
    console.print(table)

    try:
        warnings = check_config(config)
    except ConfigError as exc:
        console.print(f"[red]{exc}[/red]")
        raise SystemExit(1) from exc
    for warning in warnings:
        console.print(f"[yellow]{warning}[/yellow]")
