"""Configuration commands for CryptoChart CLI."""

from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.panel import Panel

from cryptochart.config import CONFIG_PATH, create_template_config

console = Console()


@click.command()
@click.option(
    "--path", "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help=f"Where to write the config (default: {CONFIG_PATH}).",
)
@click.option("--force", is_flag=True, help="Overwrite an existing config file.")
def init(config_path: Optional[Path], force: bool) -> None:
    """Create a config file with the default settings.
    
    \b
    Examples:
      cryptochart init
      cryptochart init --force
    """
    path = config_path or CONFIG_PATH

    if path.exists() and not force:
        console.print(f"[yellow]Config already exists at {path}[/yellow] (use --force to overwrite)")
        return

    written = create_template_config(path)
    console.print(Panel(
        f"[green]✓ Config written to[/green] {written}\n\n"
        "[dim]Edit the [chart], [exchange] and [watchlist] tables to change "
        "sampling, endpoints and polling.[/dim]",
        title="[bold]CryptoChart Config[/bold]",
        border_style="green",
    ))
