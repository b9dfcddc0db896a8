"""Symbol search command for CryptoChart CLI."""

import asyncio

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from cryptochart.errors import ChartError

console = Console()


@click.command()
@click.argument("query")
@click.option(
    "-n", "--limit",
    default=25,
    type=click.IntRange(min=1),
    help="Maximum number of matches to show (default: 25).",
)
def search(query: str, limit: int) -> None:
    """Search trading pairs by symbol, base or quote asset.

    Matching is case-insensitive.

    \b
    Examples:
      cryptochart search btc
      cryptochart search usdt -n 100
    """
    from cryptochart.config import load_settings
    from cryptochart.exchange.binance import BinanceExchange
    from cryptochart.exchange.search import filter_symbols

    exchange = BinanceExchange(load_settings())

    try:
        with console.status("[bold cyan]Fetching symbols...[/bold cyan]"):
            symbols = asyncio.run(exchange.fetch_exchange_symbols())
    except ChartError as e:
        console.print(Panel(
            f"[red]Failed to fetch symbols:[/red]\n\n{str(e)}",
            title="[bold red]Error[/bold red]",
            border_style="red",
        ))
        raise SystemExit(1)

    matches = filter_symbols(symbols, query)
    if not matches:
        console.print(f"[yellow]No trading pairs match '{query}'[/yellow]")
        return

    table = Table(title=f"Pairs matching '{query}'", show_header=True, header_style="bold cyan")
    table.add_column("Symbol", style="bold")
    table.add_column("Pair", style="dim")

    for item in matches[:limit]:
        table.add_row(item.symbol, f"{item.base_asset}/{item.quote_asset}")

    console.print(table)
    if len(matches) > limit:
        console.print(f"[dim]Showing {limit} of {len(matches)} matches[/dim]")
