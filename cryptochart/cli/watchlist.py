"""Watchlist management commands for CryptoChart CLI.

Handles watchlist operations including add, remove, list and live price
polling. Supports multiple named watchlists.
"""

import asyncio
from typing import Optional, Sequence

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from cryptochart.models import WatchlistEntry

console = Console()


def _get_settings():
    """Lazily load configuration."""
    from cryptochart.config import load_settings

    return load_settings()


def _get_store():
    """Get the watchlist store instance."""
    from cryptochart.config import DB_PATH
    from cryptochart.db.store import WatchlistStore

    return WatchlistStore(DB_PATH)


def _error_panel(action: str, error: Exception) -> None:
    console.print(Panel(
        f"[red]Failed to {action}:[/red]\n\n{str(error)}",
        title="[bold red]Error[/bold red]",
        border_style="red",
    ))


def build_watchlist_table(
    entries: Sequence[WatchlistEntry],
    list_name: str,
    error: Optional[str] = None,
) -> Table:
    """Render watchlist entries with their latest price and change."""
    caption = f"[red]{error} - retrying on next poll[/red]" if error else None
    table = Table(
        title=f"Watchlist: {list_name}",
        caption=caption,
        show_header=True,
        header_style="bold cyan",
    )
    table.add_column("Symbol", style="bold")
    table.add_column("Price", justify="right")
    table.add_column("Change", justify="right")

    for entry in entries:
        if entry.change_percent is None:
            change = f"[dim]{entry.format_change()}[/dim]"
        else:
            color = "green" if entry.change_percent >= 0 else "red"
            change = f"[{color}]{entry.format_change()}[/{color}]"
        table.add_row(entry.symbol, entry.format_price(), change)

    return table


@click.group()
def watch() -> None:
    """Manage watchlists.

    Add, remove, and view symbols in your watchlists, and poll their
    prices. A watchlist that was never edited starts with BTCUSDT,
    ETHUSDT and BNBUSDT.

    \b
    Examples:
      cryptochart watch add SOLUSDT          # Add to default watchlist
      cryptochart watch add DOGEUSDT --list meme
      cryptochart watch list                 # Show default watchlist
      cryptochart watch prices               # Poll prices every 5s
    """
    pass


@watch.command("add")
@click.argument("symbol")
@click.option(
    "--list", "list_name",
    default="default",
    help="Name of the watchlist to add to (default: 'default').",
)
def add_symbol(symbol: str, list_name: str) -> None:
    """Add a symbol to a watchlist.

    SYMBOL is the trading pair to add (e.g., SOLUSDT).
    """
    symbol = symbol.upper()

    try:
        store = _get_store()
        added = store.add_to_watchlist(symbol, list_name, _get_settings().default_watchlist)
    except Exception as e:
        _error_panel("add symbol", e)
        raise SystemExit(1)

    if added:
        console.print(f"[green]✓ Added {symbol} to watchlist '{list_name}'[/green]")
    else:
        console.print(f"[yellow]{symbol} is already in watchlist '{list_name}'[/yellow]")


@watch.command("remove")
@click.argument("symbol")
@click.option(
    "--list", "list_name",
    default="default",
    help="Name of the watchlist to remove from (default: 'default').",
)
def remove_symbol(symbol: str, list_name: str) -> None:
    """Remove a symbol from a watchlist.

    SYMBOL is the trading pair to remove.
    """
    symbol = symbol.upper()

    try:
        store = _get_store()
        removed = store.remove_from_watchlist(symbol, list_name, _get_settings().default_watchlist)
    except Exception as e:
        _error_panel("remove symbol", e)
        raise SystemExit(1)

    if removed:
        console.print(f"[green]✓ Removed {symbol} from watchlist '{list_name}'[/green]")
    else:
        console.print(f"[yellow]{symbol} is not in watchlist '{list_name}'[/yellow]")


@watch.command("list")
@click.option(
    "--list", "list_name",
    default="default",
    help="Name of the watchlist to display (default: 'default').",
)
def list_watchlist(list_name: str) -> None:
    """Display watchlist symbols in saved order."""
    try:
        symbols = _get_store().load_watchlist(list_name, _get_settings().default_watchlist)
    except Exception as e:
        _error_panel("list watchlist", e)
        raise SystemExit(1)

    if not symbols:
        console.print(Panel(
            f"[dim]Watchlist '{list_name}' is empty[/dim]",
            title=f"[bold]Watchlist: {list_name}[/bold]",
            border_style="dim",
        ))
        return

    table = Table(
        title=f"Watchlist: {list_name}",
        show_header=True,
        header_style="bold cyan",
    )
    table.add_column("#", style="dim", width=4)
    table.add_column("Symbol", style="bold")

    for i, symbol in enumerate(symbols, 1):
        table.add_row(str(i), symbol)

    console.print(table)
    console.print(f"\n[dim]Total: {len(symbols)} symbols[/dim]")


@watch.command("prices")
@click.option(
    "--list", "list_name",
    default="default",
    help="Name of the watchlist to poll (default: 'default').",
)
@click.option(
    "-i", "--interval",
    default=None,
    type=click.FloatRange(min=0.5),
    help="Seconds between polls (default from config: 5).",
)
@click.option(
    "-c", "--cycles",
    default=None,
    type=click.IntRange(min=1),
    help="Stop after this many polls instead of running until Ctrl+C.",
)
def prices(list_name: str, interval: Optional[float], cycles: Optional[int]) -> None:
    """Poll watchlist prices and show the change since the last poll.

    The first poll shows prices only; changes appear from the second poll.

    \b
    Examples:
      cryptochart watch prices
      cryptochart watch prices -i 10 -c 6
    """
    from rich.live import Live

    from cryptochart.exchange.binance import BinanceExchange
    from cryptochart.watchlist.poller import WatchlistPoller

    settings = _get_settings()
    symbols = _get_store().load_watchlist(list_name, settings.default_watchlist)

    if not symbols:
        console.print(f"[yellow]Watchlist '{list_name}' is empty[/yellow]")
        return

    exchange = BinanceExchange(settings)
    poller = WatchlistPoller(
        exchange.fetch_ticker_prices,
        symbols,
        interval=interval or settings.poll_interval,
    )

    async def run(live_display: Live) -> None:
        poller.on_update = lambda entries: live_display.update(
            build_watchlist_table(entries, list_name, poller.error)
        )
        if cycles is None:
            async with poller:
                await asyncio.Event().wait()
        else:
            for i in range(cycles):
                await poller.poll_once()
                if i < cycles - 1:
                    await asyncio.sleep(poller.interval)

    initial = build_watchlist_table(poller.tracker.entries(), list_name)
    try:
        with Live(initial, refresh_per_second=2, console=console) as live_display:
            asyncio.run(run(live_display))
    except KeyboardInterrupt:
        console.print("\n[dim]Stopped watching.[/dim]")
