"""Chart commands for CryptoChart CLI.

Handles fetching kline history, rendering the sampled display sequence,
following live candle closes and placing trendlines.
"""

import asyncio
from typing import Sequence

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from cryptochart.errors import ChartError, UserInputRejected
from cryptochart.models import Candle, ViewportState
from cryptochart.timeframes import VALID_TIMEFRAMES, label

console = Console()

MAX_ZOOM_STEPS = 4


def _get_settings():
    """Lazily load configuration."""
    from cryptochart.config import load_settings

    return load_settings()


def _get_session(symbol: str, timeframe: str, sample_rate: int | None = None):
    """Build a chart session backed by Binance."""
    from cryptochart.chart.session import ChartSession
    from cryptochart.exchange.binance import BinanceExchange

    settings = _get_settings()
    return ChartSession(
        BinanceExchange(settings),
        symbol,
        timeframe,
        sample_rate=sample_rate or settings.sample_rate,
    )


def _error_panel(action: str, error: Exception) -> None:
    console.print(Panel(
        f"[red]Failed to {action}:[/red]\n\n{str(error)}",
        title="[bold red]Error[/bold red]",
        border_style="red",
    ))


def build_candle_table(
    display: Sequence[Candle],
    symbol: str,
    timeframe: str,
    viewport: ViewportState,
    total: int,
) -> Table:
    """Render a display sequence as a rich table."""
    title = (
        f"{symbol} - {label(timeframe)} "
        f"({len(display)} shown of {total}, zoom x{viewport.zoom_level:g}, "
        f"scroll {viewport.scroll_position}%)"
    )
    table = Table(title=title, show_header=True, header_style="bold cyan")

    table.add_column("#", style="dim", width=5)
    table.add_column("Time (UTC)", style="dim")
    table.add_column("Open", justify="right")
    table.add_column("High", justify="right", style="green")
    table.add_column("Low", justify="right", style="red")
    table.add_column("Close", justify="right")
    table.add_column("Volume", justify="right", style="dim")

    for i, candle in enumerate(display):
        color = "green" if candle.is_bullish else "red"
        table.add_row(
            str(i),
            candle.timestamp.strftime("%Y-%m-%d %H:%M"),
            f"{candle.open:.2f}",
            f"{candle.high:.2f}",
            f"{candle.low:.2f}",
            f"[{color}]{candle.close:.2f}[/{color}]",
            f"{candle.volume:,.2f}",
        )

    return table


def _apply_viewport(session, zoom_steps: int, scroll: int | None) -> None:
    for _ in range(zoom_steps):
        session.zoom_in()
    if scroll is not None:
        try:
            session.set_scroll(scroll)
        except UserInputRejected as e:
            console.print(f"[yellow]{e}[/yellow]")


@click.command()
@click.argument("symbol")
@click.option(
    "-t", "--timeframe",
    default="1h",
    type=click.Choice(VALID_TIMEFRAMES),
    help="Candle timeframe (default: 1h)",
)
@click.option(
    "-z", "--zoom", "zoom_steps",
    default=0,
    type=click.IntRange(0, MAX_ZOOM_STEPS),
    help="Number of zoom-in steps; each doubles the zoom level (max x10).",
)
@click.option(
    "-s", "--scroll",
    default=None,
    type=click.IntRange(0, 100),
    help="Scroll position in percent (only when zoomed in).",
)
@click.option(
    "-r", "--sample-rate",
    default=None,
    type=click.IntRange(min=1),
    help="Show every Nth candle (default from config: 10).",
)
def chart(symbol: str, timeframe: str, zoom_steps: int, scroll: int | None, sample_rate: int | None) -> None:
    """Fetch and display sampled candles for a symbol.

    SYMBOL is the trading pair (e.g., BTCUSDT, ETHUSDT).

    \b
    Examples:
      cryptochart chart BTCUSDT                  # 1h candles, full range
      cryptochart chart ETHUSDT -t 5m -z 2 -s 50 # zoom x4, middle window
      cryptochart chart BNBUSDT -r 1             # no downsampling
    """
    session = _get_session(symbol, timeframe, sample_rate)

    console.print(f"[dim]Fetching {timeframe} klines for {session.symbol}...[/dim]")

    try:
        asyncio.run(session.load())
    except ChartError as e:
        _error_panel("fetch klines", e)
        raise SystemExit(1)

    if not session.series:
        console.print(Panel(
            f"[yellow]No data available for {session.symbol}[/yellow]",
            title="[bold yellow]No Data[/bold yellow]",
            border_style="yellow",
        ))
        return

    _apply_viewport(session, zoom_steps, scroll)
    console.print(build_candle_table(
        session.display, session.symbol, session.timeframe, session.viewport, len(session.series),
    ))


@click.command()
@click.argument("symbol")
@click.option(
    "-t", "--timeframe",
    default="1m",
    type=click.Choice(VALID_TIMEFRAMES),
    help="Candle timeframe (default: 1m)",
)
@click.option(
    "-r", "--sample-rate",
    default=None,
    type=click.IntRange(min=1),
    help="Show every Nth candle (default from config: 10).",
)
@click.option(
    "--rows",
    default=20,
    type=click.IntRange(min=1),
    help="Number of most recent display candles to show (default: 20).",
)
def live(symbol: str, timeframe: str, sample_rate: int | None, rows: int) -> None:
    """Follow closed candles for a symbol as they arrive.

    Loads history, then merges each closed candle from the stream.
    Press Ctrl+C to stop.

    \b
    Examples:
      cryptochart live BTCUSDT
      cryptochart live ETHUSDT -t 5m -r 1
    """
    from rich.live import Live

    session = _get_session(symbol, timeframe, sample_rate)

    def generate_table() -> Table:
        display = session.display[-rows:]
        return build_candle_table(
            display, session.symbol, session.timeframe, session.viewport, len(session.series),
        )

    async def follow() -> None:
        async with session:
            await session.load()
            await session.start_live()
            with Live(generate_table(), refresh_per_second=1, console=console) as live_display:
                while True:
                    await asyncio.sleep(1)
                    live_display.update(generate_table())

    console.print(f"[dim]Following {session.symbol} {timeframe} candle closes...[/dim]\n")

    try:
        asyncio.run(follow())
    except KeyboardInterrupt:
        console.print("\n[dim]Stopped following.[/dim]")
    except ChartError as e:
        _error_panel("follow candles", e)
        raise SystemExit(1)


@click.command()
@click.argument("symbol")
@click.option(
    "--at", "indices",
    multiple=True,
    required=True,
    type=int,
    help="Display index of a candle to click (give exactly twice).",
)
@click.option(
    "-t", "--timeframe",
    default="1h",
    type=click.Choice(VALID_TIMEFRAMES),
    help="Candle timeframe (default: 1h)",
)
@click.option(
    "-r", "--sample-rate",
    default=None,
    type=click.IntRange(min=1),
    help="Show every Nth candle (default from config: 10).",
)
def trendline(symbol: str, indices: tuple[int, ...], timeframe: str, sample_rate: int | None) -> None:
    """Draw a trendline between two displayed candles.

    Indices refer to the '#' column of the chart command with the same
    timeframe and sample rate.

    \b
    Examples:
      cryptochart trendline BTCUSDT --at 3 --at 40
    """
    from cryptochart.chart.trendline import acknowledgment_details

    if len(indices) != 2:
        console.print("[yellow]Give exactly two --at indices[/yellow]")
        raise SystemExit(2)

    session = _get_session(symbol, timeframe, sample_rate)

    try:
        asyncio.run(session.load())
    except ChartError as e:
        _error_panel("fetch klines", e)
        raise SystemExit(1)

    session.toggle_drawing()
    for index in indices:
        if not 0 <= index < len(session.display):
            console.print(
                f"[yellow]Index {index} is outside the chart (0-{len(session.display) - 1})[/yellow]"
            )
            raise SystemExit(1)
        session.click(index)

    details = acknowledgment_details(session.trendline)
    session.acknowledge_trendline()

    console.print(Panel(
        f"[bold blue]Starting Point[/bold blue]\n"
        f"  Price: ${details['start_price']}\n"
        f"  Time:  {details['start_time']}\n\n"
        f"[bold magenta]Ending Point[/bold magenta]\n"
        f"  Price: ${details['end_price']}\n"
        f"  Time:  {details['end_time']}",
        title=f"[bold]Trendline Details - {session.symbol}[/bold]",
        border_style="blue",
    ))
