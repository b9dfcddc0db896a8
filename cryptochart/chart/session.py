"""Chart session for one (symbol, timeframe) selection.

The session owns the canonical candle series and everything derived from
it: the viewport, the sampled display sequence and the trendline capture.
Only the most recent selection may write to the series; responses and
streamed candles belonging to an earlier selection are dropped.
"""

import logging
from typing import Mapping, Optional

from cryptochart.chart.merge import merge_closed_candle
from cryptochart.chart.sampler import DEFAULT_SAMPLE_RATE, ViewportController, sample_viewport
from cryptochart.chart.trendline import TrendlineCapture, nearest_candle
from cryptochart.errors import NetworkFailure
from cryptochart.exchange.base import BaseExchange, Subscription
from cryptochart.models import Candle, TrendlineSnapshot, ViewportState
from cryptochart.timeframes import TIMEFRAMES

logger = logging.getLogger(__name__)


class ChartSession:
    """Candle pipeline controller for the chart view."""

    def __init__(
        self,
        exchange: BaseExchange,
        symbol: str,
        timeframe: str = "1h",
        sample_rate: int = DEFAULT_SAMPLE_RATE,
        timeframes: Mapping[str, tuple[str, str]] = TIMEFRAMES,
    ):
        """Initialize the session (no data is fetched until :meth:`load`).

        Args:
            exchange: Market data source.
            symbol: Initial pair identifier.
            timeframe: Initial timeframe.
            sample_rate: Downsampling stride for the display sequence.
            timeframes: Table of supported timeframes.

        Raises:
            ValueError: If the timeframe or sample rate is invalid.
        """
        if timeframe not in timeframes:
            raise ValueError(f"Unsupported timeframe: {timeframe}")
        if sample_rate < 1:
            raise ValueError(f"sample_rate must be >= 1, got {sample_rate}")

        self._exchange = exchange
        self._timeframes = timeframes
        self.symbol = symbol.upper()
        self.timeframe = timeframe
        self.sample_rate = sample_rate

        self._series: list[Candle] = []
        self._display: list[Candle] = []
        self._viewport = ViewportController()
        self._capture = TrendlineCapture()
        self._subscription: Optional[Subscription] = None
        self._generation = 0
        self.error: Optional[str] = None

    # ==================== Snapshots ====================

    @property
    def series(self) -> tuple[Candle, ...]:
        return tuple(self._series)

    @property
    def display(self) -> tuple[Candle, ...]:
        return tuple(self._display)

    @property
    def viewport(self) -> ViewportState:
        return self._viewport.state

    @property
    def trendline(self) -> TrendlineSnapshot:
        return self._capture.snapshot()

    def _refresh(self) -> None:
        self._display = sample_viewport(self._series, self._viewport.state, self.sample_rate)

    # ==================== Loading ====================

    def select(self, symbol: Optional[str] = None, timeframe: Optional[str] = None) -> int:
        """Switch selection and invalidate everything tied to the old one.

        Returns:
            Generation token identifying the new selection.
        """
        timeframe = timeframe or self.timeframe
        if timeframe not in self._timeframes:
            raise ValueError(f"Unsupported timeframe: {timeframe}")

        self.symbol = (symbol or self.symbol).upper()
        self.timeframe = timeframe
        self._generation += 1
        self._series = []
        self._display = []
        return self._generation

    async def load(self, symbol: Optional[str] = None, timeframe: Optional[str] = None) -> tuple[Candle, ...]:
        """Fetch history for the (new) selection and rebuild the series.

        Any live stream for the previous selection is closed. If another
        selection is made while the fetch is in flight, the response is
        discarded.

        Returns:
            The display sequence.

        Raises:
            NetworkFailure: If the fetch for the current selection fails.
        """
        generation = self.select(symbol, timeframe)
        requested = (self.symbol, self.timeframe)
        await self.stop_live()

        try:
            candles = await self._exchange.fetch_klines(*requested)
        except NetworkFailure as e:
            if generation != self._generation:
                logger.debug("Ignoring failure of stale fetch for %s %s", *requested)
                return self.display
            self.error = str(e)
            raise

        if generation != self._generation:
            logger.debug("Discarding stale klines for %s %s", *requested)
            return self.display

        self.error = None
        self._series = list(candles)
        self._refresh()
        return self.display

    async def reload(self) -> tuple[Candle, ...]:
        """Manual retry for the current selection."""
        return await self.load()

    # ==================== Live updates ====================

    def apply_closed_candle(self, candle: Candle) -> bool:
        """Merge a closed candle and refresh the display if it changed."""
        changed = merge_closed_candle(self._series, candle)
        if changed:
            self._refresh()
        return changed

    def _stream_callback(self, generation: int):
        def on_candle(candle: Candle) -> None:
            if generation != self._generation:
                logger.debug("Dropping streamed candle for a previous selection")
                return
            self.apply_closed_candle(candle)
        return on_candle

    async def start_live(self) -> Subscription:
        """Subscribe to candle closes, replacing any existing stream."""
        await self.stop_live()
        self._subscription = self._exchange.subscribe_candle_closes(
            self.symbol,
            self.timeframe,
            self._stream_callback(self._generation),
        )
        return self._subscription

    async def stop_live(self) -> None:
        if self._subscription is not None:
            subscription, self._subscription = self._subscription, None
            await subscription.close()

    async def close(self) -> None:
        await self.stop_live()

    async def __aenter__(self) -> "ChartSession":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    # ==================== Viewport ====================

    def zoom_in(self) -> tuple[Candle, ...]:
        self._viewport.zoom_in()
        self._refresh()
        return self.display

    def zoom_out(self) -> tuple[Candle, ...]:
        self._viewport.zoom_out()
        self._refresh()
        return self.display

    def reset_zoom(self) -> tuple[Candle, ...]:
        self._viewport.reset()
        self._refresh()
        return self.display

    def set_scroll(self, position: int) -> tuple[Candle, ...]:
        """Scroll the zoomed window.

        Raises:
            UserInputRejected: At zoom level 1.
        """
        self._viewport.set_scroll(position)
        self._refresh()
        return self.display

    # ==================== Trendline ====================

    def toggle_drawing(self) -> TrendlineSnapshot:
        return self._capture.toggle_drawing()

    def click(self, index: int) -> TrendlineSnapshot:
        """Commit the displayed candle at ``index`` (out of range is a miss)."""
        candle = self._display[index] if 0 <= index < len(self._display) else None
        return self._capture.commit(candle)

    def click_at(self, time: float) -> TrendlineSnapshot:
        """Commit the displayed candle nearest to ``time``."""
        return self._capture.commit(nearest_candle(self._display, time))

    def hover(self, index: int) -> TrendlineSnapshot:
        candle = self._display[index] if 0 <= index < len(self._display) else None
        return self._capture.hover(candle)

    def hover_at(self, time: float) -> TrendlineSnapshot:
        return self._capture.hover(nearest_candle(self._display, time))

    def acknowledge_trendline(self, keep_drawing: bool = False) -> TrendlineSnapshot:
        return self._capture.acknowledge(keep_drawing)
