"""Periodic watchlist price polling."""

import asyncio
import logging
from typing import Awaitable, Callable, Iterable, Mapping, Optional

from cryptochart.errors import ChartError
from cryptochart.models import WatchlistEntry
from cryptochart.watchlist.tracker import DeltaTracker

logger = logging.getLogger(__name__)

FetchPrices = Callable[[set[str]], Awaitable[Mapping[str, float]]]
EntriesCallback = Callable[[list[WatchlistEntry]], None]


class WatchlistPoller:
    """Polls prices on a fixed interval and feeds a :class:`DeltaTracker`.

    The poll loop runs as one task owned by the poller. It is cancelled
    by :meth:`stop`, on leaving the ``async with`` block, and whenever the
    watchlist becomes empty.
    """

    def __init__(
        self,
        fetch_prices: FetchPrices,
        symbols: Iterable[str] = (),
        interval: float = 5.0,
        tracker: Optional[DeltaTracker] = None,
        on_update: Optional[EntriesCallback] = None,
    ):
        """Initialize the poller.

        Args:
            fetch_prices: Coroutine returning symbol -> price.
            symbols: Watchlist symbols.
            interval: Seconds between polls.
            tracker: Tracker to update; a new one is created if omitted.
            on_update: Called with fresh entries after every poll attempt.
        """
        if interval <= 0:
            raise ValueError(f"interval must be > 0, got {interval}")
        self._fetch_prices = fetch_prices
        self.interval = interval
        self.tracker = tracker or DeltaTracker()
        self.tracker.set_symbols(symbols)
        self.on_update = on_update
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def error(self) -> Optional[str]:
        return self.tracker.last_error

    async def poll_once(self) -> list[WatchlistEntry]:
        """Run one poll; also serves as the manual retry after a failure."""
        symbols = self.tracker.symbols
        if not symbols:
            return []

        try:
            snapshot = await self._fetch_prices(set(symbols))
        except ChartError as e:
            logger.warning("Price poll failed: %s", e)
            entries = self.tracker.record_failure("Failed to fetch latest prices")
        else:
            entries = self.tracker.update(snapshot)

        if self.on_update:
            self.on_update(entries)
        return entries

    async def _run(self) -> None:
        while True:
            await self.poll_once()
            await asyncio.sleep(self.interval)

    def start(self) -> Optional[asyncio.Task]:
        """Start polling; returns the task handle, or None for an empty list."""
        if not self.tracker.symbols:
            return None
        if not self.running:
            self._task = asyncio.create_task(self._run())
        return self._task

    def _cancel(self) -> Optional[asyncio.Task]:
        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()
        return task

    async def stop(self) -> None:
        task = self._cancel()
        if task is not None:
            try:
                await task
            except asyncio.CancelledError:
                pass

    def set_symbols(self, symbols: Iterable[str]) -> None:
        """Change the watchlist; polling stops when it becomes empty."""
        self.tracker.set_symbols(symbols)
        if not self.tracker.symbols:
            self._cancel()

    async def __aenter__(self) -> "WatchlistPoller":
        self.start()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.stop()
