"""Base exchange interface for CryptoChart."""

from abc import ABC, abstractmethod
from typing import Callable, Iterable, Protocol

from cryptochart.models import Candle, SymbolInfo

CandleCallback = Callable[[Candle], None]


class Subscription(Protocol):
    """Handle returned by a stream subscription."""

    async def close(self) -> None:
        """Stop the stream and any pending reconnect."""
        ...


class BaseExchange(ABC):
    """Abstract base class for market data sources.

    Fetch methods raise :class:`~cryptochart.errors.NetworkFailure` on any
    transport or decoding problem.
    """

    @abstractmethod
    async def fetch_ticker_prices(self, symbols: Iterable[str]) -> dict[str, float]:
        """Get the latest price for each requested symbol.

        Args:
            symbols: Symbols to look up.

        Returns:
            Mapping of symbol to last price; unknown symbols are omitted.
        """
        pass

    @abstractmethod
    async def fetch_exchange_symbols(self) -> list[SymbolInfo]:
        """Get all symbols currently trading on the exchange."""
        pass

    @abstractmethod
    async def fetch_klines(self, symbol: str, timeframe: str) -> list[Candle]:
        """Get recent candle history, normalised.

        Args:
            symbol: Pair identifier.
            timeframe: One of the supported timeframes.

        Returns:
            Candles ascending by time.

        Raises:
            ValueError: If the timeframe is not supported.
        """
        pass

    @abstractmethod
    def subscribe_candle_closes(
        self,
        symbol: str,
        timeframe: str,
        on_candle: CandleCallback,
    ) -> Subscription:
        """Start streaming closed candles to ``on_candle``.

        Must be called from a running event loop. The stream reconnects on
        its own up to a retry ceiling, then goes quiet.
        """
        pass
