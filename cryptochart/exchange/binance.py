"""Binance market data client.

REST endpoints are read with aiohttp; closed candles are streamed from
the public kline websocket.
"""

import asyncio
import json
import logging
from typing import Any, Callable, Iterable, Mapping, Optional

import aiohttp
import websockets

from cryptochart.chart.normalizer import normalize_klines, normalize_stream_kline
from cryptochart.config import Settings
from cryptochart.errors import MalformedData, NetworkFailure
from cryptochart.exchange.base import BaseExchange, CandleCallback
from cryptochart.models import Candle, SymbolInfo
from cryptochart.timeframes import TIMEFRAMES, to_interval

logger = logging.getLogger(__name__)


class KlineSubscription:
    """A reconnecting kline stream for one symbol/interval.

    Every connection loss (clean or not) counts against the retry ceiling;
    once it is reached the subscription stops and stays silent. Closing it
    cancels any pending reconnect and it never restarts afterwards.
    """

    def __init__(
        self,
        url: str,
        on_candle: CandleCallback,
        max_reconnects: int = 5,
        reconnect_delay: float = 5.0,
        connect: Callable[..., Any] = websockets.connect,
    ):
        """Initialize the subscription (call :meth:`start` to connect).

        Args:
            url: Full stream URL.
            on_candle: Called once per closed candle.
            max_reconnects: Reconnect attempts before giving up.
            reconnect_delay: Seconds to wait before each reconnect.
            connect: Websocket connect factory.
        """
        self.url = url
        self.on_candle = on_candle
        self.max_reconnects = max_reconnects
        self.reconnect_delay = reconnect_delay
        self._connect = connect
        self._task: Optional[asyncio.Task] = None
        self._closed = False
        self.reconnects = 0
        self.exhausted = False

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> "KlineSubscription":
        if self._closed:
            raise RuntimeError("Subscription already closed")
        if self._task is None:
            self._task = asyncio.create_task(self._run())
        return self

    async def close(self) -> None:
        self._closed = True
        if self._task is not None and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass

    async def __aenter__(self) -> "KlineSubscription":
        return self.start()

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    def _handle_message(self, raw: Any) -> None:
        try:
            message = json.loads(raw)
        except (TypeError, ValueError):
            logger.debug("Ignoring unparsable stream message")
            return

        candle = normalize_stream_kline(message)
        if candle is None:
            return

        try:
            self.on_candle(candle)
        except Exception:
            logger.exception("Candle callback failed for %s", self.url)

    async def _run(self) -> None:
        while not self._closed:
            try:
                async with self._connect(self.url) as ws:
                    logger.debug("Connected to %s", self.url)
                    async for raw in ws:
                        self._handle_message(raw)
            except (websockets.WebSocketException, OSError, asyncio.TimeoutError) as e:
                logger.debug("Stream %s dropped: %s", self.url, e)

            if self._closed:
                break
            if self.reconnects >= self.max_reconnects:
                self.exhausted = True
                logger.warning(
                    "Stream %s stopped after %d reconnect attempt(s)",
                    self.url, self.reconnects,
                )
                break

            self.reconnects += 1
            logger.info(
                "Reconnecting to %s in %.1fs (attempt %d/%d)",
                self.url, self.reconnect_delay, self.reconnects, self.max_reconnects,
            )
            await asyncio.sleep(self.reconnect_delay)


class BinanceExchange(BaseExchange):
    """Binance spot market data via the public REST and stream APIs."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        timeframes: Mapping[str, tuple[str, str]] = TIMEFRAMES,
    ):
        """Initialize the client.

        Args:
            settings: Endpoint URLs, limits and retry policy.
            timeframes: Timeframe table used to resolve intervals.
        """
        self.settings = settings or Settings()
        self.timeframes = timeframes

    async def _get_json(self, path: str, operation: str, params: Optional[dict] = None) -> Any:
        """GET an endpoint and decode JSON, mapping every failure to NetworkFailure."""
        url = f"{self.settings.rest_url}/{path}"
        timeout = aiohttp.ClientTimeout(total=self.settings.request_timeout)

        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.get(url, params=params) as resp:
                    if resp.status >= 400:
                        text = await resp.text()
                        raise NetworkFailure(operation, text[:200], status=resp.status)
                    return await resp.json()
        except NetworkFailure:
            raise
        except asyncio.TimeoutError:
            raise NetworkFailure(operation, "request timed out") from None
        except (aiohttp.ClientError, ValueError) as e:
            raise NetworkFailure(operation, str(e)) from e

    async def fetch_ticker_prices(self, symbols: Iterable[str]) -> dict[str, float]:
        wanted = set(symbols)
        data = await self._get_json("ticker/price", "fetch ticker prices")
        if not isinstance(data, list):
            raise MalformedData("Expected a list of tickers")

        prices = {}
        for item in data:
            if not isinstance(item, dict):
                logger.debug("Ignoring ticker entry %r", item)
                continue
            symbol = item.get("symbol")
            if symbol not in wanted:
                continue
            try:
                prices[symbol] = float(item.get("price"))
            except (TypeError, ValueError):
                logger.debug("Unparsable price for %s: %r", symbol, item.get("price"))
        return prices

    async def fetch_exchange_symbols(self) -> list[SymbolInfo]:
        data = await self._get_json("exchangeInfo", "fetch exchange symbols")
        if not isinstance(data, dict):
            raise MalformedData("Expected an exchangeInfo object")

        return [
            SymbolInfo(
                symbol=item["symbol"],
                base_asset=item.get("baseAsset", ""),
                quote_asset=item.get("quoteAsset", ""),
            )
            for item in data.get("symbols", [])
            if isinstance(item, dict) and item.get("status") == "TRADING" and item.get("symbol")
        ]

    async def fetch_raw_klines(self, symbol: str, timeframe: str) -> Any:
        """Fetch the undecoded kline arrays for a symbol."""
        interval = to_interval(timeframe, self.timeframes)
        params = {
            "symbol": symbol.upper(),
            "interval": interval,
            "limit": self.settings.kline_limit,
        }
        return await self._get_json("klines", f"fetch klines for {symbol}", params=params)

    async def fetch_klines(self, symbol: str, timeframe: str) -> list[Candle]:
        return normalize_klines(await self.fetch_raw_klines(symbol, timeframe))

    def stream_url(self, symbol: str, timeframe: str) -> str:
        interval = to_interval(timeframe, self.timeframes)
        return f"{self.settings.stream_url}/{symbol.lower()}@kline_{interval}"

    def subscribe_candle_closes(
        self,
        symbol: str,
        timeframe: str,
        on_candle: CandleCallback,
    ) -> KlineSubscription:
        subscription = KlineSubscription(
            self.stream_url(symbol, timeframe),
            on_candle,
            max_reconnects=self.settings.max_reconnects,
            reconnect_delay=self.settings.reconnect_delay,
        )
        return subscription.start()
