"""Tests for the Binance client and kline stream subscription.

**Feature: crypto-chart**
"""

import asyncio
import json
from unittest.mock import AsyncMock, MagicMock, patch

import aiohttp
import pytest

from cryptochart.config import Settings
from cryptochart.errors import MalformedData, NetworkFailure
from cryptochart.exchange.binance import BinanceExchange, KlineSubscription
from cryptochart.exchange.search import filter_symbols
from cryptochart.models import SymbolInfo


# ============================================================================
# Test Fixtures
# ============================================================================

def _mock_session(status: int, payload=None, text: str = ""):
    """Create a mock aiohttp ClientSession returning one response."""
    resp = MagicMock()
    resp.status = status
    resp.json = AsyncMock(return_value=payload)
    resp.text = AsyncMock(return_value=text)
    session = MagicMock()
    session.__aenter__.return_value = session
    session.get.return_value.__aenter__.return_value = resp
    return session


def _kline_event(open_ms: int, closed: bool = True) -> str:
    return json.dumps({
        "e": "kline",
        "k": {"t": open_ms, "o": "1", "h": "2", "l": "0.5", "c": "1.5", "v": "10", "x": closed},
    })


class FakeSocket:
    """Async-iterable stand-in for a websocket connection."""

    def __init__(self, messages: list):
        self.messages = messages

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        return False

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for message in self.messages:
            yield message


class FakeConnect:
    """Connect factory replaying scripted outcomes, then refusing."""

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.calls = 0

    def __call__(self, url):
        self.calls += 1
        outcome = self.outcomes.pop(0) if self.outcomes else OSError("connection refused")
        if isinstance(outcome, Exception):
            raise outcome
        return FakeSocket(outcome)


# ============================================================================
# REST
# ============================================================================

class TestRestErrors:
    """Transport and HTTP errors surface as a single NetworkFailure."""

    def test_http_error_status(self):
        exchange = BinanceExchange()
        session = _mock_session(400, text='{"code":-1121,"msg":"Invalid symbol."}')

        with patch("cryptochart.exchange.binance.aiohttp.ClientSession", return_value=session):
            with pytest.raises(NetworkFailure) as exc_info:
                asyncio.run(exchange.fetch_klines("NOPE", "1h"))

        assert exc_info.value.status == 400
        assert "Invalid symbol" in str(exc_info.value)

    def test_connection_error(self):
        exchange = BinanceExchange()

        with patch(
            "cryptochart.exchange.binance.aiohttp.ClientSession",
            side_effect=aiohttp.ClientConnectionError("no route"),
        ):
            with pytest.raises(NetworkFailure) as exc_info:
                asyncio.run(exchange.fetch_ticker_prices({"BTCUSDT"}))

        assert exc_info.value.operation == "fetch ticker prices"

    def test_success_decodes_json(self):
        exchange = BinanceExchange(Settings(kline_limit=2))
        payload = [[1_700_000_000_000, "1", "2", "0.5", "1.5", "10"]]
        session = _mock_session(200, payload=payload)

        with patch("cryptochart.exchange.binance.aiohttp.ClientSession", return_value=session):
            candles = asyncio.run(exchange.fetch_klines("btcusdt", "15m"))

        assert [c.time for c in candles] == [1_700_000_000]
        session.get.assert_called_once_with(
            "https://api.binance.com/api/v3/klines",
            params={"symbol": "BTCUSDT", "interval": "15m", "limit": 2},
        )


class TestRestParsing:
    """Endpoint payloads are reduced to what the chart needs."""

    def test_ticker_prices_filtered(self):
        exchange = BinanceExchange()
        data = [
            {"symbol": "BTCUSDT", "price": "43000.10"},
            {"symbol": "ETHUSDT", "price": "2300.5"},
            {"symbol": "BNBUSDT", "price": "bad"},
        ]

        with patch.object(BinanceExchange, "_get_json", new=AsyncMock(return_value=data)):
            prices = asyncio.run(exchange.fetch_ticker_prices(["BTCUSDT", "BNBUSDT", "XRPUSDT"]))

        assert prices == {"BTCUSDT": 43000.10}

    def test_ticker_prices_skip_non_objects(self):
        exchange = BinanceExchange()
        data = [None, "BTCUSDT", ["ETHUSDT", "1"], {"symbol": "BTCUSDT", "price": "42000"}]

        with patch.object(BinanceExchange, "_get_json", new=AsyncMock(return_value=data)):
            prices = asyncio.run(exchange.fetch_ticker_prices(["BTCUSDT", "ETHUSDT"]))

        assert prices == {"BTCUSDT": 42000.0}

    def test_ticker_prices_wrong_shape(self):
        exchange = BinanceExchange()

        with patch.object(BinanceExchange, "_get_json", new=AsyncMock(return_value={"msg": "x"})):
            with pytest.raises(MalformedData):
                asyncio.run(exchange.fetch_ticker_prices(["BTCUSDT"]))

    def test_exchange_symbols_trading_only(self):
        exchange = BinanceExchange()
        data = {"symbols": [
            {"symbol": "BTCUSDT", "status": "TRADING", "baseAsset": "BTC", "quoteAsset": "USDT"},
            {"symbol": "OLDBTC", "status": "BREAK", "baseAsset": "OLD", "quoteAsset": "BTC"},
        ]}

        with patch.object(BinanceExchange, "_get_json", new=AsyncMock(return_value=data)):
            symbols = asyncio.run(exchange.fetch_exchange_symbols())

        assert symbols == [SymbolInfo(symbol="BTCUSDT", base_asset="BTC", quote_asset="USDT")]

    def test_unknown_timeframe(self):
        with pytest.raises(ValueError):
            asyncio.run(BinanceExchange().fetch_klines("BTCUSDT", "7m"))

    def test_stream_url(self):
        url = BinanceExchange().stream_url("BTCUSDT", "1h")

        assert url == "wss://stream.binance.com:9443/ws/btcusdt@kline_1h"


class TestSymbolSearch:
    """Case-insensitive substring search over symbol and assets."""

    SYMBOLS = [
        SymbolInfo(symbol="BTCUSDT", base_asset="BTC", quote_asset="USDT"),
        SymbolInfo(symbol="ETHBTC", base_asset="ETH", quote_asset="BTC"),
        SymbolInfo(symbol="SOLEUR", base_asset="SOL", quote_asset="EUR"),
    ]

    def test_matches_any_field(self):
        assert [s.symbol for s in filter_symbols(self.SYMBOLS, "btc")] == ["BTCUSDT", "ETHBTC"]
        assert [s.symbol for s in filter_symbols(self.SYMBOLS, "Eur")] == ["SOLEUR"]

    def test_empty_query(self):
        assert filter_symbols(self.SYMBOLS, "  ") == []


# ============================================================================
# Streaming
# ============================================================================

class TestKlineSubscription:
    """
    **Feature: crypto-chart, Property 14: Bounded Reconnects**

    The stream reconnects at most ``max_reconnects`` times, delivers only
    closed candles, and never restarts after being closed.
    """

    def test_retry_ceiling(self):
        connect = FakeConnect()
        received = []

        async def run():
            sub = KlineSubscription("wss://x", received.append, max_reconnects=3,
                                    reconnect_delay=0, connect=connect)
            sub.start()
            await sub._task
            return sub

        sub = asyncio.run(run())

        assert connect.calls == 4
        assert sub.reconnects == 3
        assert sub.exhausted
        assert received == []

    def test_only_closed_candles_delivered(self):
        messages = [
            _kline_event(60_000, closed=True),
            _kline_event(120_000, closed=False),
            "not json",
            json.dumps({"result": None, "id": 1}),
            _kline_event(120_000, closed=True),
        ]
        connect = FakeConnect(messages)
        received = []

        async def run():
            sub = KlineSubscription("wss://x", received.append, max_reconnects=0,
                                    reconnect_delay=0, connect=connect)
            sub.start()
            await sub._task

        asyncio.run(run())

        assert [c.time for c in received] == [60, 120]

    def test_callback_error_does_not_stop_stream(self):
        connect = FakeConnect([_kline_event(60_000), _kline_event(120_000)])
        received = []

        def on_candle(candle):
            received.append(candle)
            if len(received) == 1:
                raise RuntimeError("renderer exploded")

        async def run():
            sub = KlineSubscription("wss://x", on_candle, max_reconnects=0,
                                    reconnect_delay=0, connect=connect)
            sub.start()
            await sub._task

        asyncio.run(run())

        assert len(received) == 2

    def test_close_cancels_pending_reconnect(self):
        connect = FakeConnect()

        async def run():
            sub = KlineSubscription("wss://x", lambda c: None, max_reconnects=5,
                                    reconnect_delay=30, connect=connect)
            sub.start()
            await asyncio.sleep(0.01)
            await sub.close()
            return sub

        sub = asyncio.run(run())

        assert connect.calls == 1
        assert not sub.running
        assert not sub.exhausted
        with pytest.raises(RuntimeError):
            sub.start()

    def test_exchange_subscribe_starts_stream(self):
        async def run():
            sub = BinanceExchange().subscribe_candle_closes("BTCUSDT", "1m", lambda c: None)
            running = sub.running
            await sub.close()
            return sub, running

        sub, running = asyncio.run(run())

        assert running
        assert sub.url.endswith("btcusdt@kline_1m")
        assert not sub.running
