"""Exchange clients for CryptoChart."""

from cryptochart.exchange.base import BaseExchange, CandleCallback, Subscription
from cryptochart.exchange.binance import BinanceExchange, KlineSubscription
from cryptochart.exchange.search import filter_symbols

__all__ = [
    "BaseExchange",
    "BinanceExchange",
    "CandleCallback",
    "KlineSubscription",
    "Subscription",
    "filter_symbols",
]
