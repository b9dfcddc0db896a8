"""Data models for CryptoChart."""

from cryptochart.models.candle import Candle
from cryptochart.models.symbol import SymbolInfo
from cryptochart.models.trendline import CaptureState, TrendlinePoint, TrendlineSnapshot
from cryptochart.models.viewport import ViewportState
from cryptochart.models.watchlist import WatchlistEntry

__all__ = [
    "Candle",
    "CaptureState",
    "SymbolInfo",
    "TrendlinePoint",
    "TrendlineSnapshot",
    "ViewportState",
    "WatchlistEntry",
]
