"""Candlestick data pipeline: normalise, sample, merge, annotate."""

from cryptochart.chart.merge import merge_closed_candle
from cryptochart.chart.normalizer import normalize_klines, normalize_stream_kline
from cryptochart.chart.sampler import DEFAULT_SAMPLE_RATE, ViewportController, sample_viewport
from cryptochart.chart.session import ChartSession
from cryptochart.chart.trendline import TrendlineCapture

__all__ = [
    "ChartSession",
    "DEFAULT_SAMPLE_RATE",
    "TrendlineCapture",
    "ViewportController",
    "merge_closed_candle",
    "normalize_klines",
    "normalize_stream_kline",
    "sample_viewport",
]
