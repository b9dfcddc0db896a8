"""CLI commands for CryptoChart.

This package provides the command-line interface for CryptoChart,
including charting, live streaming, trendlines, search and watchlists.
"""

from cryptochart.cli.main import cli, main

__all__ = ["cli", "main"]
