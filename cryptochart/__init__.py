"""CryptoChart - terminal candlestick charts and watchlist for Binance markets."""

__version__ = "0.1.0"
