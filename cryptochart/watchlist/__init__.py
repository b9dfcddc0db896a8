"""Watchlist price tracking."""

from cryptochart.watchlist.poller import WatchlistPoller
from cryptochart.watchlist.tracker import DeltaTracker, percent_change

__all__ = ["DeltaTracker", "WatchlistPoller", "percent_change"]
