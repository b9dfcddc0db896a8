"""Percent change tracking between watchlist price polls."""

import math
from typing import Any, Iterable, Mapping, Optional

from cryptochart.models import WatchlistEntry


def _as_price(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        price = float(value)
    except (TypeError, ValueError):
        return None
    return price if math.isfinite(price) else None


def percent_change(previous: Any, current: Any) -> Optional[float]:
    """Percent change from ``previous`` to ``current``.

    Returns None when either price is not a finite number or the
    previous price is zero.
    """
    old = _as_price(previous)
    new = _as_price(current)
    if old is None or new is None or old == 0:
        return None
    return (new - old) / old * 100


class DeltaTracker:
    """Keeps the last two observed prices per symbol.

    Symbols missing from a snapshot keep their previous price and change.
    A symbol seen for the first time has no change yet.
    """

    def __init__(self, symbols: Iterable[str] = ()):
        self._symbols: list[str] = list(dict.fromkeys(symbols))
        self._prices: dict[str, float] = {}
        self._previous: dict[str, float] = {}
        self._changes: dict[str, float] = {}
        self.last_error: Optional[str] = None

    @property
    def symbols(self) -> list[str]:
        return list(self._symbols)

    def set_symbols(self, symbols: Iterable[str]) -> None:
        """Replace the tracked symbol set, forgetting removed symbols."""
        self._symbols = list(dict.fromkeys(symbols))
        keep = set(self._symbols)
        for table in (self._prices, self._previous, self._changes):
            for symbol in [s for s in table if s not in keep]:
                del table[symbol]

    def update(self, snapshot: Mapping[str, Any]) -> list[WatchlistEntry]:
        """Apply a successful poll.

        Args:
            snapshot: Mapping of symbol to latest price.

        Returns:
            Entries for all tracked symbols.
        """
        tracked = set(self._symbols)
        for symbol, value in snapshot.items():
            price = _as_price(value)
            if symbol not in tracked or price is None:
                continue

            previous = self._prices.get(symbol)
            if previous is not None:
                change = percent_change(previous, price)
                if change is not None:
                    self._changes[symbol] = change
                self._previous[symbol] = previous
            self._prices[symbol] = price

        self.last_error = None
        return self.entries()

    def record_failure(self, message: str) -> list[WatchlistEntry]:
        """Note a failed poll; existing prices and changes are kept."""
        self.last_error = message
        return self.entries()

    def entry(self, symbol: str) -> WatchlistEntry:
        return WatchlistEntry(
            symbol=symbol,
            price=self._prices.get(symbol),
            previous_price=self._previous.get(symbol),
            change_percent=self._changes.get(symbol),
        )

    def entries(self) -> list[WatchlistEntry]:
        return [self.entry(symbol) for symbol in self._symbols]
