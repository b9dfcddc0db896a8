"""Supported chart timeframes."""

from types import MappingProxyType
from typing import Mapping

# timeframe -> (exchange interval, display label)
TIMEFRAMES: Mapping[str, tuple[str, str]] = MappingProxyType({
    "1m": ("1m", "1 Minute"),
    "5m": ("5m", "5 Minutes"),
    "15m": ("15m", "15 Minutes"),
    "1h": ("1h", "1 Hour"),
    "4h": ("4h", "4 Hours"),
    "1d": ("1d", "1 Day"),
})

VALID_TIMEFRAMES = list(TIMEFRAMES)


def to_interval(timeframe: str, table: Mapping[str, tuple[str, str]] = TIMEFRAMES) -> str:
    """Map a timeframe to the exchange's kline interval.

    Raises:
        ValueError: If the timeframe is not supported.
    """
    try:
        return table[timeframe][0]
    except KeyError:
        raise ValueError(
            f"Unsupported timeframe: {timeframe}. Valid: {', '.join(table)}"
        ) from None


def label(timeframe: str, table: Mapping[str, tuple[str, str]] = TIMEFRAMES) -> str:
    """Human readable label for a timeframe."""
    return table[timeframe][1] if timeframe in table else timeframe
