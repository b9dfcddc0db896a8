"""Kline normalisation.

Converts Binance kline arrays into :class:`Candle` sequences. Records are
validated one by one: a bad record is dropped, never raised.

Numeric fallback policy: any OHLCV field that does not parse to a finite,
non-negative number becomes ``0.0``. The same rule applies to REST and
stream payloads.
"""

import logging
import math
from typing import Any, Optional, Sequence

from cryptochart.errors import MalformedData
from cryptochart.models import Candle

logger = logging.getLogger(__name__)

# Positional layout of a Binance kline array
TIME, OPEN, HIGH, LOW, CLOSE, VOLUME = range(6)
MIN_FIELDS = 6


def parse_number(value: Any) -> float:
    """Parse a price/volume field, falling back to 0.0."""
    if isinstance(value, bool):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(number) or number < 0:
        return 0.0
    return number


def _ms_to_seconds(value: Any) -> Optional[int]:
    """Millisecond timestamp to whole seconds, None when absent or invalid."""
    if value is None or isinstance(value, bool):
        return None
    try:
        millis = int(float(value))
    except (TypeError, ValueError, OverflowError):
        return None
    seconds = millis // 1000
    return seconds if seconds > 0 else None


def _is_zero(value: Any) -> bool:
    if value is None or value == "":
        return True
    try:
        return float(value) == 0
    except (TypeError, ValueError):
        return False


def normalize_record(record: Any) -> Optional[Candle]:
    """Normalise one kline array, or return None if it must be discarded."""
    if isinstance(record, (str, bytes)) or not isinstance(record, Sequence):
        return None
    if len(record) < MIN_FIELDS:
        return None

    time = _ms_to_seconds(record[TIME])
    if time is None or _is_zero(record[CLOSE]):
        return None

    return Candle(
        time=time,
        open=parse_number(record[OPEN]),
        high=parse_number(record[HIGH]),
        low=parse_number(record[LOW]),
        close=parse_number(record[CLOSE]),
        volume=parse_number(record[VOLUME]),
    )


def normalize_klines(records: Any) -> list[Candle]:
    """Normalise a kline payload into a candle series.

    Input order is preserved; the exchange already returns candles in
    ascending time.

    Args:
        records: Decoded JSON from the klines endpoint.

    Returns:
        Candles for every well-formed record.

    Raises:
        MalformedData: If the payload itself is not a list.
    """
    if not isinstance(records, list):
        raise MalformedData(f"Expected a list of klines, got {type(records).__name__}")

    candles = []
    for record in records:
        candle = normalize_record(record)
        if candle is not None:
            candles.append(candle)

    dropped = len(records) - len(candles)
    if dropped:
        logger.debug("Dropped %d malformed kline record(s) of %d", dropped, len(records))
    if records and not candles:
        logger.warning("No valid klines in a batch of %d record(s)", len(records))

    return candles


def normalize_stream_kline(message: Any) -> Optional[Candle]:
    """Extract a closed candle from a kline stream event.

    Only events flagged closed (``k.x``) yield a candle; in-progress
    updates and non-kline messages return None.
    """
    if not isinstance(message, dict):
        return None
    kline = message.get("k")
    if not isinstance(kline, dict) or not kline.get("x"):
        return None

    time = _ms_to_seconds(kline.get("t"))
    if time is None:
        return None

    return Candle(
        time=time,
        open=parse_number(kline.get("o")),
        high=parse_number(kline.get("h")),
        low=parse_number(kline.get("l")),
        close=parse_number(kline.get("c")),
        volume=parse_number(kline.get("v")),
    )
