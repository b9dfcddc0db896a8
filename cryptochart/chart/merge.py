"""Merging streamed candle closes into a series."""

from cryptochart.models import Candle


def merge_closed_candle(series: list[Candle], candle: Candle) -> bool:
    """Apply a freshly closed candle to the series in place.

    - same time as the last candle: replace it (late correction)
    - later than the last candle: append
    - anything older: discard, never insert mid-series

    Args:
        series: Candle series, ascending by time. Mutated.
        candle: Closed candle from the stream.

    Returns:
        True if the series changed.
    """
    if not series:
        series.append(candle)
        return True

    last = series[-1]
    if candle.time == last.time:
        series[-1] = candle
        return True
    if candle.time > last.time:
        series.append(candle)
        return True
    return False
