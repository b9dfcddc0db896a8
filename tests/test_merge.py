"""Property-based tests for merging streamed candle closes.

**Feature: crypto-chart**
"""

from hypothesis import given, settings
from hypothesis import strategies as st

from cryptochart.chart.merge import merge_closed_candle
from cryptochart.models import Candle

from conftest import candle_series


def _candle_at(time: int, close: float = 999.0) -> Candle:
    return Candle(time=time, open=close, high=close + 1, low=close - 1, close=close, volume=1.0)


class TestReplaceLast:
    """
    **Feature: crypto-chart, Property 5: Same-Time Candle Replaces Last**

    *For any* series, a candle for the last bar's time replaces it and the
    length is unchanged.
    """

    @given(series=candle_series(min_size=1, max_size=100))
    @settings(max_examples=100)
    def test_same_time_replaces(self, series: list[Candle]):
        length = len(series)
        update = _candle_at(series[-1].time)

        changed = merge_closed_candle(series, update)

        assert changed
        assert len(series) == length
        assert series[-1] == update


class TestAppendNewer:
    """
    **Feature: crypto-chart, Property 6: Newer Candle Appends**

    *For any* series, a strictly later candle grows it by exactly one.
    """

    @given(
        series=candle_series(min_size=0, max_size=100),
        gap=st.integers(min_value=1, max_value=86_400),
    )
    @settings(max_examples=100)
    def test_newer_appends(self, series: list[Candle], gap: int):
        length = len(series)
        last_time = series[-1].time if series else 0
        update = _candle_at(last_time + gap)

        changed = merge_closed_candle(series, update)

        assert changed
        assert len(series) == length + 1
        assert series[-1] == update


class TestDiscardOlder:
    """
    **Feature: crypto-chart, Property 7: Out-Of-Order Candle Discarded**

    *For any* candle older than the last bar, the series is unchanged.
    """

    @given(series=candle_series(min_size=2, max_size=100), data=st.data())
    @settings(max_examples=100)
    def test_older_discarded(self, series: list[Candle], data):
        before = list(series)
        time = data.draw(st.integers(min_value=0, max_value=series[-1].time - 1))

        changed = merge_closed_candle(series, _candle_at(time))

        assert not changed
        assert series == before
