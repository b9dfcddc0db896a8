"""Two-click trendline capture.

States: IDLE (drawing off) -> ARMED -> ONE_POINT -> COMPLETE.

A commit while COMPLETE starts a new line from that point instead of
being blocked; COMPLETE only waits for the acknowledgment to be shown.
Points always come from the displayed (sampled) candles.
"""

import bisect
from typing import Optional, Sequence

from cryptochart.models import Candle, CaptureState, TrendlinePoint, TrendlineSnapshot

TIME_FORMAT = "%Y-%m-%d %H:%M:%S"


def point_from_candle(candle: Candle) -> TrendlinePoint:
    """Chart-space point for a candle: its time and high/low midpoint."""
    return TrendlinePoint(x=float(candle.time), y=candle.midpoint)


def nearest_candle(display: Sequence[Candle], time: float) -> Optional[Candle]:
    """Candle in the display sequence closest in time to ``time``."""
    if not display:
        return None
    times = [c.time for c in display]
    idx = bisect.bisect_left(times, time)
    if idx == 0:
        return display[0]
    if idx == len(display):
        return display[-1]
    before, after = display[idx - 1], display[idx]
    return before if time - before.time <= after.time - time else after


class TrendlineCapture:
    """State machine turning click/move events into a trendline."""

    def __init__(self):
        self._state = CaptureState.IDLE
        self._points: list[TrendlinePoint] = []
        self._preview: Optional[tuple[TrendlinePoint, TrendlinePoint]] = None

    @property
    def state(self) -> CaptureState:
        return self._state

    def snapshot(self) -> TrendlineSnapshot:
        return TrendlineSnapshot(
            state=self._state,
            points=tuple(self._points),
            preview=self._preview,
        )

    def _clear(self) -> None:
        self._points = []
        self._preview = None

    def set_drawing(self, enabled: bool) -> TrendlineSnapshot:
        """Turn drawing mode on or off; either way capture starts empty."""
        self._clear()
        self._state = CaptureState.ARMED if enabled else CaptureState.IDLE
        return self.snapshot()

    def toggle_drawing(self) -> TrendlineSnapshot:
        return self.set_drawing(self._state is CaptureState.IDLE)

    def commit(self, candle: Optional[Candle]) -> TrendlineSnapshot:
        """Handle a click/tap on a candle.

        Ignored while drawing mode is off or when nothing was hit.
        """
        if self._state is CaptureState.IDLE or candle is None:
            return self.snapshot()

        point = point_from_candle(candle)
        if len(self._points) < 2:
            self._points = [*self._points, point]
        else:
            self._points = [point]

        if len(self._points) == 2:
            self._state = CaptureState.COMPLETE
            self._preview = (self._points[0], self._points[1])
        else:
            self._state = CaptureState.ONE_POINT
            self._preview = None
        return self.snapshot()

    def hover(self, candle: Optional[Candle]) -> TrendlineSnapshot:
        """Handle a move/hover; only updates the preview in ONE_POINT."""
        if self._state is CaptureState.ONE_POINT and candle is not None:
            self._preview = (self._points[0], point_from_candle(candle))
        return self.snapshot()

    def acknowledge(self, keep_drawing: bool = False) -> TrendlineSnapshot:
        """Dismiss the completed-line acknowledgment.

        Clears the points. Drawing mode is switched off unless
        ``keep_drawing`` is set, in which case a new capture can begin.
        """
        return self.set_drawing(keep_drawing and self._state is not CaptureState.IDLE)


def acknowledgment_details(snapshot: TrendlineSnapshot) -> Optional[dict[str, str]]:
    """Formatted start/end price and time for a completed trendline.

    Returns:
        Dict with start_price, start_time, end_price, end_time, or None
        unless the snapshot is COMPLETE.
    """
    if snapshot.state is not CaptureState.COMPLETE or len(snapshot.points) != 2:
        return None
    start, end = snapshot.points
    return {
        "start_price": f"{start.y:.2f}",
        "start_time": start.timestamp.strftime(TIME_FORMAT),
        "end_price": f"{end.y:.2f}",
        "end_time": end.timestamp.strftime(TIME_FORMAT),
    }
