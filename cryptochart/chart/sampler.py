"""Viewport sampling and zoom/scroll control.

The display sequence is recomputed from the full series on every call:
pick the visible window from zoom and scroll, then keep every Nth candle
of that window so the rendered point count stays bounded.
"""

from typing import Sequence

from cryptochart.errors import UserInputRejected
from cryptochart.models import Candle, ViewportState
from cryptochart.models.viewport import MAX_ZOOM, MIN_ZOOM

DEFAULT_SAMPLE_RATE = 10
ZOOM_STEP = 2


def visible_range(total: int, viewport: ViewportState) -> tuple[int, int]:
    """Compute the ``[start, end)`` index window for a series length.

    Args:
        total: Number of candles in the full series.
        viewport: Current zoom and scroll.

    Returns:
        Start and end indices; ``(0, 0)`` for an empty series.
    """
    if total <= 0:
        return 0, 0

    visible = max(int(total // viewport.zoom_level), 1)
    max_start = total - visible
    start = int(max_start * (viewport.scroll_position / 100))
    start = min(max(start, 0), max_start)
    end = min(total, start + visible)
    return start, end


def downsample(candles: Sequence[Candle], sample_rate: int = DEFAULT_SAMPLE_RATE) -> list[Candle]:
    """Keep every ``sample_rate``-th candle, starting with the first."""
    if sample_rate < 1:
        raise ValueError(f"sample_rate must be >= 1, got {sample_rate}")
    return list(candles[::sample_rate])


def sample_viewport(
    series: Sequence[Candle],
    viewport: ViewportState,
    sample_rate: int = DEFAULT_SAMPLE_RATE,
) -> list[Candle]:
    """Derive the display sequence for the current viewport.

    Args:
        series: Full candle series, ascending by time.
        viewport: Zoom level and scroll position.
        sample_rate: Stride used for downsampling the visible window.

    Returns:
        A new list; the input series is never modified.
    """
    start, end = visible_range(len(series), viewport)
    return downsample(series[start:end], sample_rate)


class ViewportController:
    """Owns the viewport state and applies zoom/scroll actions.

    Each action replaces the immutable :class:`ViewportState`, so
    snapshots handed out earlier never change.
    """

    def __init__(self, state: ViewportState | None = None):
        self._state = state or ViewportState()

    @property
    def state(self) -> ViewportState:
        return self._state

    def zoom_in(self) -> ViewportState:
        """Double the zoom level, capped at the maximum."""
        zoom = min(self._state.zoom_level * ZOOM_STEP, MAX_ZOOM)
        self._state = self._state.model_copy(update={"zoom_level": zoom})
        return self._state

    def zoom_out(self) -> ViewportState:
        """Halve the zoom level, floored at 1."""
        zoom = max(self._state.zoom_level / ZOOM_STEP, MIN_ZOOM)
        self._state = self._state.model_copy(update={"zoom_level": zoom})
        return self._state

    def reset(self) -> ViewportState:
        """Back to the full series with no scroll offset."""
        self._state = ViewportState()
        return self._state

    def set_scroll(self, position: int) -> ViewportState:
        """Move the visible window.

        Raises:
            UserInputRejected: If the chart is not zoomed in.
        """
        if not self._state.is_zoomed:
            raise UserInputRejected("Please zoom in first to use the scroll slider")
        position = min(max(int(position), 0), 100)
        self._state = self._state.model_copy(update={"scroll_position": position})
        return self._state
