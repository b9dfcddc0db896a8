"""Trendline capture models."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class CaptureState(str, Enum):
    """States of the two-click trendline capture."""

    IDLE = "idle"
    ARMED = "armed"
    ONE_POINT = "one_point"
    COMPLETE = "complete"


class TrendlinePoint(BaseModel):
    """A chart-space point: time on the x axis, price on the y axis."""

    x: float = Field(..., description="Epoch seconds")
    y: float = Field(..., description="Price")

    model_config = {"frozen": True}

    @property
    def timestamp(self) -> datetime:
        """Point time in the local timezone."""
        return datetime.fromtimestamp(self.x).astimezone()


class TrendlineSnapshot(BaseModel):
    """Immutable view of the capture state handed to the renderer."""

    state: CaptureState = Field(..., description="Current capture state")
    points: tuple[TrendlinePoint, ...] = Field(default=(), description="Committed points")
    preview: Optional[tuple[TrendlinePoint, TrendlinePoint]] = Field(
        default=None, description="Segment to draw (dashed while previewing)"
    )

    model_config = {"frozen": True}

    @property
    def drawing(self) -> bool:
        return self.state is not CaptureState.IDLE
