"""Viewport state model."""

from pydantic import BaseModel, Field

MIN_ZOOM = 1.0
MAX_ZOOM = 10.0


class ViewportState(BaseModel):
    """Zoom and scroll position of the chart view."""

    zoom_level: float = Field(default=MIN_ZOOM, ge=MIN_ZOOM, le=MAX_ZOOM, description="Zoom divisor")
    scroll_position: int = Field(default=0, ge=0, le=100, description="Scroll offset in percent")

    model_config = {"frozen": True}

    @property
    def is_zoomed(self) -> bool:
        return self.zoom_level > MIN_ZOOM
