"""Candle (OHLCV) data model."""

from datetime import datetime, timezone

from pydantic import BaseModel, Field


class Candle(BaseModel):
    """Represents a single OHLCV candle.

    High/low consistency with open/close is not validated; exchange data
    is passed through as received.
    """

    time: int = Field(..., ge=0, description="Bucket open time, UTC epoch seconds")
    open: float = Field(default=0.0, ge=0, description="Opening price")
    high: float = Field(default=0.0, ge=0, description="High price")
    low: float = Field(default=0.0, ge=0, description="Low price")
    close: float = Field(default=0.0, ge=0, description="Closing price")
    volume: float = Field(default=0.0, ge=0, description="Base asset volume")

    model_config = {"frozen": True}

    @property
    def midpoint(self) -> float:
        """Midpoint of the high/low range."""
        return (self.high + self.low) / 2

    @property
    def is_bullish(self) -> bool:
        """True when the candle closed at or above its open."""
        return self.close >= self.open

    @property
    def timestamp(self) -> datetime:
        """Open time as an aware UTC datetime."""
        return datetime.fromtimestamp(self.time, tz=timezone.utc)
