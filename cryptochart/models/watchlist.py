"""Watchlist entry model."""

from typing import Optional

from pydantic import BaseModel, Field


class WatchlistEntry(BaseModel):
    """A watched symbol with its last observed prices."""

    symbol: str = Field(..., min_length=1, description="Pair identifier")
    price: Optional[float] = Field(default=None, description="Latest observed price")
    previous_price: Optional[float] = Field(default=None, description="Price seen on the poll before")
    change_percent: Optional[float] = Field(
        default=None, description="Percent change versus the previous price, None when unknown"
    )

    model_config = {"frozen": True}

    def format_price(self) -> str:
        """Price with thousands separator, or '-' when not yet fetched."""
        if not self.price:
            return "-"
        return f"${self.price:,.2f}"

    def format_change(self) -> str:
        """Arrow plus absolute percent, or '-' when no change is known."""
        if self.change_percent is None:
            return "-"
        arrow = "↑" if self.change_percent >= 0 else "↓"
        return f"{arrow} {abs(self.change_percent):.2f}%"
