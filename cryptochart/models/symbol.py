"""Exchange symbol metadata model."""

from pydantic import BaseModel, Field


class SymbolInfo(BaseModel):
    """A tradable pair as listed by the exchange."""

    symbol: str = Field(..., min_length=1, description="Pair identifier (e.g., BTCUSDT)")
    base_asset: str = Field(..., description="Base asset (e.g., BTC)")
    quote_asset: str = Field(..., description="Quote asset (e.g., USDT)")

    model_config = {"frozen": True}
