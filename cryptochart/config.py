"""Configuration loading for CryptoChart.

Settings live in ``~/.config/cryptochart/config.toml`` and are split into
``[chart]``, ``[exchange]`` and ``[watchlist]`` tables. Every key is
optional; missing keys fall back to the defaults on :class:`Settings`.
"""

import logging
from pathlib import Path
from typing import Optional

import toml
from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / ".config" / "cryptochart"
CONFIG_PATH = CONFIG_DIR / "config.toml"
DB_PATH = CONFIG_DIR / "cryptochart.db"


class Settings(BaseModel):
    """Runtime settings."""

    # [chart]
    sample_rate: int = Field(default=10, ge=1, description="Keep every Nth candle")
    kline_limit: int = Field(default=1000, ge=1, le=1000, description="Bars per history fetch")
    default_symbol: str = Field(default="BTCUSDT", min_length=1)
    default_timeframe: str = Field(default="1h")

    # [exchange]
    rest_url: str = Field(default="https://api.binance.com/api/v3")
    stream_url: str = Field(default="wss://stream.binance.com:9443/ws")
    request_timeout: float = Field(default=10.0, gt=0)
    max_reconnects: int = Field(default=5, ge=0, description="Stream retry ceiling")
    reconnect_delay: float = Field(default=5.0, ge=0, description="Seconds between reconnects")

    # [watchlist]
    poll_interval: float = Field(default=5.0, gt=0, description="Seconds between price polls")
    default_watchlist: list[str] = Field(
        default_factory=lambda: ["BTCUSDT", "ETHUSDT", "BNBUSDT"]
    )

    model_config = {"frozen": True}


SECTIONS = {
    "chart": ("sample_rate", "kline_limit", "default_symbol", "default_timeframe"),
    "exchange": ("rest_url", "stream_url", "request_timeout", "max_reconnects", "reconnect_delay"),
    "watchlist": ("poll_interval", "default_watchlist"),
}


def load_settings(config_path: Optional[Path] = None) -> Settings:
    """Load settings from the toml config file.

    A missing or unreadable file yields the defaults.
    """
    path = config_path or CONFIG_PATH

    if not path.exists():
        return Settings()

    try:
        raw = toml.load(path)
    except (OSError, toml.TomlDecodeError) as e:
        logger.warning("Could not read config %s: %s", path, e)
        return Settings()

    values = {}
    for section, keys in SECTIONS.items():
        table = raw.get(section, {})
        for key in keys:
            if key in table:
                values[key] = table[key]

    try:
        return Settings(**values)
    except ValidationError as e:
        logger.warning("Invalid config %s, using defaults: %s", path, e)
        return Settings()


def create_template_config(config_path: Optional[Path] = None) -> Path:
    """Write a config file populated with the default settings."""
    path = config_path or CONFIG_PATH
    path.parent.mkdir(parents=True, exist_ok=True)

    defaults = Settings().model_dump()
    template = {
        section: {key: defaults[key] for key in keys}
        for section, keys in SECTIONS.items()
    }

    with open(path, "w") as f:
        toml.dump(template, f)

    return path
