"""Shared fixtures and strategies for CryptoChart tests."""

import tempfile
from pathlib import Path

import pytest
from hypothesis import strategies as st

from cryptochart.models import Candle


def make_candles(count: int, start: int = 1_700_000_000, step: int = 60) -> list[Candle]:
    """Build an ascending candle series with simple rising prices."""
    candles = []
    for i in range(count):
        base = 100.0 + i
        candles.append(Candle(
            time=start + i * step,
            open=base,
            high=base + 2.0,
            low=base - 1.0,
            close=base + 1.0,
            volume=10.0 + i,
        ))
    return candles


@st.composite
def candle_series(draw, min_size: int = 0, max_size: int = 300):
    """Strategy for an ascending candle series."""
    count = draw(st.integers(min_value=min_size, max_value=max_size))
    start = draw(st.integers(min_value=1, max_value=1_900_000_000))
    return make_candles(count, start=start)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)
