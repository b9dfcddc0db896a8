"""Symbol search."""

from typing import Iterable

from cryptochart.models import SymbolInfo


def filter_symbols(symbols: Iterable[SymbolInfo], query: str) -> list[SymbolInfo]:
    """Case-insensitive substring match on symbol, base or quote asset.

    An empty query matches nothing.
    """
    needle = query.strip().lower()
    if not needle:
        return []
    return [
        item for item in symbols
        if needle in item.symbol.lower()
        or needle in item.base_asset.lower()
        or needle in item.quote_asset.lower()
    ]
