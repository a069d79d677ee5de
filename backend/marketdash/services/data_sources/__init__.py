"""
Data Sources

CONTRACT:
    Adapters return market schemas (Bar, TimeSeriesPoint, EarningsPoint,
    OptionsPage); provider field names stop here.

RESPONSIBILITIES:
    - Yahoo Finance bars, spot prices and security earnings (yfinance)
    - FRED macro series, Polygon options chain, multpl index earnings (aiohttp)
    - Prioritized fallback chains, ending in mock data when enabled
    - Macro series served through the macro TTL cache
"""

from marketdash.services.data_sources.interface import (
    PriceSource,
    SpotPriceSource,
    EarningsSource,
    MacroSource,
    OptionsSource,
    HistoryStore,
)
from marketdash.services.data_sources.chain import (
    PriceSourceChain,
    EarningsSourceChain,
    MacroSourceChain,
    CachedMacroSource,
    get_price_source,
    get_macro_source,
    get_index_earnings_source,
    get_security_earnings_source,
    get_options_source,
    close_sources,
)

__all__ = [
    "PriceSource",
    "SpotPriceSource",
    "EarningsSource",
    "MacroSource",
    "OptionsSource",
    "HistoryStore",
    "PriceSourceChain",
    "EarningsSourceChain",
    "MacroSourceChain",
    "CachedMacroSource",
    "get_price_source",
    "get_macro_source",
    "get_index_earnings_source",
    "get_security_earnings_source",
    "get_options_source",
    "close_sources",
]
