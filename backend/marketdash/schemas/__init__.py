"""
MarketDash Schema Contracts

This module defines all JSON contracts between system components.
These are the authoritative interfaces - all modules must conform to these schemas.
"""

from marketdash.schemas.market import (
    Bar,
    TimeSeriesPoint,
    EarningsPoint,
    AlignedSeries,
    OptionContract,
    OptionsPage,
    Interval,
    PeriodType,
    MacroType,
    ContractType,
)
from marketdash.schemas.analytics import (
    IndicatorSnapshot,
    BetaDataPoint,
    BetaResult,
    CorrelationResult,
    ValuationMode,
    ValuationSeries,
    StrikeAggregate,
    RatioRecord,
    RatioRequest,
)

__all__ = [
    # Market
    "Bar",
    "TimeSeriesPoint",
    "EarningsPoint",
    "AlignedSeries",
    "OptionContract",
    "OptionsPage",
    "Interval",
    "PeriodType",
    "MacroType",
    "ContractType",
    # Analytics
    "IndicatorSnapshot",
    "BetaDataPoint",
    "BetaResult",
    "CorrelationResult",
    "ValuationMode",
    "ValuationSeries",
    "StrikeAggregate",
    "RatioRecord",
    "RatioRequest",
]
