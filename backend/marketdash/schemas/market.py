"""
CONTRACT 1: Market Data Inputs

Normalized shapes produced by the data source adapters and consumed by the
analytics services. Provider-specific field names never cross this boundary.
"""

from datetime import date, datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


# =============================================================================
# ENUMS
# =============================================================================


class Interval(str, Enum):
    D1 = "1d"
    W1 = "1wk"
    MO1 = "1mo"


class PeriodType(str, Enum):
    QUARTERLY = "quarterly"
    ANNUAL = "annual"


class MacroType(str, Enum):
    CPI = "CPI"
    JOBLESS = "JOBLESS"


class ContractType(str, Enum):
    CALL = "call"
    PUT = "put"


# =============================================================================
# TIME SERIES
# =============================================================================


class Bar(BaseModel):
    """Single OHLCV bar."""

    date: date
    open: float = Field(..., ge=0)
    high: float = Field(..., ge=0)
    low: float = Field(..., ge=0)
    close: float = Field(..., ge=0)
    volume: float = Field(default=0, ge=0)


class TimeSeriesPoint(BaseModel):
    """Dated scalar: macro index observation or per-period indicator output."""

    date: date
    value: float


class EarningsPoint(BaseModel):
    """
    Earnings observation.

    Index sources report real (inflation-adjusted) annualized earnings;
    security sources report nominal EPS for one fiscal period.
    """

    date: date
    value: float
    period_type: Optional[PeriodType] = Field(
        default=None,
        description="Reporting period when the source knows it",
    )


class AlignedSeries(BaseModel):
    """Several series projected onto one shared timeline."""

    dates: list[date] = Field(default_factory=list)
    values: list[list[float]] = Field(
        default_factory=list,
        description="One vector per input series, index-aligned with dates",
    )

    @property
    def insufficient(self) -> bool:
        """Fewer than two aligned points cannot support a statistic."""
        return len(self.dates) < 2

    def __len__(self) -> int:
        return len(self.dates)


# =============================================================================
# OPTIONS
# =============================================================================


class OptionContract(BaseModel):
    """One option contract from a chain snapshot."""

    strike: float = Field(..., gt=0)
    contract_type: ContractType
    open_interest: float = Field(default=0, ge=0)
    day_timestamp_ms: Optional[float] = Field(
        default=None, description="Daily bar timestamp (milliseconds)"
    )
    last_quote_ns: Optional[float] = Field(
        default=None, description="Last quote SIP timestamp (nanoseconds)"
    )
    last_trade_ns: Optional[float] = Field(
        default=None, description="Last trade SIP timestamp (nanoseconds)"
    )


class OptionsPage(BaseModel):
    """One page of a cursor-paginated options chain."""

    contracts: list[OptionContract] = Field(default_factory=list)
    next_cursor: Optional[str] = None
    fetched_at: Optional[datetime] = None
