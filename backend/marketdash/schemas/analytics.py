"""
CONTRACT 2: Analytics Outputs

Derived indicators returned by the analytics services.
Pure Python/NumPy upstream - these are plain result shapes.
"""

from datetime import date, datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field

from marketdash.schemas.market import MacroType, TimeSeriesPoint


class ValuationMode(str, Enum):
    INDEX = "index"
    SECURITY = "security"


# =============================================================================
# INDICATORS
# =============================================================================


class IndicatorSnapshot(BaseModel):
    """Latest technical indicators for one bar series."""

    sma: float = Field(..., ge=0, description="0 when history is too short")
    rsi: float = Field(..., ge=0, le=100)
    atr: float = Field(..., ge=0)
    relative_volume: float = Field(..., ge=0, description="1 is neutral")
    moving_averages: dict[int, float] = Field(default_factory=dict)
    sma_distances: dict[int, float] = Field(
        default_factory=dict,
        description="(price - sma) / sma per period with a positive SMA",
    )
    last_close: Optional[float] = None
    bars_used: int = 0


# =============================================================================
# CORRELATION
# =============================================================================


class BetaDataPoint(BaseModel):
    """One aligned macro/asset change pair."""

    date: date
    macro_change: float
    asset_change: float


class BetaResult(BaseModel):
    """Correlation between a macro indicator's changes and an asset's returns."""

    macro_type: MacroType
    correlation: float = Field(..., ge=-1, le=1)
    data_points: list[BetaDataPoint] = Field(default_factory=list)
    period: str


class CorrelationResult(BaseModel):
    """Pairwise correlation matrix of daily returns."""

    tickers: list[str]
    matrix: list[list[float]] = Field(default_factory=list)
    period: str
    data_points: int = Field(default=0, ge=0)


# =============================================================================
# VALUATION
# =============================================================================


class ValuationSeries(BaseModel):
    """CAPE history, newest first."""

    symbol: str
    mode: ValuationMode
    points: list[TimeSeriesPoint] = Field(default_factory=list)


# =============================================================================
# OPTIONS SENTIMENT
# =============================================================================


class StrikeAggregate(BaseModel):
    """Open interest summed per strike."""

    strike: float
    call_open_interest: float = 0.0
    put_open_interest: float = 0.0


class RatioRecord(BaseModel):
    """Append-only call/put open interest ratio observation."""

    timestamp: datetime
    ticker: str
    price: float
    ratio: float = Field(..., ge=0)
    strikes_count: int = Field(..., ge=0)

    class Config:
        frozen = True


class RatioRequest(BaseModel):
    """Manual ratio calculation request."""

    ticker: str = Field(..., min_length=1, max_length=12)
    persist: bool = True
