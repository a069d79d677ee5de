"""
Technical Indicator Calculations

Pure Python/NumPy implementations of the dashboard's technical indicators.
Every function returns the latest value as a float and uses 0 (or 1 for
relative volume) when the history is too short, instead of raising.
"""

from datetime import datetime
from typing import Optional

import numpy as np

from marketdash.core.market_hours import (
    SESSION_MINUTES,
    is_market_open,
    minutes_since_open,
)

# No projection during the first minutes of the session.
MIN_PROJECTION_MINUTES = 10


def _as_array(values) -> np.ndarray:
    return np.asarray(values, dtype=float)


# =============================================================================
# MOVING AVERAGES
# =============================================================================


def sma(data, period: int) -> float:
    """Simple Moving Average of the last `period` values."""
    data = _as_array(data)
    if period <= 0 or len(data) < period:
        return 0.0
    return float(np.mean(data[-period:]))


def wilder_smooth(values: np.ndarray, period: int) -> float:
    """
    Seed with the simple average of the first `period` values, then
    apply avg = (avg * (period - 1) + current) / period for the rest.
    """
    avg = float(np.mean(values[:period]))
    for current in values[period:]:
        avg = (avg * (period - 1) + float(current)) / period
    return avg


# =============================================================================
# MOMENTUM
# =============================================================================


def rsi(closes, period: int = 14) -> float:
    """Relative Strength Index (Wilder)."""
    closes = _as_array(closes)
    if period <= 0 or len(closes) < period + 1:
        return 0.0

    deltas = np.diff(closes)
    gains = np.where(deltas > 0, deltas, 0.0)
    losses = np.where(deltas < 0, -deltas, 0.0)

    avg_gain = wilder_smooth(gains, period)
    avg_loss = wilder_smooth(losses, period)

    if avg_loss == 0:
        return 100.0

    rs = avg_gain / avg_loss
    value = 100 - (100 / (1 + rs))
    return float(min(100.0, max(0.0, value)))


# =============================================================================
# VOLATILITY
# =============================================================================


def true_range(highs, lows, closes) -> np.ndarray:
    """True range per bar; the first bar has no previous close."""
    highs = _as_array(highs)
    lows = _as_array(lows)
    closes = _as_array(closes)

    tr = np.zeros(len(closes))
    if len(closes) == 0:
        return tr

    tr[0] = highs[0] - lows[0]
    for i in range(1, len(closes)):
        tr[i] = max(
            highs[i] - lows[i],
            abs(highs[i] - closes[i - 1]),
            abs(lows[i] - closes[i - 1]),
        )
    return tr


def atr(highs, lows, closes, period: int = 14) -> float:
    """Average True Range (Wilder)."""
    tr = true_range(highs, lows, closes)
    if period <= 0 or len(tr) <= period:
        return 0.0
    return max(0.0, wilder_smooth(tr, period))


# =============================================================================
# VOLUME
# =============================================================================


def relative_volume(volumes, period: int = 20) -> float:
    """Latest volume over its `period` average; 1 is neutral."""
    volumes = _as_array(volumes)
    if len(volumes) == 0:
        return 1.0

    average = sma(volumes, period)
    if average <= 0:
        return 1.0
    return float(volumes[-1] / average)


def projected_relative_volume(
    volume: float,
    average_volume: float,
    now: Optional[datetime] = None,
) -> float:
    """
    Relative volume with the session-to-date volume projected to a full day.

    During the regular US session, after the first few minutes, volume is
    scaled by SESSION_MINUTES / minutes elapsed before dividing.
    """
    if average_volume <= 0:
        return 1.0

    if is_market_open(now):
        elapsed = minutes_since_open(now)
        if elapsed > MIN_PROJECTION_MINUTES:
            projected = (volume / elapsed) * SESSION_MINUTES
            return projected / average_volume

    return volume / average_volume


def sma_distance(price: float, average: float) -> Optional[float]:
    """Fractional distance of price from its moving average."""
    if average <= 0:
        return None
    return (price - average) / average
