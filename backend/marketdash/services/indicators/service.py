"""
Indicator Engine Service Implementation

Calculates the dashboard's technical indicators from OHLCV bars.
Pure Python/NumPy calculations.
"""

import logging
from datetime import datetime
from typing import Callable, Optional, Sequence

import numpy as np

from marketdash.core.market_hours import get_et_now, is_market_open, to_et
from marketdash.schemas.market import Bar
from marketdash.schemas.analytics import IndicatorSnapshot
from marketdash.services.indicators.interface import IndicatorServiceInterface
from marketdash.services.indicators.calculations import (
    sma,
    rsi,
    atr,
    relative_volume,
    projected_relative_volume,
    sma_distance,
)

logger = logging.getLogger(__name__)

MOVING_AVERAGE_PERIODS = (20, 50, 150, 200)


def _bars_to_arrays(bars: Sequence[Bar]) -> tuple:
    """Convert bar list to numpy arrays."""
    highs = np.array([b.high for b in bars], dtype=float)
    lows = np.array([b.low for b in bars], dtype=float)
    closes = np.array([b.close for b in bars], dtype=float)
    volumes = np.array([b.volume for b in bars], dtype=float)
    return highs, lows, closes, volumes


class IndicatorService(IndicatorServiceInterface):
    """
    Indicator Engine Service.

    All calculations are deterministic given the bars and the clock. The
    clock only matters when the latest bar is today's open session.
    """

    def __init__(self, clock: Callable[[], datetime] = get_et_now):
        self._clock = clock

    @property
    def name(self) -> str:
        return "IndicatorService"

    async def execute(self, input_data: Sequence[Bar]) -> IndicatorSnapshot:
        return self.compute_indicators(input_data)

    def compute_indicators(
        self,
        bars: Sequence[Bar],
        sma_period: int = 20,
        rsi_period: int = 14,
        atr_period: int = 14,
        volume_period: int = 20,
    ) -> IndicatorSnapshot:
        """Calculate indicators; bars are sorted ascending first."""
        ordered = sorted(bars, key=lambda b: b.date)
        if not ordered:
            return IndicatorSnapshot(sma=0.0, rsi=0.0, atr=0.0, relative_volume=1.0)

        highs, lows, closes, volumes = _bars_to_arrays(ordered)
        last_close = float(closes[-1])

        moving_averages = {}
        sma_distances = {}
        for period in MOVING_AVERAGE_PERIODS:
            average = sma(closes, period)
            moving_averages[period] = average
            distance = sma_distance(last_close, average)
            if distance is not None:
                sma_distances[period] = distance

        if len(ordered) <= max(rsi_period, atr_period):
            logger.debug(f"Only {len(ordered)} bars, RSI/ATR left undefined")

        return IndicatorSnapshot(
            sma=sma(closes, sma_period),
            rsi=rsi(closes, rsi_period),
            atr=atr(highs, lows, closes, atr_period),
            relative_volume=self._relative_volume(ordered, volumes, volume_period),
            moving_averages=moving_averages,
            sma_distances=sma_distances,
            last_close=last_close,
            bars_used=len(ordered),
        )

    def _relative_volume(self, bars: Sequence[Bar], volumes: np.ndarray, period: int) -> float:
        """Today's session bar is projected to a full day against prior sessions."""
        now = to_et(self._clock())
        if bars[-1].date != now.date() or not is_market_open(now):
            return relative_volume(volumes, period)

        average = sma(volumes[:-1], period)
        return projected_relative_volume(float(volumes[-1]), average, now)

    async def health_check(self) -> bool:
        """Indicator service is always healthy (pure computation)."""
        return True


# Singleton instance
_service_instance: Optional[IndicatorService] = None


def get_indicator_service() -> IndicatorService:
    """Get or create indicator service instance."""
    global _service_instance
    if _service_instance is None:
        _service_instance = IndicatorService()
    return _service_instance
