"""
Indicator Engine Service Interface

Defines the contract for the indicator calculation layer.
"""

from abc import abstractmethod
from typing import Sequence

from marketdash.services.base import BaseService
from marketdash.schemas.market import Bar
from marketdash.schemas.analytics import IndicatorSnapshot


class IndicatorServiceInterface(BaseService[Sequence[Bar], IndicatorSnapshot]):
    """
    Indicator Engine Service Contract.

    INPUT: list[Bar]
        - Daily OHLCV bars, any order

    OUTPUT: IndicatorSnapshot
        - SMA, RSI(14), ATR(14), relative volume(20)
        - Moving averages and price distances for 20/50/150/200
    """

    @property
    def name(self) -> str:
        return "IndicatorService"

    @abstractmethod
    async def execute(self, input_data: Sequence[Bar]) -> IndicatorSnapshot:
        """Calculate indicators for one bar series."""
        pass

    @abstractmethod
    def compute_indicators(
        self,
        bars: Sequence[Bar],
        sma_period: int = 20,
        rsi_period: int = 14,
        atr_period: int = 14,
        volume_period: int = 20,
    ) -> IndicatorSnapshot:
        """
        Calculate the indicator snapshot.

        Never raises on short input; undefined values come back as 0
        (relative volume as 1).
        """
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """Indicator service is always healthy (pure computation)."""
        pass
