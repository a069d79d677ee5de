"""
Valuation Engine Service Interface
"""

from abc import abstractmethod

from marketdash.services.base import BaseService
from marketdash.schemas.market import TimeSeriesPoint
from marketdash.schemas.analytics import ValuationSeries


class ValuationServiceInterface(BaseService[str, ValuationSeries]):
    """
    Valuation Engine Service Contract.

    INPUT: symbol
        - "^GSPC" / "SPY": index mode (real earnings, cached)
        - anything else: security mode (nominal EPS + CPI, per call)

    OUTPUT: ValuationSeries
        - CAPE points, newest first
    """

    @property
    def name(self) -> str:
        return "ValuationService"

    @abstractmethod
    async def compute_valuation_series(self, symbol: str = "^GSPC") -> list[TimeSeriesPoint]:
        """CAPE history for symbol, newest first."""
        pass
