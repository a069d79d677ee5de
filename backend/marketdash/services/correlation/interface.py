"""
Correlation Engine Service Interface
"""

from abc import abstractmethod

from marketdash.services.base import BaseService
from marketdash.schemas.market import MacroType
from marketdash.schemas.analytics import BetaResult, CorrelationResult


class CorrelationServiceInterface(BaseService[MacroType, BetaResult]):
    """
    Correlation Engine Service Contract.

    INPUT: MacroType (CPI or JOBLESS)

    OUTPUT: BetaResult
        - correlation between macro changes and asset returns
        - the aligned change pairs it was computed from

    Also builds the cross-asset correlation matrix of daily returns.
    """

    @property
    def name(self) -> str:
        return "CorrelationService"

    @abstractmethod
    async def compute_beta(
        self, macro_type: MacroType, months: int = 24, symbol: str = "^GSPC"
    ) -> BetaResult:
        """Correlate a macro series' changes with an asset's returns."""
        pass

    @abstractmethod
    async def compute_asset_correlation(
        self, tickers: list[str], months: int = 12
    ) -> CorrelationResult:
        """Pairwise correlation matrix of daily returns."""
        pass
