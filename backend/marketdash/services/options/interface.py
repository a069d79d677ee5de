"""
Options Ratio Service Interface
"""

from abc import abstractmethod
from datetime import datetime
from typing import Optional

from marketdash.services.base import BaseService
from marketdash.schemas.analytics import RatioRecord, RatioRequest


class OptionsRatioServiceInterface(BaseService[RatioRequest, Optional[RatioRecord]]):
    """
    Options Ratio Service Contract.

    INPUT: RatioRequest
        - ticker: underlying symbol
        - persist: append the result to history

    OUTPUT: RatioRecord, or None when the chain is empty
    """

    @property
    def name(self) -> str:
        return "OptionsRatioService"

    @abstractmethod
    async def compute_options_ratio(
        self, ticker: str, persist: bool = True
    ) -> Optional[RatioRecord]:
        """Call/put open interest ratio over the strikes around spot."""
        pass

    @abstractmethod
    async def compute_batch(
        self, tickers: list[str], pause_seconds: Optional[float] = None
    ) -> list[RatioRecord]:
        """Compute and persist ratios for several tickers, one at a time."""
        pass

    @abstractmethod
    async def get_history(
        self,
        ticker: Optional[str] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> list[RatioRecord]:
        pass
