"""
Data Source Interfaces

Contracts for every external collaborator the analytics services use.
Adapters normalize provider payloads into the market schemas before
returning; services never see raw provider shapes.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from marketdash.schemas.market import (
    Bar,
    EarningsPoint,
    Interval,
    MacroType,
    OptionsPage,
    TimeSeriesPoint,
)
from marketdash.schemas.analytics import RatioRecord


class PriceSource(ABC):
    """Historical OHLCV bars."""

    @property
    @abstractmethod
    def name(self) -> str:
        pass

    @abstractmethod
    async def get_bars(
        self, ticker: str, interval: Interval = Interval.D1, period: str = "2y"
    ) -> list[Bar]:
        """
        Fetch bars for ticker.

        Args:
            ticker: Symbol as the provider knows it (e.g. "^GSPC", "AAPL")
            interval: Bar size
            period: Lookback range ("1y", "2y", "20y", "max")

        Returns:
            Bars sorted ascending; empty when the provider has none.
        """
        pass


class SpotPriceSource(ABC):
    """Latest traded price."""

    @abstractmethod
    async def get_current_price(self, ticker: str) -> Optional[float]:
        """Return the latest price, or None when unavailable."""
        pass


class EarningsSource(ABC):
    """Earnings history for CAPE."""

    @property
    @abstractmethod
    def name(self) -> str:
        pass

    @abstractmethod
    async def get_earnings_history(self, ticker: str) -> list[EarningsPoint]:
        """Earnings observations sorted ascending."""
        pass


class MacroSource(ABC):
    """Macro-economic series."""

    @property
    @abstractmethod
    def name(self) -> str:
        pass

    @abstractmethod
    async def get_series(self, macro_type: MacroType) -> list[TimeSeriesPoint]:
        """
        History used for macro beta.

        CPI is the year-over-year percent change (monthly), JOBLESS the
        weekly initial claims count.
        """
        pass

    @abstractmethod
    async def get_cpi_index(self) -> list[TimeSeriesPoint]:
        """CPI index level history (monthly) for inflation adjustment."""
        pass


class OptionsSource(ABC):
    """Cursor-paginated options chain snapshots."""

    @abstractmethod
    async def get_options_page(
        self, ticker: str, cursor: Optional[str] = None
    ) -> OptionsPage:
        """
        Fetch one page of the chain.

        A page with next_cursor=None is the last one.
        """
        pass


class HistoryStore(ABC):
    """Append-only store for options ratio observations."""

    @abstractmethod
    async def append(self, record: RatioRecord) -> bool:
        pass

    @abstractmethod
    async def query(
        self,
        ticker: Optional[str] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> list[RatioRecord]:
        """Records ordered by timestamp ascending."""
        pass
