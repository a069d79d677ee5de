"""
Shared fixtures: in-memory fakes for every data source and an in-memory
SQLite history store.
"""

from datetime import date, timedelta
from typing import Optional

import pytest

from marketdash.db.database import create_engine, create_session_factory, create_tables
from marketdash.db.history_store import SQLHistoryStore
from marketdash.schemas.market import (
    Bar,
    ContractType,
    EarningsPoint,
    Interval,
    MacroType,
    OptionContract,
    OptionsPage,
    TimeSeriesPoint,
)
from marketdash.services.base import ExternalAPIError
from marketdash.services.data_sources.interface import (
    EarningsSource,
    MacroSource,
    OptionsSource,
    PriceSource,
    SpotPriceSource,
)


def make_bar(on: date, close: float, high: Optional[float] = None,
             low: Optional[float] = None, volume: float = 1000) -> Bar:
    return Bar(
        date=on,
        open=close,
        high=high if high is not None else close,
        low=low if low is not None else close,
        close=close,
        volume=volume,
    )


def daily_bars(closes, start: date = date(2024, 1, 1), volume: float = 1000) -> list[Bar]:
    return [make_bar(start + timedelta(days=i), c, volume=volume) for i, c in enumerate(closes)]


def point(on: date, value: float) -> TimeSeriesPoint:
    return TimeSeriesPoint(date=on, value=value)


class FakePriceSource(PriceSource, SpotPriceSource):
    """Bars keyed by ticker; records every call."""

    def __init__(self, bars=None, spot=None, errors=None):
        self.bars = bars or {}
        self.spot = spot or {}
        self.errors = errors or {}
        self.calls = []

    @property
    def name(self) -> str:
        return "FakePrices"

    async def get_bars(self, ticker, interval=Interval.D1, period="2y"):
        self.calls.append((ticker, interval, period))
        if ticker in self.errors:
            raise self.errors[ticker]
        return list(self.bars.get(ticker, []))

    async def get_current_price(self, ticker):
        return self.spot.get(ticker)


class FakeMacroSource(MacroSource):
    def __init__(self, series=None, cpi=None, cpi_error=None):
        self.series = series or {}
        self.cpi = cpi or []
        self.cpi_error = cpi_error
        self.calls = 0

    @property
    def name(self) -> str:
        return "FakeMacro"

    async def get_series(self, macro_type: MacroType):
        self.calls += 1
        return list(self.series.get(macro_type, []))

    async def get_cpi_index(self):
        self.calls += 1
        if self.cpi_error is not None:
            raise self.cpi_error
        return list(self.cpi)


class FakeEarningsSource(EarningsSource):
    def __init__(self, points=None, error=None):
        self.points = points or []
        self.error = error
        self.calls = 0

    @property
    def name(self) -> str:
        return "FakeEarnings"

    async def get_earnings_history(self, ticker):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return list(self.points)


class FakeOptionsSource(OptionsSource):
    """Serves pre-built pages; cursor N points at page N."""

    def __init__(self, pages: list[list[OptionContract]], endless: bool = False):
        self.pages = pages
        self.endless = endless
        self.requested = []

    async def get_options_page(self, ticker, cursor=None):
        self.requested.append(cursor)
        index = 0 if cursor is None else int(cursor)
        if self.endless:
            return OptionsPage(contracts=self.pages[0], next_cursor=str(index + 1))

        contracts = self.pages[index] if index < len(self.pages) else []
        next_cursor = str(index + 1) if index + 1 < len(self.pages) else None
        return OptionsPage(contracts=contracts, next_cursor=next_cursor)


class FailingHistoryStore:
    async def append(self, record):
        raise RuntimeError("disk full")

    async def query(self, ticker=None, start=None, end=None):
        return []


def quarterly_earnings(start_year: int, years: int, eps: float) -> list[EarningsPoint]:
    points = []
    for year in range(start_year, start_year + years):
        for month in (3, 6, 9, 12):
            points.append(EarningsPoint(date=date(year, month, 28), value=eps))
    return points


@pytest.fixture
async def history_store():
    engine = create_engine("sqlite+aiosqlite:///:memory:")
    await create_tables(engine)
    yield SQLHistoryStore(create_session_factory(engine))
    await engine.dispose()


@pytest.fixture
def upstream_error():
    return ExternalAPIError("FakeUpstream", "upstream unavailable")


def call(strike, oi, **kwargs) -> OptionContract:
    return OptionContract(strike=strike, contract_type=ContractType.CALL, open_interest=oi, **kwargs)


def put(strike, oi, **kwargs) -> OptionContract:
    return OptionContract(strike=strike, contract_type=ContractType.PUT, open_interest=oi, **kwargs)


def chain_around() -> list[OptionContract]:
    """Strikes 90..110 by 5, calls at twice the puts."""
    contracts = []
    for strike in (90, 95, 100, 105, 110):
        contracts.append(call(strike, 200))
        contracts.append(put(strike, 100))
    return contracts
