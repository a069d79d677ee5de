"""
Mock Data Generator

Realistic mock bars and macro series for development, and as the last
resort in the source chains when mock fallback is enabled.
Each ticker gets its own seeded random walk, so repeated calls agree.
"""

import random
import re
from datetime import date, timedelta
from typing import Optional

from marketdash.schemas.market import Bar, Interval, MacroType, TimeSeriesPoint
from marketdash.services.data_sources.interface import MacroSource, PriceSource


# Base prices for common symbols
SYMBOL_BASE_PRICES = {
    "^GSPC": 5800.0,
    "SPY": 580.0,
    "QQQ": 500.0,
    "AAPL": 225.0,
    "MSFT": 420.0,
    "NVDA": 130.0,
    "GLD": 240.0,
    "TLT": 95.0,
}

INTERVAL_DAYS = {
    Interval.D1: 1,
    Interval.W1: 7,
    Interval.MO1: 30,
}

PERIOD_PATTERN = re.compile(r"^(\d+)(d|mo|y)$")


def get_base_price(symbol: str, rng: random.Random) -> float:
    """Get base price for a symbol."""
    return SYMBOL_BASE_PRICES.get(symbol.upper(), 100.0 + rng.random() * 400)


def period_to_days(period: str) -> int:
    """'2y' -> 730, '6mo' -> 180, 'max' -> 20 years."""
    match = PERIOD_PATTERN.match(period)
    if not match:
        return 365 * 20

    count, unit = int(match.group(1)), match.group(2)
    if unit == "d":
        return count
    if unit == "mo":
        return count * 30
    return count * 365


def generate_mock_bars(
    symbol: str,
    interval: Interval = Interval.D1,
    period: str = "2y",
    end: Optional[date] = None,
) -> list[Bar]:
    """Generate a mock OHLCV random walk ending at `end`."""
    end = end or date.today()
    rng = random.Random(f"{symbol}:{interval.value}")

    step = INTERVAL_DAYS[interval]
    count = max(period_to_days(period) // step, 1)
    price = get_base_price(symbol, rng)
    volatility = 0.02 if interval == Interval.D1 else 0.04

    bars = []
    when = end - timedelta(days=step * (count - 1))
    for _ in range(count):
        if interval == Interval.D1 and when.weekday() >= 5:
            when += timedelta(days=1)
            continue

        change = (rng.random() - 0.5) * volatility * price
        open_price = price
        close_price = max(open_price + change, 0.01)
        high_price = max(open_price, close_price) * (1 + rng.random() * volatility / 2)
        low_price = min(open_price, close_price) * (1 - rng.random() * volatility / 2)

        bars.append(
            Bar(
                date=when,
                open=round(open_price, 2),
                high=round(high_price, 2),
                low=round(low_price, 2),
                close=round(close_price, 2),
                volume=float(rng.randint(1_000_000, 50_000_000)),
            )
        )
        price = close_price
        when += timedelta(days=step)

    return bars


def generate_mock_macro(
    macro_type: Optional[MacroType], end: Optional[date] = None
) -> list[TimeSeriesPoint]:
    """
    Mock macro history.

    macro_type None yields a CPI index level series (monthly, 20 years).
    """
    end = end or date.today()
    rng = random.Random(f"macro:{macro_type.value if macro_type else 'CPI_INDEX'}")
    points = []

    if macro_type == MacroType.JOBLESS:
        value = 220_000.0
        start = end - timedelta(weeks=519)
        for i in range(520):
            value = max(150_000.0, value + (rng.random() - 0.5) * 15_000)
            points.append(TimeSeriesPoint(date=start + timedelta(weeks=i), value=round(value)))
        return points

    months = 240
    value = 3.0 if macro_type == MacroType.CPI else 200.0
    for i in range(months):
        offset = months - 1 - i
        year, month = end.year, end.month - offset
        while month <= 0:
            month += 12
            year -= 1
        if macro_type == MacroType.CPI:
            value = min(9.0, max(-1.0, value + (rng.random() - 0.5) * 0.4))
        else:
            value = value * (1 + 0.002 + (rng.random() - 0.5) * 0.002)
        points.append(TimeSeriesPoint(date=date(year, month, 1), value=round(value, 3)))

    return points


class MockPriceSource(PriceSource):
    """Seeded random-walk bars for any ticker."""

    @property
    def name(self) -> str:
        return "Mock"

    async def get_bars(
        self, ticker: str, interval: Interval = Interval.D1, period: str = "2y"
    ) -> list[Bar]:
        return generate_mock_bars(ticker, interval, period)


class MockMacroSource(MacroSource):
    """Seeded mock CPI and jobless claims."""

    @property
    def name(self) -> str:
        return "Mock"

    async def get_series(self, macro_type: MacroType) -> list[TimeSeriesPoint]:
        return generate_mock_macro(macro_type)

    async def get_cpi_index(self) -> list[TimeSeriesPoint]:
        return generate_mock_macro(None)
