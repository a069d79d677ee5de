"""
CAPE (Shiller P/E) Calculations

Price over the trailing average of annual real earnings.

Index mode: earnings are already real and annualized; average them.
Security mode: nominal EPS is restated in the price date's dollars via
CPI, then annualized (quarterly points x4) before averaging.
"""

import logging
from bisect import bisect_left, bisect_right
from datetime import date
from typing import Optional, Sequence, Union

from marketdash.schemas.market import Bar, EarningsPoint, PeriodType, TimeSeriesPoint
from marketdash.schemas.analytics import ValuationMode
from marketdash.services.alignment import item_value, month_key, sort_by_date

logger = logging.getLogger(__name__)

DAYS_PER_YEAR = 365
QUARTERS_PER_YEAR = 4


class CpiLookup:
    """CPI level on or before a date, over a pre-sorted history."""

    def __init__(self, history: Optional[Sequence[TimeSeriesPoint]] = None):
        self._points = sort_by_date(history or [])
        self._dates = [p.date for p in self._points]

    def __bool__(self) -> bool:
        return bool(self._points)

    def at(self, when: date) -> float:
        """
        Latest observation dated on or before `when`.

        Dates before the history starts use the earliest observation;
        an empty history yields 1 (no adjustment).
        """
        if not self._points:
            return 1.0
        idx = bisect_right(self._dates, when) - 1
        return self._points[max(idx, 0)].value


def cpi_at(cpi_history: Sequence[TimeSeriesPoint], when: date) -> float:
    return CpiLookup(cpi_history).at(when)


def years_before(when: date, years: int) -> date:
    try:
        return when.replace(year=when.year - years)
    except ValueError:
        # Feb 29 in a non-leap target year
        return when.replace(year=when.year - years, day=28)


def dedupe_monthly(bars: Sequence[Union[Bar, TimeSeriesPoint]]) -> list:
    """One observation per calendar month, the latest one winning."""
    by_month = {}
    for bar in sort_by_date(bars):
        by_month[month_key(bar.date)] = bar
    return sort_by_date(list(by_month.values()))


def average_annual_earnings(
    window: Sequence[EarningsPoint],
    price_date: date,
    mode: ValuationMode,
    cpi: CpiLookup,
    min_span_years: float = 0.7,
    quarterly_spacing_days: int = 100,
) -> Optional[float]:
    """
    Average annual real earnings over an ascending earnings window.

    Returns None when the window is too thin to be meaningful.
    """
    if len(window) < 2:
        return None

    span_days = (window[-1].date - window[0].date).days
    if span_days / DAYS_PER_YEAR < min_span_years:
        return None

    if mode == ValuationMode.INDEX:
        return sum(e.value for e in window) / len(window)

    cpi_price = cpi.at(price_date)
    if cpi_price <= 0:
        return None

    adjusted = []
    for e in window:
        cpi_earning = cpi.at(e.date)
        if cpi_earning <= 0:
            continue
        adjusted.append((e, e.value * (cpi_price / cpi_earning)))

    if not adjusted:
        return None

    if all(e.period_type is not None for e, _ in adjusted):
        annualized = [
            value * (QUARTERS_PER_YEAR if e.period_type == PeriodType.QUARTERLY else 1)
            for e, value in adjusted
        ]
        return sum(annualized) / len(annualized)

    average = sum(value for _, value in adjusted) / len(adjusted)
    average_interval_days = span_days / (len(window) - 1)
    if average_interval_days < quarterly_spacing_days:
        return average * QUARTERS_PER_YEAR
    return average


def compute_cape_series(
    prices: Sequence[Union[Bar, TimeSeriesPoint]],
    earnings: Sequence[EarningsPoint],
    mode: ValuationMode,
    cpi: Optional[Sequence[TimeSeriesPoint]] = None,
    lookback_years: int = 10,
    min_span_years: float = 0.7,
    quarterly_spacing_days: int = 100,
) -> list[TimeSeriesPoint]:
    """
    CAPE for every price date with enough earnings history.

    Args:
        prices: Bars (close used) or points, any order
        earnings: Earnings observations, any order
        mode: INDEX (real earnings) or SECURITY (nominal EPS + CPI)
        cpi: CPI index history; security mode only
        lookback_years: Earnings window ending at each price date

    Returns:
        Points sorted newest first; dates without a positive average
        earnings figure are omitted.
    """
    ordered = sort_by_date(earnings)
    earning_dates = [e.date for e in ordered]
    lookup = CpiLookup(cpi if mode == ValuationMode.SECURITY else None)

    points = []
    for price in prices:
        start = years_before(price.date, lookback_years)
        window = ordered[bisect_left(earning_dates, start):bisect_right(earning_dates, price.date)]

        average = average_annual_earnings(
            window,
            price.date,
            mode,
            lookup,
            min_span_years=min_span_years,
            quarterly_spacing_days=quarterly_spacing_days,
        )
        if average is None or average <= 0:
            continue

        points.append(TimeSeriesPoint(date=price.date, value=item_value(price) / average))

    points.sort(key=lambda p: p.date, reverse=True)
    logger.debug(f"CAPE ({mode.value}): {len(points)} of {len(prices)} price dates usable")
    return points
