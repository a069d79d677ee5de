"""
Yahoo Finance Data Adapter

Fetches bars, spot prices and per-security earnings from Yahoo Finance.
yfinance is synchronous, so every call runs in the default executor.
"""

import asyncio
import logging
import math
from datetime import date
from typing import Callable, Optional, TypeVar

import yfinance as yf

from marketdash.schemas.market import Bar, EarningsPoint, Interval, PeriodType
from marketdash.services.base import ExternalAPIError
from marketdash.services.data_sources.interface import (
    EarningsSource,
    PriceSource,
    SpotPriceSource,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def _run_sync(func: Callable[[], T]) -> T:
    loop = asyncio.get_event_loop()
    return await loop.run_in_executor(None, func)


def _is_number(value) -> bool:
    try:
        return value is not None and not math.isnan(float(value))
    except (TypeError, ValueError):
        return False


def frame_to_bars(hist) -> list[Bar]:
    """Convert a yfinance history DataFrame to bars, skipping empty closes."""
    bars = []
    for idx, row in hist.iterrows():
        close = row.get("Close")
        if not _is_number(close):
            continue

        close = float(close)
        open_ = float(row["Open"]) if _is_number(row.get("Open")) else close
        high = float(row["High"]) if _is_number(row.get("High")) else close
        low = float(row["Low"]) if _is_number(row.get("Low")) else close
        volume = float(row["Volume"]) if _is_number(row.get("Volume")) else 0.0

        bars.append(
            Bar(
                date=idx.to_pydatetime().date(),
                open=open_,
                high=max(high, open_, close),
                low=min(low, open_, close),
                close=close,
                volume=max(volume, 0.0),
            )
        )

    bars.sort(key=lambda b: b.date)
    return bars


class YahooPriceSource(PriceSource, SpotPriceSource):
    """Daily/weekly/monthly bars and the latest traded price."""

    @property
    def name(self) -> str:
        return "Yahoo Finance"

    async def get_bars(
        self, ticker: str, interval: Interval = Interval.D1, period: str = "2y"
    ) -> list[Bar]:
        logger.info(f"Fetching {ticker} {interval.value} bars ({period}) from Yahoo Finance...")

        try:
            hist = await _run_sync(
                lambda: yf.Ticker(ticker).history(
                    period=period, interval=interval.value, auto_adjust=False
                )
            )
        except Exception as e:
            raise ExternalAPIError(self.name, f"History fetch failed for {ticker}: {e}") from e

        if hist is None or hist.empty:
            logger.warning(f"No data returned for {ticker}")
            return []

        return frame_to_bars(hist)

    async def get_current_price(self, ticker: str) -> Optional[float]:
        def fetch() -> Optional[float]:
            yt = yf.Ticker(ticker)
            try:
                price = yt.fast_info.last_price
                if _is_number(price) and float(price) > 0:
                    return float(price)
            except Exception as e:
                logger.debug(f"fast_info unavailable for {ticker}: {e}")

            # Latest one-minute bar of the session
            hist = yt.history(period="1d", interval="1m")
            if hist is None or hist.empty:
                return None
            closes = hist["Close"].dropna()
            return float(closes.iloc[-1]) if len(closes) else None

        try:
            return await _run_sync(fetch)
        except Exception as e:
            logger.error(f"Error fetching current price for {ticker}: {e}")
            return None


class YahooEarningsSource(EarningsSource):
    """
    Nominal EPS history for one security.

    Reported quarterly EPS covers recent quarters; older years come from
    annual net income divided by shares outstanding, dated Dec 31. Annual
    points are dropped for any year that has quarterly data.
    """

    @property
    def name(self) -> str:
        return "Yahoo Finance Earnings"

    async def get_earnings_history(self, ticker: str) -> list[EarningsPoint]:
        try:
            quarterly, annual = await _run_sync(lambda: self._fetch(ticker))
        except Exception as e:
            raise ExternalAPIError(self.name, f"Earnings fetch failed for {ticker}: {e}") from e

        return merge_earnings(quarterly, annual)

    def _fetch(self, ticker: str) -> tuple[list[EarningsPoint], list[EarningsPoint]]:
        yt = yf.Ticker(ticker)
        quarterly: list[EarningsPoint] = []
        annual: list[EarningsPoint] = []

        try:
            history = yt.earnings_history
            if history is not None and not history.empty and "epsActual" in history.columns:
                for idx, row in history.iterrows():
                    if _is_number(row["epsActual"]):
                        quarterly.append(
                            EarningsPoint(
                                date=idx.to_pydatetime().date(),
                                value=float(row["epsActual"]),
                                period_type=PeriodType.QUARTERLY,
                            )
                        )
        except Exception as e:
            logger.debug(f"No quarterly EPS for {ticker}: {e}")

        try:
            shares = yt.info.get("sharesOutstanding")
            income = yt.income_stmt
            if shares and income is not None and "Net Income" in income.index:
                for column, value in income.loc["Net Income"].items():
                    if _is_number(value):
                        annual.append(
                            EarningsPoint(
                                date=date(column.year, 12, 31),
                                value=float(value) / float(shares),
                                period_type=PeriodType.ANNUAL,
                            )
                        )
        except Exception as e:
            logger.debug(f"No annual earnings for {ticker}: {e}")

        return quarterly, annual


def merge_earnings(
    quarterly: list[EarningsPoint], annual: list[EarningsPoint]
) -> list[EarningsPoint]:
    """Quarterly points plus annual points for years without quarterly data."""
    quarterly_years = {p.date.year for p in quarterly}
    kept_annual = [p for p in annual if p.date.year not in quarterly_years]

    combined = sorted(kept_annual + quarterly, key=lambda p: p.date)
    if combined:
        logger.info(
            f"Using hybrid earnings: {len(kept_annual)} annual + {len(quarterly)} quarterly"
        )
    return combined
