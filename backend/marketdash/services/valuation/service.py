"""
Valuation Engine Service Implementation

CAPE history for the S&P 500 or a single security.
"""

import logging
from typing import Optional

from marketdash.core.config import settings
from marketdash.schemas.market import Interval, TimeSeriesPoint
from marketdash.schemas.analytics import ValuationMode, ValuationSeries
from marketdash.services.base import ServiceError
from marketdash.services.cache import TTLCache, get_valuation_cache
from marketdash.services.data_sources import (
    EarningsSource,
    MacroSource,
    PriceSource,
    get_index_earnings_source,
    get_macro_source,
    get_price_source,
    get_security_earnings_source,
)
from marketdash.services.valuation.interface import ValuationServiceInterface
from marketdash.services.valuation.calculations import compute_cape_series, dedupe_monthly

logger = logging.getLogger(__name__)

INDEX_SYMBOLS = {"^GSPC", "SPY"}
INDEX_PRICE_TICKER = "^GSPC"
INDEX_PRICE_PERIOD = "20y"
INDEX_CACHE_KEY = "index"


def valuation_mode(symbol: str) -> ValuationMode:
    return ValuationMode.INDEX if symbol.upper() in INDEX_SYMBOLS else ValuationMode.SECURITY


class ValuationService(ValuationServiceInterface):
    """
    Valuation Engine Service.

    The index series is cached; if a refresh fails the last good series
    is served instead.
    """

    def __init__(
        self,
        price_source: Optional[PriceSource] = None,
        index_earnings: Optional[EarningsSource] = None,
        security_earnings: Optional[EarningsSource] = None,
        macro_source: Optional[MacroSource] = None,
        cache: Optional[TTLCache] = None,
    ):
        self.price_source = price_source or get_price_source()
        self.index_earnings = index_earnings or get_index_earnings_source()
        self.security_earnings = security_earnings or get_security_earnings_source()
        self.macro_source = macro_source or get_macro_source()
        self.cache = cache if cache is not None else get_valuation_cache()
        self._last_index_series: Optional[list[TimeSeriesPoint]] = None

    @property
    def name(self) -> str:
        return "ValuationService"

    async def execute(self, input_data: str) -> ValuationSeries:
        symbol = input_data.upper()
        points = await self.compute_valuation_series(symbol)
        return ValuationSeries(symbol=symbol, mode=valuation_mode(symbol), points=points)

    async def compute_valuation_series(self, symbol: str = "^GSPC") -> list[TimeSeriesPoint]:
        symbol = symbol.upper()
        if valuation_mode(symbol) == ValuationMode.INDEX:
            return await self._index_series()
        return await self._security_series(symbol)

    async def _index_series(self) -> list[TimeSeriesPoint]:
        cached = await self.cache.get(INDEX_CACHE_KEY)
        if cached is not None:
            logger.debug("CAPE cache hit")
            return [TimeSeriesPoint.model_validate(p) for p in cached]

        try:
            logger.info("Fetching S&P 500 data (real earnings + ^GSPC)")
            earnings = await self.index_earnings.get_earnings_history(INDEX_PRICE_TICKER)
            prices = await self.price_source.get_bars(
                INDEX_PRICE_TICKER, Interval.MO1, INDEX_PRICE_PERIOD
            )
        except ServiceError as e:
            if self._last_index_series is not None:
                logger.warning(f"CAPE refresh failed, serving stale series: {e}")
                return self._last_index_series
            raise

        points = compute_cape_series(
            prices,
            earnings,
            ValuationMode.INDEX,
            lookback_years=settings.cape_lookback_years,
            min_span_years=settings.cape_min_span_years,
            quarterly_spacing_days=settings.cape_quarterly_spacing_days,
        )
        logger.info(
            f"CAPE index: {len(points)} points from {len(earnings)} earnings, {len(prices)} prices"
        )

        if points:
            await self.cache.set(INDEX_CACHE_KEY, [p.model_dump(mode="json") for p in points])
            self._last_index_series = points
        return points

    async def _security_series(self, symbol: str) -> list[TimeSeriesPoint]:
        logger.info(f"Fetching CAPE inputs for {symbol}")
        earnings = await self.security_earnings.get_earnings_history(symbol)

        try:
            cpi = await self.macro_source.get_cpi_index()
        except ServiceError as e:
            logger.warning(f"CPI unavailable for {symbol}, using nominal earnings: {e}")
            cpi = []

        bars = await self.price_source.get_bars(symbol, Interval.MO1, "max")
        prices = dedupe_monthly(bars)
        logger.info(
            f"CAPE {symbol}: {len(earnings)} earnings, {len(cpi)} CPI, "
            f"{len(prices)} monthly prices (after dedupe)"
        )

        return compute_cape_series(
            prices,
            earnings,
            ValuationMode.SECURITY,
            cpi=cpi,
            lookback_years=settings.cape_lookback_years,
            min_span_years=settings.cape_min_span_years,
            quarterly_spacing_days=settings.cape_quarterly_spacing_days,
        )

    async def health_check(self) -> bool:
        return True


# Singleton instance
_service_instance: Optional[ValuationService] = None


def get_valuation_service() -> ValuationService:
    """Get or create valuation service instance."""
    global _service_instance
    if _service_instance is None:
        _service_instance = ValuationService()
    return _service_instance
