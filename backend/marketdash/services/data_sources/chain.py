"""
Source Chains

Prioritized fallback across data sources. Each source is tried in order;
one that raises or returns nothing hands off to the next. A chain whose
sources all answered empty returns that empty result; ExternalAPIError is
raised only when every source failed, listing what each one reported.
"""

import logging
from typing import Awaitable, Callable, Optional, Sequence, TypeVar

from marketdash.core.config import settings
from marketdash.schemas.market import (
    Bar,
    EarningsPoint,
    Interval,
    MacroType,
    TimeSeriesPoint,
)
from marketdash.services.base import ExternalAPIError
from marketdash.services.cache import TTLCache, get_macro_cache
from marketdash.services.data_sources.interface import (
    EarningsSource,
    MacroSource,
    OptionsSource,
    PriceSource,
    SpotPriceSource,
)
from marketdash.services.data_sources.fred_adapter import FredMacroSource
from marketdash.services.data_sources.mock_data import MockMacroSource, MockPriceSource
from marketdash.services.data_sources.multpl_adapter import MultplEarningsSource
from marketdash.services.data_sources.polygon_adapter import PolygonOptionsSource
from marketdash.services.data_sources.yahoo_adapter import YahooEarningsSource, YahooPriceSource

logger = logging.getLogger(__name__)

S = TypeVar("S")
R = TypeVar("R")


async def first_successful(
    chain_name: str,
    sources: Sequence[S],
    call: Callable[[S], Awaitable[R]],
    what: str,
) -> R:
    """
    Return the first non-empty result of call(source) across sources.

    An empty answer is not a failure: when no source has data but at least
    one answered, that empty result is returned. ExternalAPIError is raised
    only when every source raised.
    """
    failures = []
    answered = False
    empty_result = None

    for source in sources:
        source_name = getattr(source, "name", type(source).__name__)
        try:
            result = await call(source)
        except Exception as e:
            logger.warning(f"{source_name} failed for {what}: {e}")
            failures.append(f"{source_name}: {e}")
            continue

        if result:
            logger.debug(f"{source_name} served {what}")
            return result

        logger.info(f"{source_name} returned no data for {what}")
        if not answered:
            answered = True
            empty_result = result

    if answered:
        return empty_result

    raise ExternalAPIError(
        chain_name,
        f"No source could serve {what}",
        {"failures": failures},
    )


class PriceSourceChain(PriceSource, SpotPriceSource):
    """Bars from the first source that has them."""

    def __init__(self, sources: Sequence[PriceSource]):
        self.sources = list(sources)

    @property
    def name(self) -> str:
        return "PriceSourceChain"

    async def get_bars(
        self, ticker: str, interval: Interval = Interval.D1, period: str = "2y"
    ) -> list[Bar]:
        return await first_successful(
            self.name,
            self.sources,
            lambda source: source.get_bars(ticker, interval, period),
            f"{ticker} {interval.value} bars",
        )

    async def get_current_price(self, ticker: str) -> Optional[float]:
        """Latest price from the sources that quote one; None if none do."""
        spot_sources = [s for s in self.sources if isinstance(s, SpotPriceSource)]
        try:
            return await first_successful(
                self.name,
                spot_sources,
                lambda source: source.get_current_price(ticker),
                f"{ticker} spot price",
            )
        except ExternalAPIError as e:
            logger.warning(str(e))
            return None


class EarningsSourceChain(EarningsSource):
    """Earnings history from the first source that has it."""

    def __init__(self, sources: Sequence[EarningsSource], chain_name: str = "EarningsSourceChain"):
        self.sources = list(sources)
        self._name = chain_name

    @property
    def name(self) -> str:
        return self._name

    async def get_earnings_history(self, ticker: str) -> list[EarningsPoint]:
        return await first_successful(
            self.name,
            self.sources,
            lambda source: source.get_earnings_history(ticker),
            f"{ticker} earnings",
        )


class MacroSourceChain(MacroSource):
    """Macro series from the first source that has them."""

    def __init__(self, sources: Sequence[MacroSource]):
        self.sources = list(sources)

    @property
    def name(self) -> str:
        return "MacroSourceChain"

    async def get_series(self, macro_type: MacroType) -> list[TimeSeriesPoint]:
        return await first_successful(
            self.name,
            self.sources,
            lambda source: source.get_series(macro_type),
            f"{macro_type.value} history",
        )

    async def get_cpi_index(self) -> list[TimeSeriesPoint]:
        return await first_successful(
            self.name,
            self.sources,
            lambda source: source.get_cpi_index(),
            "CPI index",
        )


class CachedMacroSource(MacroSource):
    """Serves macro series through a TTL cache; only non-empty results are stored."""

    def __init__(self, inner: MacroSource, cache: TTLCache):
        self.inner = inner
        self.cache = cache

    @property
    def name(self) -> str:
        return f"Cached {self.inner.name}"

    async def _cached(
        self, key: str, fetch: Callable[[], Awaitable[list[TimeSeriesPoint]]]
    ) -> list[TimeSeriesPoint]:
        cached = await self.cache.get(key)
        if cached is not None:
            logger.debug(f"Macro cache hit: {key}")
            return [TimeSeriesPoint.model_validate(p) for p in cached]

        points = await fetch()
        if points:
            await self.cache.set(key, [p.model_dump(mode="json") for p in points])
        return points

    async def get_series(self, macro_type: MacroType) -> list[TimeSeriesPoint]:
        return await self._cached(
            f"series:{macro_type.value}", lambda: self.inner.get_series(macro_type)
        )

    async def get_cpi_index(self) -> list[TimeSeriesPoint]:
        return await self._cached("cpi_index", self.inner.get_cpi_index)


# =============================================================================
# DEFAULT WIRING
# =============================================================================

_price_source: Optional[PriceSourceChain] = None
_macro_source: Optional[MacroSource] = None
_index_earnings: Optional[EarningsSourceChain] = None
_security_earnings: Optional[EarningsSourceChain] = None
_options_source: Optional[OptionsSource] = None


def get_price_source() -> PriceSourceChain:
    """Yahoo Finance, then mock bars when mock fallback is enabled."""
    global _price_source
    if _price_source is None:
        sources: list[PriceSource] = [YahooPriceSource()]
        if settings.enable_mock_fallback:
            sources.append(MockPriceSource())
        _price_source = PriceSourceChain(sources)
    return _price_source


def get_macro_source() -> MacroSource:
    """FRED (then mock when enabled) behind the macro TTL cache."""
    global _macro_source
    if _macro_source is None:
        sources: list[MacroSource] = [FredMacroSource()]
        if settings.enable_mock_fallback:
            sources.append(MockMacroSource())
        _macro_source = CachedMacroSource(MacroSourceChain(sources), get_macro_cache())
    return _macro_source


def get_index_earnings_source() -> EarningsSourceChain:
    global _index_earnings
    if _index_earnings is None:
        _index_earnings = EarningsSourceChain([MultplEarningsSource()], "IndexEarnings")
    return _index_earnings


def get_security_earnings_source() -> EarningsSourceChain:
    global _security_earnings
    if _security_earnings is None:
        _security_earnings = EarningsSourceChain([YahooEarningsSource()], "SecurityEarnings")
    return _security_earnings


def get_options_source() -> OptionsSource:
    global _options_source
    if _options_source is None:
        _options_source = PolygonOptionsSource()
    return _options_source


async def close_sources() -> None:
    """Close any HTTP sessions held by the default sources."""
    candidates: list = [_options_source]
    for chain in (_macro_source, _index_earnings, _security_earnings):
        if isinstance(chain, CachedMacroSource):
            chain = chain.inner
        candidates.extend(getattr(chain, "sources", []))

    for source in candidates:
        close = getattr(source, "close", None)
        if close is not None:
            await close()
