"""
Correlation Engine Service Implementation

Macro beta (CPI / jobless claims vs. an index) and cross-asset
correlation matrices.
"""

import logging
from datetime import date
from typing import Callable, Optional

from marketdash.core.config import settings
from marketdash.schemas.market import AlignedSeries, Bar, Interval, MacroType
from marketdash.schemas.analytics import BetaDataPoint, BetaResult, CorrelationResult
from marketdash.services.alignment import MatchPolicy, align_series, find_nearest, sort_by_date
from marketdash.services.base import ValidationError
from marketdash.services.correlation.interface import CorrelationServiceInterface
from marketdash.services.correlation.calculations import (
    lookback_period,
    months_ago,
    pearson,
    percent_change,
    percent_changes,
)
from marketdash.services.data_sources import (
    MacroSource,
    PriceSource,
    get_macro_source,
    get_price_source,
)

logger = logging.getLogger(__name__)

# CPI is monthly, claims are weekly; the asset is sampled to match.
MACRO_ASSET_INTERVAL = {
    MacroType.CPI: Interval.MO1,
    MacroType.JOBLESS: Interval.W1,
}

MAX_TICKERS = 20


class CorrelationService(CorrelationServiceInterface):
    """
    Correlation Engine Service.

    Fetches through the injected sources; the math itself is pure.
    """

    def __init__(
        self,
        price_source: Optional[PriceSource] = None,
        macro_source: Optional[MacroSource] = None,
        tolerance_days: Optional[int] = None,
        today: Callable[[], date] = date.today,
    ):
        self.price_source = price_source or get_price_source()
        self.macro_source = macro_source or get_macro_source()
        self.tolerance_days = tolerance_days or settings.beta_tolerance_days
        self._today = today

    @property
    def name(self) -> str:
        return "CorrelationService"

    async def execute(self, input_data: MacroType) -> BetaResult:
        return await self.compute_beta(input_data)

    async def compute_beta(
        self, macro_type: MacroType, months: int = 24, symbol: str = "^GSPC"
    ) -> BetaResult:
        """
        Correlate period-over-period macro changes with the asset's returns.

        Each macro observation inside the trailing window is paired with the
        one before it; both dates must have an asset bar within the
        tolerance or the pair is skipped.
        """
        macro_history = await self.macro_source.get_series(macro_type)
        bars = await self.price_source.get_bars(
            symbol, MACRO_ASSET_INTERVAL[macro_type], lookback_period(months)
        )

        if len(macro_history) < 2 or len(bars) < 2:
            logger.warning(
                f"Beta {macro_type.value}/{symbol}: not enough raw data "
                f"({len(macro_history)} macro, {len(bars)} bars)"
            )
            return BetaResult(macro_type=macro_type, correlation=0.0, data_points=[], period="N/A")

        macro_history = sort_by_date(macro_history)
        bars = sort_by_date(bars)
        cutoff = months_ago(self._today(), months)

        data_points = []
        for previous, current in zip(macro_history, macro_history[1:]):
            if current.date < cutoff:
                continue

            current_bar = find_nearest(bars, current.date, self.tolerance_days)
            previous_bar = find_nearest(bars, previous.date, self.tolerance_days)
            if current_bar is None or previous_bar is None:
                continue

            data_points.append(
                BetaDataPoint(
                    date=current.date,
                    macro_change=percent_change(previous.value, current.value),
                    asset_change=percent_change(previous_bar.close, current_bar.close),
                )
            )

        period = f"{months}m"
        if len(data_points) < 2:
            logger.info(f"Beta {macro_type.value}/{symbol}: insufficient aligned data")
            return BetaResult(macro_type=macro_type, correlation=0.0, data_points=[], period=period)

        correlation = pearson(
            [p.macro_change for p in data_points],
            [p.asset_change for p in data_points],
        )
        logger.info(
            f"Beta {macro_type.value}/{symbol}: r={correlation:.3f} over {len(data_points)} points"
        )
        return BetaResult(
            macro_type=macro_type,
            correlation=correlation,
            data_points=data_points,
            period=period,
        )

    async def compute_asset_correlation(
        self, tickers: list[str], months: int = 12
    ) -> CorrelationResult:
        """
        Correlation matrix of daily returns on the dates every ticker traded.

        Tickers are fetched one at a time; a failed fetch propagates. The
        first ticker's dates inside the window form the calendar the others
        are matched against exactly.
        """
        if len(tickers) > MAX_TICKERS:
            raise ValidationError(self.name, f"At most {MAX_TICKERS} tickers allowed")

        period = f"{months}m"
        if not tickers:
            return CorrelationResult(tickers=[], matrix=[], period=period, data_points=0)

        series: list[list[Bar]] = []
        for ticker in tickers:
            bars = await self.price_source.get_bars(ticker, Interval.D1, lookback_period(months))
            series.append(bars)

        cutoff = months_ago(self._today(), months)
        series[0] = [bar for bar in series[0] if bar.date >= cutoff]
        aligned = _align_closes(series)

        if aligned.insufficient:
            logger.info(f"Asset correlation {tickers}: fewer than 2 common dates")
            return CorrelationResult(tickers=tickers, matrix=[], period=period, data_points=0)

        returns = [percent_changes(values) for values in aligned.values]

        n = len(tickers)
        matrix = [[1.0 if i == j else 0.0 for j in range(n)] for i in range(n)]
        for i in range(n):
            for j in range(i + 1, n):
                matrix[i][j] = matrix[j][i] = pearson(returns[i], returns[j])

        return CorrelationResult(
            tickers=tickers,
            matrix=matrix,
            period=period,
            data_points=len(aligned),
        )

    async def health_check(self) -> bool:
        return True


def _align_closes(series: list[list[Bar]]) -> AlignedSeries:
    """Exact-date alignment; a lone series is its own calendar."""
    if len(series) == 1:
        ordered = sort_by_date(series[0])
        return AlignedSeries(
            dates=[bar.date for bar in ordered],
            values=[[bar.close for bar in ordered]],
        )
    return align_series(series, MatchPolicy.EXACT)


# Singleton instance
_service_instance: Optional[CorrelationService] = None


def get_correlation_service() -> CorrelationService:
    """Get or create correlation service instance."""
    global _service_instance
    if _service_instance is None:
        _service_instance = CorrelationService()
    return _service_instance
