from datetime import date, timedelta

import pytest

from marketdash.schemas.market import Interval, MacroType
from marketdash.services.base import ExternalAPIError, ValidationError
from marketdash.services.correlation import CorrelationService
from marketdash.services.correlation.calculations import (
    lookback_period,
    months_ago,
    pearson,
    percent_change,
    percent_changes,
)
from marketdash.services.data_sources.chain import MacroSourceChain, PriceSourceChain

from conftest import FakeMacroSource, FakePriceSource, daily_bars, make_bar, point


class TestPearson:

    def test_perfect_positive(self):
        assert pearson([1, 2, 3, 4], [2, 4, 6, 8]) == pytest.approx(1.0)

    def test_perfect_negative(self):
        assert pearson([1, 2, 3, 4], [8, 6, 4, 2]) == pytest.approx(-1.0)

    def test_constant_series_is_zero(self):
        assert pearson([1, 1, 1], [1, 2, 3]) == 0.0

    def test_mismatched_lengths_is_zero(self):
        assert pearson([1, 2, 3], [1, 2]) == 0.0

    def test_empty_is_zero(self):
        assert pearson([], []) == 0.0

    def test_bounded(self):
        value = pearson([0.1, 0.2, 0.30000000000000004], [0.1, 0.2, 0.3])
        assert -1.0 <= value <= 1.0


class TestChanges:

    def test_percent_change(self):
        assert percent_change(100, 110) == pytest.approx(0.1)

    def test_zero_previous(self):
        assert percent_change(0, 5) == 0.0

    def test_series(self):
        assert percent_changes([100, 110, 99]) == pytest.approx([0.1, -0.1])

    def test_months_ago_clamps_to_month_end(self):
        assert months_ago(date(2024, 3, 31), 1) == date(2024, 2, 29)
        assert months_ago(date(2024, 1, 15), 13) == date(2022, 12, 15)

    def test_lookback_period(self):
        assert lookback_period(1) == "2y"
        assert lookback_period(12) == "2y"
        assert lookback_period(24) == "3y"


def _monthly_dates(start_year: int, months: int) -> list[date]:
    dates = []
    for i in range(months):
        year, month = divmod(i, 12)
        dates.append(date(start_year + year, month + 1, 1))
    return dates


def _beta_service(macro_points, bars, today=date(2024, 12, 31)):
    return CorrelationService(
        price_source=FakePriceSource(bars={"^GSPC": bars}),
        macro_source=FakeMacroSource(series={MacroType.CPI: macro_points}),
        tolerance_days=5,
        today=lambda: today,
    )


class TestMacroBeta:

    async def test_proportional_series_correlate_perfectly(self):
        dates = _monthly_dates(2023, 24)
        values = [100 + k * k for k in range(24)]
        macro = [point(d, v) for d, v in zip(dates, values)]
        bars = [make_bar(d, v * 2) for d, v in zip(dates, values)]

        result = await _beta_service(macro, bars).compute_beta(MacroType.CPI, months=12)

        assert result.correlation == pytest.approx(1.0)
        assert result.period == "12m"
        assert len(result.data_points) == 12
        assert result.data_points[0].date == date(2024, 1, 1)
        assert all(p.date >= date(2023, 12, 31) for p in result.data_points)

    async def test_asset_interval_follows_macro_frequency(self):
        service = CorrelationService(
            price_source=FakePriceSource(),
            macro_source=FakeMacroSource(),
            today=lambda: date(2024, 12, 31),
        )

        await service.compute_beta(MacroType.JOBLESS, months=24)

        ticker, interval, period = service.price_source.calls[0]
        assert (ticker, interval, period) == ("^GSPC", Interval.W1, "3y")

    async def test_insufficient_raw_data(self):
        macro = [point(date(2024, 6, 1), 3.0)]
        bars = [make_bar(date(2024, 6, 1), 10.0), make_bar(date(2024, 7, 1), 11.0)]

        result = await _beta_service(macro, bars).compute_beta(MacroType.CPI)

        assert result.correlation == 0.0
        assert result.data_points == []
        assert result.period == "N/A"

    async def test_sources_without_data(self):
        service = CorrelationService(
            price_source=PriceSourceChain([FakePriceSource()]),
            macro_source=MacroSourceChain([FakeMacroSource()]),
            today=lambda: date(2024, 12, 31),
        )

        result = await service.compute_beta(MacroType.CPI)

        assert result.correlation == 0.0
        assert result.data_points == []
        assert result.period == "N/A"

    async def test_unaligned_dates_give_empty_result(self):
        dates = _monthly_dates(2024, 6)
        macro = [point(d, 100 + i) for i, d in enumerate(dates)]
        bars = [make_bar(d + timedelta(days=12), 10.0 + i) for i, d in enumerate(dates)]

        result = await _beta_service(macro, bars).compute_beta(MacroType.CPI, months=12)

        assert result.correlation == 0.0
        assert result.data_points == []
        assert result.period == "12m"


class TestAssetCorrelation:

    async def test_matrix_is_symmetric_with_unit_diagonal(self):
        closes = [100, 102, 101, 105, 104, 108, 107, 110]
        prices = FakePriceSource(bars={
            "SPY": daily_bars(closes),
            "QQQ": daily_bars([c * 3 for c in closes]),
            "GLD": daily_bars([200 - c for c in closes]),
        })
        service = CorrelationService(price_source=prices, macro_source=FakeMacroSource(),
                                     today=lambda: date(2024, 2, 1))

        result = await service.compute_asset_correlation(["SPY", "QQQ", "GLD"], months=12)

        matrix = result.matrix
        assert result.tickers == ["SPY", "QQQ", "GLD"]
        assert result.data_points == len(closes)
        assert [matrix[i][i] for i in range(3)] == [1.0, 1.0, 1.0]
        for i in range(3):
            for j in range(3):
                assert matrix[i][j] == matrix[j][i]
        assert matrix[0][1] == pytest.approx(1.0)
        assert matrix[0][2] < 0

    async def test_only_common_dates_are_used(self):
        spy = daily_bars([100, 101, 102, 103])
        qqq = [b for i, b in enumerate(daily_bars([50, 51, 52, 53])) if i != 1]
        service = CorrelationService(
            price_source=FakePriceSource(bars={"SPY": spy, "QQQ": qqq}),
            macro_source=FakeMacroSource(),
            today=lambda: date(2024, 2, 1),
        )

        result = await service.compute_asset_correlation(["SPY", "QQQ"], months=12)

        assert result.data_points == 3

    async def test_fewer_than_two_common_dates(self):
        spy = daily_bars([100, 101], start=date(2024, 1, 1))
        qqq = daily_bars([50, 51], start=date(2024, 1, 10))
        service = CorrelationService(
            price_source=FakePriceSource(bars={"SPY": spy, "QQQ": qqq}),
            macro_source=FakeMacroSource(),
            today=lambda: date(2024, 2, 1),
        )

        result = await service.compute_asset_correlation(["SPY", "QQQ"], months=12)

        assert result.matrix == []
        assert result.data_points == 0

    async def test_fetch_failure_propagates(self, upstream_error):
        service = CorrelationService(
            price_source=FakePriceSource(bars={"SPY": daily_bars([1, 2, 3])},
                                         errors={"BAD": upstream_error}),
            macro_source=FakeMacroSource(),
            today=lambda: date(2024, 2, 1),
        )

        with pytest.raises(ExternalAPIError):
            await service.compute_asset_correlation(["SPY", "BAD"])

    async def test_too_many_tickers(self):
        prices = FakePriceSource()
        service = CorrelationService(price_source=prices, macro_source=FakeMacroSource())

        with pytest.raises(ValidationError):
            await service.compute_asset_correlation([f"T{i}" for i in range(21)])

        assert prices.calls == []

    async def test_ticker_without_history_gives_empty_matrix(self):
        prices = PriceSourceChain([FakePriceSource(bars={"AAA": daily_bars([10, 11, 12])})])
        service = CorrelationService(price_source=prices, macro_source=FakeMacroSource(),
                                     today=lambda: date(2024, 2, 1))

        result = await service.compute_asset_correlation(["AAA", "NEW"])

        assert result.tickers == ["AAA", "NEW"]
        assert result.matrix == []
        assert result.data_points == 0

    async def test_single_ticker_is_its_own_calendar(self):
        service = CorrelationService(
            price_source=FakePriceSource(bars={"SPY": daily_bars([100, 101, 103])}),
            macro_source=FakeMacroSource(),
            today=lambda: date(2024, 2, 1),
        )

        result = await service.compute_asset_correlation(["SPY"])

        assert result.matrix == [[1.0]]
        assert result.data_points == 3

    async def test_window_trims_anchor_dates(self):
        closes = [100, 101, 102, 103, 104]
        service = CorrelationService(
            price_source=FakePriceSource(bars={
                "SPY": daily_bars(closes, start=date(2023, 1, 30)),
                "QQQ": daily_bars(closes, start=date(2023, 1, 30)),
            }),
            macro_source=FakeMacroSource(),
            today=lambda: date(2024, 2, 1),
        )

        result = await service.compute_asset_correlation(["SPY", "QQQ"], months=12)

        # only Feb 1..3 fall inside the trailing year
        assert result.data_points == 3
