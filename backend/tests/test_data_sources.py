from datetime import date

import pytest

from marketdash.schemas.market import EarningsPoint, Interval, MacroType, PeriodType
from marketdash.services.base import ExternalAPIError
from marketdash.services.cache import MemoryTTLCache
from marketdash.services.data_sources.chain import (
    CachedMacroSource,
    EarningsSourceChain,
    MacroSourceChain,
    PriceSourceChain,
)
from marketdash.services.data_sources.fred_adapter import FredMacroSource, parse_observations
from marketdash.services.data_sources.mock_data import (
    MockMacroSource,
    MockPriceSource,
    generate_mock_bars,
    period_to_days,
)
from marketdash.services.data_sources.multpl_adapter import MultplEarningsSource, parse_earnings_table
from marketdash.services.data_sources.polygon_adapter import PolygonOptionsSource
from marketdash.services.data_sources.yahoo_adapter import merge_earnings

from conftest import FakeEarningsSource, FakeMacroSource, FakePriceSource, daily_bars, point


class TestSourceChains:

    async def test_falls_through_to_next_source(self, upstream_error):
        bars = daily_bars([1, 2, 3])
        chain = PriceSourceChain([
            FakePriceSource(errors={"SPY": upstream_error}),
            FakePriceSource(),
            FakePriceSource(bars={"SPY": bars}),
        ])

        assert await chain.get_bars("SPY") == bars

    async def test_all_sources_failing(self, upstream_error):
        chain = EarningsSourceChain([
            FakeEarningsSource(error=upstream_error),
            FakeEarningsSource(error=upstream_error),
        ])

        with pytest.raises(ExternalAPIError) as exc:
            await chain.get_earnings_history("AAPL")

        assert len(exc.value.details["failures"]) == 2

    async def test_empty_answer_is_not_a_failure(self, upstream_error):
        first = FakeEarningsSource()
        last = FakeEarningsSource(error=upstream_error)
        chain = EarningsSourceChain([first, last])

        assert await chain.get_earnings_history("XYZ") == []
        assert first.calls == last.calls == 1

    async def test_empty_sources_fall_through_to_data(self):
        bars = daily_bars([1, 2])
        chain = PriceSourceChain([FakePriceSource(), FakePriceSource(bars={"NEW": bars})])

        assert await chain.get_bars("NEW") == bars

    async def test_spot_price_skips_sources_without_quotes(self):
        chain = PriceSourceChain([MockPriceSource(), FakePriceSource(spot={"SPY": 512.5})])

        assert await chain.get_current_price("SPY") == 512.5

    async def test_spot_price_unavailable(self):
        chain = PriceSourceChain([MockPriceSource(), FakePriceSource()])

        assert await chain.get_current_price("SPY") is None

    async def test_macro_chain(self):
        cpi = [point(date(2024, 1, 1), 300.0), point(date(2024, 2, 1), 301.0)]
        chain = MacroSourceChain([FakeMacroSource(), FakeMacroSource(cpi=cpi)])

        assert await chain.get_cpi_index() == cpi


class TestCachedMacroSource:

    async def test_second_call_is_served_from_cache(self):
        series = [point(date(2024, 1, 1), 3.1), point(date(2024, 2, 1), 3.2)]
        inner = FakeMacroSource(series={MacroType.CPI: series})
        source = CachedMacroSource(inner, MemoryTTLCache(60))

        first = await source.get_series(MacroType.CPI)
        second = await source.get_series(MacroType.CPI)

        assert first == second == series
        assert inner.calls == 1

    async def test_empty_results_are_not_cached(self):
        inner = FakeMacroSource()
        source = CachedMacroSource(inner, MemoryTTLCache(60))

        await source.get_series(MacroType.JOBLESS)
        await source.get_series(MacroType.JOBLESS)

        assert inner.calls == 2

    async def test_series_and_cpi_index_use_separate_keys(self):
        inner = FakeMacroSource(
            series={MacroType.CPI: [point(date(2024, 1, 1), 3.1)]},
            cpi=[point(date(2024, 1, 1), 310.0)],
        )
        source = CachedMacroSource(inner, MemoryTTLCache(60))

        await source.get_series(MacroType.CPI)
        levels = await source.get_cpi_index()

        assert levels[0].value == 310.0


class TestParsers:

    def test_fred_observations(self):
        payload = {"observations": [
            {"date": "2024-02-01", "value": "3.2"},
            {"date": "2024-01-01", "value": "."},
            {"date": "2023-12-01", "value": "3.4"},
        ]}

        points = parse_observations(payload)

        assert [(p.date, p.value) for p in points] == [
            (date(2023, 12, 1), 3.4),
            (date(2024, 2, 1), 3.2),
        ]

    def test_fred_empty_payload(self):
        assert parse_observations({}) == []

    async def test_fred_requires_key(self):
        source = FredMacroSource(api_key="")

        with pytest.raises(ExternalAPIError):
            await source.get_series(MacroType.CPI)

    def test_multpl_table(self):
        html = """
        <table id="datatable">
          <tr><th>Date</th><th>Value</th></tr>
          <tr class="odd"><td>Jan 1, 2024</td><td>&#x2002;192.43</td></tr>
          <tr class="even"><td>Dec 1, 2023</td><td>
            1,190.12 <abbr title="Estimate">estimate</abbr></td></tr>
          <tr><td>not a date</td><td>5</td></tr>
        </table>
        """

        points = parse_earnings_table(html)

        assert [(p.date, p.value) for p in points] == [
            (date(2023, 12, 1), 1190.12),
            (date(2024, 1, 1), 192.43),
        ]

    async def test_multpl_source_keeps_comma_dates(self):
        source = MultplEarningsSource(url="https://example.test/earnings")

        async def fake_get_text(url, params=None, label=""):
            return (
                "<tr><td>January 1, 2024</td><td>192.43</td></tr>"
                "<tr><td>Feb 1, 2024</td><td>1,201.50</td></tr>"
            )

        source.get_text = fake_get_text

        points = await source.get_earnings_history("^GSPC")

        assert [p.date for p in points] == [date(2024, 1, 1), date(2024, 2, 1)]
        assert points[1].value == 1201.5

    def test_merge_prefers_quarterly_years(self):
        quarterly = [
            EarningsPoint(date=date(2023, 3, 31), value=1.0, period_type=PeriodType.QUARTERLY),
            EarningsPoint(date=date(2023, 6, 30), value=1.1, period_type=PeriodType.QUARTERLY),
        ]
        annual = [
            EarningsPoint(date=date(2022, 12, 31), value=4.0, period_type=PeriodType.ANNUAL),
            EarningsPoint(date=date(2023, 12, 31), value=4.4, period_type=PeriodType.ANNUAL),
        ]

        merged = merge_earnings(quarterly, annual)

        assert [p.date for p in merged] == [date(2022, 12, 31), date(2023, 3, 31), date(2023, 6, 30)]


class TestPolygonPaging:

    async def test_cursor_carries_api_key(self):
        source = PolygonOptionsSource(api_key="secret", base_url="https://example.test/options")
        requests = []

        async def fake_get_json(url, params=None, label=""):
            requests.append((url, params))
            if len(requests) == 1:
                return {
                    "results": [{"details": {"strike_price": 100, "contract_type": "call"},
                                 "open_interest": 10}],
                    "next_url": "https://example.test/options/SPY?cursor=abc",
                }
            return {"results": []}

        source.get_json = fake_get_json

        first = await source.get_options_page("SPY")
        second = await source.get_options_page("SPY", first.next_cursor)

        assert requests[0] == ("https://example.test/options/SPY", {"apiKey": "secret", "limit": 250})
        assert requests[1] == ("https://example.test/options/SPY?cursor=abc&apiKey=secret", None)
        assert len(first.contracts) == 1
        assert second.contracts == []
        assert second.next_cursor is None

    async def test_requires_key(self):
        with pytest.raises(ExternalAPIError):
            await PolygonOptionsSource(api_key="").get_options_page("SPY")


class TestMockData:

    def test_daily_bars_skip_weekends(self):
        bars = generate_mock_bars("SPY", Interval.D1, "1mo", end=date(2024, 3, 31))

        assert bars
        assert all(b.date.weekday() < 5 for b in bars)
        assert all(b.low <= b.close <= b.high for b in bars)

    def test_seeded_by_symbol(self):
        end = date(2024, 3, 31)
        assert generate_mock_bars("SPY", Interval.D1, "1mo", end=end) == \
            generate_mock_bars("SPY", Interval.D1, "1mo", end=end)

    def test_period_to_days(self):
        assert period_to_days("5d") == 5
        assert period_to_days("1y") == 365

    async def test_mock_macro_lengths(self):
        source = MockMacroSource()

        assert len(await source.get_series(MacroType.JOBLESS)) == 520
        assert len(await source.get_series(MacroType.CPI)) == 240
        assert len(await source.get_cpi_index()) == 240
