import asyncio
from datetime import date
from decimal import Decimal

import pytest

from holdings_engine.domain.models import Currency, PerformancePoint, Portfolio
from holdings_engine.domain.services.performance_aggregator import (
    PerformanceAggregator,
    derive_metrics,
    merge_series,
)
from holdings_engine.exceptions import BackendRequestError

USD = Currency(code="USD")
SGD = Currency(code="SGD")

JAN = date(2024, 1, 31)
FEB = date(2024, 2, 29)


def _portfolio(code, currency=USD):
    return Portfolio(code=code, name=code, currency=currency, base=currency)


def _point(point_date, market_value, net_contributions="0", dividends="0"):
    return PerformancePoint(
        date=point_date,
        market_value=Decimal(market_value),
        net_contributions=Decimal(net_contributions),
        cumulative_dividends=Decimal(dividends),
    )


class FakePerformanceSource:
    def __init__(self, series, errors=None, delays=None):
        self.series = series
        self.errors = errors or {}
        self.delays = delays or {}
        self.calls = []
        self.cancelled = []

    async def get_performance(self, portfolio_code, months):
        self.calls.append((portfolio_code, months))
        if portfolio_code in self.delays:
            try:
                await asyncio.sleep(self.delays[portfolio_code])
            except asyncio.CancelledError:
                self.cancelled.append(portfolio_code)
                raise
        if portfolio_code in self.errors:
            raise self.errors[portfolio_code]
        return self.series[portfolio_code]


@pytest.mark.asyncio
async def test_converts_each_portfolio_into_display_currency():
    source = FakePerformanceSource({
        "US": [_point(JAN, "5000")],
        "SG": [_point(JAN, "10000")],
    })
    aggregator = PerformanceAggregator(source)

    series = await aggregator.aggregate(
        [_portfolio("US"), _portfolio("SG", SGD)],
        12,
        {"USD": Decimal("1"), "SGD": Decimal("0.6")},
        "USD",
    )

    assert len(series) == 1
    assert series[0].market_value == Decimal("11000")
    assert source.calls == [("US", 12), ("SG", 12)]


@pytest.mark.asyncio
async def test_same_currency_portfolios_sum():
    source = FakePerformanceSource({
        "A": [_point(JAN, "3000")],
        "B": [_point(JAN, "5000")],
    })

    series = await PerformanceAggregator(source).aggregate(
        [_portfolio("A"), _portfolio("B")], 6, {"USD": Decimal("1")}, "USD"
    )

    assert series[0].market_value == Decimal("8000")


@pytest.mark.asyncio
async def test_output_independent_of_portfolio_order():
    source = FakePerformanceSource({
        "A": [_point(FEB, "1200", "1000"), _point(JAN, "1000", "1000")],
        "B": [_point(JAN, "400", "300", "5")],
    })
    rates = {"USD": Decimal("1"), "SGD": Decimal("0.75")}
    aggregator = PerformanceAggregator(source)

    forward = await aggregator.aggregate([_portfolio("A"), _portfolio("B", SGD)], 12, rates, "USD")
    backward = await aggregator.aggregate([_portfolio("B", SGD), _portfolio("A")], 12, rates, "USD")

    assert forward == backward
    assert [p.date for p in forward] == [JAN, FEB]


@pytest.mark.asyncio
async def test_failed_portfolio_is_excluded_and_reported():
    source = FakePerformanceSource(
        {"A": [_point(JAN, "1000")]},
        errors={"B": BackendRequestError("GET /performance/B returned 500", status_code=500)},
    )

    result = await PerformanceAggregator(source).aggregate_with_failures(
        [_portfolio("A"), _portfolio("B")], 12, {"USD": Decimal("1")}, "USD"
    )

    assert [p.market_value for p in result.series] == [Decimal("1000")]
    assert result.failures == {"B": "GET /performance/B returned 500"}


@pytest.mark.asyncio
async def test_slow_portfolio_times_out_without_blocking_others():
    source = FakePerformanceSource(
        {"FAST": [_point(JAN, "100")], "SLOW": [_point(JAN, "900")]},
        delays={"SLOW": 5},
    )
    aggregator = PerformanceAggregator(source, fetch_timeout_seconds=0.05)

    result = await aggregator.aggregate_with_failures(
        [_portfolio("FAST"), _portfolio("SLOW")], 12, {"USD": Decimal("1")}, "USD"
    )

    assert [p.market_value for p in result.series] == [Decimal("100")]
    assert result.failures == {"SLOW": "timed out"}


@pytest.mark.asyncio
async def test_nothing_fetched_without_display_currency_or_portfolios():
    source = FakePerformanceSource({"A": [_point(JAN, "1")]})
    aggregator = PerformanceAggregator(source)

    assert await aggregator.aggregate([_portfolio("A")], 12, {}, None) == []
    assert await aggregator.aggregate([], 12, {}, "USD") == []
    assert source.calls == []


@pytest.mark.asyncio
async def test_missing_rate_defaults_to_one():
    source = FakePerformanceSource({"SG": [_point(JAN, "250")]})

    series = await PerformanceAggregator(source).aggregate(
        [_portfolio("SG", SGD)], 12, {"USD": Decimal("1")}, "USD"
    )

    assert series[0].market_value == Decimal("250")


def test_merge_series_sorts_dates_and_converts_all_fields():
    merged = merge_series([
        (Decimal("2"), [_point(FEB, "10", "8", "1"), _point(JAN, "5", "4", "0")]),
        (Decimal("1"), [_point(FEB, "3", "3", "0.5")]),
    ])

    assert [p.date for p in merged] == [JAN, FEB]
    assert merged[1].market_value == Decimal("23")
    assert merged[1].net_contributions == Decimal("19")
    assert merged[1].cumulative_dividends == Decimal("2.5")


def test_derive_metrics_uses_first_point_as_baseline():
    merged = merge_series([(Decimal("1"), [_point(JAN, "1000", "900"), _point(FEB, "1100", "950")])])

    derived = derive_metrics(merged)

    assert derived[0].growth_of_1000 == Decimal("1000")
    assert derived[0].cumulative_return == Decimal("0")
    assert derived[1].growth_of_1000 == Decimal("1100")
    assert derived[1].cumulative_return == Decimal("0.1")
    assert derived[1].investment_gain == Decimal("150")


def test_derive_metrics_zero_baseline_leaves_ratios_zero():
    merged = merge_series([(Decimal("1"), [_point(JAN, "0", "100"), _point(FEB, "50", "100")])])

    derived = derive_metrics(merged)

    assert derived[1].growth_of_1000 == Decimal("0")
    assert derived[1].cumulative_return == Decimal("0")
    assert derived[1].investment_gain == Decimal("-50")


@pytest.mark.asyncio
async def test_cancelling_aggregate_cancels_every_fetch():
    source = FakePerformanceSource(
        {"US": [_point(JAN, "5000")], "SG": [_point(JAN, "10000")]},
        delays={"US": 5, "SG": 5},
    )
    aggregator = PerformanceAggregator(source, fetch_timeout_seconds=10)

    task = asyncio.ensure_future(
        aggregator.aggregate(
            [_portfolio("US"), _portfolio("SG", SGD)], 12, {"SGD": Decimal("0.6")}, "USD"
        )
    )
    while len(source.calls) < 2:
        await asyncio.sleep(0)
    task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await task

    assert sorted(source.cancelled) == ["SG", "US"]
