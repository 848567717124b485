"""
CROSS-PORTFOLIO PERFORMANCE AGGREGATOR
Per-portfolio series → one FX-normalised series

RESPONSIBILITIES:
- Fetch every portfolio's series concurrently
- Isolate per-portfolio failures (logged, reported, excluded)
- Convert to the display currency and merge by date
- Derive gain, growth of 1000 and cumulative return from the first date

RULES:
✅ Best effort: one failing portfolio never fails the aggregate
✅ Output order comes from an explicit date sort, not fetch order
✅ Cancelling the aggregate cancels every outstanding fetch
"""

import asyncio
import logging
from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from holdings_engine.domain.models import (
    AggregatedDataPoint,
    AggregationResult,
    PerformancePoint,
    Portfolio,
    ZERO,
)
from holdings_engine.infrastructure.backend.types import PerformanceSource

logger = logging.getLogger(__name__)

ONE = Decimal("1")
GROWTH_BASE = Decimal("1000")


def merge_series(
    converted: Iterable[Tuple[Decimal, Sequence[PerformancePoint]]],
) -> List[AggregatedDataPoint]:
    """
    Merge FX-converted series by calendar date.

    Args:
        converted: (rate to display currency, series) per portfolio

    Returns:
        One point per date seen in any series, sorted ascending. Derived
        fields are left at zero.
    """
    merged: Dict[date, List[Decimal]] = {}
    for rate, series in converted:
        for point in series:
            bucket = merged.setdefault(point.date, [ZERO, ZERO, ZERO])
            bucket[0] += point.market_value * rate
            bucket[1] += point.net_contributions * rate
            bucket[2] += point.cumulative_dividends * rate

    return [
        AggregatedDataPoint(
            date=point_date,
            market_value=market_value,
            net_contributions=net_contributions,
            cumulative_dividends=cumulative_dividends,
        )
        for point_date, (market_value, net_contributions, cumulative_dividends) in sorted(merged.items())
    ]


def derive_metrics(points: List[AggregatedDataPoint]) -> List[AggregatedDataPoint]:
    """Fill derived fields using the first point as the baseline."""
    if not points:
        return []

    initial_value = points[0].market_value
    derived = []
    for point in points:
        updates = {"investment_gain": point.market_value - point.net_contributions}
        if initial_value != ZERO:
            ratio = point.market_value / initial_value
            updates["growth_of_1000"] = GROWTH_BASE * ratio
            updates["cumulative_return"] = ratio - ONE
        derived.append(replace(point, **updates))
    return derived


class PerformanceAggregator:
    """
    Performance Aggregator
    Combines several portfolios' performance into one display-currency series
    """

    def __init__(
        self,
        source: PerformanceSource,
        fetch_timeout_seconds: Optional[float] = None,
    ):
        """
        Initialize performance aggregator

        Args:
            source: Provider of per-portfolio performance series
            fetch_timeout_seconds: Per-portfolio fetch timeout; None waits indefinitely
        """
        self.source = source
        self.fetch_timeout_seconds = fetch_timeout_seconds

    async def aggregate(
        self,
        portfolios: Sequence[Portfolio],
        months: int,
        fx_rates: Mapping[str, Decimal],
        display_currency_code: Optional[str],
    ) -> List[AggregatedDataPoint]:
        """Merged series only; see aggregate_with_failures."""
        result = await self.aggregate_with_failures(
            portfolios, months, fx_rates, display_currency_code
        )
        return result.series

    async def aggregate_with_failures(
        self,
        portfolios: Sequence[Portfolio],
        months: int,
        fx_rates: Mapping[str, Decimal],
        display_currency_code: Optional[str],
    ) -> AggregationResult:
        """
        Fetch, convert, merge and derive

        Args:
            portfolios: Portfolios to combine
            months: Trailing window requested from each portfolio
            fx_rates: Portfolio currency code → rate into the display currency
            display_currency_code: Display currency; nothing is fetched without one

        Returns:
            Merged series and the failure reason per failed portfolio code
        """
        if not portfolios or not display_currency_code:
            return AggregationResult(series=[])

        outcomes = await asyncio.gather(
            *(self._fetch(portfolio, months) for portfolio in portfolios),
            return_exceptions=True,
        )

        converted: List[Tuple[Decimal, Sequence[PerformancePoint]]] = []
        failures: Dict[str, str] = {}
        for portfolio, outcome in zip(portfolios, outcomes):
            if isinstance(outcome, BaseException):
                reason = self._describe_failure(outcome)
                logger.warning(
                    "Performance fetch failed for %s: %s", portfolio.code, reason
                )
                failures[portfolio.code] = reason
                continue
            rate = fx_rates.get(portfolio.currency.code, ONE)
            converted.append((rate, outcome))

        series = derive_metrics(merge_series(converted))
        logger.debug(
            "Aggregated %d/%d portfolios into %d points (%s, %d months)",
            len(converted),
            len(portfolios),
            len(series),
            display_currency_code,
            months,
        )
        return AggregationResult(series=series, failures=failures)

    async def _fetch(self, portfolio: Portfolio, months: int) -> List[PerformancePoint]:
        fetch = self.source.get_performance(portfolio.code, months)
        if self.fetch_timeout_seconds is None:
            return await fetch
        return await asyncio.wait_for(fetch, timeout=self.fetch_timeout_seconds)

    @staticmethod
    def _describe_failure(error: BaseException) -> str:
        if isinstance(error, asyncio.TimeoutError):
            return "timed out"
        if isinstance(error, asyncio.CancelledError):
            return "cancelled"
        return str(error) or type(error).__name__
