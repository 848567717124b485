"""
Portfolio view service.
Entry point for host route handlers: fetches upstream contracts and runs
the holdings, allocation and performance engines over them.
"""

from __future__ import annotations

from typing import List, Optional, Sequence

from holdings_engine.config import settings
from holdings_engine.core.logging import get_logger
from holdings_engine.domain.models import (
    AggregatedDataPoint,
    AllocationSlice,
    GroupDimension,
    Holdings,
    Portfolio,
    ValuationBasis,
)
from holdings_engine.domain.services.allocation_slice_builder import (
    build_slices,
    build_slices_from_holdings,
)
from holdings_engine.domain.services.group_key_resolver import allocation_dimension
from holdings_engine.domain.services.holdings_aggregator import (
    HoldingsAggregator,
    order_holdings,
    sort_holdings,
)
from holdings_engine.domain.services.performance_aggregator import PerformanceAggregator
from holdings_engine.infrastructure.backend.client import BackendClient
from holdings_engine.infrastructure.backend.fx_provider import FxRateProvider
from holdings_engine.infrastructure.backend.holdings_provider import HoldingsProvider
from holdings_engine.infrastructure.backend.performance_provider import PerformanceProvider
from holdings_engine.infrastructure.backend.types import (
    FxRateSource,
    HoldingsSource,
    PerformanceSource,
)
from holdings_engine.infrastructure.cache.ttl_cache import TTLCache

logger = get_logger(__name__)


def performance_cache_key(portfolios: Sequence[Portfolio], months: int, currency_code: str) -> str:
    codes = ",".join(portfolio.code for portfolio in portfolios)
    return f"aggregated-perf:{codes}:{months}:{currency_code}"


class PortfolioViewService:
    def __init__(
        self,
        holdings_source: HoldingsSource,
        performance_source: PerformanceSource,
        fx: FxRateSource,
        performance_cache: Optional[TTLCache[List[AggregatedDataPoint]]] = None,
        fetch_timeout_seconds: Optional[float] = None,
    ):
        self.holdings_source = holdings_source
        self.fx = fx
        self.holdings_aggregator = HoldingsAggregator()
        self.performance_aggregator = PerformanceAggregator(
            performance_source,
            fetch_timeout_seconds=fetch_timeout_seconds,
        )
        self.performance_cache = performance_cache or TTLCache(
            settings.PERFORMANCE_CACHE_TTL_SECONDS, name="aggregated-perf"
        )

    async def holdings(
        self,
        portfolio_code: str,
        hide_empty: bool = True,
        basis: ValuationBasis = ValuationBasis.PORTFOLIO,
        dimension: GroupDimension = GroupDimension.ASSET_CLASS,
        sort_key: Optional[str] = None,
        direction: str = "asc",
    ) -> Holdings:
        contract = await self.holdings_source.get_holdings(portfolio_code)
        holdings = self.holdings_aggregator.aggregate(contract, hide_empty, basis, dimension)
        holdings = order_holdings(holdings, dimension)
        if sort_key:
            holdings = sort_holdings(holdings, sort_key, direction)
        return holdings

    async def holdings_allocation(
        self,
        portfolio_code: str,
        basis: ValuationBasis = ValuationBasis.PORTFOLIO,
        dimension: GroupDimension = GroupDimension.ASSET_CLASS,
        hide_empty: bool = True,
    ) -> List[AllocationSlice]:
        """Slices for one portfolio, consistent with its holdings subtotals."""
        holdings = await self.holdings(
            portfolio_code, hide_empty, basis, allocation_dimension(dimension)
        )
        return build_slices_from_holdings(holdings, basis)

    async def allocation(
        self,
        portfolio_codes: Optional[List[str]] = None,
        dimension: GroupDimension = GroupDimension.ASSET_CLASS,
        basis: ValuationBasis = ValuationBasis.BASE,
    ) -> List[AllocationSlice]:
        """Slices across portfolios, from the backend's aggregated contract."""
        contract = await self.holdings_source.get_aggregated_holdings(portfolio_codes)
        return build_slices(contract, allocation_dimension(dimension), basis)

    async def aggregated_performance(
        self,
        portfolios: Sequence[Portfolio],
        months: int,
        display_currency_code: Optional[str],
    ) -> List[AggregatedDataPoint]:
        """
        Combined performance series in the display currency.

        Results are cached per (portfolios, months, currency) and concurrent
        requests for the same key share one computation.
        """
        if not portfolios or not display_currency_code:
            return []

        async def load() -> List[AggregatedDataPoint]:
            logger.debug("Aggregating performance for %s", key)
            fx_rates = await self.fx.get_rates(
                [portfolio.currency.code for portfolio in portfolios],
                display_currency_code,
            )
            return await self.performance_aggregator.aggregate(
                portfolios, months, fx_rates, display_currency_code
            )

        key = performance_cache_key(portfolios, months, display_currency_code)
        return await self.performance_cache.get_or_load(key, load)


def build_portfolio_view_service(client: Optional[BackendClient] = None) -> PortfolioViewService:
    """Wire the service to the configured backend."""
    client = client or BackendClient()
    return PortfolioViewService(
        holdings_source=HoldingsProvider(client),
        performance_source=PerformanceProvider(client),
        fx=FxRateProvider(client),
        fetch_timeout_seconds=settings.PERFORMANCE_FETCH_TIMEOUT_SECONDS,
    )
