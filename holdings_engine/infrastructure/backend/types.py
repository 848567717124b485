"""
Backend data source protocols for type hints.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Protocol

from holdings_engine.domain.models import Currency, HoldingContract, PerformancePoint


class PerformanceSource(Protocol):
    async def get_performance(self, portfolio_code: str, months: int) -> List[PerformancePoint]:
        ...


class FxRateSource(Protocol):
    async def get_rate(self, from_code: str, to_code: str, rate_date: str = "today") -> Decimal:
        ...

    async def get_rates(self, source_codes: Iterable[str], display_code: str) -> Dict[str, Decimal]:
        ...


class CurrencySource(Protocol):
    async def list_currencies(self) -> List[Currency]:
        ...

    async def find(self, code: str) -> Optional[Currency]:
        ...


class HoldingsSource(Protocol):
    async def get_holdings(self, portfolio_code: str, as_at: str = "today") -> HoldingContract:
        ...

    async def get_aggregated_holdings(
        self, portfolio_codes: Optional[List[str]] = None, as_at: str = "today"
    ) -> HoldingContract:
        ...
