"""
Display currency resolution and conversion for holdings values.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Optional

from holdings_engine.domain.models import Currency, Portfolio
from holdings_engine.infrastructure.backend.types import CurrencySource, FxRateSource

logger = logging.getLogger(__name__)


class DisplayMode(str, Enum):
    """Which currency values are shown in"""
    TRADE = "TRADE"
    PORTFOLIO = "PORTFOLIO"
    BASE = "BASE"
    CUSTOM = "CUSTOM"


async def resolve_target_currency(
    mode: DisplayMode,
    source_currency: Optional[Currency],
    portfolio: Portfolio,
    currencies: CurrencySource,
    custom_code: Optional[str] = None,
) -> Optional[Currency]:
    if mode == DisplayMode.TRADE:
        return source_currency
    if mode == DisplayMode.PORTFOLIO:
        return portfolio.currency
    if mode == DisplayMode.BASE:
        return portfolio.base
    if mode == DisplayMode.CUSTOM and custom_code:
        return await currencies.find(custom_code)
    return None


@dataclass(frozen=True)
class DisplayCurrencyConverter:
    source_currency: Optional[Currency]
    target_currency: Optional[Currency]
    rate: Decimal
    is_custom: bool = False

    @property
    def currency_code(self) -> str:
        currency = self.target_currency or self.source_currency
        return currency.code if currency else ""

    @property
    def currency_symbol(self) -> str:
        for currency in (self.target_currency, self.source_currency):
            if currency and currency.symbol:
                return currency.symbol
        return "$"

    def convert(self, value: Decimal) -> Decimal:
        return value * self.rate

    @classmethod
    async def create(
        cls,
        mode: DisplayMode,
        source_currency: Optional[Currency],
        portfolio: Portfolio,
        currencies: CurrencySource,
        fx: FxRateSource,
        custom_code: Optional[str] = None,
    ) -> "DisplayCurrencyConverter":
        """
        Resolve the target currency for `mode` and look up the conversion rate.

        An unresolvable target converts at 1.
        """
        target = await resolve_target_currency(mode, source_currency, portfolio, currencies, custom_code)
        rate = Decimal("1")
        if source_currency and target and source_currency != target:
            rate = await fx.get_rate(source_currency.code, target.code)
        elif mode == DisplayMode.CUSTOM and target is None:
            logger.debug("Custom display currency %s not offered", custom_code)
        return cls(
            source_currency=source_currency,
            target_currency=target,
            rate=rate,
            is_custom=mode == DisplayMode.CUSTOM,
        )
