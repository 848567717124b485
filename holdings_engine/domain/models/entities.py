"""
Domain Models - Entities
Pure domain objects with no infrastructure dependencies
"""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Dict, Optional


ZERO = Decimal("0")


class ValuationBasis(str, Enum):
    """Currency perspective used to value the same position"""
    TRADE = "TRADE"
    BASE = "BASE"
    PORTFOLIO = "PORTFOLIO"


class GroupDimension(str, Enum):
    """Dimension used to bucket positions"""
    ASSET_CLASS = "ASSET_CLASS"
    SECTOR = "SECTOR"
    MARKET_CURRENCY = "MARKET_CURRENCY"
    MARKET = "MARKET"
    ASSET = "ASSET"


class AssetCategoryId(str, Enum):
    """Raw asset category identifiers supplied by the backend"""
    EQUITY = "EQUITY"
    CASH = "CASH"
    ETF = "ETF"
    MUTUAL_FUND = "MUTUAL FUND"
    RE = "RE"
    ACCOUNT = "ACCOUNT"
    TRADE = "TRADE"
    POLICY = "POLICY"


CASH_RELATED_CATEGORIES = frozenset(
    {AssetCategoryId.CASH.value, AssetCategoryId.ACCOUNT.value, AssetCategoryId.TRADE.value}
)


@dataclass(frozen=True)
class Currency:
    """Currency - compared by code only"""
    code: str
    name: str = field(default="", compare=False)
    symbol: str = field(default="", compare=False)


@dataclass(frozen=True)
class Market:
    code: str
    name: str = ""
    currency: Optional[Currency] = None


@dataclass(frozen=True)
class AssetCategory:
    id: str
    name: str = ""


@dataclass(frozen=True)
class Asset:
    """Asset definition - Immutable"""
    code: str
    name: str
    category: AssetCategory
    market: Market
    id: str = ""
    sector: Optional[str] = None
    effective_report_category: Optional[str] = None
    price_symbol: Optional[str] = None

    @property
    def is_cash(self) -> bool:
        """Asset represents a currency balance"""
        return self.category.id.upper() == AssetCategoryId.CASH.value

    @property
    def is_account(self) -> bool:
        """Asset represents a bank account"""
        return self.category.id.upper() == AssetCategoryId.ACCOUNT.value

    @property
    def is_cash_related(self) -> bool:
        """Currency, bank account or trade-settlement balance"""
        return self.category.id.upper() in CASH_RELATED_CATEGORIES


@dataclass(frozen=True)
class PriceData:
    close: Decimal = ZERO
    previous_close: Decimal = ZERO
    change: Decimal = ZERO
    change_percent: Decimal = ZERO
    price_date: str = ""


@dataclass(frozen=True)
class QuantityValues:
    total: Decimal = ZERO
    purchased: Decimal = ZERO
    sold: Decimal = ZERO
    precision: int = 0


@dataclass(frozen=True)
class MoneyValues:
    """
    Monetary values for one position (or one group) in one valuation basis.

    Numeric fields default to zero so accumulation never meets a missing value.
    `weighted_irr` is only populated on group subtotals.
    """
    currency: Currency
    basis: ValuationBasis
    market_value: Decimal = ZERO
    cost_value: Decimal = ZERO
    cost_basis: Decimal = ZERO
    average_cost: Decimal = ZERO
    dividends: Decimal = ZERO
    realised_gain: Decimal = ZERO
    unrealised_gain: Decimal = ZERO
    total_gain: Decimal = ZERO
    fees: Decimal = ZERO
    tax: Decimal = ZERO
    cash: Decimal = ZERO
    purchases: Decimal = ZERO
    sales: Decimal = ZERO
    weight: Decimal = ZERO
    roi: Decimal = ZERO
    irr: Decimal = ZERO
    gain_on_day: Decimal = ZERO
    weighted_irr: Decimal = ZERO
    price_data: Optional[PriceData] = None


@dataclass(frozen=True)
class Portfolio:
    code: str
    name: str
    currency: Currency
    base: Currency
    id: str = ""
    market_value: Decimal = ZERO
    irr: Decimal = ZERO


@dataclass(frozen=True)
class Position:
    """One asset's holding within one portfolio"""
    asset: Asset
    quantity_values: QuantityValues
    money_values: Dict[ValuationBasis, MoneyValues]

    def values_in(self, basis: ValuationBasis) -> MoneyValues:
        return self.money_values[basis]


@dataclass(frozen=True)
class Total:
    """Portfolio-level totals as supplied by the backend"""
    currency: Currency
    market_value: Decimal = ZERO
    purchases: Decimal = ZERO
    sales: Decimal = ZERO
    cash: Decimal = ZERO
    income: Decimal = ZERO
    gain: Decimal = ZERO
    irr: Decimal = ZERO


@dataclass(frozen=True)
class HoldingContract:
    """Raw positions for a portfolio, already priced upstream"""
    portfolio: Portfolio
    positions: Dict[str, Position]
    totals: Dict[ValuationBasis, Total] = field(default_factory=dict)
    is_mixed_currencies: bool = False
    as_at: str = ""
