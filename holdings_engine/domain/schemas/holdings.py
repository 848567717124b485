"""
Wire schemas for holdings contracts returned by the backend.

Field names follow the backend's camelCase JSON; `to_entity()` converts
to the immutable domain models.
"""

from decimal import Decimal
from typing import Annotated, Dict, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict
from pydantic.alias_generators import to_camel

from holdings_engine.domain.models import (
    Asset,
    AssetCategory,
    Currency,
    HoldingContract,
    Market,
    MoneyValues,
    Portfolio,
    Position,
    PriceData,
    QuantityValues,
    Total,
    ValuationBasis,
    ZERO,
)


def as_decimal(value):
    """Floats go through str() so 3780.03 stays 3780.03; null becomes 0."""
    if value is None:
        return ZERO
    if isinstance(value, float):
        return Decimal(str(value))
    return value


WireDecimal = Annotated[Decimal, BeforeValidator(as_decimal)]


class WireModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class CurrencySchema(WireModel):
    code: str
    name: str = ""
    symbol: str = ""

    def to_entity(self) -> Currency:
        return Currency(code=self.code, name=self.name, symbol=self.symbol)


class MarketSchema(WireModel):
    code: str
    name: str = ""
    currency: Optional[CurrencySchema] = None

    def to_entity(self) -> Market:
        return Market(
            code=self.code,
            name=self.name,
            currency=self.currency.to_entity() if self.currency else None,
        )


class AssetCategorySchema(WireModel):
    id: str
    name: str = ""


class AssetSchema(WireModel):
    id: str = ""
    code: str
    name: str = ""
    asset_category: AssetCategorySchema
    market: MarketSchema
    sector: Optional[str] = None
    effective_report_category: Optional[str] = None
    price_symbol: Optional[str] = None

    def to_entity(self) -> Asset:
        return Asset(
            id=self.id,
            code=self.code,
            name=self.name,
            category=AssetCategory(id=self.asset_category.id, name=self.asset_category.name),
            market=self.market.to_entity(),
            sector=self.sector,
            effective_report_category=self.effective_report_category,
            price_symbol=self.price_symbol,
        )


class PriceDataSchema(WireModel):
    close: WireDecimal = ZERO
    previous_close: WireDecimal = ZERO
    change: WireDecimal = ZERO
    change_percent: WireDecimal = ZERO
    price_date: Optional[str] = None

    def to_entity(self) -> PriceData:
        return PriceData(
            close=self.close,
            previous_close=self.previous_close,
            change=self.change,
            change_percent=self.change_percent,
            price_date=self.price_date or "",
        )


class QuantityValuesSchema(WireModel):
    total: WireDecimal = ZERO
    purchased: WireDecimal = ZERO
    sold: WireDecimal = ZERO
    precision: int = 0

    def to_entity(self) -> QuantityValues:
        return QuantityValues(
            total=self.total,
            purchased=self.purchased,
            sold=self.sold,
            precision=self.precision,
        )


_MONEY_FIELDS = (
    "market_value",
    "cost_value",
    "cost_basis",
    "average_cost",
    "dividends",
    "realised_gain",
    "unrealised_gain",
    "total_gain",
    "fees",
    "tax",
    "cash",
    "purchases",
    "sales",
    "weight",
    "roi",
    "irr",
    "gain_on_day",
)


class MoneyValuesSchema(WireModel):
    currency: CurrencySchema
    value_in: Optional[ValuationBasis] = None
    market_value: WireDecimal = ZERO
    cost_value: WireDecimal = ZERO
    cost_basis: WireDecimal = ZERO
    average_cost: WireDecimal = ZERO
    dividends: WireDecimal = ZERO
    realised_gain: WireDecimal = ZERO
    unrealised_gain: WireDecimal = ZERO
    total_gain: WireDecimal = ZERO
    fees: WireDecimal = ZERO
    tax: WireDecimal = ZERO
    cash: WireDecimal = ZERO
    purchases: WireDecimal = ZERO
    sales: WireDecimal = ZERO
    weight: WireDecimal = ZERO
    roi: WireDecimal = ZERO
    irr: WireDecimal = ZERO
    gain_on_day: WireDecimal = ZERO
    price_data: Optional[PriceDataSchema] = None

    def to_entity(self, basis: ValuationBasis) -> MoneyValues:
        return MoneyValues(
            currency=self.currency.to_entity(),
            basis=self.value_in or basis,
            price_data=self.price_data.to_entity() if self.price_data else None,
            **{name: getattr(self, name) for name in _MONEY_FIELDS},
        )


class PositionSchema(WireModel):
    asset: AssetSchema
    quantity_values: QuantityValuesSchema = QuantityValuesSchema()
    money_values: Dict[ValuationBasis, MoneyValuesSchema]

    def to_entity(self) -> Position:
        return Position(
            asset=self.asset.to_entity(),
            quantity_values=self.quantity_values.to_entity(),
            money_values={
                basis: values.to_entity(basis)
                for basis, values in self.money_values.items()
            },
        )


class PortfolioSchema(WireModel):
    id: str = ""
    code: str
    name: str = ""
    currency: CurrencySchema
    base: Optional[CurrencySchema] = None
    market_value: WireDecimal = ZERO
    irr: WireDecimal = ZERO

    def to_entity(self) -> Portfolio:
        currency = self.currency.to_entity()
        return Portfolio(
            id=self.id,
            code=self.code,
            name=self.name,
            currency=currency,
            base=self.base.to_entity() if self.base else currency,
            market_value=self.market_value,
            irr=self.irr,
        )


class TotalSchema(WireModel):
    currency: CurrencySchema
    market_value: WireDecimal = ZERO
    purchases: WireDecimal = ZERO
    sales: WireDecimal = ZERO
    cash: WireDecimal = ZERO
    income: WireDecimal = ZERO
    gain: WireDecimal = ZERO
    irr: WireDecimal = ZERO

    def to_entity(self) -> Total:
        return Total(
            currency=self.currency.to_entity(),
            market_value=self.market_value,
            purchases=self.purchases,
            sales=self.sales,
            cash=self.cash,
            income=self.income,
            gain=self.gain,
            irr=self.irr,
        )


class HoldingContractSchema(WireModel):
    portfolio: PortfolioSchema
    positions: Dict[str, PositionSchema] = {}
    totals: Dict[ValuationBasis, TotalSchema] = {}
    is_mixed_currencies: bool = False
    as_at: Optional[str] = None

    def to_entity(self) -> HoldingContract:
        return HoldingContract(
            portfolio=self.portfolio.to_entity(),
            positions={key: position.to_entity() for key, position in self.positions.items()},
            totals={basis: total.to_entity() for basis, total in self.totals.items()},
            is_mixed_currencies=self.is_mixed_currencies,
            as_at=self.as_at or "",
        )


class HoldingContractResponse(WireModel):
    data: HoldingContractSchema
