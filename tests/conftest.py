from decimal import Decimal
from typing import Dict, Optional

import pytest

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
)


USD = Currency(code="USD", name="US Dollar", symbol="$")
SGD = Currency(code="SGD", name="Singapore Dollar", symbol="S$")
NZD = Currency(code="NZD", name="New Zealand Dollar", symbol="$")

US_MARKET = Market(code="US", name="US Exchanges", currency=USD)
CASH_MARKET = Market(code="CASH", name="Cash")

_PRICE_FIELDS = ("close", "change_percent")


def _decimal(value) -> Decimal:
    return value if isinstance(value, Decimal) else Decimal(str(value))


def build_position(
    code: str,
    category_id: str = "EQUITY",
    category_name: str = "Equity",
    market: Market = US_MARKET,
    currency: Currency = USD,
    quantity="1",
    name: Optional[str] = None,
    sector: Optional[str] = None,
    price_symbol: Optional[str] = None,
    effective_report_category: Optional[str] = None,
    per_basis: Optional[Dict[ValuationBasis, dict]] = None,
    **money,
) -> Position:
    """
    Position valued identically in every basis unless `per_basis` overrides
    fields for a specific basis. `close` and `change_percent` go to price data.
    """
    asset = Asset(
        code=code,
        name=name or code,
        category=AssetCategory(id=category_id, name=category_name),
        market=market,
        sector=sector,
        effective_report_category=effective_report_category,
        price_symbol=price_symbol,
    )
    money_values = {}
    for basis in ValuationBasis:
        fields = dict(money)
        fields.update((per_basis or {}).get(basis, {}))
        price = {name: _decimal(fields.pop(name)) for name in _PRICE_FIELDS if name in fields}
        money_values[basis] = MoneyValues(
            currency=fields.pop("currency", currency),
            basis=basis,
            price_data=PriceData(**price),
            **{name: _decimal(value) for name, value in fields.items()},
        )
    return Position(
        asset=asset,
        quantity_values=QuantityValues(total=_decimal(quantity)),
        money_values=money_values,
    )


def build_contract(
    positions,
    portfolio: Optional[Portfolio] = None,
    totals: Optional[Dict[ValuationBasis, Total]] = None,
) -> HoldingContract:
    portfolio = portfolio or Portfolio(code="TEST", name="Test Portfolio", currency=USD, base=USD)
    return HoldingContract(
        portfolio=portfolio,
        positions={f"{portfolio.code}:{p.asset.code}": p for p in positions},
        totals=totals or {},
    )


@pytest.fixture()
def position_factory():
    return build_position


@pytest.fixture()
def contract_factory():
    return build_contract


@pytest.fixture()
def sample_contract() -> HoldingContract:
    """
    Mixed portfolio: two equities, two ETFs (one fully sold) and a USD balance.
    """
    positions = [
        build_position(
            "BKNG", name="Booking Holdings", sector="Consumer Discretionary",
            market_value="3780.03", cost_value="2980.00", irr="0.12",
            gain_on_day="45.10", change_percent="1.21", close="3780.03",
        ),
        build_position(
            "MCD", name="McDonald's", sector="Consumer Staples", quantity="4",
            market_value="1071.80", cost_value="721.00", irr="0.08",
            gain_on_day="-3.20", change_percent="-0.30", close="267.95",
        ),
        build_position(
            "QQQ", category_id="ETF", category_name="Exchange Traded Fund", quantity="1",
            market_value="441.02", cost_value="333.33", unrealised_gain="107.69", irr="0.15",
            gain_on_day="2.00", change_percent="0.45", close="441.02",
        ),
        build_position(
            "SMH", category_id="ETF", category_name="Exchange Traded Fund", quantity="0",
            market_value="0", realised_gain="52.40",
        ),
        build_position(
            "USD", name="US Dollar", category_id="CASH", category_name="Cash",
            market=CASH_MARKET, quantity="5741.00", market_value="5741.00",
        ),
    ]
    totals = {
        basis: Total(currency=USD, market_value=Decimal("11033.85"), cash=Decimal("5741.00"))
        for basis in ValuationBasis
    }
    return build_contract(positions, totals=totals)
