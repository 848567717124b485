"""
SUBTOTAL ACCUMULATOR
Fold positions into zero-seeded money totals

RULES:
✅ Pure: returns a new record, never mutates the input
✅ Cash-related assets feed `cash`, never `gain_on_day`
✅ Day gain only counts when the position has a price move
"""

from dataclasses import replace
from decimal import Decimal
from typing import Dict, Tuple

from holdings_engine.domain.models import (
    Currency,
    MoneyValues,
    Position,
    PriceData,
    Total,
    ValuationBasis,
    ZERO,
)


ADDITIVE_FIELDS: Tuple[str, ...] = (
    "market_value",
    "cost_value",
    "dividends",
    "realised_gain",
    "unrealised_gain",
    "irr",
    "total_gain",
)


def zero_money_values(currency: Currency, basis: ValuationBasis) -> MoneyValues:
    """Seed record: every number zero, price data zeroed, currency and basis tagged."""
    return MoneyValues(currency=currency, basis=basis, price_data=PriceData())


def zero_total(currency: Currency) -> Total:
    return Total(currency=currency)


def _has_price_move(values: MoneyValues) -> bool:
    return values.price_data is not None and values.price_data.change_percent != ZERO


def fold_position(
    running_total: MoneyValues,
    position: Position,
    basis: ValuationBasis,
) -> MoneyValues:
    """
    Add one position's values (in `basis`) into a running total.

    Args:
        running_total: Totals accumulated so far
        position: Position to add
        basis: Which of the position's valuations to read

    Returns:
        Updated totals
    """
    values = position.values_in(basis)
    updates: Dict[str, Decimal] = {
        name: getattr(running_total, name) + getattr(values, name)
        for name in ADDITIVE_FIELDS
    }
    updates["weight"] = running_total.weight + values.weight

    if position.asset.is_cash_related:
        updates["cash"] = running_total.cash + values.market_value
    else:
        updates["purchases"] = running_total.purchases + values.purchases
        updates["sales"] = running_total.sales + values.sales
        if _has_price_move(values):
            updates["gain_on_day"] = running_total.gain_on_day + values.gain_on_day

    return replace(running_total, **updates)


def fold_position_all_bases(
    subtotals: Dict[ValuationBasis, MoneyValues],
    position: Position,
) -> Dict[ValuationBasis, MoneyValues]:
    """Fold a position into every basis, each reading its own valuation."""
    return {
        basis: fold_position(subtotal, position, basis)
        for basis, subtotal in subtotals.items()
    }
