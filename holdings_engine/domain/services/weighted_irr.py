"""
WEIGHTED IRR CALCULATOR

IRR is not additive, so a group's return is the market-value-weighted
mean of its members' IRRs. Cash-related and non-positive positions do
not take part.
"""

from decimal import Decimal
from typing import Iterable

from holdings_engine.domain.models import Position, ValuationBasis, ZERO


def _qualifies(position: Position, basis: ValuationBasis) -> bool:
    values = position.values_in(basis)
    return (
        not position.asset.is_cash_related
        and values.market_value.is_finite()
        and values.market_value > ZERO
        and values.irr.is_finite()
    )


def weighted_irr(positions: Iterable[Position], basis: ValuationBasis) -> Decimal:
    """
    Σ(irr × market value) / Σ(market value) over qualifying positions.

    Returns:
        Weighted IRR, or 0 when nothing qualifies (read as "no data")
    """
    weighted_sum = ZERO
    total_value = ZERO
    for position in positions:
        if not _qualifies(position, basis):
            continue
        values = position.values_in(basis)
        weighted_sum += values.irr * values.market_value
        total_value += values.market_value

    if total_value == ZERO:
        return ZERO
    return weighted_sum / total_value
