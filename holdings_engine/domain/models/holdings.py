"""
DOMAIN MODELS - HOLDINGS VIEW

Grouped, subtotalled view of one holdings contract.
Derived on every request. Never persisted.
"""

from dataclasses import dataclass, field
from typing import Dict, Tuple

from .entities import (
    Currency,
    MoneyValues,
    Portfolio,
    Position,
    Total,
    ValuationBasis,
)


@dataclass(frozen=True)
class HoldingGroup:
    """
    A named bucket of positions with one subtotal per valuation basis.
    """
    key: str
    positions: Tuple[Position, ...]
    subtotals: Dict[ValuationBasis, MoneyValues]

    def subtotal(self, basis: ValuationBasis) -> MoneyValues:
        return self.subtotals[basis]


@dataclass(frozen=True)
class Holdings:
    """
    Aggregate result of grouping a contract's positions.
    """
    portfolio: Portfolio
    basis: ValuationBasis
    currency: Currency
    totals: Total
    view_totals: MoneyValues
    holding_groups: Dict[str, HoldingGroup] = field(default_factory=dict)
