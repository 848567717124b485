"""
ALLOCATION SLICE BUILDER
Positions (or computed holdings) → percentage-of-total chart slices
"""

from decimal import Decimal
from typing import Dict, List, Tuple

from holdings_engine.domain.models import (
    AllocationSlice,
    GroupDimension,
    HoldingContract,
    Holdings,
    Position,
    ValuationBasis,
    ZERO,
)
from holdings_engine.domain.services.group_key_resolver import (
    resolve_group_key,
    resolve_group_label,
)
from holdings_engine.domain.services.weighted_irr import weighted_irr


HUNDRED = Decimal("100")

CATEGORY_COLORS: Dict[str, str] = {
    "Equity": "#3B82F6",
    "ETF": "#10B981",
    "Mutual Fund": "#8B5CF6",
    "Cash": "#6B7280",
    "Property": "#F59E0B",
}

FALLBACK_COLORS: Tuple[str, ...] = (
    "#3B82F6",
    "#10B981",
    "#F59E0B",
    "#EF4444",
    "#8B5CF6",
    "#EC4899",
    "#14B8A6",
    "#6366F1",
    "#84CC16",
    "#F97316",
)


def slice_color(key: str, index: int) -> str:
    """Fixed color for known categories, else cycle the fallback palette by insertion index."""
    return CATEGORY_COLORS.get(key) or FALLBACK_COLORS[index % len(FALLBACK_COLORS)]


def _ordered(slices: List[AllocationSlice]) -> List[AllocationSlice]:
    # Largest first; equal values by key so output never depends on dict order
    return sorted(slices, key=lambda s: (-s.value, s.key))


def build_slices(
    contract: HoldingContract,
    dimension: GroupDimension,
    basis: ValuationBasis,
) -> List[AllocationSlice]:
    """
    Build allocation slices from a (usually multi-portfolio) contract.

    Args:
        contract: Contract whose positions are already aggregated upstream
        dimension: Grouping dimension
        basis: Valuation basis to read market values from

    Returns:
        Slices sorted by value descending; empty when the total is zero
    """
    labels: Dict[str, str] = {}
    values: Dict[str, Decimal] = {}
    day_gains: Dict[str, Decimal] = {}
    members: Dict[str, List[Position]] = {}

    for position in contract.positions.values():
        money = position.money_values.get(basis)
        if money is None:
            continue
        key = resolve_group_key(dimension, position)
        if key not in values:
            labels[key] = resolve_group_label(dimension, position)
            values[key] = ZERO
            day_gains[key] = ZERO
            members[key] = []
        values[key] += money.market_value
        day_gains[key] += money.gain_on_day
        members[key].append(position)

    total = sum(values.values(), ZERO)
    if total == ZERO:
        return []

    slices = [
        AllocationSlice(
            key=key,
            label=labels[key],
            value=value,
            percentage=value / total * HUNDRED,
            color=slice_color(key, index),
            gain_on_day=day_gains[key],
            irr=weighted_irr(members[key], basis),
        )
        for index, (key, value) in enumerate(values.items())
    ]
    return _ordered(slices)


def build_slices_from_holdings(
    holdings: Holdings,
    basis: ValuationBasis,
) -> List[AllocationSlice]:
    """
    Build slices from an already computed holdings view.

    Reuses each group's weighted IRR so the chart agrees with the subtotal rows.
    """
    groups = list(holdings.holding_groups.items())
    total = sum((group.subtotal(basis).market_value for _, group in groups), ZERO)
    if total == ZERO:
        return []

    slices = []
    for index, (key, group) in enumerate(groups):
        subtotal = group.subtotal(basis)
        slices.append(
            AllocationSlice(
                key=key,
                label=key,
                value=subtotal.market_value,
                percentage=subtotal.market_value / total * HUNDRED,
                color=slice_color(key, index),
                gain_on_day=subtotal.gain_on_day,
                irr=subtotal.weighted_irr,
            )
        )
    return _ordered(slices)
