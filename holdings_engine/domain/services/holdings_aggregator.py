"""
HOLDINGS AGGREGATOR
Holdings contract → grouped, subtotalled view

RESPONSIBILITIES:
- Filter exited positions (bank accounts always stay)
- Bucket positions by the requested dimension
- Subtotal every bucket in all three valuation bases
- Stamp a weighted IRR on each bucket
- Roll bucket subtotals into view totals

RULES:
❌ No pricing, no FX
❌ Backend portfolio totals are passed through, never recomputed
✅ Empty portfolio → empty groups, zero view totals
"""

import logging
from dataclasses import replace
from decimal import Decimal
from typing import Dict, List, Tuple

from holdings_engine.domain.models import (
    GroupDimension,
    HoldingContract,
    HoldingGroup,
    Holdings,
    MoneyValues,
    Position,
    Total,
    ValuationBasis,
    ZERO,
)
from holdings_engine.domain.services.group_key_resolver import (
    order_group_keys,
    resolve_group_key,
)
from holdings_engine.domain.services.subtotal_accumulator import (
    fold_position_all_bases,
    zero_money_values,
    zero_total,
)
from holdings_engine.domain.services.weighted_irr import weighted_irr

logger = logging.getLogger(__name__)


VIEW_TOTAL_FIELDS: Tuple[str, ...] = (
    "market_value",
    "weight",
    "purchases",
    "sales",
    "cash",
    "dividends",
    "gain_on_day",
    "realised_gain",
    "unrealised_gain",
    "total_gain",
    "cost_value",
)


class HoldingsAggregator:
    """
    Holdings Aggregator
    Turns one portfolio's priced positions into a grouped view
    """

    def aggregate(
        self,
        contract: HoldingContract,
        hide_empty: bool,
        basis: ValuationBasis,
        dimension: GroupDimension,
    ) -> Holdings:
        """
        Group and subtotal a holdings contract

        Args:
            contract: Positions and totals supplied by the backend
            hide_empty: Drop positions whose quantity is exactly zero
            basis: Valuation basis for view totals and portfolio totals
            dimension: Grouping dimension

        Returns:
            Holdings view
        """
        positions = self._visible_positions(contract, hide_empty)

        members: Dict[str, List[Position]] = {}
        subtotals: Dict[str, Dict[ValuationBasis, MoneyValues]] = {}
        for position in positions:
            key = resolve_group_key(dimension, position)
            if key not in subtotals:
                subtotals[key] = self._seed_subtotals(position)
                members[key] = []
            else:
                self._note_currency_mismatch(key, subtotals[key], position)
            members[key].append(position)
            subtotals[key] = fold_position_all_bases(subtotals[key], position)

        holding_groups: Dict[str, HoldingGroup] = {}
        for key, group_positions in members.items():
            irr = weighted_irr(group_positions, basis)
            holding_groups[key] = HoldingGroup(
                key=key,
                positions=tuple(group_positions),
                subtotals={
                    group_basis: replace(subtotal, weighted_irr=irr)
                    for group_basis, subtotal in subtotals[key].items()
                },
            )

        totals = self._portfolio_totals(contract, basis)
        view_totals = self._view_totals(holding_groups, basis, totals)

        logger.debug(
            "Aggregated %s: %d positions into %d groups by %s",
            contract.portfolio.code,
            len(positions),
            len(holding_groups),
            dimension.value,
        )

        return Holdings(
            portfolio=contract.portfolio,
            basis=basis,
            currency=totals.currency,
            totals=totals,
            view_totals=view_totals,
            holding_groups=holding_groups,
        )

    @staticmethod
    def _visible_positions(contract: HoldingContract, hide_empty: bool) -> List[Position]:
        visible = []
        for position in contract.positions.values():
            if position.asset.is_account:
                visible.append(position)
                continue
            if hide_empty and position.quantity_values.total == ZERO:
                continue
            visible.append(position)
        return visible

    @staticmethod
    def _seed_subtotals(position: Position) -> Dict[ValuationBasis, MoneyValues]:
        # The first member fixes each basis currency for the whole group
        return {
            basis: zero_money_values(position.values_in(basis).currency, basis)
            for basis in ValuationBasis
        }

    @staticmethod
    def _note_currency_mismatch(
        key: str,
        subtotals: Dict[ValuationBasis, MoneyValues],
        position: Position,
    ) -> None:
        trade_currency = position.values_in(ValuationBasis.TRADE).currency
        group_currency = subtotals[ValuationBasis.TRADE].currency
        if trade_currency != group_currency:
            logger.debug(
                "Group %s mixes trade currencies (%s into %s)",
                key,
                trade_currency.code,
                group_currency.code,
            )

    @staticmethod
    def _portfolio_totals(contract: HoldingContract, basis: ValuationBasis) -> Total:
        totals = contract.totals.get(basis)
        if totals is None:
            return zero_total(contract.portfolio.currency)
        return totals

    @staticmethod
    def _view_totals(
        holding_groups: Dict[str, HoldingGroup],
        basis: ValuationBasis,
        totals: Total,
    ) -> MoneyValues:
        sums: Dict[str, Decimal] = {name: ZERO for name in VIEW_TOTAL_FIELDS}
        for group in holding_groups.values():
            subtotal = group.subtotal(basis)
            for name in VIEW_TOTAL_FIELDS:
                sums[name] += getattr(subtotal, name)
        return replace(zero_money_values(totals.currency, basis), **sums)


SORTABLE_FIELDS: Dict[str, str] = {
    "gainOnDay": "gain_on_day",
    "costValue": "cost_value",
    "marketValue": "market_value",
    "dividends": "dividends",
    "unrealisedGain": "unrealised_gain",
    "realisedGain": "realised_gain",
    "irr": "irr",
    "weight": "weight",
    "totalGain": "total_gain",
}


def _sort_value(position: Position, sort_key: str, basis: ValuationBasis):
    values = position.values_in(basis)
    if sort_key == "price":
        return values.price_data.close if values.price_data else ZERO
    if sort_key == "changePercent":
        return values.price_data.change_percent if values.price_data else ZERO
    if sort_key == "quantity":
        return position.quantity_values.total
    if sort_key in SORTABLE_FIELDS:
        return getattr(values, SORTABLE_FIELDS[sort_key])
    return (position.asset.name or position.asset.code).lower()


def sort_positions(
    group: HoldingGroup,
    sort_key: str,
    direction: str,
    basis: ValuationBasis,
) -> HoldingGroup:
    """
    Reorder a group's positions for display.

    Unknown sort keys (and "assetName") order by asset name. Direction is
    "asc" or "desc".
    """
    if not sort_key:
        return group
    ordered = sorted(
        group.positions,
        key=lambda position: _sort_value(position, sort_key, basis),
        reverse=direction == "desc",
    )
    return replace(group, positions=tuple(ordered))


def sort_holdings(
    holdings: Holdings,
    sort_key: str,
    direction: str,
) -> Holdings:
    """Apply sort_positions to every group of a holdings view."""
    groups = {
        key: sort_positions(group, sort_key, direction, holdings.basis)
        for key, group in holdings.holding_groups.items()
    }
    return replace(holdings, holding_groups=groups)


def ordered_group_keys(holdings: Holdings, dimension: GroupDimension) -> List[str]:
    """Group keys of a holdings view in display order for its dimension."""
    return order_group_keys(holdings.holding_groups, dimension)


def order_holdings(holdings: Holdings, dimension: GroupDimension) -> Holdings:
    """Rebuild the group mapping so iteration follows display order."""
    groups = {
        key: holdings.holding_groups[key]
        for key in ordered_group_keys(holdings, dimension)
    }
    return replace(holdings, holding_groups=groups)
