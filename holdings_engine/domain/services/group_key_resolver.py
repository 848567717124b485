"""
GROUP-KEY RESOLVER
Position + grouping dimension → bucket key

Every dimension is an explicit accessor. A value that is missing upstream
lands in the UNKNOWN_GROUP bucket instead of raising, so a partially
described portfolio still renders.
"""

from functools import cmp_to_key
from typing import Callable, Dict, Iterable, List, Optional

from holdings_engine.domain.models import GroupDimension, Position
from holdings_engine.domain.services.category_resolver import (
    UNCLASSIFIED,
    compare_by_report_category,
    compare_by_sector,
    resolve_report_category,
)


UNKNOWN_GROUP = "Unknown"


def _asset_class(position: Position) -> Optional[str]:
    return resolve_report_category(position.asset)


def _sector(position: Position) -> Optional[str]:
    return position.asset.sector or UNCLASSIFIED


def _market_currency(position: Position) -> Optional[str]:
    asset = position.asset
    # A cash balance *is* its currency; its market is the synthetic CASH market
    if asset.is_cash:
        return asset.code
    if asset.is_account and asset.price_symbol:
        return asset.price_symbol
    currency = asset.market.currency
    return currency.code if currency else None


def _market(position: Position) -> Optional[str]:
    return position.asset.market.code


def _asset(position: Position) -> Optional[str]:
    return position.asset.code


_KEY_ACCESSORS: Dict[GroupDimension, Callable[[Position], Optional[str]]] = {
    GroupDimension.ASSET_CLASS: _asset_class,
    GroupDimension.SECTOR: _sector,
    GroupDimension.MARKET_CURRENCY: _market_currency,
    GroupDimension.MARKET: _market,
    GroupDimension.ASSET: _asset,
}


def resolve_group_key(dimension: GroupDimension, position: Position) -> str:
    """
    Bucket key for a position under the given dimension.

    Returns:
        The key, or UNKNOWN_GROUP when the position lacks the value
    """
    return _KEY_ACCESSORS[dimension](position) or UNKNOWN_GROUP


def resolve_group_label(dimension: GroupDimension, position: Position) -> str:
    """Display label for the bucket; asset buckets show the asset name."""
    if dimension == GroupDimension.ASSET:
        return position.asset.name or resolve_group_key(dimension, position)
    return resolve_group_key(dimension, position)


def allocation_dimension(dimension: GroupDimension) -> GroupDimension:
    """
    Dimension used by allocation charts for a given table dimension.

    Currency grouping has no chart of its own and is shown by market.
    """
    if dimension == GroupDimension.MARKET_CURRENCY:
        return GroupDimension.MARKET
    return dimension


def order_group_keys(keys: Iterable[str], dimension: GroupDimension) -> List[str]:
    """
    Display order for group keys.

    Asset classes follow the report category order, sectors put
    Unclassified and Cash last, anything else is alphabetical.
    """
    if dimension == GroupDimension.ASSET_CLASS:
        return sorted(keys, key=cmp_to_key(compare_by_report_category))
    if dimension == GroupDimension.SECTOR:
        return sorted(keys, key=cmp_to_key(compare_by_sector))
    return sorted(keys)
