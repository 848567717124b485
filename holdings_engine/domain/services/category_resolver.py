"""
CATEGORY RESOLVER
Raw asset category → normalized report category

RULES:
✅ Backend-computed category wins when present
✅ Unmatched categories pass through unchanged
❌ Never raises
"""

from functools import cmp_to_key
from typing import Dict, Iterable, List

from holdings_engine.domain.models import Asset


CASH = "Cash"
EQUITY = "Equity"
ETF = "ETF"
MUTUAL_FUND = "Mutual Fund"
PROPERTY = "Property"
UNCLASSIFIED = "Unclassified"

_CATEGORY_MAP: Dict[str, str] = {
    "CASH": CASH,
    "ACCOUNT": CASH,
    "TRADE": CASH,
    "BANK ACCOUNT": CASH,
    "EQUITY": EQUITY,
    "RE": PROPERTY,
    "REAL ESTATE": PROPERTY,
    "EXCHANGE TRADED FUND": ETF,
    "ETF": ETF,
    "MUTUAL FUND": MUTUAL_FUND,
}

REPORT_CATEGORY_SORT_ORDER: List[str] = [EQUITY, ETF, MUTUAL_FUND, PROPERTY, CASH]


def map_to_report_category(category: str) -> str:
    """
    Map a raw category name or id to its report category.

    Args:
        category: Raw category label, any case

    Returns:
        Report category, or the input unchanged when unmatched
    """
    return _CATEGORY_MAP.get(category.upper(), category)


def resolve_report_category(asset: Asset) -> str:
    """
    Report category for an asset.

    Uses the backend's effective report category when supplied,
    otherwise maps the category name (falling back to its id).
    """
    if asset.effective_report_category:
        return asset.effective_report_category

    category_name = asset.category.name or asset.category.id or EQUITY
    return map_to_report_category(category_name)


def compare_by_report_category(a: str, b: str) -> int:
    """Comparator following REPORT_CATEGORY_SORT_ORDER; unknown categories last."""
    unknown = len(REPORT_CATEGORY_SORT_ORDER)
    index_a = REPORT_CATEGORY_SORT_ORDER.index(a) if a in REPORT_CATEGORY_SORT_ORDER else unknown
    index_b = REPORT_CATEGORY_SORT_ORDER.index(b) if b in REPORT_CATEGORY_SORT_ORDER else unknown
    return index_a - index_b


def compare_by_sector(a: str, b: str) -> int:
    """Comparator: sectors alphabetically, then Unclassified, then Cash."""
    if a == b:
        return 0
    if a == CASH:
        return 1
    if b == CASH:
        return -1
    if a == UNCLASSIFIED:
        return 1
    if b == UNCLASSIFIED:
        return -1
    return (a > b) - (a < b)


def sort_report_categories(categories: Iterable[str]) -> List[str]:
    # sorted() is stable, so unknown categories keep their incoming order
    return sorted(categories, key=cmp_to_key(compare_by_report_category))


def sort_sectors(sectors: Iterable[str]) -> List[str]:
    return sorted(sectors, key=cmp_to_key(compare_by_sector))
