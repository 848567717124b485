"""
Domain Models Package
Export all domain entities
"""

from .entities import (
    # Enums
    AssetCategoryId,
    GroupDimension,
    ValuationBasis,

    # Entities
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
    ZERO,
)
from .holdings import HoldingGroup, Holdings
from .performance import AggregatedDataPoint, AggregationResult, PerformancePoint
from .allocation import AllocationSlice

__all__ = [
    # Enums
    "AssetCategoryId",
    "GroupDimension",
    "ValuationBasis",

    # Entities
    "Asset",
    "AssetCategory",
    "Currency",
    "HoldingContract",
    "Market",
    "MoneyValues",
    "Portfolio",
    "Position",
    "PriceData",
    "QuantityValues",
    "Total",
    "ZERO",

    # Views
    "AggregatedDataPoint",
    "AggregationResult",
    "AllocationSlice",
    "HoldingGroup",
    "Holdings",
    "PerformancePoint",
]
