from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Dict, List

from .entities import ZERO


@dataclass(frozen=True)
class PerformancePoint:
    """
    One date of a single portfolio's performance series, in portfolio currency.
    """
    date: date
    market_value: Decimal = ZERO
    net_contributions: Decimal = ZERO
    cumulative_dividends: Decimal = ZERO
    growth_of_1000: Decimal = ZERO
    cumulative_return: Decimal = ZERO


@dataclass(frozen=True)
class AggregatedDataPoint:
    """
    One date of the merged multi-portfolio series, in the display currency.
    """
    date: date
    market_value: Decimal
    net_contributions: Decimal
    cumulative_dividends: Decimal
    investment_gain: Decimal = ZERO
    growth_of_1000: Decimal = ZERO
    cumulative_return: Decimal = ZERO


@dataclass(frozen=True)
class AggregationResult:
    """
    Merged series plus the portfolios whose fetch failed.
    """
    series: List[AggregatedDataPoint]
    failures: Dict[str, str] = field(default_factory=dict)
