from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class AllocationSlice:
    """
    Represents one chart slice: a group's share of total market value.
    """
    key: str
    label: str
    value: Decimal
    percentage: Decimal
    color: str
    gain_on_day: Decimal
    irr: Decimal
