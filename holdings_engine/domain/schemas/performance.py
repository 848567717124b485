from datetime import date
from typing import Dict, List, Optional

from pydantic import Field

from holdings_engine.domain.models import PerformancePoint, ZERO
from holdings_engine.domain.schemas.holdings import CurrencySchema, WireDecimal, WireModel


class PerformancePointSchema(WireModel):
    point_date: date = Field(alias="date")
    market_value: WireDecimal = ZERO
    net_contributions: WireDecimal = ZERO
    cumulative_dividends: WireDecimal = ZERO
    growth_of_1000: WireDecimal = Field(default=ZERO, alias="growthOf1000")
    cumulative_return: WireDecimal = ZERO

    def to_entity(self) -> PerformancePoint:
        return PerformancePoint(
            date=self.point_date,
            market_value=self.market_value,
            net_contributions=self.net_contributions,
            cumulative_dividends=self.cumulative_dividends,
            growth_of_1000=self.growth_of_1000,
            cumulative_return=self.cumulative_return,
        )


class PerformanceData(WireModel):
    series: List[PerformancePointSchema] = []


class PerformanceResponse(WireModel):
    data: Optional[PerformanceData] = None

    def to_points(self) -> List[PerformancePoint]:
        if self.data is None:
            return []
        return [point.to_entity() for point in self.data.series]


class FxRateSchema(WireModel):
    rate: WireDecimal = ZERO
    rate_date: Optional[str] = Field(default=None, alias="date")


class FxData(WireModel):
    rates: Dict[str, FxRateSchema] = {}


class FxResponse(WireModel):
    data: Optional[FxData] = None

    def rates(self) -> Dict[str, FxRateSchema]:
        return self.data.rates if self.data else {}


class CurrencyListResponse(WireModel):
    data: List[CurrencySchema] = []
