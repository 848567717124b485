"""
Per-portfolio performance series from the backend.
"""

from __future__ import annotations

from typing import List

from pydantic import ValidationError

from holdings_engine.domain.models import PerformancePoint
from holdings_engine.domain.schemas.performance import PerformanceResponse
from holdings_engine.exceptions import ContractParseError
from holdings_engine.infrastructure.backend.client import BackendClient


class PerformanceProvider:
    def __init__(self, client: BackendClient):
        self.client = client

    async def get_performance(self, portfolio_code: str, months: int) -> List[PerformancePoint]:
        """
        Trailing `months` of a portfolio's series, in portfolio currency.

        Raises:
            BackendRequestError: fetch failed
            ContractParseError: payload did not validate
        """
        payload = await self.client.get_json(
            f"/performance/{portfolio_code}", params={"months": months}
        )
        try:
            return PerformanceResponse.model_validate(payload).to_points()
        except ValidationError as exc:
            raise ContractParseError(
                f"Invalid performance series for {portfolio_code}: {exc.error_count()} errors"
            ) from exc
