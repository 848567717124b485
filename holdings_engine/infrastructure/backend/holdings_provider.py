"""
Holdings contracts from the backend position service.
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional

from pydantic import ValidationError

from holdings_engine.domain.models import HoldingContract
from holdings_engine.domain.schemas.holdings import HoldingContractResponse
from holdings_engine.exceptions import ContractParseError
from holdings_engine.infrastructure.backend.client import BackendClient

logger = logging.getLogger(__name__)


def parse_holding_contract(payload: Any) -> HoldingContract:
    """Validate a `{"data": {...}}` holdings payload and convert it."""
    try:
        return HoldingContractResponse.model_validate(payload).data.to_entity()
    except ValidationError as exc:
        raise ContractParseError(f"Invalid holdings contract: {exc.error_count()} errors") from exc


class HoldingsProvider:
    def __init__(self, client: BackendClient):
        self.client = client

    async def get_holdings(self, portfolio_code: str, as_at: str = "today") -> HoldingContract:
        payload = await self.client.get_json(f"/holdings/{portfolio_code}", params={"asAt": as_at})
        contract = parse_holding_contract(payload)
        logger.debug("Loaded %d positions for %s", len(contract.positions), portfolio_code)
        return contract

    async def get_aggregated_holdings(
        self,
        portfolio_codes: Optional[List[str]] = None,
        as_at: str = "today",
    ) -> HoldingContract:
        """Positions already summed across portfolios by the backend."""
        params = {"asAt": as_at}
        if portfolio_codes:
            params["codes"] = ",".join(portfolio_codes)
        payload = await self.client.get_json("/holdings/aggregated", params=params)
        return parse_holding_contract(payload)
