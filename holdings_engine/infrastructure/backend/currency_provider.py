"""
Supported currencies from the backend, cached for the process.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from pydantic import ValidationError

from holdings_engine.config import settings
from holdings_engine.domain.models import Currency
from holdings_engine.domain.schemas.performance import CurrencyListResponse
from holdings_engine.exceptions import BackendRequestError, ContractParseError
from holdings_engine.infrastructure.backend.client import BackendClient
from holdings_engine.infrastructure.cache.ttl_cache import TTLCache

logger = logging.getLogger(__name__)

CURRENCIES_KEY = "currencies"


def default_display_currency(
    currencies: Sequence[Currency],
    preferred_code: Optional[str] = None,
) -> Optional[Currency]:
    """Preferred currency if offered, else USD, else the first one."""
    by_code = {currency.code: currency for currency in currencies}
    if preferred_code and preferred_code in by_code:
        return by_code[preferred_code]
    if "USD" in by_code:
        return by_code["USD"]
    return currencies[0] if currencies else None


class CurrencyProvider:
    def __init__(
        self,
        client: BackendClient,
        cache: Optional[TTLCache[List[Currency]]] = None,
    ):
        self.client = client
        self.cache = cache or TTLCache(settings.CURRENCY_CACHE_TTL_SECONDS, name="currencies")

    async def _load(self) -> List[Currency]:
        payload = await self.client.get_json("/currencies")
        try:
            response = CurrencyListResponse.model_validate(payload)
        except ValidationError as exc:
            raise ContractParseError(f"Invalid currency list: {exc.error_count()} errors") from exc
        return [currency.to_entity() for currency in response.data]

    async def list_currencies(self) -> List[Currency]:
        """Cached currency list; empty (and uncached) when the backend fails."""
        try:
            return await self.cache.get_or_load(CURRENCIES_KEY, self._load)
        except (BackendRequestError, ContractParseError) as exc:
            logger.warning("Currency list unavailable: %s", exc)
            return []

    async def find(self, code: str) -> Optional[Currency]:
        for currency in await self.list_currencies():
            if currency.code == code:
                return currency
        return None

    async def default_currency(self, preferred_code: Optional[str] = None) -> Optional[Currency]:
        """Display currency to start with, honouring DEFAULT_DISPLAY_CURRENCY."""
        return default_display_currency(
            await self.list_currencies(),
            preferred_code or settings.DEFAULT_DISPLAY_CURRENCY,
        )
