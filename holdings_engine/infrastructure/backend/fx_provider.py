"""
FX rates from the backend rate service, cached per currency pair.

A missing or failed rate resolves to 1 so a partially priced view still
renders. Failures and unusable rates are logged and never cached.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from pydantic import ValidationError

from holdings_engine.config import settings
from holdings_engine.domain.schemas.performance import FxResponse, FxRateSchema
from holdings_engine.exceptions import BackendRequestError, ContractParseError
from holdings_engine.infrastructure.backend.client import BackendClient
from holdings_engine.infrastructure.cache.ttl_cache import TTLCache

logger = logging.getLogger(__name__)

ONE = Decimal("1")
TODAY = "today"


def pair_key(from_code: str, to_code: str) -> str:
    return f"{from_code}:{to_code}"


def _usable_rate(rate: Optional[FxRateSchema]) -> Optional[Decimal]:
    """None when the backend sent no rate, a zero or a non-finite one."""
    if rate is None or not rate.rate.is_finite() or rate.rate == 0:
        return None
    return rate.rate


class FxRateProvider:
    def __init__(
        self,
        client: BackendClient,
        cache: Optional[TTLCache[Decimal]] = None,
    ):
        self.client = client
        self.cache = cache or TTLCache(settings.FX_CACHE_TTL_SECONDS, name="fx")

    def _cache_key(self, from_code: str, to_code: str, rate_date: str) -> str:
        key = pair_key(from_code, to_code)
        return key if rate_date == TODAY else f"{key}@{rate_date}"

    async def _fetch_rates(self, pairs: List[Dict[str, str]], rate_date: str) -> Dict[str, FxRateSchema]:
        payload = await self.client.post_json("/fx", {"rateDate": rate_date, "pairs": pairs})
        try:
            return FxResponse.model_validate(payload).rates()
        except ValidationError as exc:
            raise ContractParseError(f"Invalid FX response: {exc.error_count()} errors") from exc

    async def get_rate(self, from_code: str, to_code: str, rate_date: str = TODAY) -> Decimal:
        """
        Multiplicative rate converting `from_code` amounts into `to_code`.

        Same-currency pairs are 1 without a backend call.
        """
        if from_code == to_code:
            return ONE

        key = pair_key(from_code, to_code)

        async def load() -> Decimal:
            rates = await self._fetch_rates([{"from": from_code, "to": to_code}], rate_date)
            rate = _usable_rate(rates.get(key))
            if rate is None:
                raise ContractParseError(f"No usable FX rate for {key}")
            return rate

        try:
            return await self.cache.get_or_load(self._cache_key(from_code, to_code, rate_date), load)
        except (BackendRequestError, ContractParseError) as exc:
            logger.warning("FX rate %s unavailable, using 1: %s", key, exc)
            return ONE

    async def get_rates(
        self,
        source_codes: Iterable[str],
        display_code: str,
        rate_date: str = TODAY,
    ) -> Dict[str, Decimal]:
        """
        Rates from every source currency into the display currency.

        Args:
            source_codes: Currency codes to convert from (duplicates allowed)
            display_code: Target currency

        Returns:
            code -> rate, always including display_code -> 1
        """
        rates: Dict[str, Decimal] = {display_code: ONE}
        missing: List[str] = []
        for code in dict.fromkeys(source_codes):
            if code == display_code:
                continue
            cached = self.cache.get(self._cache_key(code, display_code, rate_date))
            if cached is not None:
                rates[code] = cached
            else:
                missing.append(code)

        if not missing:
            return rates

        pairs = [{"from": code, "to": display_code} for code in missing]
        try:
            fetched = await self._fetch_rates(pairs, rate_date)
        except (BackendRequestError, ContractParseError) as exc:
            logger.warning("FX rates into %s unavailable, using 1: %s", display_code, exc)
            fetched = None

        for code in missing:
            rate = None if fetched is None else _usable_rate(fetched.get(pair_key(code, display_code)))
            if rate is None:
                if fetched is not None:
                    logger.warning("No usable FX rate %s, using 1", pair_key(code, display_code))
                rates[code] = ONE
                continue
            self.cache.set(self._cache_key(code, display_code, rate_date), rate)
            rates[code] = rate
        return rates
