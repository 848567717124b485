"""
Backend HTTP client.
Thin JSON-over-HTTP wrapper shared by the holdings, performance, FX and
currency providers.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from holdings_engine.config import settings
from holdings_engine.exceptions import BackendRequestError

logger = logging.getLogger(__name__)


class BackendClient:
    def __init__(
        self,
        api_base_url: Optional[str] = None,
        access_token: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_base_url = (api_base_url or settings.BACKEND_API_URL).rstrip("/")
        self.access_token = (access_token or settings.BACKEND_API_TOKEN or "").strip() or None
        self.timeout_seconds = timeout_seconds or settings.HTTP_TIMEOUT_SECONDS
        self._transport = transport

    def _headers(self) -> Dict[str, str]:
        headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
        }
        if self.access_token:
            headers["Authorization"] = f"Bearer {self.access_token}"
        return headers

    def _url(self, path: str) -> str:
        return f"{self.api_base_url}/{path.lstrip('/')}"

    async def request_json(
        self,
        method: str,
        path: str,
        params: Optional[dict] = None,
        payload: Optional[Any] = None,
    ) -> Any:
        """
        Perform a request and decode the JSON body.

        Raises:
            BackendRequestError: transport failure, non-2xx status or invalid JSON
        """
        url = self._url(path)
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout_seconds, transport=self._transport
            ) as client:
                response = await client.request(
                    method, url, headers=self._headers(), params=params, json=payload
                )
        except httpx.HTTPError as exc:
            logger.debug("Backend %s %s failed: %s", method, url, exc)
            raise BackendRequestError(f"{method} {path} failed: {exc}", url=url) from exc

        if response.status_code // 100 != 2:
            logger.debug("Backend %s %s -> %s: %s", method, url, response.status_code, response.text)
            raise BackendRequestError(
                f"{method} {path} returned {response.status_code}",
                status_code=response.status_code,
                url=url,
            )

        try:
            return response.json()
        except ValueError as exc:
            raise BackendRequestError(f"{method} {path} returned invalid JSON", url=url) from exc

    async def get_json(self, path: str, params: Optional[dict] = None) -> Any:
        return await self.request_json("GET", path, params=params)

    async def post_json(self, path: str, payload: Any) -> Any:
        return await self.request_json("POST", path, payload=payload)
