"""
Exceptions raised by the holdings engine.

Domain engines never raise for ordinary data variance (missing prices,
empty portfolios, unknown categories). These types cover the transport
and contract boundary only.
"""

from typing import Optional


class HoldingsEngineError(Exception):
    """Base exception for the holdings engine."""


class BackendRequestError(HoldingsEngineError):
    """A backend call failed at the transport level or returned non-2xx."""

    def __init__(self, message: str, status_code: Optional[int] = None, url: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.url = url


class ContractParseError(HoldingsEngineError):
    """An upstream payload did not match the expected contract."""
