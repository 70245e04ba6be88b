"""Domain exceptions. Raised inside adapters and caught at the adapter boundary."""

from __future__ import annotations


class OddsAggError(Exception):
    """Base error for the aggregation core."""


class ProviderError(OddsAggError):
    """Upstream provider call failed (network, timeout, non-2xx)."""

    def __init__(self, provider_id: str, message: str, status_code: int | None = None) -> None:
        super().__init__(f"{provider_id}: {message}")
        self.provider_id = provider_id
        self.message = message
        self.status_code = status_code


class PayloadError(OddsAggError):
    """Upstream body could not be parsed into the provider's payload shape."""
