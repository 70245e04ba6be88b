"""OddsQuote, ProviderInfo - provider-scoped records."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class OddsQuote(BaseModel):
    """One provider's decimal odds for one outcome. Lives for a single pass."""

    model_config = ConfigDict(frozen=True)

    outcome_id: str
    market_id: str
    event_id: str
    provider_id: str = Field(..., min_length=1)
    odds: float = Field(..., gt=1.0)
    timestamp: int  # ms epoch

    def confidence(self, weight: float) -> float:
        """Implicit confidence of this quote given its provider's weight (0-100)."""
        return max(0.0, min(weight, 100.0)) / 100.0


class ProviderInfo(BaseModel):
    """Registry view of one provider plus its fetch statistics."""

    id: str
    name: str
    weight: float = Field(..., ge=0, le=100)
    enabled: bool
    total_calls: int = 0
    successful_calls: int = 0
    failed_calls: int = 0
    average_response_ms: float = 0.0
    last_success_at: int | None = None
    last_error: str | None = None
