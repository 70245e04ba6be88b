"""Event, Market, Outcome - canonical entities served from the snapshot."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

EventStatus = Literal["upcoming", "live", "finished"]
MarketStatus = Literal["open", "closed", "settled"]
OutcomeStatus = Literal["active", "inactive", "winner", "loser"]


class Outcome(BaseModel):
    """Single wagerable selection in a market. `odds` is the consensus value."""

    model_config = ConfigDict(frozen=True)

    id: str
    market_id: str
    key: str
    name: str
    odds: float | None = Field(None, gt=1.0, description="Consensus decimal odds")
    status: OutcomeStatus = "active"
    provider_count: int = 0
    provider_ids: tuple[str, ...] = ()
    best_odds: float | None = None
    best_provider_id: str | None = None
    updated_at: int | None = None  # ms epoch of last consensus write


class Market(BaseModel):
    """Named group of mutually exclusive outcomes for one event."""

    model_config = ConfigDict(frozen=True)

    id: str
    event_id: str
    key: str
    name: str
    status: MarketStatus = "open"
    outcomes: tuple[Outcome, ...] = ()


class Event(BaseModel):
    """Canonical event. `id` is provider-prefixed: '<provider>:<external id>'."""

    model_config = ConfigDict(frozen=True)

    id: str
    sport_id: int
    league: str
    home_team: str
    away_team: str
    start_time: datetime
    status: EventStatus = "upcoming"
    venue: str | None = None
    score: str | None = None
    external_id: str | None = None
    provider_ids: tuple[str, ...] = ()
    markets: tuple[Market, ...] = ()
    last_seen: int | None = None  # ms epoch

    @property
    def is_live(self) -> bool:
        return self.status == "live"

    @property
    def name(self) -> str:
        return f"{self.home_team} vs {self.away_team}"
