"""Read-only query facade over the current snapshot."""

from __future__ import annotations

from typing import Any

from oddsagg.aggregation.history import OddsHistory
from oddsagg.aggregation.snapshot import SnapshotHolder
from oddsagg.models import Event, Outcome, Sport
from oddsagg.providers.registry import ProviderRegistry


def _sort_key(event: Event) -> tuple[int, float]:
    return (0 if event.is_live else 1, event.start_time.timestamp())


class OddsQueryService:
    """Every method reads `holder.current` exactly once, so a call never mixes snapshots."""

    def __init__(
        self,
        holder: SnapshotHolder,
        *,
        history: OddsHistory | None = None,
        registry: ProviderRegistry | None = None,
        scheduler: Any = None,
    ) -> None:
        self.holder = holder
        self.history = history
        self.registry = registry
        self.scheduler = scheduler

    def get_sports(self) -> list[Sport]:
        return [s for s in self.holder.current.sports if s.active]

    def get_events(self, sport_id: int | None = None, is_live: bool | None = None) -> list[Event]:
        events = self.holder.current.events.values()
        if sport_id is not None:
            events = [e for e in events if e.sport_id == sport_id]
        if is_live is not None:
            events = [e for e in events if e.is_live == is_live]
        return sorted(events, key=_sort_key)

    def get_live_events(self, sport_id: int | None = None) -> list[Event]:
        return self.get_events(sport_id=sport_id, is_live=True)

    def get_event_by_id(self, event_id: str) -> Event | None:
        """Lookup by canonical id or by any provider alias folded into it."""
        snapshot = self.holder.current
        canonical = snapshot.resolve_event_id(event_id)
        if canonical is None:
            return None
        return snapshot.events[canonical]

    def get_outcome(self, outcome_id: str) -> Outcome | None:
        return self.holder.current.outcomes.get(outcome_id)

    def get_odds_history(self, outcome_id: str) -> list[dict[str, Any]]:
        if self.history is None:
            return []
        return [{"timestamp": ts, "odds": odds} for ts, odds in self.history.get(outcome_id)]

    def get_status(self) -> dict[str, Any]:
        snapshot = self.holder.current
        status: dict[str, Any] = {
            "snapshot_version": snapshot.version,
            "snapshot_created_at": snapshot.created_at,
            "events": len(snapshot.events),
            "live_events": sum(1 for e in snapshot.events.values() if e.is_live),
            "outcomes": len(snapshot.outcomes),
        }
        if self.registry is not None:
            providers = self.registry.get_providers()
            status["providers_total"] = len(providers)
            status["providers_enabled"] = sum(1 for p in providers if p.enabled)
        if self.scheduler is not None:
            status["scheduler"] = self.scheduler.status()
        return status
