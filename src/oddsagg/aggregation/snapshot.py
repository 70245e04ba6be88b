"""Immutable snapshot of all canonical entities and its single-writer holder."""

from __future__ import annotations

from dataclasses import dataclass, field

from oddsagg.models import SPORTS_CATALOG, Event, Outcome, Sport


@dataclass(frozen=True)
class Snapshot:
    """Fully aggregated view as of the end of one pass. Never mutated after build."""

    version: int = 0
    created_at: int | None = None  # ms epoch
    events: dict[str, Event] = field(default_factory=dict)
    aliases: dict[str, str] = field(default_factory=dict)  # provider event id -> canonical id
    outcomes: dict[str, Outcome] = field(default_factory=dict)
    sports: tuple[Sport, ...] = SPORTS_CATALOG

    def resolve_event_id(self, event_id: str) -> str | None:
        if event_id in self.events:
            return event_id
        alias = self.aliases.get(event_id)
        return alias if alias in self.events else None


class SnapshotHolder:
    """Pointer to the current snapshot. `swap` is a single assignment, so readers
    see either the previous or the new snapshot, never a mix."""

    def __init__(self, initial: Snapshot | None = None) -> None:
        self._current = initial or Snapshot()

    @property
    def current(self) -> Snapshot:
        return self._current

    def swap(self, snapshot: Snapshot) -> Snapshot:
        previous = self._current
        self._current = snapshot
        return previous
