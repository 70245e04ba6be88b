"""Consensus odds movement per outcome (bounded, change-only)."""

from __future__ import annotations

from collections import deque

from oddsagg.aggregation.snapshot import Snapshot


class OddsHistory:
    """Rolling (timestamp_ms, odds) points per outcome id."""

    def __init__(self, maxlen: int = 50) -> None:
        self.maxlen = maxlen
        self._points: dict[str, deque[tuple[int, float]]] = {}

    def record(self, outcome_id: str, ts: int, odds: float) -> bool:
        """Append a point if odds changed since the last one. Returns True if recorded."""
        points = self._points.get(outcome_id)
        if points is None:
            points = deque(maxlen=self.maxlen)
            self._points[outcome_id] = points
        if points and points[-1][1] == odds:
            return False
        points.append((ts, odds))
        return True

    def observe(self, snapshot: Snapshot) -> int:
        """Record every outcome of a freshly swapped snapshot; drop outcomes it no longer has."""
        recorded = 0
        for outcome in snapshot.outcomes.values():
            if outcome.odds is None:
                continue
            ts = outcome.updated_at or snapshot.created_at or 0
            if self.record(outcome.id, ts, outcome.odds):
                recorded += 1
        for outcome_id in list(self._points):
            if outcome_id not in snapshot.outcomes:
                del self._points[outcome_id]
        return recorded

    def get(self, outcome_id: str) -> list[tuple[int, float]]:
        return list(self._points.get(outcome_id, ()))

    def movement(self, outcome_id: str) -> str | None:
        """'up', 'down' or None comparing the last two points."""
        points = self._points.get(outcome_id)
        if not points or len(points) < 2:
            return None
        prev, last = points[-2][1], points[-1][1]
        if last > prev:
            return "up"
        if last < prev:
            return "down"
        return None
