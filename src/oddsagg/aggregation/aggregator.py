"""Weighted consensus merge of provider quotes and snapshot construction."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Iterable

import structlog

from oddsagg.aggregation.snapshot import Snapshot
from oddsagg.models import Event, Market, OddsQuote, Outcome
from oddsagg.pipeline.matching import MatchResult
from oddsagg.providers.registry import ProviderRegistry

log = structlog.get_logger(__name__)


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass(frozen=True)
class Consensus:
    odds: float
    provider_ids: tuple[str, ...]
    best_odds: float
    best_provider_id: str

    @property
    def provider_count(self) -> int:
        return len(self.provider_ids)


def weighted_average(pairs: Iterable[tuple[float, float]]) -> float | None:
    """sum(odds * weight) / sum(weight) over (odds, weight) pairs; None if the weight sum is zero."""
    num = 0.0
    den = 0.0
    for odds, weight in pairs:
        num += odds * weight
        den += weight
    if den <= 0:
        return None
    return num / den


class Aggregator:
    """Groups quotes by outcome id and computes consensus odds.

    Provider enabled/weight state is read from the registry while merging; the
    merge has no suspension points, so it sees one consistent registry state.
    """

    def __init__(
        self,
        registry: ProviderRegistry,
        *,
        event_retention_sec: float = 3600.0,
        clock: Callable[[], int] = _now_ms,
    ) -> None:
        self.registry = registry
        self.event_retention_sec = event_retention_sec
        self._clock = clock

    def consensus(self, quotes: list[OddsQuote]) -> Consensus | None:
        """Consensus for one outcome's quotes, or None to leave the outcome unchanged."""
        latest: dict[str, OddsQuote] = {}
        for q in quotes:
            if not q.provider_id or not self.registry.is_enabled(q.provider_id):
                continue
            prev = latest.get(q.provider_id)
            if prev is None or q.timestamp >= prev.timestamp:
                latest[q.provider_id] = q
        if not latest:
            return None
        contributors = list(latest.values())
        best = max(contributors, key=lambda q: q.odds)
        if len(contributors) == 1:
            odds = contributors[0].odds
        else:
            odds = weighted_average((q.odds, self.registry.weight_of(q.provider_id)) for q in contributors)
            if odds is None:
                return None
        return Consensus(
            odds=odds,
            provider_ids=tuple(q.provider_id for q in contributors),
            best_odds=best.odds,
            best_provider_id=best.provider_id,
        )

    def merge(self, quotes: Iterable[OddsQuote]) -> dict[str, Consensus]:
        """Group quotes by outcome_id and compute consensus per group."""
        groups: dict[str, list[OddsQuote]] = {}
        for q in quotes:
            groups.setdefault(q.outcome_id, []).append(q)
        result: dict[str, Consensus] = {}
        unchanged = 0
        for outcome_id, group in groups.items():
            c = self.consensus(group)
            if c is None:
                unchanged += 1
                continue
            result[outcome_id] = c
        log.debug("quotes_merged", outcomes=len(groups), updated=len(result), unchanged=unchanged)
        return result

    def _apply_outcome(
        self,
        outcome: Outcome,
        consensus: Consensus | None,
        previous: Outcome | None,
        now: int,
    ) -> Outcome:
        if consensus is not None:
            return outcome.model_copy(
                update={
                    "odds": consensus.odds,
                    "provider_count": consensus.provider_count,
                    "provider_ids": consensus.provider_ids,
                    "best_odds": consensus.best_odds,
                    "best_provider_id": consensus.best_provider_id,
                    "updated_at": now,
                }
            )
        if previous is not None:
            return outcome.model_copy(
                update={
                    "odds": previous.odds,
                    "provider_count": previous.provider_count,
                    "provider_ids": previous.provider_ids,
                    "best_odds": previous.best_odds,
                    "best_provider_id": previous.best_provider_id,
                    "updated_at": previous.updated_at,
                }
            )
        return outcome

    def _apply_market(
        self,
        market: Market,
        consensus: dict[str, Consensus],
        previous: Market | None,
        now: int,
    ) -> Market:
        prev_outcomes = {o.id: o for o in previous.outcomes} if previous else {}
        outcomes = [
            self._apply_outcome(o, consensus.get(o.id), prev_outcomes.get(o.id), now) for o in market.outcomes
        ]
        seen = {o.id for o in market.outcomes}
        outcomes.extend(o for o in prev_outcomes.values() if o.id not in seen)
        return market.model_copy(update={"outcomes": tuple(outcomes)})

    def _apply_event(self, event: Event, consensus: dict[str, Consensus], previous: Event | None, now: int) -> Event:
        prev_markets = {m.id: m for m in previous.markets} if previous else {}
        markets = [self._apply_market(m, consensus, prev_markets.get(m.id), now) for m in event.markets]
        seen = {m.id for m in event.markets}
        markets.extend(m for m in prev_markets.values() if m.id not in seen)
        return event.model_copy(update={"markets": tuple(markets)})

    def build_snapshot(self, previous: Snapshot, match: MatchResult, quotes: list[OddsQuote]) -> Snapshot:
        """Merge one pass's quotes onto its canonical events, carrying forward what the pass did not report."""
        now = self._clock()
        consensus = self.merge(match.remap_quote(q) for q in quotes)

        events: dict[str, Event] = {}
        for event_id, event in match.events.items():
            events[event_id] = self._apply_event(event, consensus, previous.events.get(event_id), now)

        retention_ms = self.event_retention_sec * 1000
        expired = 0
        for event_id, event in previous.events.items():
            if event_id in events:
                continue
            if event.last_seen is not None and now - event.last_seen > retention_ms:
                expired += 1
                continue
            events[event_id] = event

        aliases = {k: v for k, v in previous.aliases.items() if v in events}
        aliases.update({k: v for k, v in match.event_ids.items() if k != v and v in events})

        outcomes = {o.id: o for e in events.values() for m in e.markets for o in m.outcomes}
        log.debug(
            "snapshot_built",
            events=len(events),
            outcomes=len(outcomes),
            updated=len(consensus),
            expired=expired,
        )
        return Snapshot(
            version=previous.version + 1,
            created_at=now,
            events=events,
            aliases=aliases,
            outcomes=outcomes,
            sports=previous.sports,
        )
