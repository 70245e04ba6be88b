"""Event identity matching across providers.

Two provider events are the same logical event when they share a provider
supplied external id, or when their normalized team names agree and their
start times fall within a tolerance. Ambiguous candidates are never merged;
the duplicates simply coexist.
"""

from __future__ import annotations

import re
import unicodedata
from dataclasses import dataclass, field

import structlog

from oddsagg.models import Event, OddsQuote

log = structlog.get_logger(__name__)

_TEAM_NOISE = ("fc", "cf", "afc", "sc", "ac", "the")


def strip_accents(text: str) -> str:
    """Remove accents from unicode characters."""
    return "".join(c for c in unicodedata.normalize("NFD", text) if unicodedata.category(c) != "Mn")


def normalize_team_name(name: str) -> str:
    """Lowercase, accent-free, punctuation-free, without club-type noise words."""
    text = strip_accents(name or "").lower()
    text = re.sub(r"[^a-z0-9 ]+", " ", text)
    words = [w for w in text.split() if w not in _TEAM_NOISE]
    return " ".join(words)


@dataclass
class MatchResult:
    """Canonical events for one pass plus id remapping for provider records."""

    events: dict[str, Event] = field(default_factory=dict)  # canonical id -> merged event
    event_ids: dict[str, str] = field(default_factory=dict)  # provider event id -> canonical id
    outcome_ids: dict[str, str] = field(default_factory=dict)  # provider outcome id -> canonical id
    market_ids: dict[str, str] = field(default_factory=dict)

    def remap_quote(self, quote: OddsQuote) -> OddsQuote:
        event_id = self.event_ids.get(quote.event_id, quote.event_id)
        if event_id == quote.event_id:
            return quote
        return quote.model_copy(
            update={
                "event_id": event_id,
                "market_id": self.market_ids.get(quote.market_id, quote.market_id),
                "outcome_id": self.outcome_ids.get(quote.outcome_id, quote.outcome_id),
            }
        )


class EventMatcher:
    """Match events across different providers within one pass."""

    def __init__(self, time_tolerance_sec: float = 300.0) -> None:
        self.time_tolerance_sec = time_tolerance_sec

    def _team_key(self, event: Event) -> tuple[str, str]:
        return normalize_team_name(event.home_team), normalize_team_name(event.away_team)

    def _candidates(self, event: Event, canonical: dict[str, Event]) -> list[Event]:
        provider = event.provider_ids[0] if event.provider_ids else None
        found: list[Event] = []
        if event.external_id:
            found = [
                c for c in canonical.values()
                if c.external_id == event.external_id and provider not in c.provider_ids
            ]
            if found:
                return found
        teams = self._team_key(event)
        if not all(teams):
            return []
        for c in canonical.values():
            if provider in c.provider_ids:
                continue
            if self._team_key(c) != teams:
                continue
            delta = abs((c.start_time - event.start_time).total_seconds())
            if delta <= self.time_tolerance_sec:
                found.append(c)
        return found

    def match(self, events: list[Event], known_aliases: dict[str, str] | None = None) -> MatchResult:
        """Fold provider events (in provider order) into canonical events.

        known_aliases maps provider event ids to the canonical id they were
        folded into on earlier passes, so a canonical id survives a pass in
        which its first claimant is missing.
        """
        aliases = known_aliases or {}
        result = MatchResult()
        for event in events:
            alias = aliases.get(event.id)
            if alias and alias != event.id:
                target = result.events.get(alias)
                if target is None:
                    target = event.model_copy(update={"id": alias, "markets": (), "provider_ids": ()})
                if not set(event.provider_ids) & set(target.provider_ids):
                    result.events[alias] = self._merge(target, event, result)
                    result.event_ids[event.id] = alias
                    continue
            candidates = self._candidates(event, result.events)
            if len(candidates) != 1:
                if len(candidates) > 1:
                    log.debug("event_match_ambiguous", event=event.id, candidates=len(candidates))
                if event.id in result.events:
                    # id already claimed, fold in so its quotes keep a home
                    log.debug("event_duplicate_id", event=event.id)
                    result.events[event.id] = self._merge(result.events[event.id], event, result)
                    result.event_ids[event.id] = event.id
                    continue
                result.events[event.id] = event
                result.event_ids[event.id] = event.id
                continue
            target = candidates[0]
            merged = self._merge(target, event, result)
            result.events[target.id] = merged
            result.event_ids[event.id] = target.id
        return result

    def _merge(self, target: Event, event: Event, result: MatchResult) -> Event:
        """Fold event's markets/outcomes into target, recording id remaps."""
        markets = {m.key: m for m in target.markets}
        for market in event.markets:
            market_id = f"{target.id}:{market.key}"
            result.market_ids[market.id] = market_id
            existing = markets.get(market.key)
            known = {o.key for o in existing.outcomes} if existing else set()
            added = []
            for outcome in market.outcomes:
                outcome_id = f"{market_id}:{outcome.key}"
                result.outcome_ids[outcome.id] = outcome_id
                if outcome.key not in known:
                    added.append(outcome.model_copy(update={"id": outcome_id, "market_id": market_id}))
            if existing is None:
                markets[market.key] = market.model_copy(
                    update={"id": market_id, "event_id": target.id, "outcomes": tuple(added)}
                )
            elif added:
                markets[market.key] = existing.model_copy(update={"outcomes": existing.outcomes + tuple(added)})
        live = target.is_live or event.is_live
        return target.model_copy(
            update={
                "markets": tuple(markets.values()),
                "provider_ids": target.provider_ids + tuple(p for p in event.provider_ids if p not in target.provider_ids),
                "sport_id": target.sport_id or event.sport_id,
                "venue": target.venue or event.venue,
                "score": target.score or event.score,
                "external_id": target.external_id or event.external_id,
                "status": "live" if live and target.status != "finished" else target.status,
                "last_seen": max(target.last_seen or 0, event.last_seen or 0),
            }
        )
