"""Raw provider payload -> canonical Event/Market/Outcome + flat OddsQuote list."""

from __future__ import annotations

import math
import re
from datetime import datetime, timezone
from typing import Any, Callable

import structlog
from pydantic import BaseModel, Field, ValidationError

from oddsagg.models import Event, Market, OddsQuote, Outcome
from oddsagg.pipeline.sports import classify_sport
from oddsagg.pipeline.payloads import StaticPayload, WalAppPayload, WurlusPayload

log = structlog.get_logger(__name__)

DEFAULT_LEAGUE = "Unknown League"
DEFAULT_MARKET_NAME = "Match Winner"
PLACEHOLDER_TEAM = "TBD"
# 9999-12-31T23:59:59.999Z, the last instant datetime can represent
MAX_EPOCH_MS = 253_402_300_799_999

LIVE_STATUSES = {"live", "inplay", "in_play", "in-play", "in-progress", "in_progress", "inprogress",
                 "1h", "2h", "ht", "halftime", "started", "running"}
FINISHED_STATUSES = {"finished", "ended", "ft", "final", "closed", "settled", "complete", "completed"}
CLOSED_MARKET_STATUSES = {"closed", "suspended", "locked", "inactive"}
SETTLED_MARKET_STATUSES = {"settled", "resulted"}
INACTIVE_OUTCOME_STATUSES = {"inactive", "suspended", "closed", "locked", "void"}

HOME_LABELS = {"1", "home", "home win", "w1"}
DRAW_LABELS = {"x", "draw", "tie"}
AWAY_LABELS = {"2", "away", "away win", "w2"}


class NormalizedBatch(BaseModel):
    """Canonical output of one provider fetch."""

    provider_id: str
    fetched_at: int
    events: list[Event] = Field(default_factory=list)
    quotes: list[OddsQuote] = Field(default_factory=list)
    rejected: int = 0


def _float(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        f = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(f):
        return None
    return f


def valid_odds(value: Any) -> float | None:
    """Decimal odds if numeric, finite and > 1.0, else None."""
    f = _float(value)
    if f is None or f <= 1.0:
        return None
    return f


def slugify(text: Any) -> str:
    s = re.sub(r"[^a-z0-9]+", "-", str(text).strip().lower())
    return s.strip("-")


def _clean_id(value: Any) -> str | None:
    if value is None or isinstance(value, bool):
        return None
    s = str(value).strip()
    return s or None


def _first(raw: dict[str, Any], *keys: str) -> Any:
    for key in keys:
        value = raw.get(key)
        if value is not None and value != "":
            return value
    return None


def to_epoch_ms(value: Any) -> int | None:
    """Parse datetime / epoch seconds or ms / ISO-8601 string into ms epoch."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        dt = value if value.tzinfo else value.replace(tzinfo=timezone.utc)
        ms = int(dt.timestamp() * 1000)
        return ms if 0 <= ms <= MAX_EPOCH_MS else None
    if isinstance(value, (int, float)):
        if not math.isfinite(value):
            return None
        # > 1e11 can only be milliseconds for any plausible date
        ms = int(value) if value > 1e11 else int(value * 1000)
        return ms if 0 <= ms <= MAX_EPOCH_MS else None
    text = str(value).strip()
    if not text:
        return None
    if re.fullmatch(r"\d+(\.\d+)?", text):
        return to_epoch_ms(float(text))
    try:
        dt = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        return None
    return to_epoch_ms(dt)


def _to_datetime(ms: int) -> datetime:
    return datetime.fromtimestamp(ms / 1000, tz=timezone.utc)


def map_event_status(raw_status: Any, is_live: Any = None) -> str:
    status = str(raw_status or "").strip().lower()
    if status in FINISHED_STATUSES:
        return "finished"
    if status in LIVE_STATUSES or is_live is True:
        return "live"
    return "upcoming"


def map_market_status(raw_status: Any) -> str:
    status = str(raw_status or "").strip().lower()
    if status in SETTLED_MARKET_STATUSES:
        return "settled"
    if status in CLOSED_MARKET_STATUSES:
        return "closed"
    return "open"


def map_outcome_status(raw_status: Any) -> str:
    status = str(raw_status or "").strip().lower()
    if status in ("winner", "won", "win"):
        return "winner"
    if status in ("loser", "lost", "lose"):
        return "loser"
    if status in INACTIVE_OUTCOME_STATUSES:
        return "inactive"
    return "active"


def outcome_key(name: str | None, raw_id: str | None, home: str, away: str) -> str | None:
    """Cross-provider outcome key: home/draw/away when recognisable, else slug of name or id."""
    if name:
        label = name.strip().lower()
        if label in HOME_LABELS or label == home.lower():
            return "home"
        if label in DRAW_LABELS:
            return "draw"
        if label in AWAY_LABELS or label == away.lower():
            return "away"
        key = slugify(name)
        if key:
            return key
    if raw_id:
        return slugify(raw_id) or None
    return None


def _reject(provider_id: str, what: str, reason: str, **kw: Any) -> None:
    log.warning(f"{what}_rejected", provider=provider_id, reason=reason, **kw)


def normalize_nested_event(
    provider_id: str,
    raw: dict[str, Any],
    fetched_at: int,
) -> tuple[Event | None, list[OddsQuote], int]:
    """Normalize one nested event record. Returns (event or None, quotes, rejected count)."""
    ext_id = _clean_id(_first(raw, "id", "eventId", "event_id"))
    if ext_id is None:
        _reject(provider_id, "event", "missing_event_id")
        return None, [], 1
    home = _first(raw, "homeTeam", "home_team", "home")
    away = _first(raw, "awayTeam", "away_team", "away")
    if home is None and away is None:
        _reject(provider_id, "event", "missing_participants", event=ext_id)
        return None, [], 1
    home = str(home or PLACEHOLDER_TEAM).strip()
    away = str(away or PLACEHOLDER_TEAM).strip()
    league = str(_first(raw, "leagueName", "league", "competition") or DEFAULT_LEAGUE).strip()
    sport_id = classify_sport(_first(raw, "sportId", "sport_id", "sport"), league, home, away)
    start_ms = to_epoch_ms(_first(raw, "startTime", "start_time", "commence_time")) or fetched_at
    event_id = f"{provider_id}:{ext_id}"

    quotes: list[OddsQuote] = []
    rejected = 0
    markets: dict[str, dict[str, Any]] = {}
    raw_markets = raw.get("markets") or []
    if not isinstance(raw_markets, list):
        raw_markets = []
    for raw_market in raw_markets:
        if not isinstance(raw_market, dict):
            rejected += 1
            _reject(provider_id, "market", "not_an_object", event=event_id)
            continue
        market_name = _first(raw_market, "name", "marketName", "market_name")
        market_raw_id = _clean_id(_first(raw_market, "id", "marketId", "market_id"))
        if market_name is None and market_raw_id is None:
            rejected += 1
            _reject(provider_id, "market", "missing_market_id", event=event_id)
            continue
        key = slugify(market_name) if market_name else slugify(market_raw_id)
        if not key:
            rejected += 1
            _reject(provider_id, "market", "missing_market_id", event=event_id)
            continue
        market_id = f"{event_id}:{key}"
        slot = markets.setdefault(
            key,
            {
                "id": market_id,
                "key": key,
                "name": str(market_name or DEFAULT_MARKET_NAME),
                "status": map_market_status(raw_market.get("status")),
                "outcomes": {},
            },
        )
        raw_outcomes = raw_market.get("outcomes") or []
        if not isinstance(raw_outcomes, list):
            raw_outcomes = []
        for raw_outcome in raw_outcomes:
            if not isinstance(raw_outcome, dict):
                rejected += 1
                _reject(provider_id, "quote", "not_an_object", market=market_id)
                continue
            name = _first(raw_outcome, "name", "outcomeName", "outcome_name")
            raw_oid = _clean_id(_first(raw_outcome, "id", "outcomeId", "outcome_id"))
            okey = outcome_key(str(name) if name is not None else None, raw_oid, home, away)
            if okey is None:
                rejected += 1
                _reject(provider_id, "quote", "missing_outcome_id", market=market_id)
                continue
            if okey in slot["outcomes"]:
                rejected += 1
                _reject(provider_id, "quote", "duplicate_outcome", market=market_id, outcome=okey)
                continue
            oid = f"{market_id}:{okey}"
            status = map_outcome_status(raw_outcome.get("status"))
            slot["outcomes"][okey] = Outcome(
                id=oid,
                market_id=market_id,
                key=okey,
                name=str(name or okey.title()),
                status=status,
            )
            if status != "active" or slot["status"] != "open":
                continue
            odds = valid_odds(_first(raw_outcome, "odds", "price", "value"))
            if odds is None:
                rejected += 1
                _reject(provider_id, "quote", "invalid_odds", outcome=oid, value=repr(raw_outcome.get("odds")))
                continue
            ts = to_epoch_ms(_first(raw_outcome, "lastUpdated", "last_updated", "timestamp")) or fetched_at
            quotes.append(
                OddsQuote(
                    outcome_id=oid,
                    market_id=market_id,
                    event_id=event_id,
                    provider_id=provider_id,
                    odds=odds,
                    timestamp=ts,
                )
            )

    event = Event(
        id=event_id,
        sport_id=sport_id,
        league=league,
        home_team=home,
        away_team=away,
        start_time=_to_datetime(start_ms),
        status=map_event_status(raw.get("status"), raw.get("isLive", raw.get("is_live"))),
        venue=_clean_id(_first(raw, "venue", "venueName")),
        score=_clean_id(raw.get("score")),
        external_id=_clean_id(_first(raw, "externalId", "external_id", "fixtureId", "fixture_id")),
        provider_ids=(provider_id,),
        markets=tuple(
            Market(
                id=m["id"],
                event_id=event_id,
                key=m["key"],
                name=m["name"],
                status=m["status"],
                outcomes=tuple(m["outcomes"].values()),
            )
            for m in markets.values()
        ),
        last_seen=fetched_at,
    )
    return event, quotes, rejected


def _normalize_nested(provider_id: str, raw_events: list[Any], fetched_at: int) -> NormalizedBatch:
    batch = NormalizedBatch(provider_id=provider_id, fetched_at=fetched_at)
    for raw in raw_events:
        if not isinstance(raw, dict):
            batch.rejected += 1
            _reject(provider_id, "event", "not_an_object")
            continue
        try:
            event, quotes, rejected = normalize_nested_event(provider_id, raw, fetched_at)
        except (ValueError, OverflowError, OSError, ValidationError) as e:
            batch.rejected += 1
            _reject(provider_id, "event", "invalid_record", event=raw.get("id"), error=str(e))
            continue
        batch.rejected += rejected
        if event is not None:
            batch.events.append(event)
            batch.quotes.extend(quotes)
    return batch


def normalize_wurlus(payload: WurlusPayload) -> NormalizedBatch:
    return _normalize_nested(payload.provider_id, payload.events, payload.fetched_at)


def normalize_static(payload: StaticPayload) -> NormalizedBatch:
    return _normalize_nested(payload.provider_id, payload.events, payload.fetched_at)


def walapp_rows_to_events(provider_id: str, rows: list[Any]) -> tuple[list[dict[str, Any]], int]:
    """Group flat Wal.app rows into the nested event shape. Returns (events, rejected rows)."""
    events: dict[str, dict[str, Any]] = {}
    rejected = 0
    for row in rows:
        if not isinstance(row, dict):
            rejected += 1
            _reject(provider_id, "quote", "not_an_object")
            continue
        ext_id = _clean_id(row.get("event_id"))
        if ext_id is None:
            rejected += 1
            _reject(provider_id, "quote", "missing_event_id", outcome=row.get("outcome_id"))
            continue
        ev = events.get(ext_id)
        if ev is None:
            ev = {"id": ext_id, "markets": {}}
            events[ext_id] = ev
        for src, dst in (
            ("home_team", "homeTeam"),
            ("away_team", "awayTeam"),
            ("league", "leagueName"),
            ("sport_id", "sportId"),
            ("sport", "sport"),
            ("start_time", "startTime"),
            ("status", "status"),
            ("venue", "venue"),
            ("score", "score"),
            ("external_id", "externalId"),
        ):
            if ev.get(dst) is None and row.get(src) is not None:
                ev[dst] = row[src]
        market_name = row.get("market_name")
        market_raw_id = _clean_id(row.get("market_id"))
        mkey = str(market_name or market_raw_id or "")
        market = ev["markets"].setdefault(
            mkey,
            {"id": market_raw_id, "name": market_name, "status": row.get("market_status"), "outcomes": []},
        )
        market["outcomes"].append(
            {
                "id": row.get("outcome_id"),
                "name": row.get("outcome_name"),
                "odds": row.get("odds"),
                "status": row.get("outcome_status"),
                "lastUpdated": row.get("last_updated"),
            }
        )
    nested = []
    for ev in events.values():
        ev["markets"] = list(ev["markets"].values())
        nested.append(ev)
    return nested, rejected


def normalize_walapp(payload: WalAppPayload) -> NormalizedBatch:
    nested, rejected = walapp_rows_to_events(payload.provider_id, payload.data)
    batch = _normalize_nested(payload.provider_id, nested, payload.fetched_at)
    batch.rejected += rejected
    return batch


_NORMALIZERS: dict[str, Callable[[Any], NormalizedBatch]] = {
    "wurlus": normalize_wurlus,
    "walapp": normalize_walapp,
    "static": normalize_static,
}


def normalize_payload(payload: WurlusPayload | WalAppPayload | StaticPayload) -> NormalizedBatch:
    """Dispatch on the payload tag to its provider-specific normalizer."""
    normalizer = _NORMALIZERS[payload.kind]
    batch = normalizer(payload)
    log.debug(
        "payload_normalized",
        provider=payload.provider_id,
        kind=payload.kind,
        events=len(batch.events),
        quotes=len(batch.quotes),
        rejected=batch.rejected,
    )
    return batch
