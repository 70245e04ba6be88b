"""Payload normalization: ids, defaults, odds validation, Wal.app grouping."""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from oddsagg.pipeline import parse_raw_payload, valid_odds
from oddsagg.pipeline.normalize import map_event_status, normalize_payload, to_epoch_ms
from oddsagg.pipeline.payloads import StaticPayload, WalAppPayload

from fakes import batch_for, raw_event


@pytest.mark.parametrize("value", [0, -1.5, "abc", None, float("inf"), float("nan"), 1.0, True, "1"])
def test_valid_odds_rejects(value):
    assert valid_odds(value) is None


def test_valid_odds_accepts():
    assert valid_odds(2.5) == 2.5
    assert valid_odds("1.85") == 1.85


def test_invalid_odds_never_become_quotes():
    event = raw_event("e1", odds={"home": 0, "draw": -2, "away": "abc"})
    batch = batch_for("x", [event, raw_event("e2", home="Milan", away="Roma", odds={"home": 1.9})])
    assert batch.rejected == 3
    assert [q.outcome_id for q in batch.quotes] == ["x:e2:match-winner:home"]
    assert all(q.odds > 1.0 for q in batch.quotes)
    # outcomes are still described, just unpriced
    e1 = batch.events[0]
    assert len(e1.markets[0].outcomes) == 3


def test_ids_and_fields():
    batch = batch_for("x", [raw_event("e1", venue="Emirates", externalId="fix-9")])
    event = batch.events[0]
    assert event.id == "x:e1"
    assert event.sport_id == 1
    assert event.venue == "Emirates"
    assert event.external_id == "fix-9"
    assert event.provider_ids == ("x",)
    assert event.start_time == datetime(2026, 11, 1, 15, tzinfo=timezone.utc)
    market = event.markets[0]
    assert market.id == "x:e1:match-winner"
    assert [o.key for o in market.outcomes] == ["home", "draw", "away"]
    assert {q.outcome_id for q in batch.quotes} == {
        "x:e1:match-winner:home",
        "x:e1:match-winner:draw",
        "x:e1:match-winner:away",
    }


def test_defaults_for_missing_fields():
    raw = {
        "id": 7,
        "homeTeam": "Arsenal",
        "markets": [{"id": "m", "outcomes": [{"name": "Arsenal", "odds": 1.5}]}],
    }
    batch = batch_for("x", [raw], fetched_at=1_700_000_000_000)
    event = batch.events[0]
    assert event.league == "Unknown League"
    assert event.away_team == "TBD"
    assert event.venue is None
    assert event.status == "upcoming"
    assert event.start_time == datetime.fromtimestamp(1_700_000_000, tz=timezone.utc)
    assert event.markets[0].name == "Match Winner"
    assert event.markets[0].key == "m"
    assert batch.quotes[0].timestamp == 1_700_000_000_000


def test_records_without_ids_are_dropped_individually():
    raws = [
        {"homeTeam": "A", "awayTeam": "B"},
        {"id": "e2"},
        {"id": "e3", "homeTeam": "A", "awayTeam": "B", "markets": [{"outcomes": [{"name": "A", "odds": 2}]}]},
        "garbage",
        raw_event("e4"),
    ]
    batch = batch_for("x", raws)
    assert [e.id for e in batch.events] == ["x:e3", "x:e4"]
    assert batch.events[0].markets == ()
    assert batch.rejected == 4
    assert len(batch.quotes) == 3


def test_inactive_outcomes_and_closed_markets_produce_no_quotes():
    raw = raw_event("e1")
    raw["markets"][0]["outcomes"][1]["status"] = "suspended"
    raw["markets"].append(
        {"id": "ou", "name": "Over/Under 2.5", "status": "closed", "outcomes": [{"name": "Over", "odds": 1.9}]}
    )
    batch = batch_for("x", [raw])
    market = batch.events[0].markets[0]
    assert market.outcomes[1].status == "inactive"
    assert {q.outcome_id.rsplit(":", 1)[1] for q in batch.quotes} == {"home", "away"}
    assert batch.events[0].markets[1].status == "closed"
    assert batch.rejected == 0


def test_event_status_mapping():
    assert map_event_status("InPlay") == "live"
    assert map_event_status("2H") == "live"
    assert map_event_status("FT") == "finished"
    assert map_event_status(None, True) == "live"
    assert map_event_status("scheduled") == "upcoming"


def test_to_epoch_ms():
    assert to_epoch_ms(1_700_000_000) == 1_700_000_000_000
    assert to_epoch_ms(1_700_000_000_000) == 1_700_000_000_000
    assert to_epoch_ms("2026-11-01T15:00:00Z") == 1_793_545_200_000
    assert to_epoch_ms("not a date") is None
    assert to_epoch_ms(None) is None
    assert to_epoch_ms("99999999999999999999") is None
    assert to_epoch_ms(-5) is None


def test_walapp_rows_grouped_into_events():
    rows = [
        {
            "event_id": "w1", "market_id": "m1", "outcome_id": "o1", "odds": 2.1,
            "home_team": "Arsenal", "away_team": "Chelsea", "league": "Premier League",
            "sport": "soccer", "start_time": "2026-11-01T15:00:00Z", "status": "live",
            "market_name": "Match Winner", "outcome_name": "Arsenal", "last_updated": 1_700_000_000,
        },
        {"event_id": "w1", "market_id": "m1", "outcome_id": "o2", "odds": 3.2,
         "market_name": "Match Winner", "outcome_name": "Chelsea"},
        {"event_id": "w2", "market_id": "m9", "outcome_id": "o1", "odds": 0.5,
         "home_team": "Lakers", "away_team": "Celtics", "sport_id": 2, "outcome_name": "Lakers"},
        {"market_id": "m1", "outcome_id": "o3", "odds": 2.0},
    ]
    batch = normalize_payload(WalAppPayload(provider_id="walapp", fetched_at=1_000, data=rows))
    assert [e.id for e in batch.events] == ["walapp:w1", "walapp:w2"]
    w1, w2 = batch.events
    assert w1.is_live
    assert w1.sport_id == 1
    assert [o.key for o in w1.markets[0].outcomes] == ["home", "away"]
    assert w2.sport_id == 2
    assert w2.markets[0].key == "m9"
    assert batch.rejected == 2
    assert [q.odds for q in batch.quotes] == [2.1, 3.2]
    assert batch.quotes[0].timestamp == 1_700_000_000_000


def test_static_payload_uses_nested_shape():
    batch = normalize_payload(StaticPayload(provider_id="static", fetched_at=1_000, events=[raw_event("s1")]))
    assert batch.events[0].id == "static:s1"
    assert len(batch.quotes) == 3


def test_parse_raw_payload_dispatches_on_kind():
    payload = parse_raw_payload({"kind": "walapp", "provider_id": "walapp", "fetched_at": 1, "data": []})
    assert isinstance(payload, WalAppPayload)
    with pytest.raises(ValidationError):
        parse_raw_payload({"kind": "nope", "fetched_at": 1})
