"""HTTP API over an in-process service with fake providers."""

import pytest
from fastapi.testclient import TestClient

from oddsagg.aggregation import Aggregator, OddsHistory, SnapshotHolder
from oddsagg.api.main import create_app
from oddsagg.providers.registry import ProviderRegistry
from oddsagg.query import OddsQueryService
from oddsagg.scheduler import RefreshScheduler
from oddsagg.service import OddsService
from oddsagg.storage import MemoryKeyValueStore

from fakes import FakeAdapter, raw_event


def _service() -> OddsService:
    store = MemoryKeyValueStore()
    x = FakeAdapter("x", 70, events=[raw_event("e1", odds={"home": 2.0}, status="live")], store=store)
    y = FakeAdapter("y", 30, events=[raw_event("e1", odds={"home": 2.5})], store=store)
    registry = ProviderRegistry([x, y])
    holder = SnapshotHolder()
    history = OddsHistory()
    aggregator = Aggregator(registry)
    scheduler = RefreshScheduler(registry, aggregator, holder, history=history)
    query = OddsQueryService(holder, history=history, registry=registry, scheduler=scheduler)
    return OddsService(
        registry=registry,
        aggregator=aggregator,
        holder=holder,
        history=history,
        scheduler=scheduler,
        query=query,
        store=store,
    )


@pytest.fixture
def client():
    app = create_app(_service(), run_scheduler=False)
    with TestClient(app) as c:
        yield c


def test_health_and_sports(client):
    assert client.get("/health").json() == {"status": "ok", "snapshot_version": 0}
    sports = client.get("/sports").json()
    assert len(sports) == 20
    assert sports[0] == {"id": 1, "name": "Football", "slug": "football", "active": True}


def test_refresh_then_read_events(client):
    r = client.post("/refresh")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"
    assert r.json()["snapshot_version"] == 1

    events = client.get("/events").json()
    assert [e["id"] for e in events] == ["x:e1"]
    outcome = events[0]["markets"][0]["outcomes"][0]
    assert outcome["odds"] == pytest.approx(2.15)
    assert outcome["provider_ids"] == ["x", "y"]

    assert [e["id"] for e in client.get("/events/live").json()] == ["x:e1"]
    assert client.get("/events", params={"sport_id": 2}).json() == []
    assert client.get("/events", params={"is_live": "false"}).json() == []
    assert client.get("/events/y:e1").json()["id"] == "x:e1"


def test_unknown_event_is_404(client):
    r = client.get("/events/nope")
    assert r.status_code == 404
    assert r.json() == {"detail": "Event not found: nope", "code": "not_found"}


def test_outcome_history(client):
    client.post("/refresh")
    r = client.get("/outcomes/x:e1:match-winner:home/history")
    assert r.status_code == 200
    body = r.json()
    assert body["current_odds"] == pytest.approx(2.15)
    assert len(body["points"]) == 1
    assert client.get("/outcomes/missing/history").status_code == 404


def test_provider_toggle_and_weight(client):
    providers = client.get("/providers").json()
    assert [(p["id"], p["weight"], p["enabled"]) for p in providers] == [("x", 70, True), ("y", 30, True)]

    r = client.post("/providers/x/toggle")
    assert r.status_code == 200 and r.json()["enabled"] is False
    r = client.post("/providers/x/toggle", json={"enabled": True})
    assert r.json()["enabled"] is True

    r = client.post("/providers/y/weight", json={"weight": 250})
    assert r.status_code == 200 and r.json()["weight"] == 100

    assert client.post("/providers/nope/toggle").status_code == 404
    r = client.post("/providers/nope/weight", json={"weight": 10})
    assert r.status_code == 404 and r.json()["code"] == "not_found"


def test_weights_change_consensus_on_next_pass(client):
    client.post("/providers/y/weight", json={"weight": 70})
    client.post("/providers/x/weight", json={"weight": 30})
    client.post("/refresh")
    event = client.get("/events/x:e1").json()
    assert event["markets"][0]["outcomes"][0]["odds"] == pytest.approx(2.35)


def test_status(client):
    client.post("/refresh")
    body = client.get("/status").json()
    assert body["snapshot_version"] == 1
    assert body["events"] == 1
    assert body["live_events"] == 1
    assert body["providers_enabled"] == 2
    assert body["scheduler"]["passes_total"] == 1
    assert body["scheduler"]["last_pass"]["status"] == "ok"
