"""Service wiring from settings, end to end with the static fallback provider."""

import asyncio
import json

from oddsagg.config import Settings
from oddsagg.service import build_service
from oddsagg.storage import DuckDBKeyValueStore, MemoryKeyValueStore

from fakes import raw_event


def _settings(path, backend="memory") -> Settings:
    return Settings(
        scheduler={"interval_sec": 5, "history_size": 3},
        storage={"backend": backend, "db_path": ":memory:"},
        providers=[
            {"id": "static", "kind": "static", "weight": 10, "path": str(path)},
            {"id": "wurlus", "kind": "wurlus", "enabled": False},
        ],
    )


def test_build_service_and_run_pass(tmp_path):
    path = tmp_path / "fallback.json"
    path.write_text(json.dumps([raw_event("s1"), raw_event("s2", home="Milan", away="Roma", status="live")]))
    service = build_service(_settings(path))
    assert isinstance(service.store, MemoryKeyValueStore)
    assert service.scheduler.interval_sec == 5
    assert service.history.maxlen == 3

    async def go():
        try:
            return await service.scheduler.refresh_odds()
        finally:
            await service.close()

    summary = asyncio.run(go())
    assert summary.status == "ok"
    assert summary.providers_total == 1
    assert [e.id for e in service.query.get_events()] == ["static:s2", "static:s1"]
    assert service.query.get_outcome("static:s1:match-winner:draw").odds == 3.4


def test_duckdb_backend(tmp_path):
    service = build_service(_settings(tmp_path / "none.json", backend="duckdb"))
    assert isinstance(service.store, DuckDBKeyValueStore)
    asyncio.run(service.close())
