"""Wire registry, aggregator, scheduler and query facade from Settings."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass

import structlog

from oddsagg.aggregation import Aggregator, OddsHistory, SnapshotHolder
from oddsagg.config.settings import Settings
from oddsagg.pipeline.matching import EventMatcher
from oddsagg.providers.factory import build_adapters
from oddsagg.providers.registry import ProviderRegistry
from oddsagg.query import OddsQueryService
from oddsagg.scheduler import RefreshScheduler
from oddsagg.storage.kv import DuckDBKeyValueStore, KeyValueStore, MemoryKeyValueStore

log = structlog.get_logger(__name__)


@dataclass
class OddsService:
    registry: ProviderRegistry
    aggregator: Aggregator
    holder: SnapshotHolder
    history: OddsHistory
    scheduler: RefreshScheduler
    query: OddsQueryService
    store: KeyValueStore

    def start(self) -> None:
        self.scheduler.start()

    async def close(self) -> None:
        """Stop the scheduler, then release adapter clients and the store."""
        await self.scheduler.stop()
        await asyncio.gather(*(a.aclose() for a in self.registry.all_adapters()))
        if isinstance(self.store, DuckDBKeyValueStore):
            self.store.close()


def build_store(settings: Settings) -> KeyValueStore:
    if settings.storage_backend == "duckdb":
        return DuckDBKeyValueStore(settings.db_path)
    return MemoryKeyValueStore()


def build_service(settings: Settings, store: KeyValueStore | None = None) -> OddsService:
    store = store if store is not None else build_store(settings)
    registry = ProviderRegistry(build_adapters(settings.providers, store))
    aggregator = Aggregator(registry, event_retention_sec=settings.event_retention_sec)
    holder = SnapshotHolder()
    history = OddsHistory(maxlen=settings.history_size)
    scheduler = RefreshScheduler(
        registry,
        aggregator,
        holder,
        matcher=EventMatcher(time_tolerance_sec=settings.match_time_tolerance_sec),
        history=history,
        interval_sec=settings.refresh_interval_sec,
    )
    query = OddsQueryService(holder, history=history, registry=registry, scheduler=scheduler)
    log.info(
        "service_built",
        providers=len(registry),
        enabled=len(registry.enabled_adapters()),
        storage=settings.storage_backend,
    )
    return OddsService(
        registry=registry,
        aggregator=aggregator,
        holder=holder,
        history=history,
        scheduler=scheduler,
        query=query,
        store=store,
    )
