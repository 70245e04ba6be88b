"""Refresh scheduler - timer-driven aggregation passes with atomic snapshot swap."""

from __future__ import annotations

import asyncio
import time
from dataclasses import asdict, dataclass, field
from typing import Any, Callable

import structlog

from oddsagg.aggregation.aggregator import Aggregator
from oddsagg.aggregation.history import OddsHistory
from oddsagg.aggregation.snapshot import Snapshot, SnapshotHolder
from oddsagg.pipeline.matching import EventMatcher
from oddsagg.pipeline.normalize import NormalizedBatch
from oddsagg.providers.base import FetchResult, ProviderAdapter
from oddsagg.providers.registry import ProviderRegistry

log = structlog.get_logger(__name__)


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class PassSummary:
    """Observability record for one pass. status: ok | partial | failed | empty."""

    status: str
    started_at: int
    finished_at: int
    providers_total: int = 0
    providers_failed: int = 0
    providers_stale: int = 0
    failed_providers: list[str] = field(default_factory=list)
    quotes: int = 0
    events: int = 0
    rejected: int = 0
    snapshot_version: int = 0
    duration_ms: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class RefreshScheduler:
    """Runs a full fetch -> match -> aggregate -> swap pass every `interval_sec`.

    A tick that fires while a pass is still in flight is skipped, not queued.
    """

    def __init__(
        self,
        registry: ProviderRegistry,
        aggregator: Aggregator,
        holder: SnapshotHolder | None = None,
        *,
        matcher: EventMatcher | None = None,
        history: OddsHistory | None = None,
        interval_sec: float = 15.0,
        fetch_timeout_sec: float = 30.0,
        clock: Callable[[], int] = _now_ms,
    ) -> None:
        self.registry = registry
        self.aggregator = aggregator
        self.holder = holder or SnapshotHolder()
        self.matcher = matcher or EventMatcher()
        self.history = history
        self.interval_sec = interval_sec
        self.fetch_timeout_sec = fetch_timeout_sec
        self._clock = clock
        self._pass_in_progress = False
        self._stop: asyncio.Event | None = None
        self._loop_task: asyncio.Task[None] | None = None
        self._pass_task: asyncio.Task[PassSummary | None] | None = None
        self.last_refresh_time: int | None = None
        self.last_pass: PassSummary | None = None
        self._passes_total = 0
        self._passes_failed = 0
        self._passes_partial = 0
        self._ticks_skipped = 0

    @property
    def snapshot(self) -> Snapshot:
        return self.holder.current

    @property
    def pass_in_progress(self) -> bool:
        return self._pass_in_progress

    @property
    def running(self) -> bool:
        return self._loop_task is not None and not self._loop_task.done()

    # --- single pass ---
    async def _fetch_one(self, adapter: ProviderAdapter) -> FetchResult:
        """adapter.fetch() with a hard ceiling; anything escaping the adapter counts as a failure."""
        provider_id = adapter.get_id()
        try:
            return await asyncio.wait_for(adapter.fetch(), timeout=self.fetch_timeout_sec)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            error = str(e) or type(e).__name__
            log.error("provider_fetch_crashed", provider=provider_id, error=error, error_type=type(e).__name__)
            return FetchResult(
                provider_id=provider_id,
                batch=NormalizedBatch(provider_id=provider_id, fetched_at=self._clock()),
                ok=False,
                error=error,
            )

    async def refresh_odds(self) -> PassSummary | None:
        """Run one pass now. Returns None if another pass is already in flight."""
        if self._pass_in_progress:
            self._ticks_skipped += 1
            log.info("refresh_skipped", reason="pass_in_progress")
            return None
        self._pass_in_progress = True
        try:
            return await self._run_pass()
        finally:
            self._pass_in_progress = False

    async def _run_pass(self) -> PassSummary:
        started_at = self._clock()
        t0 = time.monotonic()
        adapters = self.registry.enabled_adapters()
        if not adapters:
            summary = PassSummary(
                status="empty",
                started_at=started_at,
                finished_at=self._clock(),
                snapshot_version=self.holder.current.version,
            )
            log.warning("refresh_no_providers")
            return self._record(summary)

        results = await asyncio.gather(*(self._fetch_one(a) for a in adapters), return_exceptions=True)
        fetched: list[FetchResult] = []
        for adapter, r in zip(adapters, results):
            if isinstance(r, BaseException):
                if isinstance(r, asyncio.CancelledError):
                    raise r
                log.error("provider_fetch_crashed", provider=adapter.get_id(), error=str(r))
                r = FetchResult(
                    provider_id=adapter.get_id(),
                    batch=NormalizedBatch(provider_id=adapter.get_id(), fetched_at=self._clock()),
                    ok=False,
                    error=str(r),
                )
            fetched.append(r)

        failed = [r.provider_id for r in fetched if not r.ok]
        stale = sum(1 for r in fetched if r.stale)
        quotes = [q for r in fetched for q in r.batch.quotes]
        events = [e for r in fetched for e in r.batch.events]
        rejected = sum(r.batch.rejected for r in fetched)

        summary = PassSummary(
            status="ok",
            started_at=started_at,
            finished_at=started_at,
            providers_total=len(fetched),
            providers_failed=len(failed),
            providers_stale=stale,
            failed_providers=failed,
            quotes=len(quotes),
            events=len(events),
            rejected=rejected,
        )

        if len(failed) == len(fetched):
            summary.status = "failed"
            summary.snapshot_version = self.holder.current.version
            log.error("refresh_all_providers_failed", providers=failed)
        else:
            previous = self.holder.current
            match = self.matcher.match(events, known_aliases=previous.aliases)
            snapshot = self.aggregator.build_snapshot(previous, match, quotes)
            # No await between build and swap: readers see old or new, never partial
            self.holder.swap(snapshot)
            if self.history is not None:
                self.history.observe(snapshot)
            self.last_refresh_time = snapshot.created_at
            summary.snapshot_version = snapshot.version
            if failed:
                summary.status = "partial"

        summary.finished_at = self._clock()
        summary.duration_ms = round((time.monotonic() - t0) * 1000, 1)
        return self._record(summary)

    def _record(self, summary: PassSummary) -> PassSummary:
        self.last_pass = summary
        self._passes_total += 1
        if summary.status == "failed":
            self._passes_failed += 1
        elif summary.status == "partial":
            self._passes_partial += 1
        log.info(
            "refresh_pass_complete",
            status=summary.status,
            providers=summary.providers_total,
            failed=summary.providers_failed,
            quotes=summary.quotes,
            events=summary.events,
            version=summary.snapshot_version,
            duration_ms=summary.duration_ms,
        )
        return summary

    # --- loop ---
    async def _guarded_pass(self) -> PassSummary | None:
        try:
            return await self.refresh_odds()
        except asyncio.CancelledError:
            raise
        except Exception:
            log.exception("refresh_pass_error")
            return None

    def _tick(self) -> None:
        if self._pass_in_progress or (self._pass_task is not None and not self._pass_task.done()):
            self._ticks_skipped += 1
            log.info("refresh_skipped", reason="pass_in_progress")
            return
        self._pass_task = asyncio.create_task(self._guarded_pass())

    async def run(self, stop_event: asyncio.Event | None = None) -> None:
        """Tick every interval_sec until stop_event is set. First pass starts immediately."""
        stop = stop_event or asyncio.Event()
        log.info("scheduler_started", interval_sec=self.interval_sec)
        while not stop.is_set():
            self._tick()
            try:
                await asyncio.wait_for(stop.wait(), timeout=self.interval_sec)
            except asyncio.TimeoutError:
                pass
        log.info("scheduler_stopped", passes=self._passes_total)

    def start(self) -> None:
        """Start the loop on the running event loop. No-op if already running."""
        if self.running:
            return
        self._stop = asyncio.Event()
        self._loop_task = asyncio.create_task(self.run(self._stop))

    async def stop(self) -> None:
        """Stop ticking and cancel any in-flight pass."""
        if self._stop is not None:
            self._stop.set()
        if self._loop_task is not None:
            await self._loop_task
            self._loop_task = None
        if self._pass_task is not None and not self._pass_task.done():
            self._pass_task.cancel()
            try:
                await self._pass_task
            except asyncio.CancelledError:
                pass
        self._pass_task = None

    def status(self) -> dict[str, Any]:
        return {
            "running": self.running,
            "interval_sec": self.interval_sec,
            "pass_in_progress": self._pass_in_progress,
            "last_refresh_time": self.last_refresh_time,
            "passes_total": self._passes_total,
            "passes_failed": self._passes_failed,
            "passes_partial": self._passes_partial,
            "ticks_skipped": self._ticks_skipped,
            "snapshot_version": self.holder.current.version,
            "last_pass": self.last_pass.to_dict() if self.last_pass else None,
        }
