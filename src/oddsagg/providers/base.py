"""Provider adapter contract - one subclass per upstream odds source.

Adapters own failure isolation: `fetch()` and `fetch_odds()` never raise for
upstream problems. On failure they fall back to the last good batch while it
is younger than the adapter's staleness ceiling, else to an empty batch.
"""

from __future__ import annotations

import asyncio
import hashlib
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable

import httpx
import structlog
from pydantic import ValidationError

from oddsagg.errors import PayloadError, ProviderError
from oddsagg.models import OddsQuote, ProviderInfo
from oddsagg.pipeline.normalize import NormalizedBatch, normalize_payload
from oddsagg.pipeline.payloads import StaticPayload, WalAppPayload, WurlusPayload
from oddsagg.storage.kv import KeyValueStore, MemoryKeyValueStore

log = structlog.get_logger(__name__)


def _now_ms() -> int:
    return int(time.time() * 1000)


def clamp_weight(weight: float) -> float:
    return max(0.0, min(float(weight), 100.0))


@dataclass
class FetchResult:
    """Outcome of one adapter fetch. `ok` is False when the upstream call failed,
    even if a stale cached batch was served."""

    provider_id: str
    batch: NormalizedBatch
    ok: bool = True
    stale: bool = False
    cached: bool = False
    error: str | None = None
    elapsed_ms: float = 0.0


@dataclass
class _Stats:
    total_calls: int = 0
    successful_calls: int = 0
    failed_calls: int = 0
    average_response_ms: float = 0.0
    last_success_at: int | None = None
    last_error: str | None = None


class ProviderAdapter(ABC):
    """Abstract adapter: fetch raw payload, normalize, cache, contain failures."""

    kind: str = ""

    def __init__(
        self,
        provider_id: str,
        name: str | None = None,
        weight: float = 50.0,
        enabled: bool = True,
        *,
        store: KeyValueStore | None = None,
        timeout_sec: float = 10.0,
        cache_ttl_sec: float = 0.0,
        stale_after_sec: float = 300.0,
        clock: Callable[[], int] = _now_ms,
    ) -> None:
        self._id = provider_id
        self._name = name or provider_id
        self._weight = clamp_weight(weight)
        self._enabled = bool(enabled)
        self.store = store if store is not None else MemoryKeyValueStore(clock=clock)
        self.timeout_sec = timeout_sec
        self.cache_ttl_sec = cache_ttl_sec
        self.stale_after_sec = stale_after_sec
        self._clock = clock
        self._stats = _Stats()

    # --- registry-facing accessors ---
    def get_id(self) -> str:
        return self._id

    def get_name(self) -> str:
        return self._name

    def get_weight(self) -> float:
        return self._weight

    def set_weight(self, weight: float) -> float:
        self._weight = clamp_weight(weight)
        return self._weight

    def is_enabled(self) -> bool:
        return self._enabled

    def set_enabled(self, enabled: bool) -> bool:
        self._enabled = bool(enabled)
        return self._enabled

    def info(self) -> ProviderInfo:
        s = self._stats
        return ProviderInfo(
            id=self._id,
            name=self._name,
            weight=self._weight,
            enabled=self._enabled,
            total_calls=s.total_calls,
            successful_calls=s.successful_calls,
            failed_calls=s.failed_calls,
            average_response_ms=round(s.average_response_ms, 1),
            last_success_at=s.last_success_at,
            last_error=s.last_error,
        )

    # --- subclass hooks ---
    @abstractmethod
    async def fetch_payload(self) -> WurlusPayload | WalAppPayload | StaticPayload:
        """Call upstream and return the tagged raw payload. May raise anything."""
        ...

    def normalize(self, payload: WurlusPayload | WalAppPayload | StaticPayload) -> NormalizedBatch:
        return normalize_payload(payload)

    async def aclose(self) -> None:
        """Release network resources."""

    # --- cache ---
    @property
    def cache_key(self) -> str:
        return f"provider:{self._id}:batch"

    def _read_cache(self) -> NormalizedBatch | None:
        raw = self.store.get(self.cache_key)
        if raw is None:
            return None
        try:
            return NormalizedBatch.model_validate(raw)
        except ValidationError as e:
            log.warning("provider_cache_invalid", provider=self._id, error=str(e))
            return None

    def _write_cache(self, batch: NormalizedBatch) -> None:
        self.store.put(self.cache_key, batch.model_dump(mode="json"), ttl_sec=self.stale_after_sec)

    def _empty(self) -> NormalizedBatch:
        return NormalizedBatch(provider_id=self._id, fetched_at=self._clock())

    # --- fetch ---
    async def fetch(self) -> FetchResult:
        """Fetch + normalize with per-call timeout; never raises for upstream failures."""
        now = self._clock()
        cached = self._read_cache()
        if cached is not None and self.cache_ttl_sec > 0 and now - cached.fetched_at < self.cache_ttl_sec * 1000:
            return FetchResult(provider_id=self._id, batch=cached, cached=True)

        self._stats.total_calls += 1
        started = time.monotonic()
        try:
            payload = await asyncio.wait_for(self.fetch_payload(), timeout=self.timeout_sec)
            batch = self.normalize(payload)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            elapsed_ms = (time.monotonic() - started) * 1000
            error = str(e) or type(e).__name__
            self._stats.failed_calls += 1
            self._stats.last_error = error
            log.warning(
                "provider_fetch_failed",
                provider=self._id,
                error=error,
                error_type=type(e).__name__,
                elapsed_ms=round(elapsed_ms, 1),
            )
            if cached is not None and now - cached.fetched_at <= self.stale_after_sec * 1000:
                log.info("provider_serving_stale", provider=self._id, age_ms=now - cached.fetched_at)
                return FetchResult(
                    provider_id=self._id, batch=cached, ok=False, stale=True, error=error, elapsed_ms=elapsed_ms
                )
            return FetchResult(provider_id=self._id, batch=self._empty(), ok=False, error=error, elapsed_ms=elapsed_ms)

        elapsed_ms = (time.monotonic() - started) * 1000
        s = self._stats
        s.successful_calls += 1
        s.last_success_at = self._clock()
        s.last_error = None
        s.average_response_ms = (s.average_response_ms * (s.successful_calls - 1) + elapsed_ms) / s.successful_calls
        self._write_cache(batch)
        log.info(
            "provider_fetched",
            provider=self._id,
            events=len(batch.events),
            quotes=len(batch.quotes),
            rejected=batch.rejected,
            elapsed_ms=round(elapsed_ms, 1),
        )
        return FetchResult(provider_id=self._id, batch=batch, elapsed_ms=elapsed_ms)

    async def fetch_odds(self) -> list[OddsQuote]:
        """Quotes from the latest fetch (or its fallback)."""
        result = await self.fetch()
        return list(result.batch.quotes)


class HttpProviderAdapter(ProviderAdapter):
    """Adapter over a JSON HTTP endpoint using httpx.AsyncClient."""

    def __init__(
        self,
        provider_id: str,
        name: str | None = None,
        weight: float = 50.0,
        enabled: bool = True,
        *,
        base_url: str,
        api_key: str | None = None,
        params: dict[str, Any] | None = None,
        client: httpx.AsyncClient | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(provider_id, name, weight, enabled, **kwargs)
        self.base_url = base_url
        self.api_key = api_key
        self.params = dict(params or {})
        self._client = client
        self._owns_client = client is None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout_sec)
        return self._client

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.api_key:
            ts = str(self._clock())
            headers["Authorization"] = f"Bearer {self.api_key}"
            headers["X-Timestamp"] = ts
            headers["X-Signature"] = hashlib.sha256(f"{self.api_key}:{ts}".encode()).hexdigest()
        return headers

    async def _get_json(self) -> Any:
        try:
            resp = await self.client.get(self.base_url, params=self.params or None, headers=self._headers())
        except httpx.HTTPError as e:
            raise ProviderError(self._id, f"request failed: {e}") from e
        if resp.status_code != 200:
            raise ProviderError(self._id, f"unexpected status {resp.status_code}", status_code=resp.status_code)
        try:
            return resp.json()
        except ValueError as e:
            raise PayloadError(f"{self._id}: malformed JSON body") from e

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
