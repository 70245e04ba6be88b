"""Static fallback provider - a local event catalog behind the adapter contract.

Whether it contributes is purely a registry decision (enabled flag, weight).
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import structlog

from oddsagg.errors import PayloadError
from oddsagg.providers.base import ProviderAdapter
from oddsagg.pipeline.payloads import StaticPayload

log = structlog.get_logger(__name__)


class StaticFallbackProvider(ProviderAdapter):
    kind = "static"

    def __init__(
        self,
        provider_id: str = "static",
        name: str | None = "Static Fallback",
        weight: float = 10.0,
        enabled: bool = True,
        *,
        events: list[dict[str, Any]] | None = None,
        path: str | Path | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(provider_id, name, weight, enabled, **kwargs)
        self.path = Path(path) if path else None
        self._events = list(events) if events is not None else None

    def _load(self) -> list[dict[str, Any]]:
        if self._events is not None:
            return self._events
        if self.path is None or not self.path.exists():
            log.warning("static_catalog_missing", provider=self.get_id(), path=str(self.path))
            self._events = []
            return self._events
        with open(self.path, encoding="utf-8") as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise PayloadError(f"{self.get_id()}: invalid catalog JSON in {self.path}") from e
        if isinstance(data, dict):
            data = data.get("events", [])
        if not isinstance(data, list):
            raise PayloadError(f"{self.get_id()}: catalog must be a list of events")
        self._events = data
        log.info("static_catalog_loaded", provider=self.get_id(), events=len(data))
        return self._events

    async def fetch_payload(self) -> StaticPayload:
        return StaticPayload(provider_id=self.get_id(), fetched_at=self._clock(), events=self._load())
