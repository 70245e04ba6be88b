"""Wal.app odds API - flat rows, one per (event, market, outcome)."""

from __future__ import annotations

from oddsagg.errors import PayloadError
from oddsagg.providers.base import HttpProviderAdapter
from oddsagg.pipeline.payloads import WalAppPayload

WALAPP_ODDS_URL = "https://api.wal.app/v1/odds"


class WalAppAdapter(HttpProviderAdapter):
    kind = "walapp"

    async def fetch_payload(self) -> WalAppPayload:
        data = await self._get_json()
        # Some deployments return the bare list instead of {"data": [...]}
        rows = data.get("data") if isinstance(data, dict) else data
        if not isinstance(rows, list):
            raise PayloadError(f"{self.get_id()}: expected 'data' list")
        return WalAppPayload(provider_id=self.get_id(), fetched_at=self._clock(), data=rows)
