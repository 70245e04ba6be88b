"""Wurlus Protocol odds API - nested events/markets/outcomes."""

from __future__ import annotations

from oddsagg.errors import PayloadError
from oddsagg.providers.base import HttpProviderAdapter
from oddsagg.pipeline.payloads import WurlusPayload

WURLUS_ODDS_URL = "https://api.wurlus.com/v1/odds"


class WurlusAdapter(HttpProviderAdapter):
    kind = "wurlus"

    async def fetch_payload(self) -> WurlusPayload:
        data = await self._get_json()
        events = data.get("events") if isinstance(data, dict) else None
        if not isinstance(events, list):
            raise PayloadError(f"{self.get_id()}: expected 'events' list")
        return WurlusPayload(provider_id=self.get_id(), fetched_at=self._clock(), events=events)
