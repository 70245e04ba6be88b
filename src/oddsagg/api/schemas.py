"""Pydantic schemas for API request/response consistency and OpenAPI docs."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


# --- Health ---
class HealthResponse(BaseModel):
    status: str = "ok"
    snapshot_version: int = 0


# --- Error (consistent shape for 4xx/5xx) ---
class ErrorResponse(BaseModel):
    detail: str = Field(..., description="Human-readable message")
    code: str | None = Field(None, description="Machine-readable code, e.g. not_found, refresh_in_progress")


# --- Providers ---
class ToggleRequest(BaseModel):
    enabled: bool | None = Field(None, description="Target state; omitted flips the current state")


class WeightRequest(BaseModel):
    weight: float = Field(..., description="New weight; clamped to [0, 100]")


# --- History ---
class HistoryPoint(BaseModel):
    timestamp: int
    odds: float


class OddsHistoryResponse(BaseModel):
    outcome_id: str
    current_odds: float | None = None
    movement: str | None = Field(None, description="'up', 'down' or null comparing the last two points")
    points: list[HistoryPoint]


# --- Refresh ---
class PassSummaryResponse(BaseModel):
    status: str
    started_at: int
    finished_at: int
    providers_total: int
    providers_failed: int
    providers_stale: int
    failed_providers: list[str]
    quotes: int
    events: int
    rejected: int
    snapshot_version: int
    duration_ms: float


class StatusResponse(BaseModel):
    snapshot_version: int
    snapshot_created_at: int | None = None
    events: int
    live_events: int
    outcomes: int
    providers_total: int | None = None
    providers_enabled: int | None = None
    scheduler: dict[str, Any] | None = None
