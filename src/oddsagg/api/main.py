"""FastAPI app over the query facade and provider registry."""

from __future__ import annotations

from contextlib import asynccontextmanager
from pathlib import Path

import structlog
from fastapi import APIRouter, FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from oddsagg import __version__
from oddsagg.api.schemas import (
    ErrorResponse,
    HealthResponse,
    HistoryPoint,
    OddsHistoryResponse,
    PassSummaryResponse,
    StatusResponse,
    ToggleRequest,
    WeightRequest,
)
from oddsagg.config import get_settings
from oddsagg.models import Event, ProviderInfo, Sport
from oddsagg.service import OddsService, build_service

log = structlog.get_logger(__name__)

# Set by run_api() before uvicorn imports the app.
_config_profile: str | None = None
_config_dir: Path | None = None
_run_scheduler = True

router = APIRouter()


def _error_json(code: str, message: str, status_code: int = 404) -> JSONResponse:
    """Return consistent error JSON: { detail, code }."""
    return JSONResponse(
        status_code=status_code,
        content={"detail": message, "code": code},
    )


def _service(request: Request) -> OddsService:
    return request.app.state.service


@router.get("/health", response_model=HealthResponse)
def health(request: Request) -> HealthResponse:
    return HealthResponse(status="ok", snapshot_version=_service(request).holder.current.version)


@router.get("/sports", response_model=list[Sport])
def sports_list(request: Request) -> list[Sport]:
    return _service(request).query.get_sports()


@router.get("/events", response_model=list[Event])
def events_list(
    request: Request,
    sport_id: int | None = Query(None, ge=0),
    is_live: bool | None = Query(None),
) -> list[Event]:
    """Events from the current snapshot, live first then by start time."""
    return _service(request).query.get_events(sport_id=sport_id, is_live=is_live)


@router.get("/events/live", response_model=list[Event])
def events_live(request: Request, sport_id: int | None = Query(None, ge=0)) -> list[Event]:
    return _service(request).query.get_live_events(sport_id=sport_id)


@router.get(
    "/events/{event_id}",
    response_model=Event,
    responses={404: {"description": "Unknown event", "model": ErrorResponse}},
)
def event_detail(request: Request, event_id: str):
    """Event by canonical id or by any provider id merged into it. 404 if unknown."""
    event = _service(request).query.get_event_by_id(event_id)
    if event is None:
        return _error_json("not_found", f"Event not found: {event_id}")
    return event


@router.get(
    "/outcomes/{outcome_id}/history",
    response_model=OddsHistoryResponse,
    responses={404: {"description": "Unknown outcome", "model": ErrorResponse}},
)
def outcome_history(request: Request, outcome_id: str):
    service = _service(request)
    outcome = service.query.get_outcome(outcome_id)
    points = service.query.get_odds_history(outcome_id)
    if outcome is None and not points:
        return _error_json("not_found", f"Outcome not found: {outcome_id}")
    return OddsHistoryResponse(
        outcome_id=outcome_id,
        current_odds=outcome.odds if outcome else None,
        movement=service.history.movement(outcome_id),
        points=[HistoryPoint(**p) for p in points],
    )


@router.get("/status", response_model=StatusResponse)
def status(request: Request) -> StatusResponse:
    return StatusResponse(**_service(request).query.get_status())


@router.get("/providers", response_model=list[ProviderInfo])
def providers_list(request: Request) -> list[ProviderInfo]:
    return _service(request).registry.get_providers()


@router.post(
    "/providers/{provider_id}/toggle",
    response_model=ProviderInfo,
    responses={404: {"description": "Unknown provider", "model": ErrorResponse}},
)
def provider_toggle(request: Request, provider_id: str, body: ToggleRequest | None = None):
    registry = _service(request).registry
    if provider_id not in registry:
        return _error_json("not_found", f"Provider not found: {provider_id}")
    registry.toggle_provider(provider_id, body.enabled if body else None)
    return registry.get_provider(provider_id).info()


@router.post(
    "/providers/{provider_id}/weight",
    response_model=ProviderInfo,
    responses={
        404: {"description": "Unknown provider", "model": ErrorResponse},
        422: {"description": "Weight not a number", "model": ErrorResponse},
    },
)
def provider_weight(request: Request, provider_id: str, body: WeightRequest):
    registry = _service(request).registry
    if provider_id not in registry:
        return _error_json("not_found", f"Provider not found: {provider_id}")
    if not registry.update_provider_weight(provider_id, body.weight):
        return _error_json("invalid_weight", f"Invalid weight: {body.weight}", status_code=422)
    return registry.get_provider(provider_id).info()


@router.post(
    "/refresh",
    response_model=PassSummaryResponse,
    responses={409: {"description": "A pass is already running", "model": ErrorResponse}},
)
async def refresh(request: Request):
    """Run one aggregation pass now and return its summary."""
    summary = await _service(request).scheduler.refresh_odds()
    if summary is None:
        return _error_json("refresh_in_progress", "A refresh pass is already running", status_code=409)
    return PassSummaryResponse(**summary.to_dict())


def create_app(service: OddsService | None = None, run_scheduler: bool | None = None) -> FastAPI:
    """App factory. Without an injected service the lifespan builds one from settings."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        svc = service
        if svc is None:
            settings = get_settings(_config_profile, _config_dir)
            svc = build_service(settings)
        app.state.service = svc
        start = _run_scheduler if run_scheduler is None else run_scheduler
        if start:
            svc.start()
        log.info("api_started", scheduler=start, providers=len(svc.registry))
        yield
        await svc.close()
        log.info("api_stopped")

    app = FastAPI(title="OddsAgg API", version=__version__, lifespan=lifespan)
    app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])
    app.include_router(router)
    return app


app = create_app()


def run_api(
    host: str = "127.0.0.1",
    port: int = 8000,
    with_scheduler: bool = True,
    profile: str | None = None,
    config_dir: Path | None = None,
) -> None:
    global _run_scheduler, _config_profile, _config_dir
    _run_scheduler = with_scheduler
    _config_profile = profile
    _config_dir = config_dir
    import uvicorn
    uvicorn.run("oddsagg.api.main:app", host=host, port=port, reload=False)
