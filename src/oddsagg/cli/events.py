"""Events subcommand: run a pass and list the aggregated events."""

from __future__ import annotations

import asyncio

import typer

from oddsagg.models import Event
from oddsagg.service import build_service

app = typer.Typer(help="Aggregated events")


async def _fetch_events(settings, sport_id: int | None, live: bool | None) -> list[Event]:
    service = build_service(settings)
    try:
        await service.scheduler.refresh_odds()
        return service.query.get_events(sport_id=sport_id, is_live=live)
    finally:
        await service.close()


def _odds_line(event: Event) -> str:
    for market in event.markets:
        priced = [o for o in market.outcomes if o.odds is not None]
        if priced:
            return f"{market.name}: " + "  ".join(f"{o.name} {o.odds:.2f}" for o in priced)
    return "no odds"


@app.command("list")
def list_events(
    ctx: typer.Context,
    sport_id: int | None = typer.Option(None, "--sport", "-s", help="Filter by sport id"),
    live: bool | None = typer.Option(None, "--live/--upcoming", help="Only live or only non-live events"),
    limit: int = typer.Option(50, "--limit", "-n", help="Max events to show"),
) -> None:
    """Fetch from all enabled providers once and print events, live first."""
    settings = ctx.obj["settings"]
    events = asyncio.run(_fetch_events(settings, sport_id, live))
    for e in events[:limit]:
        flag = "LIVE" if e.is_live else e.start_time.strftime("%m-%d %H:%M")
        typer.echo(f"  {flag:<11} {e.id[:28]:<28} {e.name[:40]:<40} {_odds_line(e)}")
    typer.echo(f"Total: {len(events)} events")
