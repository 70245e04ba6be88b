"""Refresh command: run one aggregation pass and print its summary."""

from __future__ import annotations

import asyncio
import json

import typer

from oddsagg.scheduler import PassSummary
from oddsagg.service import build_service

app = typer.Typer(help="Run one aggregation pass against the configured providers")


async def _run_once(settings) -> tuple[PassSummary | None, dict]:
    service = build_service(settings)
    try:
        summary = await service.scheduler.refresh_odds()
        return summary, service.query.get_status()
    finally:
        await service.close()


@app.callback(invoke_without_command=True)
def refresh(
    ctx: typer.Context,
    as_json: bool = typer.Option(False, "--json", help="Print the summary as JSON"),
) -> None:
    if ctx.invoked_subcommand is not None:
        return
    settings = ctx.obj["settings"]
    summary, status = asyncio.run(_run_once(settings))
    if summary is None:
        typer.echo("Refresh skipped.")
        raise typer.Exit(1)
    if as_json:
        typer.echo(json.dumps(summary.to_dict(), indent=2))
    else:
        typer.echo(f"Status: {summary.status}")
        typer.echo(f"Providers: {summary.providers_total} ({summary.providers_failed} failed)")
        if summary.failed_providers:
            typer.echo(f"Failed: {', '.join(summary.failed_providers)}")
        typer.echo(f"Quotes: {summary.quotes}  Events: {summary.events}  Rejected: {summary.rejected}")
        typer.echo(f"Canonical events: {status['events']}  Outcomes: {status['outcomes']}")
        typer.echo(f"Duration: {summary.duration_ms:.0f} ms")
    if summary.status == "failed":
        raise typer.Exit(1)
