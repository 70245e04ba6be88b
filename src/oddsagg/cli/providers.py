"""Providers subcommand: list configured adapters."""

from __future__ import annotations

import typer

from oddsagg.providers.factory import build_adapters
from oddsagg.providers.registry import ProviderRegistry

app = typer.Typer(help="Configured odds providers")


@app.command("list")
def list_providers(ctx: typer.Context) -> None:
    """List providers from config with weight and enabled state."""
    settings = ctx.obj["settings"]
    registry = ProviderRegistry(build_adapters(settings.providers))
    infos = registry.get_providers()
    for p in infos:
        state = "on " if p.enabled else "off"
        typer.echo(f"  [{state}] {p.id:<12} {p.weight:>5.1f}  {p.name}")
    typer.echo(f"Total: {len(infos)} providers ({len(registry.enabled_adapters())} enabled)")
