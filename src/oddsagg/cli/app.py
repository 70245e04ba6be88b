"""Root CLI app - entry point and command registration."""

from pathlib import Path

import typer

from oddsagg.config import get_settings
from oddsagg.config.settings import configure_logging

app = typer.Typer(
    name="oddsagg",
    help="OddsAgg - multi-provider sports odds aggregation.",
    no_args_is_help=True,
)


@app.callback()
def main(
    ctx: typer.Context,
    config_dir: Path | None = typer.Option(
        None, "--config-dir", "-C", help="Config directory (default: ./config or package config)"
    ),
    profile: str | None = typer.Option(
        None, "--profile", "-p", help="Config profile (e.g. dev) to overlay on default.toml"
    ),
) -> None:
    """Configure logging and store options in context."""
    settings = get_settings(profile, config_dir)
    configure_logging(settings)
    ctx.obj = {"settings": settings, "config_dir": config_dir, "profile": profile}


# Subcommands registered from other modules
from oddsagg.cli import events, providers, refresh, serve  # noqa: E402

app.add_typer(serve.app, name="serve")
app.add_typer(refresh.app, name="refresh")
app.add_typer(providers.app, name="providers")
app.add_typer(events.app, name="events")


def run() -> None:
    app()


if __name__ == "__main__":
    run()
