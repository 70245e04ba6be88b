"""Serve command: API plus refresh scheduler in one process."""

import typer

from oddsagg.api.main import run_api

app = typer.Typer(help="Start the HTTP API with the refresh scheduler")


@app.callback(invoke_without_command=True)
def serve(
    ctx: typer.Context,
    host: str = typer.Option("127.0.0.1", "--host", help="Bind host"),
    port: int = typer.Option(8000, "--port", help="Bind port"),
    no_scheduler: bool = typer.Option(
        False, "--no-scheduler", help="Serve the (empty) snapshot without polling providers",
    ),
) -> None:
    if ctx.invoked_subcommand is not None:
        return
    run_api(
        host=host,
        port=port,
        with_scheduler=not no_scheduler,
        profile=ctx.obj["profile"],
        config_dir=ctx.obj["config_dir"],
    )
