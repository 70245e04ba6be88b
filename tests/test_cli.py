"""CLI commands against a temp config with the static provider."""

import json

from typer.testing import CliRunner

from oddsagg.cli.app import app

from fakes import raw_event

runner = CliRunner()


def _config_dir(tmp_path):
    catalog = tmp_path / "events.json"
    catalog.write_text(json.dumps({"events": [raw_event("s1")]}))
    (tmp_path / "default.toml").write_text(
        f"""
[logging]
level = "WARNING"

[[providers]]
id = "static"
kind = "static"
weight = 10
path = "{catalog.as_posix()}"

[[providers]]
id = "wurlus"
kind = "wurlus"
enabled = false
"""
    )
    return tmp_path


def test_providers_list(tmp_path):
    result = runner.invoke(app, ["--config-dir", str(_config_dir(tmp_path)), "providers", "list"])
    assert result.exit_code == 0
    assert "static" in result.output
    assert "Total: 2 providers (1 enabled)" in result.output


def test_refresh_json(tmp_path):
    result = runner.invoke(app, ["--config-dir", str(_config_dir(tmp_path)), "refresh", "--json"])
    assert result.exit_code == 0
    summary = json.loads(result.output[result.output.index("{"):])
    assert summary["status"] == "ok"
    assert summary["quotes"] == 3


def test_events_list(tmp_path):
    result = runner.invoke(app, ["--config-dir", str(_config_dir(tmp_path)), "events", "list"])
    assert result.exit_code == 0
    assert "static:s1" in result.output
    assert "Total: 1 events" in result.output
