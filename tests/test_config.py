"""TOML config loading, profile overlay, provider settings."""

from oddsagg.config import Settings, get_settings, load_config

DEFAULT = """
[scheduler]
interval_sec = 20

[storage]
backend = "memory"

[[providers]]
id = "wurlus"
kind = "wurlus"
weight = 60
api_key = "from-file"
"""

DEV = """
[scheduler]
history_size = 5

[storage]
backend = "duckdb"
db_path = ":memory:"
"""


def test_defaults_without_config(tmp_path):
    assert load_config(config_dir=tmp_path) == {}
    settings = get_settings(config_dir=tmp_path)
    assert settings.refresh_interval_sec == 15
    assert settings.event_retention_sec == 3600
    assert settings.match_time_tolerance_sec == 300
    assert settings.history_size == 50
    assert settings.storage_backend == "memory"
    assert settings.providers == []
    assert settings.logging_level == "INFO"


def test_profile_overlay_deep_merges(tmp_path):
    (tmp_path / "default.toml").write_text(DEFAULT)
    (tmp_path / "dev.toml").write_text(DEV)
    settings = get_settings("dev", tmp_path)
    assert settings.refresh_interval_sec == 20
    assert settings.history_size == 5
    assert settings.storage_backend == "duckdb"
    assert settings.db_path == ":memory:"
    [provider] = settings.providers
    assert provider.id == "wurlus" and provider.weight == 60
    assert provider.timeout_sec == 10
    assert get_settings("missing", tmp_path).storage_backend == "memory"


def test_api_key_env_wins(tmp_path, monkeypatch):
    (tmp_path / "default.toml").write_text(DEFAULT)
    provider = get_settings(config_dir=tmp_path).providers[0]
    monkeypatch.delenv("ODDSAGG_WURLUS_API_KEY", raising=False)
    assert provider.api_key == "from-file"
    monkeypatch.setenv("ODDSAGG_WURLUS_API_KEY", "from-env")
    assert provider.api_key == "from-env"


def test_provider_defaults():
    settings = Settings(providers=[{"id": "walapp"}, "not-a-table"])
    [provider] = settings.providers
    assert provider.kind == "walapp"
    assert provider.name == "walapp"
    assert provider.enabled is True
    assert provider.weight == 50
    assert provider.path is None
