"""TOML config loading and profiles."""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path
from typing import Any

# Default config search path (project root or cwd)
_CONFIG_DIR = Path(__file__).resolve().parent.parent.parent.parent / "config"
_CWD_CONFIG = Path.cwd() / "config"


def _load_toml(path: Path) -> dict[str, Any]:
    with open(path, "rb") as f:
        return tomllib.load(f)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge override into base. Override values take precedence."""
    result = dict(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _find_config_dir(config_dir: Path | None = None) -> Path:
    if config_dir is not None:
        return config_dir
    if _CWD_CONFIG.exists():
        return _CWD_CONFIG
    return _CONFIG_DIR


def load_config(profile: str | None = None, config_dir: Path | None = None) -> dict[str, Any]:
    """Load merged config from default.toml and optional profile overlay."""
    config_dir = _find_config_dir(config_dir)
    default_path = config_dir / "default.toml"
    if not default_path.exists():
        return {}
    base = _load_toml(default_path)
    if profile:
        profile_path = config_dir / f"{profile}.toml"
        if profile_path.exists():
            overlay = _load_toml(profile_path)
            base = _deep_merge(base, overlay)
    return base


def get_settings(profile: str | None = None, config_dir: Path | None = None) -> Settings:
    """Return Settings instance from merged config."""
    raw = load_config(profile, config_dir)
    return Settings.from_dict(raw)


class ProviderSettings:
    """One [[providers]] table from config."""

    def __init__(self, raw: dict[str, Any]):
        self.raw = dict(raw)

    @property
    def id(self) -> str:
        return str(self.raw.get("id", "")).strip()

    @property
    def kind(self) -> str:
        return str(self.raw.get("kind") or self.id).strip().lower()

    @property
    def name(self) -> str:
        return str(self.raw.get("name") or self.id)

    @property
    def weight(self) -> float:
        return float(self.raw.get("weight", 50))

    @property
    def enabled(self) -> bool:
        return bool(self.raw.get("enabled", True))

    @property
    def base_url(self) -> str:
        return str(self.raw.get("base_url", ""))

    @property
    def api_key(self) -> str | None:
        # Env wins so keys stay out of checked-in TOML
        env_key = os.environ.get(f"ODDSAGG_{self.id.upper()}_API_KEY")
        return env_key or self.raw.get("api_key") or None

    @property
    def timeout_sec(self) -> float:
        return float(self.raw.get("timeout_sec", 10.0))

    @property
    def cache_ttl_sec(self) -> float:
        return float(self.raw.get("cache_ttl_sec", 10.0))

    @property
    def stale_after_sec(self) -> float:
        return float(self.raw.get("stale_after_sec", 300.0))

    @property
    def path(self) -> str | None:
        return self.raw.get("path")


class Settings:
    """Application settings from TOML config."""

    def __init__(
        self,
        *,
        scheduler: dict[str, Any] | None = None,
        storage: dict[str, Any] | None = None,
        providers: list[dict[str, Any]] | None = None,
        logging: dict[str, Any] | None = None,
    ):
        self.scheduler = scheduler or {}
        self.storage = storage or {}
        self.providers_raw = providers or []
        self.logging = logging or {}

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Settings:
        return cls(
            scheduler=raw.get("scheduler"),
            storage=raw.get("storage"),
            providers=raw.get("providers"),
            logging=raw.get("logging"),
        )

    # Convenience accessors with defaults
    @property
    def refresh_interval_sec(self) -> float:
        return float(self.scheduler.get("interval_sec", 15))

    @property
    def event_retention_sec(self) -> float:
        return float(self.scheduler.get("event_retention_sec", 3600))

    @property
    def match_time_tolerance_sec(self) -> float:
        return float(self.scheduler.get("match_time_tolerance_sec", 300))

    @property
    def history_size(self) -> int:
        return int(self.scheduler.get("history_size", 50))

    @property
    def storage_backend(self) -> str:
        return str(self.storage.get("backend", "memory")).lower()

    @property
    def db_path(self) -> str:
        return self.storage.get("db_path", "data/oddsagg.duckdb")

    @property
    def providers(self) -> list[ProviderSettings]:
        return [ProviderSettings(p) for p in self.providers_raw if isinstance(p, dict)]

    @property
    def logging_level(self) -> str:
        return self.logging.get("level", "INFO").upper()

    @property
    def logging_format(self) -> str:
        return self.logging.get("format", "console")

    @property
    def logging_level_num(self) -> int:
        return getattr(logging, self.logging_level, logging.INFO)


def configure_logging(settings: Settings) -> None:
    """Configure structlog with settings. Call once at application entry."""
    import structlog

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]
    if settings.logging_format == "json":
        processors.append(structlog.processors.format_exc_info)
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(settings.logging_level_num),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
