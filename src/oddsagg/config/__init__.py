"""Configuration loading (TOML + profiles) and logging setup."""

from oddsagg.config.settings import ProviderSettings, Settings, configure_logging, get_settings, load_config

__all__ = ["ProviderSettings", "Settings", "configure_logging", "get_settings", "load_config"]
