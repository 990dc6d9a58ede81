"""Configuration package for runtime settings and startup validation."""

from .settings import (
    DEFAULT_RINGCENTRAL_SERVER_URL,
    AppSettings,
    SettingsLoadError,
    config_load_database_url,
    config_load_settings,
)

__all__ = [
    "AppSettings",
    "DEFAULT_RINGCENTRAL_SERVER_URL",
    "SettingsLoadError",
    "config_load_settings",
    "config_load_database_url",
]
