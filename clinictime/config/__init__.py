"""Configuration helpers exposed at :mod:`clinictime.config`."""

from __future__ import annotations

from .settings import (
    CURRENT_SETTINGS_SCHEMA_VERSION,
    ClinicCfg,
    LoggingCfg,
    ResolverCfg,
    Settings,
    SettingsFileError,
    config_path,
    default_settings,
    get_config_home,
    load_settings,
    save_settings,
)

__all__ = [
    "CURRENT_SETTINGS_SCHEMA_VERSION",
    "Settings",
    "SettingsFileError",
    "ClinicCfg",
    "LoggingCfg",
    "ResolverCfg",
    "config_path",
    "get_config_home",
    "default_settings",
    "load_settings",
    "save_settings",
]
