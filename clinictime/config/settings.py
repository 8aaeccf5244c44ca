"""Configuration models and helpers for clinictime settings."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Literal, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from ..tz.models import PREFER_EARLIER_OFFSET, AmbiguityPolicy
from ..tz.resolver import resolve_zone

CURRENT_SETTINGS_SCHEMA_VERSION = 1

# -------------------- Settings Schema --------------------


class ResolverCfg(BaseModel):
    """Policy applied when a local reading repeats after a fall-back transition."""

    ambiguity_policy: AmbiguityPolicy = PREFER_EARLIER_OFFSET


class ClinicCfg(BaseModel):
    """Clinic defaults used when a request omits them."""

    timezone: str = "America/New_York"
    slot_minutes: int = 30

    @field_validator("timezone", mode="before")
    @classmethod
    def _check_timezone(cls, value: object) -> str:
        zone_id = str(value).strip()
        resolve_zone(zone_id)
        return zone_id

    @field_validator("slot_minutes", mode="before")
    @classmethod
    def _cap_slot_minutes(cls, value: int) -> int:
        numeric = int(value)
        return max(5, min(480, numeric))


class LoggingCfg(BaseModel):
    """Default log level for entry points (``LOG_LEVEL`` still wins)."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"

    @field_validator("level", mode="before")
    @classmethod
    def _upper_level(cls, value: object) -> object:
        return value.strip().upper() if isinstance(value, str) else value


class Settings(BaseModel):
    """Top-level clinictime settings document."""

    schema_version: int = CURRENT_SETTINGS_SCHEMA_VERSION
    resolver: ResolverCfg = Field(default_factory=ResolverCfg)
    clinic: ClinicCfg = Field(default_factory=ClinicCfg)
    logging: LoggingCfg = Field(default_factory=LoggingCfg)


# -------------------- Persistence --------------------

CONFIG_FILENAME = "config.yaml"


class SettingsFileError(ValueError):
    """Raised when a settings file exists but cannot be loaded."""

    def __init__(self, path: Path, message: str) -> None:
        super().__init__(f"{path}: {message}")
        self.path = path


def get_config_home() -> Path:
    """Return the directory holding ``config.yaml``.

    ``CLINICTIME_HOME`` wins on POSIX; Windows uses ``%LOCALAPPDATA%``.
    """

    if os.name == "nt":
        base = Path(
            os.environ.get(
                "LOCALAPPDATA", str(Path.home() / "AppData" / "Local")
            )
        )
        return base / "clinictime"
    return Path(os.environ.get("CLINICTIME_HOME", str(Path.home() / ".clinictime")))


def config_path() -> Path:
    """Return the settings file path, creating its directory if needed."""

    home = get_config_home()
    home.mkdir(parents=True, exist_ok=True)
    return home / CONFIG_FILENAME


def default_settings() -> Settings:
    return Settings()


def save_settings(settings: Settings, path: Optional[Path] = None) -> Path:
    """Write ``settings`` as YAML and return the path written."""

    target_path = Path(path) if path else config_path()
    target_path.parent.mkdir(parents=True, exist_ok=True)
    data = settings.model_dump()
    with target_path.open("w", encoding="utf-8") as handle:
        yaml.safe_dump(data, handle, sort_keys=False, allow_unicode=True)
    return target_path


def _check_schema_version(path: Path, raw: object) -> None:
    if raw is None:
        return
    if isinstance(raw, bool) or not isinstance(raw, int):
        raise SettingsFileError(
            path, f"schema_version must be an integer, got {raw!r}"
        )
    if not 1 <= raw <= CURRENT_SETTINGS_SCHEMA_VERSION:
        raise SettingsFileError(
            path,
            f"schema_version {raw} is not supported by this release "
            f"(expected 1..{CURRENT_SETTINGS_SCHEMA_VERSION})",
        )


def load_settings(path: Optional[Path] = None) -> Settings:
    """Load settings from ``path`` (default :func:`config_path`).

    A missing file is created with defaults. An existing file is never
    rewritten here; one that is not valid YAML, is not a mapping, declares an
    unsupported ``schema_version`` or fails validation raises
    :class:`SettingsFileError` naming the file.
    """

    source_path = Path(path) if path else config_path()
    if not source_path.exists():
        settings = default_settings()
        save_settings(settings, source_path)
        return settings
    try:
        with source_path.open("r", encoding="utf-8") as handle:
            raw = yaml.safe_load(handle)
    except yaml.YAMLError as exc:
        raise SettingsFileError(source_path, f"invalid YAML: {exc}") from exc
    if raw is None:
        return default_settings()
    if not isinstance(raw, dict):
        raise SettingsFileError(
            source_path, f"expected a mapping at the top level, got {type(raw).__name__}"
        )
    _check_schema_version(source_path, raw.get("schema_version"))
    try:
        return Settings.model_validate(raw)
    except ValidationError as exc:
        raise SettingsFileError(source_path, str(exc)) from exc
