"""Tests for settings persistence and validation."""

from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from clinictime.config import (
    CURRENT_SETTINGS_SCHEMA_VERSION,
    Settings,
    SettingsFileError,
    config_path,
    default_settings,
    load_settings,
    save_settings,
)
from clinictime.tz import PREFER_LATER_OFFSET, TimeResolver


def test_load_creates_defaults(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CLINICTIME_HOME", str(tmp_path))
    settings = load_settings()
    assert settings == default_settings()
    assert (tmp_path / "config.yaml").exists()
    assert config_path() == tmp_path / "config.yaml"


def test_round_trip_through_yaml(tmp_path: Path) -> None:
    target = tmp_path / "custom.yaml"
    settings = Settings(
        resolver={"ambiguity_policy": PREFER_LATER_OFFSET},
        clinic={"timezone": "Asia/Kathmandu", "slot_minutes": 45},
    )
    save_settings(settings, target)
    loaded = load_settings(target)
    assert loaded == settings
    assert TimeResolver.from_settings(loaded).default_policy == PREFER_LATER_OFFSET


def test_missing_schema_version_loads_without_rewriting(tmp_path: Path) -> None:
    target = tmp_path / "config.yaml"
    text = yaml.safe_dump({"clinic": {"timezone": "Europe/London"}})
    target.write_text(text)
    loaded = load_settings(target)
    assert loaded.schema_version == CURRENT_SETTINGS_SCHEMA_VERSION
    assert loaded.clinic.timezone == "Europe/London"
    assert target.read_text() == text


@pytest.mark.parametrize("version", [CURRENT_SETTINGS_SCHEMA_VERSION + 4, 0, "two"])
def test_unsupported_schema_version_is_refused(tmp_path: Path, version: object) -> None:
    target = tmp_path / "config.yaml"
    text = yaml.safe_dump(
        {"schema_version": version, "clinic": {"timezone": "Asia/Kathmandu"}}
    )
    target.write_text(text)
    with pytest.raises(SettingsFileError) as excinfo:
        load_settings(target)
    assert excinfo.value.path == target
    assert str(target) in str(excinfo.value)
    assert "schema_version" in str(excinfo.value)
    assert target.read_text() == text


def test_empty_file_gives_defaults(tmp_path: Path) -> None:
    target = tmp_path / "config.yaml"
    target.write_text("")
    assert load_settings(target) == default_settings()
    assert target.read_text() == ""


@pytest.mark.parametrize(
    "text",
    [
        "- just\n- a list\n",
        "clinic: {timezone: [unclosed\n",
        "clinic:\n  timezone: Nope/Nada\n",
        "resolver:\n  ambiguity_policy: closest\n",
    ],
)
def test_broken_file_raises_settings_error(tmp_path: Path, text: str) -> None:
    target = tmp_path / "config.yaml"
    target.write_text(text)
    with pytest.raises(SettingsFileError) as excinfo:
        load_settings(target)
    assert str(target) in str(excinfo.value)
    assert target.read_text() == text



def test_unknown_timezone_is_rejected() -> None:
    with pytest.raises(ValidationError):
        Settings(clinic={"timezone": "Moon/Tranquility"})


def test_unknown_policy_is_rejected() -> None:
    with pytest.raises(ValidationError):
        Settings(resolver={"ambiguity_policy": "closest"})


@pytest.mark.parametrize("raw,expected", [(1, 5), (30, 30), (10_000, 480)])
def test_slot_minutes_are_clamped(raw: int, expected: int) -> None:
    assert Settings(clinic={"slot_minutes": raw}).clinic.slot_minutes == expected


def test_logging_level_is_normalised() -> None:
    assert Settings(logging={"level": " debug "}).logging.level == "DEBUG"
