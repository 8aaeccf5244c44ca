import logging

import pytest

from clinictime.boot.logging import coerce_level, configure_logging, pick_level


@pytest.mark.parametrize(
    "value,expected",
    [
        (None, logging.INFO),
        ("", logging.INFO),
        ("debug", logging.DEBUG),
        (" Warning ", logging.WARNING),
        ("15", 15),
        (logging.ERROR, logging.ERROR),
        ("chatty", logging.INFO),
    ],
)
def test_coerce_level(value, expected):
    assert coerce_level(value) == expected


def test_configure_logging_precedence(monkeypatch):
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    assert configure_logging(default="WARNING") == logging.WARNING
    assert logging.getLogger().level == logging.WARNING

    monkeypatch.setenv("LOG_LEVEL", "DEBUG")
    assert configure_logging(default="WARNING") == logging.DEBUG

    assert configure_logging(level="ERROR", default="WARNING") == logging.ERROR


def test_unusable_overrides_defer_to_configured_level(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "")
    assert pick_level(None, "ERROR") == logging.ERROR
    assert pick_level("chatty", "ERROR") == logging.ERROR

    monkeypatch.setenv("LOG_LEVEL", "shouty")
    assert pick_level(None, "warning") == logging.WARNING
    assert pick_level(None, None) == logging.INFO


def test_configure_logging_forwards_basic_config_options(monkeypatch):
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    configure_logging(default="INFO", format="%(levelname)s|%(message)s")
    handler = logging.getLogger().handlers[-1]
    assert handler.formatter._fmt == "%(levelname)s|%(message)s"
