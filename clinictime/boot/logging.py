"""Root logger setup for the ``clinictime`` command line.

The level comes from ``--log-level`` first, then ``$LOG_LEVEL``, then
``logging.level`` in ``config.yaml``.
"""

from __future__ import annotations

import logging
import os
from typing import Any

__all__ = ["LOG_LEVEL_ENV", "coerce_level", "configure_logging", "pick_level"]

LOG_LEVEL_ENV = "LOG_LEVEL"

_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
_DATEFMT = "%Y-%m-%d %H:%M:%S"


def coerce_level(value: str | int | None, fallback: int = logging.INFO) -> int:
    """Turn a level name or number into an ``int``; unknown names give ``fallback``."""

    if value is None or isinstance(value, int):
        return fallback if value is None else value
    candidate = value.strip()
    if candidate.isdigit():
        return int(candidate)
    resolved = logging.getLevelName(candidate.upper()) if candidate else None
    return resolved if isinstance(resolved, int) else fallback


def pick_level(flag: str | int | None, configured: str | int | None) -> int:
    configured_level = coerce_level(configured)
    for candidate in (flag, os.environ.get(LOG_LEVEL_ENV)):
        if candidate is not None and candidate != "":
            return coerce_level(candidate, fallback=configured_level)
    return configured_level


def configure_logging(
    *,
    level: str | int | None = None,
    default: str | int | None = None,
    **kwargs: Any,
) -> int:
    """Install the clinictime log format on the root logger.

    ``level`` is the ``--log-level`` flag and ``default`` the configured
    ``settings.logging.level``. Other keyword arguments reach
    :func:`logging.basicConfig`. Returns the level applied.
    """

    effective_level = pick_level(level, default)
    kwargs.setdefault("format", _FORMAT)
    kwargs.setdefault("datefmt", _DATEFMT)
    kwargs.setdefault("force", True)
    logging.basicConfig(level=effective_level, **kwargs)
    return effective_level
