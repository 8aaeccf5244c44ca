"""Structured errors raised by the time resolver."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

__all__ = [
    "IllegalOffset",
    "InstantOutOfRange",
    "InvalidLocalTime",
    "TimeResolutionError",
    "UnknownTimeZone",
]


class TimeResolutionError(ValueError):
    """Base error for local-time and timezone resolution failures."""

    error_code = "time_resolution_error"

    def __init__(
        self,
        message: str,
        *,
        zone_id: str | None = None,
        context: Mapping[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.zone_id = zone_id
        self.context = dict(context or {})

    def as_dict(self) -> dict[str, Any]:
        """Return a JSON-serialisable description of the failure."""

        return {
            "error": self.error_code,
            "message": str(self),
            "zone_id": self.zone_id,
            "context": dict(self.context),
        }


class InvalidLocalTime(TimeResolutionError):
    """Raised when a wall-clock reading falls inside a DST gap."""

    error_code = "nonexistent_local_time"


class UnknownTimeZone(TimeResolutionError):
    """Raised when a zone identifier cannot be found in the tz database."""

    error_code = "unknown_time_zone"


class IllegalOffset(TimeResolutionError):
    """Raised when a zoned moment carries an offset its zone never observes."""

    error_code = "illegal_offset"


class InstantOutOfRange(TimeResolutionError):
    """Raised when a local reading maps outside the supported instant range."""

    error_code = "instant_out_of_range"
