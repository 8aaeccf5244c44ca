"""Boundary parsing of request payload values into resolver types."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any

from pydantic import PlainValidator, TypeAdapter, ValidationError

from .models import Instant, LocalMoment
from .resolver import resolve_zone

_DATETIME_ADAPTER = TypeAdapter(datetime)


def _parse_datetime(value: Any) -> datetime:
    try:
        return _DATETIME_ADAPTER.validate_python(value)
    except ValidationError as exc:
        raise ValueError(f"Invalid ISO-8601 datetime: {value!r}") from exc


def parse_instant(value: Any) -> Instant:
    """Parse *value* into an :class:`Instant`.

    Accepts an existing instant, an integer count of epoch milliseconds, an
    aware ``datetime`` or an RFC3339 string. Naive datetimes and strings
    without an offset are rejected because they do not name an instant.
    """

    if isinstance(value, Instant):
        return value
    if isinstance(value, int) and not isinstance(value, bool):
        return Instant(value)
    if isinstance(value, str) and value.strip().lstrip("-").isdigit():
        return Instant(int(value.strip()))

    dt = _parse_datetime(value)
    if dt.tzinfo is None or dt.tzinfo.utcoffset(dt) is None:
        raise ValueError("Datetime must include timezone information")
    return Instant.from_datetime(dt)


def parse_local_moment(value: Any) -> LocalMoment:
    """Parse *value* into a :class:`LocalMoment`.

    Values carrying an offset are refused: a wall-clock reading only gains an
    offset by being resolved against a zone.
    """

    if isinstance(value, LocalMoment):
        return value
    dt = _parse_datetime(value)
    if dt.tzinfo is not None:
        raise ValueError("Local times must not include timezone information")
    return LocalMoment.from_datetime(dt)


def parse_zone_id(value: Any) -> str:
    """Return ``value`` stripped once it is known to resolve to a zone."""

    zone_id = value.strip() if isinstance(value, str) else value
    resolve_zone(zone_id)
    return zone_id


InstantField = Annotated[Instant, PlainValidator(parse_instant)]
LocalMomentField = Annotated[LocalMoment, PlainValidator(parse_local_moment)]
ZoneIdField = Annotated[str, PlainValidator(parse_zone_id)]


__all__ = [
    "InstantField",
    "LocalMomentField",
    "ZoneIdField",
    "parse_instant",
    "parse_local_moment",
    "parse_zone_id",
]
