"""Typer application for inspecting resolver and slot decisions."""

from __future__ import annotations

import json
import logging
from typing import List, NoReturn, Optional

import typer

from clinictime.boot import configure_logging
from clinictime.config import SettingsFileError, config_path, load_settings
from clinictime.errors import TimeResolutionError
from clinictime.slots import BookedInterval, SlotGuard
from clinictime.tz import Classification, Gap, Normal, TimeResolver, ZonedMoment
from clinictime.tz.models import format_offset
from clinictime.tz.parsing import parse_instant, parse_local_moment

LOG = logging.getLogger(__name__)

app = typer.Typer(help="Inspect DST-aware appointment time resolution.")

_ZONE_HELP = "IANA zone id (defaults to the configured clinic timezone)."
_POLICY_HELP = "Overlap policy: prefer_earlier or prefer_later."


@app.callback()
def main(
    log_level: Optional[str] = typer.Option(
        None, "--log-level", help="Logging level (overrides LOG_LEVEL)."
    ),
) -> None:
    try:
        settings = load_settings()
    except SettingsFileError as exc:
        _fail(
            {
                "error": "invalid_config",
                "message": str(exc),
                "config_path": str(exc.path),
            }
        )
    configure_logging(level=log_level, default=settings.logging.level)


def _emit(payload: object) -> None:
    typer.echo(json.dumps(payload, indent=2, sort_keys=True))


def _fail(payload: dict[str, object]) -> NoReturn:
    typer.echo(json.dumps(payload, sort_keys=True), err=True)
    raise typer.Exit(code=2)


def _zone_or_default(zone: Optional[str]) -> str:
    return zone if zone else load_settings().clinic.timezone


def _parse_local(value: str):
    try:
        return parse_local_moment(value)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc


def _parse_instant(value: str):
    try:
        return parse_instant(value)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc


def _classification_dict(classification: Classification) -> dict[str, object]:
    payload: dict[str, object] = {"classification": classification.kind}
    if isinstance(classification, Normal):
        payload["offsets"] = [format_offset(classification.offset)]
    elif isinstance(classification, Gap):
        payload["offset_before"] = format_offset(classification.offset_before)
        payload["offset_after"] = format_offset(classification.offset_after)
        payload["gap_seconds"] = classification.width.total_seconds()
    else:
        payload["offsets"] = [
            format_offset(classification.offset_earlier),
            format_offset(classification.offset_later),
        ]
    return payload


def _zoned_dict(zoned: ZonedMoment, resolver: TimeResolver) -> dict[str, object]:
    instant = zoned.instant
    return {
        "zone_id": zoned.zone_id,
        "local": zoned.local.isoformat(),
        "display": zoned.display(),
        "offset": format_offset(zoned.offset),
        "utc": instant.isoformat(),
        "epoch_ms": instant.epoch_ms,
        "dst_active": resolver.is_dst_active(instant, zoned.zone_id),
    }


def _resolver() -> TimeResolver:
    return TimeResolver.from_settings(load_settings())


@app.command("classify")
def classify_command(
    local: str = typer.Argument(..., help="Naive ISO-8601 local time."),
    zone: Optional[str] = typer.Option(None, "--zone", "-z", help=_ZONE_HELP),
) -> None:
    """Report whether LOCAL is normal, skipped (gap) or repeated (overlap)."""

    moment = _parse_local(local)
    zone_id = _zone_or_default(zone)
    try:
        classification = _resolver().classify(moment, zone_id)
    except TimeResolutionError as exc:
        _fail(exc.as_dict())
    payload = {"local": moment.isoformat(), "zone_id": zone_id}
    payload.update(_classification_dict(classification))
    _emit(payload)


@app.command("to-instant")
def to_instant_command(
    local: str = typer.Argument(..., help="Naive ISO-8601 local time."),
    zone: Optional[str] = typer.Option(None, "--zone", "-z", help=_ZONE_HELP),
    policy: Optional[str] = typer.Option(None, "--policy", "-p", help=_POLICY_HELP),
) -> None:
    """Resolve LOCAL to a UTC instant."""

    moment = _parse_local(local)
    zone_id = _zone_or_default(zone)
    try:
        resolution = _resolver().resolve(moment, zone_id, policy)  # type: ignore[arg-type]
    except TimeResolutionError as exc:
        _fail(exc.as_dict())
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--policy") from exc
    _emit(resolution.to_metadata())


@app.command("to-zoned")
def to_zoned_command(
    instant: str = typer.Argument(..., help="Epoch milliseconds or RFC3339 timestamp."),
    zone: Optional[str] = typer.Option(None, "--zone", "-z", help=_ZONE_HELP),
) -> None:
    """Show the wall-clock reading of INSTANT in a zone."""

    value = _parse_instant(instant)
    zone_id = _zone_or_default(zone)
    resolver = _resolver()
    try:
        zoned = resolver.to_zoned(value, zone_id)
    except TimeResolutionError as exc:
        _fail(exc.as_dict())
    _emit(_zoned_dict(zoned, resolver))


@app.command("convert")
def convert_command(
    local: str = typer.Argument(..., help="Naive ISO-8601 local time."),
    target: str = typer.Option(..., "--to", "-t", help="Zone to convert into."),
    zone: Optional[str] = typer.Option(None, "--zone", "-z", help=_ZONE_HELP),
    policy: Optional[str] = typer.Option(None, "--policy", "-p", help=_POLICY_HELP),
) -> None:
    """Resolve LOCAL in one zone and show the same instant in another."""

    moment = _parse_local(local)
    zone_id = _zone_or_default(zone)
    resolver = _resolver()
    try:
        source = resolver.resolve(moment, zone_id, policy)  # type: ignore[arg-type]
        converted = resolver.convert_zone(source.zoned, target)
    except TimeResolutionError as exc:
        _fail(exc.as_dict())
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--policy") from exc
    _emit(
        {
            "source": _zoned_dict(source.zoned, resolver),
            "target": _zoned_dict(converted, resolver),
            "ambiguous": source.ambiguous,
        }
    )


def _parse_booking(raw: str) -> BookedInterval:
    parts = [part.strip() for part in raw.split(",")]
    if len(parts) != 3:
        raise typer.BadParameter(
            f"Invalid booking '{raw}'. Expected RESOURCE,START,END.",
            param_hint="--booking",
        )
    resource_id, start, end = parts
    try:
        return BookedInterval(resource_id, parse_instant(start), parse_instant(end))
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--booking") from exc


@app.command("check-slot")
def check_slot_command(
    resource: str = typer.Option(..., "--resource", "-r", help="Resource identifier."),
    start: str = typer.Option(..., "--start", help="Candidate start instant."),
    end: Optional[str] = typer.Option(
        None, "--end", help="Candidate end instant (defaults to start + slot length)."
    ),
    bookings: List[str] = typer.Option(
        [], "--booking", "-b", help="Existing booking as RESOURCE,START,END."
    ),
) -> None:
    """Check whether a candidate slot collides with existing bookings."""

    guard = SlotGuard.from_settings(load_settings())
    candidate_start = _parse_instant(start)
    candidate_end = (
        _parse_instant(end) if end else candidate_start.plus(guard.slot_length)
    )
    existing = [_parse_booking(raw) for raw in bookings]
    clashes = guard.conflicts(resource, candidate_start, candidate_end, existing)
    LOG.debug("Slot check for %s found %d conflicts", resource, len(clashes))
    _emit(
        {
            "resource_id": resource,
            "start": candidate_start.isoformat(),
            "end": candidate_end.isoformat(),
            "available": guard.is_available(
                resource, candidate_start, candidate_end, existing
            ),
            "conflicts": [
                {"start": item.start.isoformat(), "end": item.end.isoformat()}
                for item in clashes
            ],
        }
    )


@app.command("config-path")
def config_path_command() -> None:
    """Print the settings file location."""

    typer.echo(str(config_path()))
