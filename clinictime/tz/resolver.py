"""Translate between local wall-clock readings, zones and UTC instants.

Every DST question is answered through :func:`classify`, which places a local
reading in exactly one of three buckets:

``Normal``
    one legal offset exists;
``Gap``
    the reading was skipped by a spring-forward transition and has no instant;
``Overlap``
    the reading occurs twice after a fall-back transition and needs an
    :data:`~clinictime.tz.models.AmbiguityPolicy` to pick one.

Gaps are always rejected with :class:`~clinictime.errors.InvalidLocalTime`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import TYPE_CHECKING
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..errors import (
    IllegalOffset,
    InstantOutOfRange,
    InvalidLocalTime,
    UnknownTimeZone,
)
from .models import (
    AMBIGUITY_POLICIES,
    INSTANT_MAX_MS,
    INSTANT_MIN_MS,
    PREFER_EARLIER_OFFSET,
    AmbiguityPolicy,
    Classification,
    Gap,
    Instant,
    LocalMoment,
    Normal,
    Overlap,
    Resolution,
    ZonedMoment,
    format_offset,
)

if TYPE_CHECKING:  # pragma: no cover
    from ..config.settings import Settings

LOG = logging.getLogger(__name__)

__all__ = [
    "TimeResolver",
    "classify",
    "convert_zone",
    "is_dst_active",
    "legal_offsets",
    "resolve",
    "resolve_zone",
    "shift_forward",
    "to_instant",
    "to_zoned",
]


def resolve_zone(zone_id: str) -> ZoneInfo:
    """Return the :class:`ZoneInfo` for ``zone_id`` or raise :class:`UnknownTimeZone`."""

    if not isinstance(zone_id, str) or not zone_id.strip():
        raise UnknownTimeZone(
            f"Time zone identifier must be a non-empty string, got {zone_id!r}",
            zone_id=zone_id if isinstance(zone_id, str) else None,
        )
    try:
        return ZoneInfo(zone_id)
    except (ZoneInfoNotFoundError, ValueError, OSError) as exc:
        LOG.debug("Unable to resolve time zone %r: %s", zone_id, exc)
        raise UnknownTimeZone(
            f"Unknown time zone: {zone_id}", zone_id=zone_id
        ) from exc


def _coerce_local(local: LocalMoment | datetime) -> LocalMoment:
    if isinstance(local, LocalMoment):
        return local
    if isinstance(local, datetime):
        return LocalMoment.from_datetime(local)
    raise TypeError(f"Expected LocalMoment or naive datetime, got {type(local).__name__}")


def _check_policy(policy: str) -> AmbiguityPolicy:
    if policy not in AMBIGUITY_POLICIES:
        raise ValueError(f"Unsupported ambiguity policy: {policy}")
    return policy  # type: ignore[return-value]


def _classify_in(naive: datetime, zone: ZoneInfo) -> Classification:
    offset0 = naive.replace(tzinfo=zone, fold=0).utcoffset() or timedelta(0)
    offset1 = naive.replace(tzinfo=zone, fold=1).utcoffset() or timedelta(0)
    if offset0 == offset1:
        return Normal(offset0)
    # fold=0 applies the pre-transition offset. If that maps to the earlier
    # instant the reading repeats, otherwise it was skipped.
    if naive - offset0 < naive - offset1:
        return Overlap(offset_earlier=offset0, offset_later=offset1)
    return Gap(offset_before=offset0, offset_after=offset1)


def classify(local: LocalMoment | datetime, zone_id: str) -> Classification:
    """Classify ``local`` against the DST transitions of ``zone_id``."""

    zone = resolve_zone(zone_id)
    return _classify_in(_coerce_local(local).to_datetime(), zone)


def legal_offsets(classification: Classification) -> tuple[timedelta, ...]:
    """Return the offsets a zoned reading may carry for ``classification``."""

    if isinstance(classification, Normal):
        return (classification.offset,)
    if isinstance(classification, Overlap):
        return (classification.offset_earlier, classification.offset_later)
    return ()


def shift_forward(local: LocalMoment | datetime, zone_id: str) -> LocalMoment:
    """Return ``local`` moved past a DST gap by the gap's width.

    Readings outside a gap are returned unchanged. This is offered as a
    suggestion for callers; :func:`to_instant` never applies it.
    """

    moment = _coerce_local(local)
    classification = classify(moment, zone_id)
    if not isinstance(classification, Gap):
        return moment
    return LocalMoment.from_datetime(moment.to_datetime() + classification.width)


def resolve(
    local: LocalMoment | datetime,
    zone_id: str,
    policy: AmbiguityPolicy = PREFER_EARLIER_OFFSET,
) -> Resolution:
    """Resolve ``local`` in ``zone_id`` and describe how the instant was chosen.

    Raises :class:`InvalidLocalTime` for gap readings and
    :class:`InstantOutOfRange` when the reading maps outside
    ``INSTANT_MIN_MS..INSTANT_MAX_MS``.
    """

    policy = _check_policy(policy)
    moment = _coerce_local(local)
    zone = resolve_zone(zone_id)
    classification = _classify_in(moment.to_datetime(), zone)

    if isinstance(classification, Gap):
        suggestion = LocalMoment.from_datetime(
            moment.to_datetime() + classification.width
        )
        LOG.debug("Rejected nonexistent local time %s in %s", moment, zone_id)
        raise InvalidLocalTime(
            f"{moment} does not exist in {zone_id}; it falls inside a DST gap",
            zone_id=zone_id,
            context={
                "local": moment.isoformat(),
                "gap_seconds": classification.width.total_seconds(),
                "offset_before": format_offset(classification.offset_before),
                "offset_after": format_offset(classification.offset_after),
                "shift_forward": suggestion.isoformat(),
            },
        )

    if isinstance(classification, Overlap):
        if policy == PREFER_EARLIER_OFFSET:
            offset = classification.offset_earlier
        else:
            offset = classification.offset_later
        LOG.info(
            "Ambiguous local time %s in %s resolved with %s to offset %s",
            moment,
            zone_id,
            policy,
            format_offset(offset),
        )
    else:
        offset = classification.offset

    zoned = ZonedMoment(local=moment, zone_id=zone_id, offset=offset)
    _checked_instant(zoned)
    return Resolution(
        input=moment,
        zone_id=zone_id,
        classification=classification,
        zoned=zoned,
        policy=policy,
    )


def _checked_instant(zoned: ZonedMoment) -> Instant:
    try:
        return zoned.instant
    except ValueError as exc:
        raise InstantOutOfRange(
            f"{zoned} lies outside the supported instant range",
            zone_id=zoned.zone_id,
            context={
                "local": zoned.local.isoformat(),
                "offset": format_offset(zoned.offset),
                "min_epoch_ms": INSTANT_MIN_MS,
                "max_epoch_ms": INSTANT_MAX_MS,
            },
        ) from exc


def to_instant(
    local: LocalMoment | datetime,
    zone_id: str,
    policy: AmbiguityPolicy = PREFER_EARLIER_OFFSET,
) -> Instant:
    """Return the instant for ``local`` in ``zone_id``.

    Raises :class:`InvalidLocalTime` when the reading falls in a DST gap.
    Overlapping readings are settled by ``policy``.
    """

    return resolve(local, zone_id, policy).instant


def to_zoned(instant: Instant, zone_id: str) -> ZonedMoment:
    """Return the wall-clock reading and offset in effect at ``instant``."""

    aware = instant.to_datetime().astimezone(resolve_zone(zone_id))
    return ZonedMoment(
        local=LocalMoment.from_datetime(aware.replace(tzinfo=None)),
        zone_id=zone_id,
        offset=aware.utcoffset() or timedelta(0),
    )


def is_dst_active(instant: Instant, zone_id: str) -> bool:
    """Return ``True`` when the offset at ``instant`` differs from standard time."""

    zone = resolve_zone(zone_id)
    aware = instant.to_datetime().astimezone(zone)
    # Standard time is the smaller of the January and July offsets. That holds
    # for zones like Europe/Dublin whose tz rules express winter as a negative
    # save, where dst() reports the opposite season.
    standard = min(
        datetime(aware.year, month, 1, tzinfo=zone).utcoffset() or timedelta(0)
        for month in (1, 7)
    )
    return (aware.utcoffset() or timedelta(0)) != standard


def convert_zone(zoned: ZonedMoment, target_zone_id: str) -> ZonedMoment:
    """Re-express ``zoned`` in ``target_zone_id`` without moving its instant."""

    allowed = legal_offsets(classify(zoned.local, zoned.zone_id))
    if zoned.offset not in allowed:
        raise IllegalOffset(
            f"Offset {format_offset(zoned.offset)} is not observed by "
            f"{zoned.zone_id} at {zoned.local}",
            zone_id=zoned.zone_id,
            context={
                "local": zoned.local.isoformat(),
                "offset": format_offset(zoned.offset),
                "allowed": [format_offset(value) for value in allowed],
            },
        )
    return to_zoned(_checked_instant(zoned), target_zone_id)


@dataclass(frozen=True, slots=True)
class TimeResolver:
    """Resolver bound to a default ambiguity policy.

    The module-level functions are the stateless core; this wrapper only
    supplies the configured policy when a call does not name one.
    """

    default_policy: AmbiguityPolicy = PREFER_EARLIER_OFFSET

    def __post_init__(self) -> None:
        _check_policy(self.default_policy)

    @classmethod
    def from_settings(cls, settings: Settings) -> TimeResolver:
        return cls(default_policy=settings.resolver.ambiguity_policy)

    def classify(self, local: LocalMoment | datetime, zone_id: str) -> Classification:
        return classify(local, zone_id)

    def resolve(
        self,
        local: LocalMoment | datetime,
        zone_id: str,
        policy: AmbiguityPolicy | None = None,
    ) -> Resolution:
        return resolve(local, zone_id, policy or self.default_policy)

    def to_instant(
        self,
        local: LocalMoment | datetime,
        zone_id: str,
        policy: AmbiguityPolicy | None = None,
    ) -> Instant:
        return to_instant(local, zone_id, policy or self.default_policy)

    def to_zoned(self, instant: Instant, zone_id: str) -> ZonedMoment:
        return to_zoned(instant, zone_id)

    def is_dst_active(self, instant: Instant, zone_id: str) -> bool:
        return is_dst_active(instant, zone_id)

    def convert_zone(self, zoned: ZonedMoment, target_zone_id: str) -> ZonedMoment:
        return convert_zone(zoned, target_zone_id)
