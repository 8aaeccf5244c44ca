"""UTC-anchored appointment time resolution with DST gap/overlap handling."""

from __future__ import annotations

from .errors import (
    IllegalOffset,
    InstantOutOfRange,
    InvalidLocalTime,
    TimeResolutionError,
    UnknownTimeZone,
)
from .slots import BookedInterval, SlotGuard, conflicts, free_slots, is_available
from .tz import (
    PREFER_EARLIER_OFFSET,
    PREFER_LATER_OFFSET,
    AmbiguityPolicy,
    Classification,
    Gap,
    Instant,
    LocalMoment,
    Normal,
    Overlap,
    Resolution,
    TimeResolver,
    ZonedMoment,
    classify,
    convert_zone,
    is_dst_active,
    resolve,
    to_instant,
    to_zoned,
)

__version__ = "0.1.0"

__all__ = [
    "AmbiguityPolicy",
    "BookedInterval",
    "Classification",
    "Gap",
    "IllegalOffset",
    "Instant",
    "InstantOutOfRange",
    "InvalidLocalTime",
    "LocalMoment",
    "Normal",
    "Overlap",
    "PREFER_EARLIER_OFFSET",
    "PREFER_LATER_OFFSET",
    "Resolution",
    "SlotGuard",
    "TimeResolutionError",
    "TimeResolver",
    "UnknownTimeZone",
    "ZonedMoment",
    "__version__",
    "classify",
    "conflicts",
    "convert_zone",
    "free_slots",
    "is_available",
    "is_dst_active",
    "resolve",
    "to_instant",
    "to_zoned",
]
