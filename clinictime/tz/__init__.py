"""DST-aware conversion between local readings, zones and instants."""

from .models import (
    AMBIGUITY_POLICIES,
    INSTANT_MAX_MS,
    INSTANT_MIN_MS,
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
    ZonedMoment,
)
from .resolver import (
    TimeResolver,
    classify,
    convert_zone,
    is_dst_active,
    legal_offsets,
    resolve,
    resolve_zone,
    shift_forward,
    to_instant,
    to_zoned,
)

__all__ = [
    "AMBIGUITY_POLICIES",
    "AmbiguityPolicy",
    "Classification",
    "Gap",
    "INSTANT_MAX_MS",
    "INSTANT_MIN_MS",
    "Instant",
    "LocalMoment",
    "Normal",
    "Overlap",
    "PREFER_EARLIER_OFFSET",
    "PREFER_LATER_OFFSET",
    "Resolution",
    "TimeResolver",
    "ZonedMoment",
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
