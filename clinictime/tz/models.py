"""Value types shared by the time resolver and the slot guard."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta, timezone
from typing import ClassVar, Final, Literal
from zoneinfo import ZoneInfo

AmbiguityPolicy = Literal["prefer_earlier", "prefer_later"]
"""How an overlapping (fall-back) local reading is mapped onto an instant."""

PREFER_EARLIER_OFFSET: Final[AmbiguityPolicy] = "prefer_earlier"
PREFER_LATER_OFFSET: Final[AmbiguityPolicy] = "prefer_later"
AMBIGUITY_POLICIES: Final[frozenset[str]] = frozenset(
    {PREFER_EARLIER_OFFSET, PREFER_LATER_OFFSET}
)

_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)
_ONE_MS = timedelta(milliseconds=1)

# One day of slack on either side of the datetime range keeps every instant
# representable as a local reading in any zone.
INSTANT_MIN_MS: Final[int] = (datetime(1, 1, 2, tzinfo=UTC) - _EPOCH) // _ONE_MS
INSTANT_MAX_MS: Final[int] = (
    datetime(9999, 12, 30, 23, 59, 59, 999000, tzinfo=UTC) - _EPOCH
) // _ONE_MS

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
    "ZonedMoment",
    "format_offset",
]


def format_offset(offset: timedelta) -> str:
    """Render ``offset`` as ``+HH:MM`` (``+HH:MM:SS`` for LMT-style offsets)."""

    total = int(offset.total_seconds())
    sign = "-" if total < 0 else "+"
    hours, rest = divmod(abs(total), 3600)
    minutes, seconds = divmod(rest, 60)
    text = f"{sign}{hours:02d}:{minutes:02d}"
    if seconds:
        text += f":{seconds:02d}"
    return text


@dataclass(frozen=True, slots=True, order=True)
class Instant:
    """Absolute point in time as milliseconds since the Unix epoch."""

    epoch_ms: int

    def __post_init__(self) -> None:
        if isinstance(self.epoch_ms, bool) or not isinstance(self.epoch_ms, int):
            raise TypeError(
                f"epoch_ms must be an integer, got {type(self.epoch_ms).__name__}"
            )
        if not INSTANT_MIN_MS <= self.epoch_ms <= INSTANT_MAX_MS:
            raise ValueError(
                f"epoch_ms {self.epoch_ms} is outside the supported range "
                f"{INSTANT_MIN_MS}..{INSTANT_MAX_MS}"
            )

    @classmethod
    def from_datetime(cls, value: datetime) -> Instant:
        """Return the instant for a timezone-aware datetime.

        Sub-millisecond precision is floored.
        """

        if value.tzinfo is None or value.utcoffset() is None:
            raise ValueError("Datetime must include timezone information")
        return cls((value - _EPOCH) // _ONE_MS)

    def to_datetime(self) -> datetime:
        """Return the instant as a UTC-aware datetime."""

        return _EPOCH + timedelta(milliseconds=self.epoch_ms)

    def isoformat(self) -> str:
        return self.to_datetime().isoformat(timespec="milliseconds").replace(
            "+00:00", "Z"
        )

    def plus(self, delta: timedelta) -> Instant:
        """Return a new instant shifted by ``delta`` (floored to milliseconds)."""

        return Instant(self.epoch_ms + delta // _ONE_MS)


@dataclass(frozen=True, slots=True, order=True)
class LocalMoment:
    """Calendar date and wall-clock time without any zone attached."""

    year: int
    month: int
    day: int
    hour: int = 0
    minute: int = 0
    second: int = 0
    millisecond: int = 0

    def __post_init__(self) -> None:
        if not 0 <= self.millisecond <= 999:
            raise ValueError("millisecond must be in 0..999")
        # datetime performs the calendar validation (month lengths, leap years).
        self.to_datetime()

    @classmethod
    def from_datetime(cls, value: datetime) -> LocalMoment:
        """Build from a naive datetime; microseconds are truncated to milliseconds."""

        if value.tzinfo is not None:
            raise ValueError("Local moments must be built from naive datetimes")
        return cls(
            value.year,
            value.month,
            value.day,
            value.hour,
            value.minute,
            value.second,
            value.microsecond // 1000,
        )

    def to_datetime(self) -> datetime:
        """Return the naive datetime for this wall-clock reading."""

        return datetime(
            self.year,
            self.month,
            self.day,
            self.hour,
            self.minute,
            self.second,
            self.millisecond * 1000,
        )

    def isoformat(self) -> str:
        timespec = "milliseconds" if self.millisecond else "seconds"
        return self.to_datetime().isoformat(timespec=timespec)

    def __str__(self) -> str:
        return self.isoformat()


@dataclass(frozen=True, slots=True)
class ZonedMoment:
    """A local reading bound to a zone and the offset resolved for it.

    Instances come from :mod:`clinictime.tz.resolver`; the offset is always one
    that the zone legally observes for :attr:`local`.
    """

    local: LocalMoment
    zone_id: str
    offset: timedelta

    @property
    def instant(self) -> Instant:
        aware = self.local.to_datetime().replace(tzinfo=timezone(self.offset))
        return Instant.from_datetime(aware)

    def to_datetime(self) -> datetime:
        """Return an aware datetime in the zone, with ``fold`` set correctly."""

        return self.instant.to_datetime().astimezone(ZoneInfo(self.zone_id))

    def isoformat(self) -> str:
        return f"{self.local.isoformat()}{format_offset(self.offset)}"

    def display(self) -> str:
        """Return e.g. ``2023-11-05 01:30:00 EDT``, naming the zone abbreviation."""

        return self.to_datetime().strftime("%Y-%m-%d %H:%M:%S %Z")

    def __str__(self) -> str:
        return f"{self.isoformat()}[{self.zone_id}]"


@dataclass(frozen=True, slots=True)
class Normal:
    """Exactly one offset is valid for the local reading."""

    kind: ClassVar[str] = "normal"
    offset: timedelta


@dataclass(frozen=True, slots=True)
class Gap:
    """The local reading was skipped by a spring-forward transition."""

    kind: ClassVar[str] = "gap"
    offset_before: timedelta
    offset_after: timedelta

    @property
    def width(self) -> timedelta:
        return abs(self.offset_after - self.offset_before)


@dataclass(frozen=True, slots=True)
class Overlap:
    """The local reading occurs twice because of a fall-back transition.

    ``offset_earlier`` yields the earlier of the two instants.
    """

    kind: ClassVar[str] = "overlap"
    offset_earlier: timedelta
    offset_later: timedelta


Classification = Normal | Gap | Overlap


@dataclass(frozen=True, slots=True)
class Resolution:
    """Snapshot describing how a local reading was mapped onto an instant.

    Attributes
    ----------
    input:
        Local moment supplied by the caller.
    zone_id:
        Zone identifier the reading was interpreted in.
    classification:
        Result of classifying :attr:`input` against the zone's transitions.
    zoned:
        The zoned moment chosen for the reading.
    policy:
        Ambiguity policy that was in force for the call.
    """

    input: LocalMoment
    zone_id: str
    classification: Classification
    zoned: ZonedMoment
    policy: AmbiguityPolicy

    @property
    def instant(self) -> Instant:
        return self.zoned.instant

    @property
    def ambiguous(self) -> bool:
        """``True`` when the policy had to choose between two readings.

        Callers should surface this so end users know which reading was used.
        """

        return isinstance(self.classification, Overlap)

    def to_metadata(self) -> dict[str, object]:
        """Serialise the resolution into a metadata dictionary."""

        return {
            "input_local": self.input.isoformat(),
            "zone_id": self.zone_id,
            "classification": self.classification.kind,
            "resolved_local": self.zoned.isoformat(),
            "offset": format_offset(self.zoned.offset),
            "utc": self.instant.isoformat(),
            "epoch_ms": self.instant.epoch_ms,
            "ambiguous": self.ambiguous,
            "policy": self.policy,
        }
