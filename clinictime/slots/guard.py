"""Double-booking predicates over committed reservations.

Intervals are half-open (``[start, end)``) so back-to-back appointments for
the same resource never conflict. These helpers only answer the question;
atomically checking and committing a reservation belongs to the store that
owns the bookings.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from datetime import timedelta
from typing import TYPE_CHECKING

from ..tz.models import Instant

if TYPE_CHECKING:  # pragma: no cover
    from ..config.settings import Settings

__all__ = [
    "BookedInterval",
    "SlotGuard",
    "conflicts",
    "free_slots",
    "is_available",
    "overlaps",
]


@dataclass(frozen=True, slots=True)
class BookedInterval:
    """A committed reservation of ``resource_id`` over ``[start, end)``."""

    resource_id: str
    start: Instant
    end: Instant

    def __post_init__(self) -> None:
        if self.start >= self.end:
            raise ValueError("start must be earlier than end")

    @property
    def duration(self) -> timedelta:
        return timedelta(milliseconds=self.end.epoch_ms - self.start.epoch_ms)


def overlaps(start_a: Instant, end_a: Instant, start_b: Instant, end_b: Instant) -> bool:
    """Half-open interval intersection test."""

    return start_a < end_b and start_b < end_a


def conflicts(
    resource_id: str,
    start: Instant,
    end: Instant,
    existing: Iterable[BookedInterval],
) -> list[BookedInterval]:
    """Return the bookings of ``resource_id`` that intersect ``[start, end)``.

    The result is ordered by start time.
    """

    hits = [
        booked
        for booked in existing
        if booked.resource_id == resource_id
        and overlaps(booked.start, booked.end, start, end)
    ]
    return sorted(hits, key=lambda booked: (booked.start, booked.end))


def is_available(
    resource_id: str,
    start: Instant,
    end: Instant,
    existing: Iterable[BookedInterval],
) -> bool:
    """Return ``False`` iff a booking of the same resource intersects the candidate."""

    return not any(
        booked.resource_id == resource_id
        and overlaps(booked.start, booked.end, start, end)
        for booked in existing
    )


def free_slots(
    resource_id: str,
    window_start: Instant,
    window_end: Instant,
    slot: timedelta,
    existing: Iterable[BookedInterval],
    *,
    step: timedelta | None = None,
) -> Iterator[tuple[Instant, Instant]]:
    """Yield available ``slot``-long candidates inside ``[window_start, window_end)``.

    Candidates start at ``window_start`` and advance by ``step`` (defaults to
    ``slot``). Non-positive lengths yield nothing.
    """

    stride = step if step is not None else slot
    if slot <= timedelta(0) or stride <= timedelta(0):
        return
    booked = [item for item in existing if item.resource_id == resource_id]
    candidate = window_start
    while True:
        candidate_end = candidate.plus(slot)
        if candidate_end > window_end:
            break
        if is_available(resource_id, candidate, candidate_end, booked):
            yield candidate, candidate_end
        candidate = candidate.plus(stride)


@dataclass(frozen=True, slots=True)
class SlotGuard:
    """Availability checks with a default appointment length."""

    slot_length: timedelta = timedelta(minutes=30)

    @classmethod
    def from_settings(cls, settings: Settings) -> SlotGuard:
        return cls(slot_length=timedelta(minutes=settings.clinic.slot_minutes))

    def is_available(
        self,
        resource_id: str,
        start: Instant,
        end: Instant,
        existing: Iterable[BookedInterval],
    ) -> bool:
        return is_available(resource_id, start, end, existing)

    def conflicts(
        self,
        resource_id: str,
        start: Instant,
        end: Instant,
        existing: Iterable[BookedInterval],
    ) -> list[BookedInterval]:
        return conflicts(resource_id, start, end, existing)

    def free_slots(
        self,
        resource_id: str,
        window_start: Instant,
        window_end: Instant,
        existing: Iterable[BookedInterval],
        *,
        slot: timedelta | None = None,
        step: timedelta | None = None,
    ) -> list[tuple[Instant, Instant]]:
        return list(
            free_slots(
                resource_id,
                window_start,
                window_end,
                slot or self.slot_length,
                existing,
                step=step,
            )
        )
