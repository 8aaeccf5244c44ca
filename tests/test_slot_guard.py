from datetime import UTC, datetime, timedelta

import pytest

from clinictime.config import Settings
from clinictime.slots import (
    BookedInterval,
    SlotGuard,
    conflicts,
    free_slots,
    is_available,
    overlaps,
)
from clinictime.tz import Instant, LocalMoment, to_instant


def _at(hour: int, minute: int = 0) -> Instant:
    return Instant.from_datetime(datetime(2024, 2, 6, hour, minute, tzinfo=UTC))


def _booking(resource_id: str, start: Instant, end: Instant) -> BookedInterval:
    return BookedInterval(resource_id=resource_id, start=start, end=end)


def test_back_to_back_slots_do_not_conflict():
    existing = [_booking("room-1", _at(10), _at(10, 30))]
    assert is_available("room-1", _at(10, 30), _at(11), existing)

    existing = [_booking("room-1", _at(10, 30), _at(11))]
    assert is_available("room-1", _at(10), _at(10, 30), existing)


def test_partial_overlap_is_unavailable():
    existing = [_booking("room-1", _at(10), _at(10, 30))]
    assert not is_available("room-1", _at(10, 15), _at(10, 45), existing)


@pytest.mark.parametrize(
    "start,end",
    [
        (_at(9, 45), _at(10, 15)),
        (_at(10, 5), _at(10, 25)),
        (_at(9), _at(12)),
        (_at(10), _at(10, 30)),
    ],
)
def test_any_intersection_blocks(start, end):
    existing = [_booking("room-1", _at(10), _at(10, 30))]
    assert not is_available("room-1", start, end, existing)


def test_other_resources_are_ignored():
    existing = [_booking("room-2", _at(10), _at(11))]
    assert is_available("room-1", _at(10), _at(11), existing)
    assert conflicts("room-1", _at(10), _at(11), existing) == []


def test_no_bookings_means_available():
    assert is_available("room-1", _at(10), _at(11), [])
    assert is_available("room-1", _at(10), _at(11), iter(()))


def test_degenerate_candidate_never_raises():
    existing = [_booking("room-1", _at(10), _at(11))]
    assert not is_available("room-1", _at(10, 30), _at(10, 30), existing)
    assert is_available("room-1", _at(12), _at(11), existing)


def test_conflicts_sorted_by_start():
    late = _booking("room-1", _at(11), _at(12))
    early = _booking("room-1", _at(9), _at(10, 30))
    other = _booking("room-9", _at(10), _at(11))
    assert conflicts("room-1", _at(10), _at(11, 30), [late, other, early]) == [early, late]


def test_overlaps_is_half_open():
    assert overlaps(_at(10), _at(11), _at(10, 59), _at(12))
    assert not overlaps(_at(10), _at(11), _at(11), _at(12))


def test_booked_interval_requires_positive_length():
    with pytest.raises(ValueError):
        BookedInterval("room-1", _at(11), _at(10))
    with pytest.raises(ValueError):
        BookedInterval("room-1", _at(10), _at(10))
    assert _booking("room-1", _at(10), _at(10, 45)).duration == timedelta(minutes=45)


def test_free_slots_skip_booked_time():
    existing = [
        _booking("room-1", _at(9, 30), _at(10, 30)),
        _booking("room-2", _at(9), _at(12)),
    ]
    slots = list(
        free_slots("room-1", _at(9), _at(11, 15), timedelta(minutes=30), existing)
    )
    assert slots == [(_at(9), _at(9, 30)), (_at(10, 30), _at(11))]


def test_free_slots_with_step():
    slots = list(
        free_slots(
            "room-1",
            _at(9),
            _at(10),
            timedelta(minutes=30),
            [],
            step=timedelta(minutes=15),
        )
    )
    assert [start for start, _ in slots] == [_at(9), _at(9, 15), _at(9, 30)]
    assert list(free_slots("room-1", _at(9), _at(10), timedelta(0), [])) == []


def test_slot_guard_defaults_from_settings():
    settings = Settings(clinic={"timezone": "Europe/Berlin", "slot_minutes": 20})
    guard = SlotGuard.from_settings(settings)
    assert guard.slot_length == timedelta(minutes=20)
    slots = guard.free_slots("room-1", _at(9), _at(10), [])
    assert len(slots) == 3
    assert guard.is_available("room-1", _at(9), _at(9, 20), [])


def test_guard_compares_instants_across_dst_change():
    # The same 01:30 wall-clock reading twice on the fall-back night is two
    # distinct hours of real time.
    local = LocalMoment(2023, 11, 5, 1, 30)
    first = to_instant(local, "America/New_York", "prefer_earlier")
    second = to_instant(local, "America/New_York", "prefer_later")
    existing = [_booking("dr-lee", first, first.plus(timedelta(minutes=30)))]
    assert is_available("dr-lee", second, second.plus(timedelta(minutes=30)), existing)
