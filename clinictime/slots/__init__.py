"""Slot availability helpers guarding against double-booking."""

from .guard import BookedInterval, SlotGuard, conflicts, free_slots, is_available, overlaps

__all__ = [
    "BookedInterval",
    "SlotGuard",
    "conflicts",
    "free_slots",
    "is_available",
    "overlaps",
]
