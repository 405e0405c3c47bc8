"""
Household Chores — Recurrence codec.

Repeating chores store their weekdays as a 7-bit integer in the
``repeat_days`` column: Mon=1, Tue=2, Wed=4, Thu=8, Fri=16, Sat=32, Sun=64.
0 means the chore does not repeat. Stored values must stay decodable, so the
bit positions never change.
"""

from __future__ import annotations

from enum import Enum
from typing import Iterable

from src.core.errors import ValidationError

MAX_MASK = 0b1111111


class Weekday(Enum):
    MON = 1
    TUE = 2
    WED = 4
    THU = 8
    FRI = 16
    SAT = 32
    SUN = 64

    @property
    def short_name(self) -> str:
        """Form label, e.g. "Mon"."""
        return self.name.capitalize()

    @property
    def full_name(self) -> str:
        return _FULL_NAMES[self]


# Canonical Mon -> Sun order (Enum iteration follows definition order)
WEEK: tuple[Weekday, ...] = tuple(Weekday)

_FULL_NAMES = dict(zip(
    WEEK, ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"),
))

_BY_NAME = {
    **{day.short_name.casefold(): day for day in WEEK},
    **{day.full_name.casefold(): day for day in WEEK},
}


def encode(days: Iterable[Weekday]) -> int:
    """Collapse a set of weekdays into a bitmask."""
    mask = 0
    for day in days:
        mask |= day.value
    return mask


def decode(mask: int) -> list[Weekday]:
    """Expand a bitmask into weekdays, Mon first. Empty for 0."""
    validate_mask(mask)
    return [day for day in WEEK if mask & day.value]


def validate_mask(mask: int) -> int:
    """Reject anything outside [0, 127]."""
    if isinstance(mask, bool) or not isinstance(mask, int) or not 0 <= mask <= MAX_MASK:
        raise ValidationError(
            {"repeat_mask": f"Repeat mask must be an integer between 0 and {MAX_MASK}."}
        )
    return mask


def parse_days(names: Iterable[str]) -> list[Weekday]:
    """Map day names ("Mon", "tuesday") to weekdays in canonical order.

    Only exact short or full names match, in any case. Unknown names are
    collected and reported together.
    """
    found: set[Weekday] = set()
    unknown: list[str] = []
    for name in names:
        day = _BY_NAME.get(str(name).strip().casefold())
        if day is None:
            unknown.append(str(name))
        else:
            found.add(day)
    if unknown:
        raise ValidationError({"repeat_days": f"Unknown weekday(s): {', '.join(unknown)}"})
    return [day for day in WEEK if day in found]
