"""
Typed day classification for plan days.

Stored plan days only carry a free-text ``focus``. It is parsed once into a
``DayType`` so schedule code branches on ``kind`` rather than on strings.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

REST_FOCUS = "Rest"

WEEKDAY_NAMES = ("Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")


class DayKind(str, Enum):
    rest = "rest"
    trained = "trained"


@dataclass(frozen=True)
class DayType:
    kind: DayKind
    focus: str

    @property
    def is_rest(self) -> bool:
        return self.kind is DayKind.rest

    @classmethod
    def rest(cls) -> DayType:
        return cls(kind=DayKind.rest, focus=REST_FOCUS)

    @classmethod
    def trained(cls, focus: str) -> DayType:
        return cls(kind=DayKind.trained, focus=focus)

    @classmethod
    def from_focus(cls, focus: str | None) -> DayType:
        # Legacy rows spell rest days in several ways ("Rest", "Active rest", "rest day")
        text = (focus or "").strip()
        if not text or "rest" in text.lower():
            return cls(kind=DayKind.rest, focus=text or REST_FOCUS)
        return cls.trained(text)


def weekday_name(day_of_week: int) -> str:
    return WEEKDAY_NAMES[day_of_week % 7]


def sunday_based_weekday(value) -> int:
    """Convert a date's Monday-based ``weekday()`` into the 0=Sunday scheme."""
    return (value.weekday() + 1) % 7
