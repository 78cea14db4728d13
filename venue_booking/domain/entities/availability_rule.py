from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Weekday(int, Enum):
    # Values follow date.weekday()
    MONDAY = 0
    TUESDAY = 1
    WEDNESDAY = 2
    THURSDAY = 3
    FRIDAY = 4
    SATURDAY = 5
    SUNDAY = 6

    @staticmethod
    def from_name(name: str) -> "Weekday":
        return Weekday[(name or "").strip().upper()]


class Ordinal(str, Enum):
    FIRST = "first"
    SECOND = "second"
    THIRD = "third"
    FOURTH = "fourth"
    LAST = "last"

    @property
    def week_number(self) -> int | None:
        """Week of month this ordinal targets; None for LAST."""
        return {
            Ordinal.FIRST: 1,
            Ordinal.SECOND: 2,
            Ordinal.THIRD: 3,
            Ordinal.FOURTH: 4,
        }.get(self)


@dataclass(frozen=True)
class DayOfMonth:
    day: int


@dataclass(frozen=True)
class NthWeekday:
    weekday: Weekday
    ordinal: Ordinal


@dataclass(frozen=True)
class LastDayOfMonth:
    pass


MonthlyPattern = DayOfMonth | NthWeekday | LastDayOfMonth


@dataclass(frozen=True)
class DailyRule:
    weekdays: frozenset[Weekday] = frozenset(Weekday)


@dataclass(frozen=True)
class WeeklyRule:
    weekdays: frozenset[Weekday] = frozenset()


@dataclass(frozen=True)
class MonthlyRule:
    patterns: tuple[MonthlyPattern, ...] = ()


ScheduleRule = DailyRule | WeeklyRule | MonthlyRule


@dataclass(frozen=True)
class CombinedRule:
    """Several active schedules; a date is offered when any of them allows it."""

    rules: tuple[ScheduleRule, ...] = ()


AvailabilityRule = ScheduleRule | CombinedRule
