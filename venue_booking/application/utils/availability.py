from __future__ import annotations

import calendar
import math
from datetime import date, timedelta
from typing import Iterable

from venue_booking.domain.entities.availability_rule import (
    AvailabilityRule,
    CombinedRule,
    DailyRule,
    DayOfMonth,
    LastDayOfMonth,
    MonthlyPattern,
    MonthlyRule,
    NthWeekday,
    Ordinal,
    WeeklyRule,
    Weekday,
)
from venue_booking.domain.entities.day_off import DayOff

DEFAULT_HORIZON_DAYS = 90


def week_of_month(day: date) -> int:
    """Week number as ceil((day + weekday of the 1st, Sunday = 0) / 7)."""
    first_weekday = (day.replace(day=1).weekday() + 1) % 7
    return math.ceil((day.day + first_weekday) / 7)


def days_in_month(day: date) -> int:
    return calendar.monthrange(day.year, day.month)[1]


def is_last_week_of_month(day: date) -> bool:
    return days_in_month(day) - day.day < 7


def is_last_day_of_month(day: date) -> bool:
    return day.day == days_in_month(day)


def _pattern_rank(pattern: MonthlyPattern) -> int:
    if isinstance(pattern, DayOfMonth):
        return 0
    if isinstance(pattern, NthWeekday):
        return 1
    return 2


def matches_pattern(pattern: MonthlyPattern, day: date) -> bool:
    if isinstance(pattern, DayOfMonth):
        return pattern.day == day.day
    if isinstance(pattern, NthWeekday):
        if pattern.weekday != day.weekday():
            return False
        if pattern.ordinal is Ordinal.LAST:
            return is_last_week_of_month(day)
        return week_of_month(day) == pattern.ordinal.week_number
    if isinstance(pattern, LastDayOfMonth):
        return is_last_day_of_month(day)
    raise TypeError(f"Unknown monthly pattern: {pattern!r}")


def matches_rule(rule: AvailabilityRule, day: date) -> bool:
    if isinstance(rule, (DailyRule, WeeklyRule)):
        return Weekday(day.weekday()) in rule.weekdays
    if isinstance(rule, MonthlyRule):
        ordered = sorted(rule.patterns, key=_pattern_rank)
        return any(matches_pattern(pattern, day) for pattern in ordered)
    if isinstance(rule, CombinedRule):
        return any(matches_rule(part, day) for part in rule.rules)
    raise TypeError(f"Unknown availability rule: {rule!r}")


def is_closed(day: date, day_offs: Iterable[DayOff], package_id: int | None = None) -> bool:
    return any(
        off.is_full_day and off.occurs_on(day) and off.applies_to(package_id)
        for off in day_offs
    )


def eligible_dates(
    rule: AvailabilityRule,
    horizon_days: int = DEFAULT_HORIZON_DAYS,
    reference_date: date | None = None,
    day_offs: Iterable[DayOff] = (),
    package_id: int | None = None,
) -> list[date]:
    """
    Dates from reference_date (inclusive) over the next horizon_days days that the
    rule allows, minus full-day closures. An empty list means nothing is bookable.
    """
    if reference_date is None:
        reference_date = date.today()
    closures = [off for off in day_offs if off.is_full_day]

    dates: list[date] = []
    for offset in range(max(0, horizon_days)):
        day = reference_date + timedelta(days=offset)
        if not matches_rule(rule, day):
            continue
        if is_closed(day, closures, package_id):
            continue
        dates.append(day)
    return dates
