from __future__ import annotations

from datetime import date, time

from venue_booking.application.utils.availability import (
    eligible_dates,
    is_last_week_of_month,
    matches_pattern,
    matches_rule,
    week_of_month,
)
from venue_booking.domain.entities.availability_rule import (
    DailyRule,
    DayOfMonth,
    LastDayOfMonth,
    MonthlyRule,
    NthWeekday,
    Ordinal,
    Weekday,
    WeeklyRule,
)
from venue_booking.domain.entities.day_off import DayOff

MARCH_2026 = date(2026, 3, 1)  # a Sunday; 31 days


def _march(rule) -> list[date]:
    return eligible_dates(rule, horizon_days=31, reference_date=MARCH_2026)


def test_last_sunday_of_month_uses_last_week():
    rule = MonthlyRule(patterns=(NthWeekday(Weekday.SUNDAY, Ordinal.LAST),))
    dates = _march(rule)

    assert date(2026, 3, 29) in dates
    assert date(2026, 3, 22) not in dates
    assert dates == [date(2026, 3, 29)]


def test_week_of_month_counts_from_sunday():
    assert week_of_month(date(2026, 3, 1)) == 1
    assert week_of_month(date(2026, 3, 7)) == 1
    assert week_of_month(date(2026, 3, 8)) == 2
    # April 2026 starts on a Wednesday, so the first Monday falls in week 2
    assert week_of_month(date(2026, 4, 6)) == 2


def test_ordinal_weekday_follows_week_formula():
    first_monday = NthWeekday(Weekday.MONDAY, Ordinal.FIRST)
    second_monday = NthWeekday(Weekday.MONDAY, Ordinal.SECOND)

    assert matches_pattern(first_monday, date(2026, 3, 2))
    assert not matches_pattern(first_monday, date(2026, 4, 6))
    assert matches_pattern(second_monday, date(2026, 4, 6))
    assert not matches_pattern(first_monday, date(2026, 3, 3))


def test_last_week_is_the_final_seven_days():
    assert is_last_week_of_month(date(2026, 3, 25))
    assert not is_last_week_of_month(date(2026, 3, 24))
    assert is_last_week_of_month(date(2026, 2, 22))


def test_day_of_month_and_last_day_patterns():
    rule = MonthlyRule(patterns=(DayOfMonth(15), LastDayOfMonth()))
    dates = eligible_dates(rule, horizon_days=59, reference_date=date(2026, 2, 1))

    assert dates == [date(2026, 2, 15), date(2026, 2, 28), date(2026, 3, 15), date(2026, 3, 31)]


def test_weekly_rule_matches_listed_weekdays():
    rule = WeeklyRule(weekdays=frozenset({Weekday.SATURDAY, Weekday.SUNDAY}))

    assert matches_rule(rule, date(2026, 3, 7))
    assert matches_rule(rule, date(2026, 3, 8))
    assert not matches_rule(rule, date(2026, 3, 9))
    assert len(_march(rule)) == 9


def test_horizon_starts_today_and_is_exclusive():
    dates = eligible_dates(DailyRule(), horizon_days=7, reference_date=date(2026, 3, 2))

    assert dates[0] == date(2026, 3, 2)
    assert dates[-1] == date(2026, 3, 8)
    assert len(dates) == 7
    assert dates == sorted(set(dates))


def test_empty_rule_yields_no_dates():
    assert _march(WeeklyRule()) == []
    assert _march(MonthlyRule()) == []
    assert eligible_dates(DailyRule(), horizon_days=0, reference_date=MARCH_2026) == []


def test_full_day_closures_remove_dates():
    closures = [
        DayOff(day=date(2026, 3, 3), reason="Maintenance"),
        DayOff(day=date(2025, 3, 5), is_recurring=True, reason="Founders day"),
        DayOff(day=date(2026, 3, 4), package_ids=(99,)),
        DayOff(day=date(2026, 3, 6), closes_at=time(12, 0)),
    ]
    dates = eligible_dates(
        DailyRule(), horizon_days=7, reference_date=date(2026, 3, 2), day_offs=closures, package_id=1
    )

    assert date(2026, 3, 3) not in dates
    assert date(2026, 3, 5) not in dates
    # Scoped to another package
    assert date(2026, 3, 4) in dates
    # Partial closures only trim slots
    assert date(2026, 3, 6) in dates
