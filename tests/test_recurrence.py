"""Tests for routine recurrence resolution."""

import datetime as dt
from types import SimpleNamespace

from shiftplan.domain.models import RepetitionType
from shiftplan.services.recurrence import applicable_routines, is_applicable
from shiftplan.services.timeplan import day_of_week


def _routine(**kwargs):
    base = {"repetition_type": "daily", "weekly_days": None, "specific_date": None, "is_active": True}
    base.update(kwargs)
    return SimpleNamespace(**base)


def test_day_of_week_numbering_starts_on_sunday():
    assert day_of_week(dt.date(2025, 11, 23)) == 0  # Sunday
    assert day_of_week(dt.date(2025, 11, 24)) == 1  # Monday
    assert day_of_week(dt.date(2025, 11, 29)) == 6  # Saturday


def test_daily_always_applies():
    r = _routine()
    for i in range(14):
        assert is_applicable(r, dt.date(2025, 11, 1) + dt.timedelta(days=i))


def test_weekly_only_on_listed_days():
    r = _routine(repetition_type="weekly", weekly_days=[1, 3])
    start = dt.date(2025, 11, 1)
    for i in range(28):
        d = start + dt.timedelta(days=i)
        assert is_applicable(r, d) == (d.weekday() in (0, 2)), d


def test_weekly_without_days_never_applies():
    assert not is_applicable(_routine(repetition_type="weekly", weekly_days=None), dt.date(2025, 11, 24))
    assert not is_applicable(_routine(repetition_type="weekly", weekly_days=["x"]), dt.date(2025, 11, 24))


def test_single_applies_on_exactly_one_date():
    r = _routine(repetition_type="single", specific_date=dt.date(2025, 11, 26))
    hits = [
        dt.date(2025, 11, 1) + dt.timedelta(days=i)
        for i in range(60)
        if is_applicable(r, dt.date(2025, 11, 1) + dt.timedelta(days=i))
    ]
    assert hits == [dt.date(2025, 11, 26)]


def test_single_accepts_string_dates():
    r = _routine(repetition_type="single", specific_date="2025-11-26")
    assert is_applicable(r, "2025-11-26")
    assert not is_applicable(r, "2025-11-27")


def test_unknown_type_fails_closed():
    assert not is_applicable(_routine(repetition_type="monthly"), dt.date(2025, 11, 24))
    assert not is_applicable(_routine(repetition_type=None), dt.date(2025, 11, 24))


def test_resolver_ignores_active_flag_but_filter_does_not():
    inactive = _routine(is_active=False)
    assert is_applicable(inactive, dt.date(2025, 11, 24))
    assert applicable_routines([inactive, _routine()], dt.date(2025, 11, 24)) == [_routine()]


def test_enum_repetition_types_are_resolved():
    monday = dt.date(2025, 11, 24)
    assert is_applicable(_routine(repetition_type=RepetitionType.DAILY), monday)
    assert is_applicable(_routine(repetition_type=RepetitionType.WEEKLY, weekly_days=[1]), monday)
    assert not is_applicable(_routine(repetition_type=RepetitionType.WEEKLY, weekly_days=[2]), monday)
    assert is_applicable(_routine(repetition_type=RepetitionType.SINGLE, specific_date=monday), monday)
