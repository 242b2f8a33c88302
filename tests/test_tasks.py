"""Tests for scheduled tasks (double-booking) and routine tasks (soft delete)."""

import datetime as dt

import pytest

from shiftplan.domain.models import RoutineStatus, RoutineTask, ScheduledTask
from shiftplan.exceptions import ConflictError, NotFoundError, PermissionDeniedError, ValidationError
from shiftplan.services.tasks import RoutineTaskService, ScheduledTaskService, daily_agenda

MONDAY = dt.date(2025, 11, 24)


@pytest.fixture
def tasks(db_session):
    return ScheduledTaskService(db_session)


@pytest.fixture
def routines(db_session):
    return RoutineTaskService(db_session)


def test_create_task_defaults(tasks, member):
    t = tasks.create_task(member, "Write report", MONDAY, "09:00", "10:00")
    assert t.id is not None
    assert t.user_id == member.id
    assert t.status == "ongoing"
    assert t.is_recurring is False


def test_overlapping_task_rejected_touching_accepted(tasks, member, db_session):
    tasks.create_task(member, "Meeting", MONDAY, "09:00", "10:00")

    with pytest.raises(ConflictError) as exc:
        tasks.create_task(member, "Call", MONDAY, "09:30", "09:45")
    assert [t.title for t in exc.value.conflicts] == ["Meeting"]
    assert "Meeting" in str(exc.value)

    tasks.create_task(member, "Review", MONDAY, "10:00", "11:00")
    assert db_session.query(ScheduledTask).count() == 2


def test_no_conflict_across_users_or_days(tasks, profiles):
    tasks.create_task(profiles["u-1"], "Meeting", MONDAY, "09:00", "10:00")
    tasks.create_task(profiles["u-2"], "Meeting", MONDAY, "09:00", "10:00")
    tasks.create_task(profiles["u-1"], "Meeting", MONDAY + dt.timedelta(days=1), "09:00", "10:00")


@pytest.mark.parametrize("start,end", [("10:00", "09:00"), ("10:00", "10:00"), ("ten", "11:00")])
def test_task_times_validated(tasks, member, start, end):
    with pytest.raises(ValidationError):
        tasks.create_task(member, "Bad", MONDAY, start, end)


def test_task_requires_title(tasks, member):
    with pytest.raises(ValidationError):
        tasks.create_task(member, "  ", MONDAY, "09:00", "10:00")


def test_recurring_task_needs_valid_weekdays(tasks, member):
    with pytest.raises(ValidationError):
        tasks.create_task(member, "Gym", MONDAY, "07:00", "08:00", is_recurring=True, recurring_days=[])
    with pytest.raises(ValidationError):
        tasks.create_task(member, "Gym", MONDAY, "07:00", "08:00", is_recurring=True, recurring_days=[7])
    t = tasks.create_task(member, "Gym", MONDAY, "07:00", "08:00", is_recurring=True, recurring_days=[3, 1])
    assert t.recurring_days == [1, 3]


def test_update_task_rechecks_conflicts_excluding_itself(tasks, member):
    a = tasks.create_task(member, "A", MONDAY, "09:00", "10:00")
    tasks.create_task(member, "B", MONDAY, "11:00", "12:00")

    moved = tasks.update_task(member, a.id, start_time="09:15", end_time="10:15")
    assert moved.start_time == dt.time(9, 15)

    with pytest.raises(ConflictError):
        tasks.update_task(member, a.id, end_time="11:30")


def test_only_owner_can_update_or_delete(tasks, profiles):
    t = tasks.create_task(profiles["u-1"], "Mine", MONDAY, "09:00", "10:00")
    with pytest.raises(PermissionDeniedError):
        tasks.update_task(profiles["u-2"], t.id, title="Hijacked")
    with pytest.raises(PermissionDeniedError):
        tasks.delete_task(profiles["admin-1"], t.id)


def test_complete_and_delete_task(tasks, member, db_session):
    t = tasks.create_task(member, "Finish", MONDAY, "09:00", "10:00")
    done = tasks.complete_task(member, t.id)
    assert done.status == "completed"
    assert done.completed_at is not None

    tasks.delete_task(member, t.id)
    assert db_session.query(ScheduledTask).count() == 0
    with pytest.raises(NotFoundError):
        tasks.delete_task(member, t.id)


def test_update_rejects_unknown_fields_and_status(tasks, member):
    t = tasks.create_task(member, "X", MONDAY, "09:00", "10:00")
    with pytest.raises(ValidationError):
        tasks.update_task(member, t.id, user_id="u-2")
    with pytest.raises(ValidationError):
        tasks.update_task(member, t.id, status="paused")


def test_create_routine_validation(routines, member):
    with pytest.raises(ValidationError):
        routines.create_routine(member, "Weekly", "09:00", "10:00", "weekly")
    with pytest.raises(ValidationError):
        routines.create_routine(member, "Once", "09:00", "10:00", "single")
    with pytest.raises(ValidationError):
        routines.create_routine(member, "Monthly", "09:00", "10:00", "monthly")
    with pytest.raises(ValidationError):
        routines.create_routine(member, "Backwards", "10:00", "09:00", "daily")


def test_routines_for_day(routines, member):
    routines.create_routine(member, "Standup", "09:00", "09:15", "daily")
    routines.create_routine(member, "Mon/Wed sync", "15:00", "16:00", "WEEKLY", weekly_days=[1, 3])
    routines.create_routine(member, "Audit", "13:00", "14:00", "single", specific_date="2025-11-25")

    assert [r.title for r in routines.routines_for_day(member.id, MONDAY)] == ["Standup", "Mon/Wed sync"]
    assert [r.title for r in routines.routines_for_day(member.id, "2025-11-25")] == ["Standup", "Audit"]


def test_deactivate_routine_is_soft_and_idempotent(routines, member, db_session):
    r = routines.create_routine(member, "Standup", "09:00", "09:15", "daily")
    routines.deactivate_routine(member, r.id)
    again = routines.deactivate_routine(member, r.id)

    assert again.status == RoutineStatus.INACTIVE
    assert not again.is_active
    assert db_session.query(RoutineTask).count() == 1
    assert routines.routines_for_day(member.id, MONDAY) == []


def test_deactivate_routine_owner_only(routines, profiles):
    r = routines.create_routine(profiles["u-1"], "Standup", "09:00", "09:15", "daily")
    with pytest.raises(PermissionDeniedError):
        routines.deactivate_routine(profiles["u-2"], r.id)
    with pytest.raises(NotFoundError):
        routines.deactivate_routine(profiles["u-1"], 999)


def test_daily_agenda_merges_tasks_and_routines(db_session, tasks, routines, member):
    tasks.create_task(member, "Client call", MONDAY, "11:00", "12:00")
    routines.create_routine(member, "Standup", "09:00", "09:15", "daily")

    agenda = daily_agenda(db_session, member.id, MONDAY)
    assert [(i.kind, i.title) for i in agenda] == [("routine", "Standup"), ("task", "Client call")]
