"""Tests for owner-managed personal events."""

import datetime as dt

import pytest

from shiftplan.domain.models import EventStatus
from shiftplan.exceptions import NotFoundError, PermissionDeniedError, ValidationError
from shiftplan.services.availability import check_availability
from shiftplan.services.events import PersonalEventService

MONDAY = dt.date(2025, 11, 24)


@pytest.fixture
def events(db_session):
    return PersonalEventService(db_session)


def test_create_all_day_event_drops_times(events, member):
    e = events.create_event(
        member, " Leave ", MONDAY, MONDAY + dt.timedelta(days=2), event_type="Vacation",
        start_time="09:00", end_time="10:00",
    )
    assert e.id is not None
    assert e.user_id == member.id
    assert e.title == "Leave"
    assert e.event_type == "vacation"
    assert e.status == EventStatus.PENDING
    assert e.is_all_day is True
    assert e.start_time is None and e.end_time is None


def test_create_timed_event(events, member):
    e = events.create_event(member, "Doctor", "2025-11-24", "2025-11-24", is_all_day=False, start_time="14:00", end_time="15:30")
    assert e.start_time == dt.time(14, 0)
    assert e.end_time == dt.time(15, 30)
    assert e.event_type == "other"


@pytest.mark.parametrize(
    "kwargs",
    [
        {"title": "", "start_date": MONDAY, "end_date": MONDAY},
        {"title": "Leave", "start_date": MONDAY, "end_date": MONDAY - dt.timedelta(days=1)},
        {"title": "Doctor", "start_date": MONDAY, "end_date": MONDAY, "is_all_day": False, "start_time": "14:00"},
        {"title": "Doctor", "start_date": MONDAY, "end_date": MONDAY, "is_all_day": False, "start_time": "15:00", "end_time": "14:00"},
    ],
)
def test_invalid_events_rejected(events, member, kwargs):
    with pytest.raises(ValidationError):
        events.create_event(member, **kwargs)
    assert events.events_for_user(member.id) == []


def test_events_show_up_in_availability(events, member, db_session):
    events.create_event(member, "Leave", MONDAY, MONDAY + dt.timedelta(days=1))

    report = check_availability(db_session, member.id, MONDAY + dt.timedelta(days=1))
    assert report.warning == "User has personal events: Leave"
    assert [e.title for e in events.events_on(member.id, MONDAY)] == ["Leave"]
    assert events.events_on(member.id, MONDAY + dt.timedelta(days=2)) == []


def test_update_event_revalidates_merged_fields(events, member):
    e = events.create_event(member, "Leave", MONDAY, MONDAY + dt.timedelta(days=2))

    with pytest.raises(ValidationError):
        events.update_event(member, e.id, end_date=MONDAY - dt.timedelta(days=1))

    updated = events.update_event(member, e.id, is_all_day=False, start_time="08:00", end_time="12:00", title="Half day")
    assert updated.title == "Half day"
    assert updated.start_time == dt.time(8, 0)

    updated = events.update_event(member, e.id, is_all_day=True)
    assert updated.start_time is None

    with pytest.raises(ValidationError):
        events.update_event(member, e.id, status="approved")


def test_only_owner_can_edit_or_delete(events, member, profiles):
    e = events.create_event(member, "Leave", MONDAY, MONDAY)
    other = profiles["u-2"]

    with pytest.raises(PermissionDeniedError):
        events.update_event(other, e.id, title="Mine now")
    with pytest.raises(PermissionDeniedError):
        events.delete_event(other, e.id)
    assert events.events_for_user(member.id)[0].title == "Leave"


def test_delete_event(events, member):
    e = events.create_event(member, "Leave", MONDAY, MONDAY)
    events.delete_event(member, e.id)
    assert events.events_for_user(member.id) == []

    with pytest.raises(NotFoundError):
        events.delete_event(member, e.id)
    with pytest.raises(NotFoundError):
        events.update_event(member, e.id, title="x")


def test_events_for_user_latest_first(events, member, profiles):
    events.create_event(member, "Early", MONDAY, MONDAY)
    events.create_event(member, "Later", MONDAY + dt.timedelta(days=7), MONDAY + dt.timedelta(days=7))
    events.create_event(profiles["u-2"], "Someone else", MONDAY, MONDAY)

    assert [e.title for e in events.events_for_user(member.id)] == ["Later", "Early"]
