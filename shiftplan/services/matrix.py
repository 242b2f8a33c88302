"""Week matrix: per-user, per-day view of assignments and personal events."""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from shiftplan.config import SchedulerConfig
from shiftplan.domain.repositories import (
    PersonalEventRepository,
    ProfileRepository,
    ShiftAssignmentRepository,
)
from shiftplan.exceptions import StoreError

from .timeplan import WeekWindow, safe_date, week_from_id, week_window


@dataclass
class DayCell:
    date: dt.date
    assignment: Optional[object] = None
    events: List = field(default_factory=list)


Matrix = Dict[str, Dict[dt.date, DayCell]]


def _user_id(user) -> str:
    # Accept Profile objects or bare ids
    return getattr(user, "id", user)


def _covers(event, day: dt.date) -> bool:
    start, end = safe_date(event.start_date), safe_date(event.end_date)
    if start is None or end is None:
        return False
    return start <= day <= end


def build_matrix(users: Iterable, week: WeekWindow, assignments: Iterable, personal_events: Iterable) -> Matrix:
    """
    Arrange a week's rows into ``{user_id: {date: DayCell}}``.

    Every user gets all seven dates of ``week``. Each cell holds at most one
    assignment (the first one seen for that key) and the user's events whose
    [start_date, end_date] contains the date. Pure: no I/O, inputs are not
    modified.
    """
    by_key: Dict[Tuple[str, dt.date], object] = {}
    for a in assignments:
        key = (a.user_id, safe_date(a.date))
        by_key.setdefault(key, a)

    events_by_user: Dict[str, List] = {}
    for e in personal_events:
        events_by_user.setdefault(e.user_id, []).append(e)

    days = week.dates
    matrix: Matrix = {}
    for user in users:
        uid = _user_id(user)
        user_events = events_by_user.get(uid, [])
        matrix[uid] = {
            day: DayCell(
                date=day,
                assignment=by_key.get((uid, day)),
                events=[e for e in user_events if _covers(e, day)],
            )
            for day in days
        }
    return matrix


def resolve_week(week=None, offset: int = 0, cfg: Optional[SchedulerConfig] = None, today=None) -> WeekWindow:
    """Week from a WeekWindow, an ISO week id ("2025-W48"), or an offset from the current week."""
    if isinstance(week, WeekWindow):
        return week
    if isinstance(week, str):
        return week_from_id(week)
    cfg = cfg or SchedulerConfig()
    return week_window(offset, tz=cfg.timezone, today=today)


def week_assignments(session: Session, week: WeekWindow) -> List:
    """Flat list of the week's assignments."""
    try:
        return ShiftAssignmentRepository.get_between(session, week.start, week.end)
    except SQLAlchemyError as e:
        raise StoreError("Could not read assignments") from e


def load_week_matrix(session: Session, week: WeekWindow, users: Optional[Iterable] = None):
    """
    Fetch the rows for ``week`` and build the matrix.

    Args:
        session: Database session
        week: Week to show
        users: Users (rows) to include; defaults to all active profiles

    Returns:
        (users, matrix) so callers can render names in row order
    """
    try:
        if users is None:
            users = ProfileRepository.get_all(session)
        users = list(users)
        assignments = ShiftAssignmentRepository.get_between(session, week.start, week.end)
        events = PersonalEventRepository.get_overlapping(session, week.start, week.end)
    except SQLAlchemyError as e:
        raise StoreError("Could not load week schedule") from e
    return users, build_matrix(users, week, assignments, events)
