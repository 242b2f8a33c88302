"""Availability: is a user scheduled on a date, and who is working right now."""

from __future__ import annotations

import datetime as dt
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from shiftplan.config import SchedulerConfig
from shiftplan.domain.repositories import (
    PersonalEventRepository,
    RoutineTaskRepository,
    ShiftAssignmentRepository,
)
from shiftplan.exceptions import StoreError

from .recurrence import applicable_routines
from .time_window import ShiftWindow, is_within_window
from .timeplan import coerce_date, now_in_zone, to_zone

logger = logging.getLogger(__name__)

NO_SHIFT_WARNING = "User has no scheduled shift for this date"


@dataclass
class AvailabilityReport:
    is_scheduled: bool
    schedule: Optional[object] = None
    has_personal_events: bool = False
    events: List = field(default_factory=list)
    warning: Optional[str] = None
    routines: List = field(default_factory=list)


def availability_warning(is_scheduled: bool, events: Sequence) -> Optional[str]:
    """Warning text for the (scheduled?, has events?) combination."""
    titles = ", ".join(e.title for e in events)
    if not is_scheduled and not events:
        return NO_SHIFT_WARNING
    if not is_scheduled:
        return f"User has personal events: {titles}"
    if events:
        return f"User is scheduled but also has events: {titles}"
    return None


def check_availability(session: Session, user_id: str, day) -> AvailabilityReport:
    """
    Combine the user's assignment, personal events and routines on ``day``.

    Raises:
        StoreError: If the store fails
    """
    day = coerce_date(day)
    try:
        schedule = ShiftAssignmentRepository.get(session, user_id, day)
        events = PersonalEventRepository.get_covering(session, user_id, day)
        routines = RoutineTaskRepository.get_active_for_user(session, user_id)
    except SQLAlchemyError as e:
        logger.error("Availability lookup failed for %s on %s: %s", user_id, day, e)
        raise StoreError("Could not check availability") from e

    is_scheduled = schedule is not None
    return AvailabilityReport(
        is_scheduled=is_scheduled,
        schedule=schedule,
        has_personal_events=bool(events),
        events=events,
        warning=availability_warning(is_scheduled, events),
        routines=applicable_routines(routines, day),
    )


def working_at(assignments, now) -> List[str]:
    """User ids whose assignment window contains the civil time of ``now``."""
    return [a.user_id for a in assignments if is_within_window(now, ShiftWindow.from_record(a))]


def currently_working(session: Session, cfg: Optional[SchedulerConfig] = None, now: Optional[dt.datetime] = None) -> List[str]:
    """
    User ids on shift at ``now`` (default: current time in the configured zone).

    An aware ``now`` is first converted to the configured zone; a naive one is
    read as civil time there. Only assignments dated on that civil date are
    considered, so the morning half of an overnight shift that started
    yesterday is not counted.
    """
    cfg = cfg or SchedulerConfig()
    now = now_in_zone(cfg.timezone) if now is None else to_zone(now, cfg.timezone)
    try:
        assignments = ShiftAssignmentRepository.get_for_date(session, now.date())
    except SQLAlchemyError as e:
        logger.error("Failed to read today's shifts: %s", e)
        raise StoreError("Could not check who is working") from e
    return working_at(assignments, now)
