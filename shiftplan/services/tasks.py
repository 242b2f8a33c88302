"""Owner-managed scheduled (ad-hoc) tasks and routine tasks."""

from __future__ import annotations

import datetime as dt
import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from shiftplan.domain.models import RepetitionType, RoutineStatus, RoutineTask, ScheduledTask, utc_now
from shiftplan.domain.repositories import RoutineTaskRepository, ScheduledTaskRepository
from shiftplan.exceptions import ConflictError, NotFoundError, StoreError, ValidationError

from .access import require_owner
from .conflicts import find_conflicts
from .recurrence import applicable_routines
from .timeplan import coerce_date, coerce_time, format_hm, to_minutes

logger = logging.getLogger(__name__)

TASK_STATUSES = ("ongoing", "completed")


def _validate_times(start_time, end_time):
    start = coerce_time(start_time, "start_time")
    end = coerce_time(end_time, "end_time")
    if to_minutes(end) <= to_minutes(start):
        raise ValidationError(f"End time {format_hm(end)} must be after start time {format_hm(start)}")
    return start, end


def _validate_weekdays(days: Optional[Iterable]) -> List[int]:
    try:
        out = sorted({int(d) for d in days or []})
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Weekdays must be integers 0-6, got {days!r}") from e
    bad = [d for d in out if d < 0 or d > 6]
    if bad:
        raise ValidationError(f"Weekdays must be in 0-6 (0=Sunday), got {bad}")
    return out


class ScheduledTaskService:
    """Book, edit and delete a user's ad-hoc tasks without double-booking."""

    def __init__(self, session: Session):
        self.session = session

    def _get(self, task_id: int) -> ScheduledTask:
        try:
            task = ScheduledTaskRepository.get_by_id(self.session, task_id)
        except SQLAlchemyError as e:
            raise StoreError("Could not load scheduled task") from e
        if task is None:
            raise NotFoundError(f"Scheduled task {task_id} not found")
        return task

    def _check_conflicts(self, user_id: str, day: dt.date, start, end, exclude_id=None) -> None:
        try:
            existing = ScheduledTaskRepository.get_for_user_on(self.session, user_id, day)
        except SQLAlchemyError as e:
            raise StoreError("Could not load existing tasks") from e
        existing = [t for t in existing if t.id != exclude_id]
        clashes = find_conflicts(start, end, existing)
        if clashes:
            names = ", ".join(f"{t.title} ({format_hm(t.start_time)}-{format_hm(t.end_time)})" for t in clashes)
            logger.warning("Rejected task for %s on %s %s-%s: overlaps %s", user_id, day, format_hm(start), format_hm(end), names)
            raise ConflictError(f"Time slot conflicts with: {names}", conflicts=clashes)

    def create_task(
        self,
        actor,
        title: str,
        day,
        start_time,
        end_time,
        description: Optional[str] = None,
        is_recurring: bool = False,
        recurring_days: Optional[Iterable] = None,
    ) -> ScheduledTask:
        """
        Book a task for the actor on ``day``.

        Raises:
            ValidationError: Missing title or end time not after start time
            ConflictError: The slot overlaps one of the actor's tasks that day
        """
        if not title or not str(title).strip():
            raise ValidationError("Task title is required")
        day = coerce_date(day)
        start, end = _validate_times(start_time, end_time)
        days = _validate_weekdays(recurring_days) if is_recurring else None
        if is_recurring and not days:
            raise ValidationError("Recurring tasks need at least one weekday")

        # Check and insert happen in the same transaction
        self._check_conflicts(actor.id, day, start, end)
        task = ScheduledTask(
            user_id=actor.id,
            title=str(title).strip(),
            description=description,
            date=day,
            start_time=start,
            end_time=end,
            status="ongoing",
            is_recurring=bool(is_recurring),
            recurring_days=days,
        )
        try:
            ScheduledTaskRepository.create(self.session, task)
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error("Failed to create task for %s: %s", actor.id, e)
            raise StoreError("Could not create scheduled task") from e

        logger.info("Created task %s for %s on %s", task.id, actor.id, day)
        return task

    def update_task(self, actor, task_id: int, **changes) -> ScheduledTask:
        """Edit an owned task. Time/date changes are re-checked for conflicts."""
        allowed = {"title", "description", "date", "start_time", "end_time", "status"}
        unknown = set(changes) - allowed
        if unknown:
            raise ValidationError(f"Unknown task fields: {', '.join(sorted(unknown))}")

        task = self._get(task_id)
        require_owner(actor, task, "edit this task")

        day = coerce_date(changes["date"]) if "date" in changes else task.date
        start, end = _validate_times(changes.get("start_time", task.start_time), changes.get("end_time", task.end_time))
        status = changes.get("status", task.status)
        if status not in TASK_STATUSES:
            raise ValidationError(f"Unknown task status {status!r}")

        if {"date", "start_time", "end_time"} & set(changes):
            self._check_conflicts(task.user_id, day, start, end, exclude_id=task.id)

        if "title" in changes:
            if not changes["title"] or not str(changes["title"]).strip():
                raise ValidationError("Task title is required")
            task.title = str(changes["title"]).strip()
        if "description" in changes:
            task.description = changes["description"]
        task.date, task.start_time, task.end_time = day, start, end
        if status == "completed" and task.status != "completed":
            task.completed_at = utc_now()
        task.status = status

        try:
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise StoreError("Could not update scheduled task") from e
        logger.info("Updated task %s", task_id)
        return task

    def complete_task(self, actor, task_id: int) -> ScheduledTask:
        return self.update_task(actor, task_id, status="completed")

    def delete_task(self, actor, task_id: int) -> None:
        task = self._get(task_id)
        require_owner(actor, task, "delete this task")
        try:
            ScheduledTaskRepository.delete(self.session, task)
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise StoreError("Could not delete scheduled task") from e
        logger.info("Deleted task %s", task_id)

    def tasks_for_day(self, user_id: str, day) -> List[ScheduledTask]:
        try:
            return ScheduledTaskRepository.get_for_user_on(self.session, user_id, coerce_date(day))
        except SQLAlchemyError as e:
            raise StoreError("Could not load scheduled tasks") from e


class RoutineTaskService:
    """Create and soft-delete routine tasks; resolve which apply on a date."""

    def __init__(self, session: Session):
        self.session = session

    def create_routine(
        self,
        actor,
        title: str,
        start_time,
        end_time,
        repetition_type: str,
        weekly_days: Optional[Iterable] = None,
        specific_date=None,
    ) -> RoutineTask:
        """
        Create a routine for the actor.

        Raises:
            ValidationError: weekly without weekdays, single without a date,
                unknown repetition type, or end time not after start time
        """
        if not title or not str(title).strip():
            raise ValidationError("Routine title is required")
        start, end = _validate_times(start_time, end_time)

        try:
            rtype = RepetitionType(str(repetition_type).strip().lower())
        except ValueError as e:
            raise ValidationError(f"Unknown repetition type {repetition_type!r}") from e

        days = None
        single_day = None
        if rtype is RepetitionType.WEEKLY:
            days = _validate_weekdays(weekly_days)
            if not days:
                raise ValidationError("Weekly routines need at least one weekday")
        elif rtype is RepetitionType.SINGLE:
            if specific_date is None:
                raise ValidationError("Single routines need a specific date")
            single_day = coerce_date(specific_date, "specific_date")

        routine = RoutineTask(
            user_id=actor.id,
            title=str(title).strip(),
            start_time=start,
            end_time=end,
            repetition_type=rtype.value,
            weekly_days=days,
            specific_date=single_day,
            status=RoutineStatus.ACTIVE,
        )
        try:
            RoutineTaskRepository.create(self.session, routine)
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error("Failed to create routine for %s: %s", actor.id, e)
            raise StoreError("Could not create routine task") from e

        logger.info("Created %s routine %s for %s", rtype.value, routine.id, actor.id)
        return routine

    def deactivate_routine(self, actor, routine_id: int) -> RoutineTask:
        """Soft delete: flip status to inactive. Repeating the call is harmless."""
        try:
            routine = RoutineTaskRepository.get_by_id(self.session, routine_id)
        except SQLAlchemyError as e:
            raise StoreError("Could not load routine task") from e
        if routine is None:
            raise NotFoundError(f"Routine task {routine_id} not found")
        require_owner(actor, routine, "delete this routine")

        if routine.is_active:
            routine.status = RoutineStatus.INACTIVE
            routine.deactivated_at = utc_now()
            try:
                self.session.commit()
            except SQLAlchemyError as e:
                self.session.rollback()
                raise StoreError("Could not deactivate routine task") from e
            logger.info("Deactivated routine %s", routine_id)
        return routine

    def routines_for_day(self, user_id: str, day) -> List[RoutineTask]:
        day = coerce_date(day)
        try:
            routines = RoutineTaskRepository.get_active_for_user(self.session, user_id)
        except SQLAlchemyError as e:
            raise StoreError("Could not load routine tasks") from e
        return applicable_routines(routines, day)


@dataclass
class AgendaItem:
    kind: str  # "task" or "routine"
    title: str
    start_time: dt.time
    end_time: dt.time
    source: object


def daily_agenda(session: Session, user_id: str, day) -> List[AgendaItem]:
    """Scheduled tasks and applicable routines for one user and date, by start time."""
    tasks = ScheduledTaskService(session).tasks_for_day(user_id, day)
    routines = RoutineTaskService(session).routines_for_day(user_id, day)
    items = [AgendaItem("task", t.title, t.start_time, t.end_time, t) for t in tasks]
    items += [AgendaItem("routine", r.title, r.start_time, r.end_time, r) for r in routines]
    return sorted(items, key=lambda item: (to_minutes(item.start_time) or 0, item.kind))
