"""Repository classes for data access.

Write methods add/flush only. Services own commit and rollback so a batch
can be made all-or-nothing.
"""

from __future__ import annotations

from datetime import date
from typing import Dict, Iterable, List, Optional

from sqlalchemy.orm import Session

from .models import (
    PersonalEvent,
    Profile,
    RoutineStatus,
    RoutineTask,
    ScheduledTask,
    ShiftAssignment,
    ShiftTemplate,
)

# Columns rewritten when an assignment already exists for (user_id, date)
ASSIGNMENT_REPLACE_FIELDS = (
    "shift_template_id",
    "start_time",
    "end_time",
    "is_overnight",
    "is_split",
    "split_start_time",
    "split_end_time",
    "created_by",
    "created_at",
)


class ProfileRepository:
    """Repository for profile (user) data access."""

    @staticmethod
    def get_all(session: Session, active_only: bool = True) -> List[Profile]:
        """Get all profiles ordered by name."""
        query = session.query(Profile)
        if active_only:
            query = query.filter(Profile.is_active.is_(True))
        return query.order_by(Profile.full_name).all()

    @staticmethod
    def get_by_id(session: Session, user_id: str) -> Optional[Profile]:
        """Get profile by ID."""
        return session.query(Profile).filter(Profile.id == user_id).first()

    @staticmethod
    def bulk_create(session: Session, profiles: List[Profile]) -> None:
        """Add multiple profiles."""
        session.add_all(profiles)
        session.flush()


class ShiftTemplateRepository:
    """Repository for shift template data access."""

    @staticmethod
    def get_all(session: Session) -> List[ShiftTemplate]:
        """Get all templates ordered by name."""
        return session.query(ShiftTemplate).order_by(ShiftTemplate.name).all()

    @staticmethod
    def get_by_id(session: Session, template_id: int) -> Optional[ShiftTemplate]:
        """Get template by ID."""
        return session.query(ShiftTemplate).filter(ShiftTemplate.id == template_id).first()

    @staticmethod
    def create(session: Session, template: ShiftTemplate) -> ShiftTemplate:
        """Add a new template and assign its ID."""
        session.add(template)
        session.flush()
        return template


class ShiftAssignmentRepository:
    """Repository for shift assignment data access."""

    @staticmethod
    def get(session: Session, user_id: str, day: date) -> Optional[ShiftAssignment]:
        """Get the assignment for one (user, date) slot."""
        return (
            session.query(ShiftAssignment)
            .filter(ShiftAssignment.user_id == user_id, ShiftAssignment.date == day)
            .first()
        )

    @staticmethod
    def get_for_date(session: Session, day: date) -> List[ShiftAssignment]:
        """Get all assignments on a date."""
        return (
            session.query(ShiftAssignment)
            .filter(ShiftAssignment.date == day)
            .order_by(ShiftAssignment.start_time)
            .all()
        )

    @staticmethod
    def get_between(session: Session, start: date, end: date) -> List[ShiftAssignment]:
        """Get all assignments with start <= date <= end."""
        return (
            session.query(ShiftAssignment)
            .filter(ShiftAssignment.date >= start, ShiftAssignment.date <= end)
            .order_by(ShiftAssignment.date, ShiftAssignment.user_id)
            .all()
        )

    @staticmethod
    def get_for_user_between(session: Session, user_id: str, start: date, end: date) -> List[ShiftAssignment]:
        """Get one user's assignments with start <= date <= end."""
        return (
            session.query(ShiftAssignment)
            .filter(
                ShiftAssignment.user_id == user_id,
                ShiftAssignment.date >= start,
                ShiftAssignment.date <= end,
            )
            .order_by(ShiftAssignment.date)
            .all()
        )

    @staticmethod
    def upsert_many(session: Session, rows: List[Dict]) -> int:
        """
        Insert or replace assignments keyed on (user_id, date) in one statement.

        Uses INSERT ... ON CONFLICT DO UPDATE on PostgreSQL and SQLite. Other
        dialects fall back to a lookup-then-update loop in the same transaction.

        Args:
            session: Database session
            rows: Column dicts, at most one per (user_id, date)

        Returns:
            Number of rows submitted
        """
        if not rows:
            return 0

        dialect = session.get_bind().dialect.name
        if dialect == "postgresql":
            from sqlalchemy.dialects.postgresql import insert
        elif dialect == "sqlite":
            from sqlalchemy.dialects.sqlite import insert
        else:
            return ShiftAssignmentRepository._upsert_by_lookup(session, rows)

        stmt = insert(ShiftAssignment).values(rows)
        stmt = stmt.on_conflict_do_update(
            index_elements=["user_id", "date"],
            set_={field: stmt.excluded[field] for field in ASSIGNMENT_REPLACE_FIELDS},
        )
        session.execute(stmt)
        return len(rows)

    @staticmethod
    def _upsert_by_lookup(session: Session, rows: Iterable[Dict]) -> int:
        count = 0
        for row in rows:
            existing = ShiftAssignmentRepository.get(session, row["user_id"], row["date"])
            if existing:
                for field in ASSIGNMENT_REPLACE_FIELDS:
                    setattr(existing, field, row.get(field))
            else:
                session.add(ShiftAssignment(**row))
            count += 1
        session.flush()
        return count

    @staticmethod
    def delete(session: Session, user_id: str, day: date) -> int:
        """Delete the assignment for (user, date). Returns number of deleted rows."""
        return (
            session.query(ShiftAssignment)
            .filter(ShiftAssignment.user_id == user_id, ShiftAssignment.date == day)
            .delete(synchronize_session=False)
        )


class ScheduledTaskRepository:
    """Repository for ad-hoc scheduled task data access."""

    @staticmethod
    def get_by_id(session: Session, task_id: int) -> Optional[ScheduledTask]:
        """Get task by ID."""
        return session.query(ScheduledTask).filter(ScheduledTask.id == task_id).first()

    @staticmethod
    def get_for_user_on(session: Session, user_id: str, day: date) -> List[ScheduledTask]:
        """Get one user's tasks on a date ordered by start time."""
        return (
            session.query(ScheduledTask)
            .filter(ScheduledTask.user_id == user_id, ScheduledTask.date == day)
            .order_by(ScheduledTask.start_time)
            .all()
        )

    @staticmethod
    def create(session: Session, task: ScheduledTask) -> ScheduledTask:
        """Add a new task and assign its ID."""
        session.add(task)
        session.flush()
        return task

    @staticmethod
    def delete(session: Session, task: ScheduledTask) -> None:
        """Delete a task."""
        session.delete(task)
        session.flush()


class RoutineTaskRepository:
    """Repository for routine task data access."""

    @staticmethod
    def get_by_id(session: Session, routine_id: int) -> Optional[RoutineTask]:
        """Get routine by ID (active or not)."""
        return session.query(RoutineTask).filter(RoutineTask.id == routine_id).first()

    @staticmethod
    def get_active_for_user(session: Session, user_id: str) -> List[RoutineTask]:
        """Get a user's active routines ordered by start time."""
        return (
            session.query(RoutineTask)
            .filter(RoutineTask.user_id == user_id, RoutineTask.status == RoutineStatus.ACTIVE)
            .order_by(RoutineTask.start_time)
            .all()
        )

    @staticmethod
    def create(session: Session, routine: RoutineTask) -> RoutineTask:
        """Add a new routine and assign its ID."""
        session.add(routine)
        session.flush()
        return routine


class PersonalEventRepository:
    """Repository for personal event data access."""

    @staticmethod
    def get_by_id(session: Session, event_id: int) -> Optional[PersonalEvent]:
        """Get event by ID."""
        return session.query(PersonalEvent).filter(PersonalEvent.id == event_id).first()

    @staticmethod
    def get_for_user(session: Session, user_id: str) -> List[PersonalEvent]:
        """Get all of one user's events, latest start date first."""
        return (
            session.query(PersonalEvent)
            .filter(PersonalEvent.user_id == user_id)
            .order_by(PersonalEvent.start_date.desc(), PersonalEvent.id.desc())
            .all()
        )

    @staticmethod
    def get_covering(session: Session, user_id: str, day: date) -> List[PersonalEvent]:
        """Get one user's events with start_date <= day <= end_date."""
        return (
            session.query(PersonalEvent)
            .filter(
                PersonalEvent.user_id == user_id,
                PersonalEvent.start_date <= day,
                PersonalEvent.end_date >= day,
            )
            .order_by(PersonalEvent.start_date, PersonalEvent.id)
            .all()
        )

    @staticmethod
    def get_overlapping(session: Session, start: date, end: date) -> List[PersonalEvent]:
        """Get all events that intersect [start, end]."""
        return (
            session.query(PersonalEvent)
            .filter(PersonalEvent.start_date <= end, PersonalEvent.end_date >= start)
            .order_by(PersonalEvent.start_date, PersonalEvent.id)
            .all()
        )

    @staticmethod
    def create(session: Session, event: PersonalEvent) -> PersonalEvent:
        """Add a new event and assign its ID."""
        session.add(event)
        session.flush()
        return event

    @staticmethod
    def delete(session: Session, event: PersonalEvent) -> None:
        """Delete an event."""
        session.delete(event)
        session.flush()
