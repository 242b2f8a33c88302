"""SQLAlchemy models for the team schedule store."""

from __future__ import annotations

import datetime as dt
import enum

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    String,
    Text,
    Time,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, relationship


def utc_now() -> dt.datetime:
    """Current UTC time as a naive datetime (the DateTime columns store naive UTC)."""
    return dt.datetime.now(dt.timezone.utc).replace(tzinfo=None)


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


class RepetitionType(str, enum.Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    SINGLE = "single"


class RoutineStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class EventStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    DENIED = "denied"


class Profile(Base):
    """Read model of a team member. Managed by the external auth/profile layer."""

    __tablename__ = "profiles"

    id = Column(String(64), primary_key=True)
    full_name = Column(String(200), nullable=False)
    email = Column(String(200), nullable=True)
    role = Column(String(20), nullable=False, default="member")  # admin, member
    is_active = Column(Boolean, nullable=False, default=True)

    def __repr__(self) -> str:
        return f"<Profile(id={self.id}, name='{self.full_name}', role='{self.role}')>"


class ShiftTemplate(Base):
    """Reusable shift definition. Times are civil time-of-day in the configured zone."""

    __tablename__ = "shift_templates"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    is_overnight = Column(Boolean, nullable=False, default=False)
    is_split = Column(Boolean, nullable=False, default=False)
    split_start_time = Column(Time, nullable=True)
    split_end_time = Column(Time, nullable=True)

    def __repr__(self) -> str:
        return f"<ShiftTemplate(id={self.id}, name='{self.name}', {self.start_time}-{self.end_time})>"


class ShiftAssignment(Base):
    """
    One user's shift on one date.

    Window fields are a snapshot copied from the template at assignment time,
    so later template edits do not rewrite history.
    """

    __tablename__ = "user_schedules"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(64), nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)
    shift_template_id = Column(Integer, ForeignKey("shift_templates.id", ondelete="SET NULL"), nullable=True)

    # Snapshot of the template window
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    is_overnight = Column(Boolean, nullable=False, default=False)
    is_split = Column(Boolean, nullable=False, default=False)
    split_start_time = Column(Time, nullable=True)
    split_end_time = Column(Time, nullable=True)

    created_by = Column(String(64), nullable=True)
    created_at = Column(DateTime, nullable=False, default=utc_now)

    template = relationship("ShiftTemplate")

    __table_args__ = (
        UniqueConstraint("user_id", "date", name="uq_user_schedules_user_date"),
    )

    def __repr__(self) -> str:
        return f"<ShiftAssignment(user={self.user_id}, date={self.date}, template={self.shift_template_id})>"


class ScheduledTask(Base):
    """Ad-hoc task a user books into a time slot on one date."""

    __tablename__ = "scheduled_tasks"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(64), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    date = Column(Date, nullable=False, index=True)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    status = Column(String(20), nullable=False, default="ongoing")  # ongoing, completed
    is_recurring = Column(Boolean, nullable=False, default=False)
    recurring_days = Column(JSON, nullable=True)  # list of weekday numbers, 0=Sunday
    created_at = Column(DateTime, nullable=False, default=utc_now)
    completed_at = Column(DateTime, nullable=True)

    def __repr__(self) -> str:
        return f"<ScheduledTask(id={self.id}, user={self.user_id}, {self.date} {self.start_time}-{self.end_time})>"


class RoutineTask(Base):
    """Recurring task (daily, on given weekdays, or once). Never hard-deleted."""

    __tablename__ = "routine_tasks"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(64), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    # Plain text so unrecognised values are kept and resolve as not applicable
    repetition_type = Column(String(10), nullable=False)
    weekly_days = Column(JSON, nullable=True)  # 0=Sunday .. 6=Saturday
    specific_date = Column(Date, nullable=True)
    status = Column(Enum(RoutineStatus), nullable=False, default=RoutineStatus.ACTIVE)
    created_at = Column(DateTime, nullable=False, default=utc_now)
    deactivated_at = Column(DateTime, nullable=True)

    @property
    def is_active(self) -> bool:
        return self.status in (None, RoutineStatus.ACTIVE)

    def __repr__(self) -> str:
        return f"<RoutineTask(id={self.id}, user={self.user_id}, type={self.repetition_type}, status={self.status})>"


class PersonalEvent(Base):
    """Leave, appointment or other personal event spanning one or more dates."""

    __tablename__ = "personal_events"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(64), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    event_type = Column(String(50), nullable=False, default="other")
    description = Column(Text, nullable=True)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    is_all_day = Column(Boolean, nullable=False, default=True)
    start_time = Column(Time, nullable=True)
    end_time = Column(Time, nullable=True)
    status = Column(Enum(EventStatus), nullable=False, default=EventStatus.PENDING)

    def covers(self, day: dt.date) -> bool:
        """True if ``day`` lies in [start_date, end_date], both ends inclusive."""
        return self.start_date <= day <= self.end_date

    def __repr__(self) -> str:
        return f"<PersonalEvent(id={self.id}, user={self.user_id}, '{self.title}', {self.start_date}..{self.end_date})>"
