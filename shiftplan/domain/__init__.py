"""Domain models and data access layer."""

from .models import (
    Base,
    EventStatus,
    PersonalEvent,
    Profile,
    RepetitionType,
    RoutineStatus,
    RoutineTask,
    ScheduledTask,
    ShiftAssignment,
    ShiftTemplate,
)
from .repositories import (
    PersonalEventRepository,
    ProfileRepository,
    RoutineTaskRepository,
    ScheduledTaskRepository,
    ShiftAssignmentRepository,
    ShiftTemplateRepository,
)

__all__ = [
    "Base",
    "EventStatus",
    "PersonalEvent",
    "Profile",
    "RepetitionType",
    "RoutineStatus",
    "RoutineTask",
    "ScheduledTask",
    "ShiftAssignment",
    "ShiftTemplate",
    "PersonalEventRepository",
    "ProfileRepository",
    "RoutineTaskRepository",
    "ScheduledTaskRepository",
    "ShiftAssignmentRepository",
    "ShiftTemplateRepository",
]
