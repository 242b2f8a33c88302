"""Services for scheduling logic."""

from .assignments import AssignmentService, BatchResult
from .availability import check_availability, currently_working
from .conflicts import has_conflict, intervals_overlap
from .events import PersonalEventService
from .matrix import build_matrix, load_week_matrix
from .recurrence import is_applicable
from .tasks import RoutineTaskService, ScheduledTaskService, daily_agenda
from .templates import ShiftTemplateService
from .time_window import ShiftWindow, is_within_window
from .timeplan import WeekWindow, week_window

__all__ = [
    "AssignmentService",
    "BatchResult",
    "check_availability",
    "currently_working",
    "has_conflict",
    "intervals_overlap",
    "PersonalEventService",
    "build_matrix",
    "load_week_matrix",
    "is_applicable",
    "RoutineTaskService",
    "ScheduledTaskService",
    "daily_agenda",
    "ShiftTemplateService",
    "ShiftWindow",
    "is_within_window",
    "WeekWindow",
    "week_window",
]
