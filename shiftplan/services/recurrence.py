"""Routine task recurrence resolution against a calendar date."""

from __future__ import annotations

import enum
from typing import Iterable, List, Set

from shiftplan.domain.models import RepetitionType

from .timeplan import day_of_week, safe_date


def _weekday_set(days) -> Set[int]:
    out: Set[int] = set()
    for d in days or []:
        try:
            out.add(int(d))
        except (TypeError, ValueError):
            continue
    return out


def is_applicable(routine, day) -> bool:
    """
    True if ``routine`` should appear on ``day``.

    - daily: always
    - weekly: weekday of ``day`` (0=Sunday .. 6=Saturday) is in ``weekly_days``
    - single: ``day`` equals ``specific_date``
    - anything else: never

    ``is_active`` is not consulted here; callers filter inactive routines first.
    """
    d = safe_date(day)
    if d is None:
        return False

    rtype = getattr(routine, "repetition_type", None)
    if isinstance(rtype, enum.Enum):
        rtype = rtype.value
    rtype = str(rtype or "").strip().lower()

    if rtype == RepetitionType.DAILY.value:
        return True
    if rtype == RepetitionType.WEEKLY.value:
        return day_of_week(d) in _weekday_set(getattr(routine, "weekly_days", None))
    if rtype == RepetitionType.SINGLE.value:
        specific = safe_date(getattr(routine, "specific_date", None))
        return specific is not None and specific == d
    return False


def applicable_routines(routines: Iterable, day) -> List:
    """Filter routines to the active ones applicable on ``day``."""
    return [r for r in routines if getattr(r, "is_active", True) and is_applicable(r, day)]
