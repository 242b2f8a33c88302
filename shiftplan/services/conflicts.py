"""Overlap detection between scheduled tasks of one user on one date."""

from __future__ import annotations

from typing import Iterable, List

from .timeplan import to_minutes


def intervals_overlap(a_start, a_end, b_start, b_end) -> bool:
    """
    Half-open interval intersection: a_start < b_end and b_start < a_end.

    Touching endpoints (one ends exactly when the other starts) do not overlap.
    Returns False if any bound is missing or malformed.
    """
    bounds = [to_minutes(v) for v in (a_start, a_end, b_start, b_end)]
    if any(b is None for b in bounds):
        return False
    as_, ae, bs, be = bounds
    return as_ < be and bs < ae


def find_conflicts(start, end, existing: Iterable) -> List:
    """Return existing tasks (anything with start_time/end_time) that overlap [start, end)."""
    return [
        task
        for task in existing
        if intervals_overlap(start, end, task.start_time, task.end_time)
    ]


def has_conflict(candidate, existing: Iterable) -> bool:
    """
    True if ``candidate`` overlaps any task in ``existing``.

    ``existing`` must already be restricted to the same user and date; tasks of
    other users or days are never compared here.
    """
    return bool(find_conflicts(candidate.start_time, candidate.end_time, existing))
