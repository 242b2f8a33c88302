"""Shift window evaluation: is a civil time-of-day inside a (split/overnight) shift."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .timeplan import TimeLike, format_hm, to_minutes


@dataclass(frozen=True)
class ShiftWindow:
    start: Optional[TimeLike]
    end: Optional[TimeLike]
    is_overnight: bool = False
    is_split: bool = False
    split_start: Optional[TimeLike] = None
    split_end: Optional[TimeLike] = None

    @classmethod
    def from_record(cls, record) -> "ShiftWindow":
        """Build from a ShiftTemplate or ShiftAssignment (same column names)."""
        return cls(
            start=record.start_time,
            end=record.end_time,
            is_overnight=bool(record.is_overnight),
            is_split=bool(record.is_split),
            split_start=getattr(record, "split_start_time", None),
            split_end=getattr(record, "split_end_time", None),
        )

    def label(self) -> str:
        """Human-readable window, e.g. "09:00-12:00 + 14:00-18:00"."""
        main = f"{format_hm(self.start)}-{format_hm(self.end)}"
        if self.is_split:
            return f"{main} + {format_hm(self.split_start)}-{format_hm(self.split_end)}"
        if self.is_overnight:
            return f"{main} (overnight)"
        return main


def _in_period(now: int, start: Optional[int], end: Optional[int]) -> bool:
    # Both ends inclusive; a missing bound never matches
    if start is None or end is None:
        return False
    return start <= now <= end


def is_within_window(now, window: ShiftWindow) -> bool:
    """
    True if the civil time ``now`` falls inside ``window``.

    - split: either [start, end] or [split_start, split_end] qualifies
    - overnight: now >= start OR now <= end (wraps past midnight)
    - regular: start <= now <= end

    Only the time of day is compared, so overnight windows are an approximation
    meant for "right now" queries. Malformed or missing bounds never match.
    """
    t = to_minutes(now)
    if t is None:
        return False

    start = to_minutes(window.start)
    end = to_minutes(window.end)

    if window.is_split:
        return _in_period(t, start, end) or _in_period(
            t, to_minutes(window.split_start), to_minutes(window.split_end)
        )

    if window.is_overnight:
        return (start is not None and t >= start) or (end is not None and t <= end)

    return _in_period(t, start, end)


def is_overnight_span(start: TimeLike, end: TimeLike) -> bool:
    """True if end time-of-day is earlier than start, i.e. the shift crosses midnight."""
    s, e = to_minutes(start), to_minutes(end)
    if s is None or e is None:
        return False
    return e < s


def window_minutes(window: ShiftWindow) -> int:
    """Total scheduled minutes of the window (0 when bounds are missing)."""
    start, end = to_minutes(window.start), to_minutes(window.end)
    if start is None or end is None:
        return 0
    if window.is_overnight and end < start:
        total = (24 * 60 - start) + end
    else:
        total = max(end - start, 0)
    if window.is_split:
        s2, e2 = to_minutes(window.split_start), to_minutes(window.split_end)
        if s2 is not None and e2 is not None:
            total += max(e2 - s2, 0)
    return total
