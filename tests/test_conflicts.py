"""Tests for scheduled task overlap detection."""

from types import SimpleNamespace

from shiftplan.services.conflicts import find_conflicts, has_conflict, intervals_overlap


def _task(start, end, title="t"):
    return SimpleNamespace(start_time=start, end_time=end, title=title)


def test_contained_interval_conflicts():
    existing = [_task("09:00", "10:00")]
    assert has_conflict(_task("09:30", "09:45"), existing)


def test_touching_boundary_is_not_a_conflict():
    existing = [_task("09:00", "10:00")]
    assert not has_conflict(_task("10:00", "11:00"), existing)
    assert not has_conflict(_task("08:00", "09:00"), existing)


def test_partial_overlaps_and_containment():
    assert intervals_overlap("09:00", "10:00", "09:59", "11:00")
    assert intervals_overlap("09:30", "11:00", "09:00", "10:00")
    assert intervals_overlap("08:00", "12:00", "09:00", "10:00")
    assert intervals_overlap("09:00", "10:00", "09:00", "10:00")


def test_malformed_times_do_not_conflict():
    assert not intervals_overlap("09:00", None, "09:00", "10:00")
    assert not intervals_overlap("x", "10:00", "09:00", "10:00")


def test_find_conflicts_returns_only_overlapping():
    a, b, c = _task("08:00", "09:00", "a"), _task("09:30", "10:30", "b"), _task("11:00", "12:00", "c")
    assert [t.title for t in find_conflicts("09:00", "11:00", [a, b, c])] == ["b"]


def test_empty_existing_never_conflicts():
    assert not has_conflict(_task("09:00", "10:00"), [])
