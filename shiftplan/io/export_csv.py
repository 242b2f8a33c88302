"""CSV export of the week matrix and assignment lists."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Iterable, Optional

import pandas as pd

from shiftplan.services.matrix import DayCell, Matrix
from shiftplan.services.time_window import ShiftWindow, window_minutes

logger = logging.getLogger(__name__)


def cell_label(cell: DayCell) -> str:
    """Text for one matrix cell: shift window plus event titles in brackets."""
    parts = []
    if cell.assignment is not None:
        parts.append(ShiftWindow.from_record(cell.assignment).label())
    if cell.events:
        parts.append("[" + "; ".join(e.title for e in cell.events) + "]")
    return " ".join(parts)


def matrix_to_dataframe(matrix: Matrix, names: Optional[Dict[str, str]] = None) -> pd.DataFrame:
    """
    One row per user, one column per date (YYYY-MM-DD), plus weekly hours.

    Args:
        matrix: Output of build_matrix
        names: Optional user_id -> display name mapping
    """
    names = names or {}
    rows = []
    for user_id, days in matrix.items():
        row = {"user_id": user_id, "name": names.get(user_id, user_id)}
        minutes = 0
        for day, cell in sorted(days.items()):
            row[day.strftime("%Y-%m-%d")] = cell_label(cell)
            if cell.assignment is not None:
                minutes += window_minutes(ShiftWindow.from_record(cell.assignment))
        row["hours"] = round(minutes / 60.0, 2)
        rows.append(row)
    return pd.DataFrame(rows)


def export_matrix_csv(matrix: Matrix, csv_path: str | Path, names: Optional[Dict[str, str]] = None) -> int:
    """Write the week matrix to CSV. Returns number of user rows written."""
    df = matrix_to_dataframe(matrix, names)
    df.to_csv(csv_path, index=False)
    logger.info("Exported week matrix (%d users) to %s", len(df), csv_path)
    return len(df)


def assignments_to_dataframe(assignments: Iterable) -> pd.DataFrame:
    cols = [
        "user_id",
        "date",
        "shift_template_id",
        "start_time",
        "end_time",
        "is_overnight",
        "is_split",
        "split_start_time",
        "split_end_time",
        "created_by",
    ]
    records = [{c: getattr(a, c) for c in cols} for a in assignments]
    df = pd.DataFrame(records, columns=cols)
    for c in ("start_time", "end_time", "split_start_time", "split_end_time"):
        df[c] = df[c].map(lambda t: t.strftime("%H:%M") if pd.notna(t) and t is not None else "")
    return df


def export_assignments_csv(assignments: Iterable, csv_path: str | Path) -> int:
    """Write a flat assignment list to CSV. Returns number of rows written."""
    df = assignments_to_dataframe(assignments)
    df.to_csv(csv_path, index=False)
    logger.info("Exported %d assignments to %s", len(df), csv_path)
    return len(df)
