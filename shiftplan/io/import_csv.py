"""CSV import utilities to seed the schedule store."""

from __future__ import annotations

import logging
from pathlib import Path

import pandas as pd
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from shiftplan.domain.models import Profile, ShiftTemplate
from shiftplan.domain.repositories import ProfileRepository
from shiftplan.exceptions import StoreError, ValidationError
from shiftplan.services.templates import validate_template_fields
from shiftplan.services.timeplan import coerce_time

logger = logging.getLogger(__name__)

_TRUE = {"TRUE", "T", "1", "YES", "Y"}


def _flag(value) -> bool:
    return pd.notna(value) and str(value).strip().upper() in _TRUE


def _optional_time(value, field: str):
    if pd.isna(value) or not str(value).strip():
        return None
    return coerce_time(str(value).strip(), field)


def import_profiles_csv(session: Session, csv_path: str | Path) -> int:
    """
    Import profiles from CSV (columns: id, full_name, email, role[, is_active]).

    Returns:
        Number of profiles imported

    Raises:
        StoreError: If the rows cannot be written (e.g. a duplicate id); nothing is imported
    """
    df = pd.read_csv(csv_path, dtype={"id": str})

    # Normalize column names
    df.columns = df.columns.str.lower().str.strip()
    missing = {"id", "full_name"} - set(df.columns)
    if missing:
        raise ValidationError(f"Profiles CSV missing columns: {', '.join(sorted(missing))}")

    profiles = []
    for _, row in df.iterrows():
        profiles.append(
            Profile(
                id=str(row["id"]).strip(),
                full_name=str(row["full_name"]).strip(),
                email=str(row["email"]).strip() if pd.notna(row.get("email")) else None,
                role=str(row["role"]).strip().lower() if pd.notna(row.get("role")) else "member",
                is_active=_flag(row["is_active"]) if "is_active" in df.columns else True,
            )
        )

    try:
        ProfileRepository.bulk_create(session, profiles)
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        logger.error("Failed to import profiles from %s: %s", csv_path, e)
        raise StoreError(f"Could not import profiles from {csv_path}") from e

    logger.info("Imported %d profiles from %s", len(profiles), csv_path)
    return len(profiles)


def import_templates_csv(session: Session, csv_path: str | Path) -> int:
    """
    Import shift templates from CSV.

    Columns: name, start_time, end_time[, is_overnight, is_split,
    split_start_time, split_end_time]. Times are "HH:MM".

    Returns:
        Number of templates imported

    Raises:
        ValidationError: If a row has an inconsistent window (nothing is imported)
    """
    df = pd.read_csv(csv_path, dtype=str)
    df.columns = df.columns.str.lower().str.strip()
    missing = {"name", "start_time", "end_time"} - set(df.columns)
    if missing:
        raise ValidationError(f"Templates CSV missing columns: {', '.join(sorted(missing))}")

    templates = []
    for idx, row in df.iterrows():
        values = {
            "name": str(row["name"]).strip(),
            "start_time": coerce_time(str(row["start_time"]).strip(), "start_time"),
            "end_time": coerce_time(str(row["end_time"]).strip(), "end_time"),
            "is_overnight": _flag(row.get("is_overnight")),
            "is_split": _flag(row.get("is_split")),
            "split_start_time": _optional_time(row.get("split_start_time"), "split_start_time"),
            "split_end_time": _optional_time(row.get("split_end_time"), "split_end_time"),
        }
        try:
            validate_template_fields(
                values["start_time"],
                values["end_time"],
                values["is_overnight"],
                values["is_split"],
                values["split_start_time"],
                values["split_end_time"],
            )
        except ValidationError as e:
            raise ValidationError(f"Row {idx + 2} ({values['name']}): {e}") from e
        templates.append(ShiftTemplate(**values))

    try:
        session.add_all(templates)
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        logger.error("Failed to import shift templates from %s: %s", csv_path, e)
        raise StoreError(f"Could not import shift templates from {csv_path}") from e

    logger.info("Imported %d shift templates from %s", len(templates), csv_path)
    return len(templates)
