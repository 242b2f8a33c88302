"""Admin management of shift templates."""

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from shiftplan.config import SchedulerConfig
from shiftplan.domain.models import ShiftTemplate
from shiftplan.domain.repositories import ShiftTemplateRepository
from shiftplan.exceptions import NotFoundError, StoreError, ValidationError

from .access import require_admin
from .time_window import is_overnight_span
from .timeplan import coerce_time, to_minutes

logger = logging.getLogger(__name__)

_TEMPLATE_FIELDS = (
    "name",
    "start_time",
    "end_time",
    "is_overnight",
    "is_split",
    "split_start_time",
    "split_end_time",
)


def validate_template_fields(
    start_time,
    end_time,
    is_overnight: bool = False,
    is_split: bool = False,
    split_start_time=None,
    split_end_time=None,
) -> None:
    """
    Check a template's window is consistent.

    Raises:
        ValidationError: If a period is unordered or split bounds are missing
    """
    start, end = to_minutes(start_time), to_minutes(end_time)
    if start is None or end is None:
        raise ValidationError("Shift start and end times are required")

    if is_overnight and is_split:
        raise ValidationError("A shift cannot be both overnight and split")

    if is_overnight:
        if not is_overnight_span(start_time, end_time):
            raise ValidationError("Overnight shift must end earlier in the day than it starts")
    elif end <= start:
        raise ValidationError("Shift end time must be after start time")

    if is_split:
        s2, e2 = to_minutes(split_start_time), to_minutes(split_end_time)
        if s2 is None or e2 is None:
            raise ValidationError("Split shift requires split start and end times")
        if e2 <= s2:
            raise ValidationError("Split period end time must be after its start time")
        if s2 < end:
            raise ValidationError("Split period must start after the first period ends")


class ShiftTemplateService:
    """Create and edit shift templates. Existing assignments keep their snapshot."""

    def __init__(self, session: Session, cfg: Optional[SchedulerConfig] = None):
        self.session = session
        self.cfg = cfg or SchedulerConfig()

    def create_template(
        self,
        actor,
        name: str,
        start_time,
        end_time,
        is_overnight: bool = False,
        is_split: bool = False,
        split_start_time=None,
        split_end_time=None,
    ) -> ShiftTemplate:
        require_admin(actor, self.cfg, "create shift templates")
        if not name or not str(name).strip():
            raise ValidationError("Template name is required")

        values = {
            "name": str(name).strip(),
            "start_time": coerce_time(start_time, "start_time"),
            "end_time": coerce_time(end_time, "end_time"),
            "is_overnight": bool(is_overnight),
            "is_split": bool(is_split),
            "split_start_time": coerce_time(split_start_time, "split_start_time") if split_start_time else None,
            "split_end_time": coerce_time(split_end_time, "split_end_time") if split_end_time else None,
        }
        validate_template_fields(
            values["start_time"],
            values["end_time"],
            values["is_overnight"],
            values["is_split"],
            values["split_start_time"],
            values["split_end_time"],
        )

        try:
            template = ShiftTemplateRepository.create(self.session, ShiftTemplate(**values))
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error("Failed to create template %s: %s", values["name"], e)
            raise StoreError("Could not create shift template") from e

        logger.info("Created shift template %s (%s)", template.id, template.name)
        return template

    def update_template(self, actor, template_id: int, **changes) -> ShiftTemplate:
        """Edit template fields. Assignments made earlier are not touched."""
        require_admin(actor, self.cfg, "edit shift templates")
        unknown = set(changes) - set(_TEMPLATE_FIELDS)
        if unknown:
            raise ValidationError(f"Unknown template fields: {', '.join(sorted(unknown))}")

        try:
            template = ShiftTemplateRepository.get_by_id(self.session, template_id)
        except SQLAlchemyError as e:
            raise StoreError("Could not load shift template") from e
        if template is None:
            raise NotFoundError(f"Shift template {template_id} not found")

        merged = {field: getattr(template, field) for field in _TEMPLATE_FIELDS}
        for field, value in changes.items():
            if field == "name":
                if not value or not str(value).strip():
                    raise ValidationError("Template name is required")
                value = str(value).strip()
            elif field.endswith("_time") and value is not None:
                value = coerce_time(value, field)
            merged[field] = value
        validate_template_fields(
            merged["start_time"],
            merged["end_time"],
            bool(merged["is_overnight"]),
            bool(merged["is_split"]),
            merged["split_start_time"],
            merged["split_end_time"],
        )

        for field, value in merged.items():
            setattr(template, field, value)
        try:
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error("Failed to update template %s: %s", template_id, e)
            raise StoreError("Could not update shift template") from e

        logger.info("Updated shift template %s", template_id)
        return template
