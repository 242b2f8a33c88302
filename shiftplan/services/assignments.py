"""Assignment service: admin-only writes of per-user, per-date shift assignments."""

from __future__ import annotations

import datetime as dt
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from shiftplan.config import SchedulerConfig
from shiftplan.domain.models import ShiftAssignment, utc_now
from shiftplan.domain.repositories import ShiftAssignmentRepository, ShiftTemplateRepository
from shiftplan.exceptions import NotFoundError, StoreError, ValidationError

from .access import require_admin
from .timeplan import coerce_date

logger = logging.getLogger(__name__)

SlotKey = Tuple[str, dt.date]


@dataclass
class FailedRow:
    user_id: str
    date: dt.date
    error: str


@dataclass
class BatchResult:
    """Outcome of a bulk or copy operation."""

    requested: int = 0
    written: int = 0
    failed: List[FailedRow] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed


def snapshot_row(source, user_id: str, day: dt.date, created_by: Optional[str], template_id=None) -> Dict:
    """
    Column dict for one assignment, copying the window fields from ``source``.

    ``source`` is a ShiftTemplate (assign/bulk) or another ShiftAssignment (copy).
    """
    return {
        "user_id": user_id,
        "date": day,
        "shift_template_id": template_id,
        "start_time": source.start_time,
        "end_time": source.end_time,
        "is_overnight": bool(source.is_overnight),
        "is_split": bool(source.is_split),
        "split_start_time": source.split_start_time,
        "split_end_time": source.split_end_time,
        "created_by": created_by,
        "created_at": utc_now(),
    }


def _dedupe(rows: Iterable[Dict]) -> List[Dict]:
    # One row per (user_id, date); the later row wins
    by_key: Dict[SlotKey, Dict] = {}
    for row in rows:
        by_key[(row["user_id"], row["date"])] = row
    return list(by_key.values())


class AssignmentService:
    """
    Upsert, remove, bulk-assign and copy shift assignments.

    Every operation requires the actor to hold the admin role. Assignments are
    keyed on (user_id, date); writing an occupied slot replaces it.
    """

    def __init__(self, session: Session, cfg: Optional[SchedulerConfig] = None):
        self.session = session
        self.cfg = cfg or SchedulerConfig()

    def _load_template(self, template_id: int):
        try:
            template = ShiftTemplateRepository.get_by_id(self.session, template_id)
        except SQLAlchemyError as e:
            logger.error("Failed to load template %s: %s", template_id, e)
            raise StoreError("Could not load shift template") from e
        if template is None:
            raise NotFoundError(f"Shift template {template_id} not found")
        return template

    def assign_shift(self, actor, user_id: str, day, template_id: int) -> ShiftAssignment:
        """
        Assign a template to a user on a date, replacing any existing assignment.

        Returns:
            The stored assignment for (user_id, day)

        Raises:
            PermissionDeniedError: If the actor is not an admin
            NotFoundError: If the template does not exist
            StoreError: If the store fails
        """
        require_admin(actor, self.cfg, "assign shifts")
        day = coerce_date(day)
        template = self._load_template(template_id)

        row = snapshot_row(template, user_id, day, getattr(actor, "id", None), template.id)
        try:
            ShiftAssignmentRepository.upsert_many(self.session, [row])
            self.session.commit()
            assignment = ShiftAssignmentRepository.get(self.session, user_id, day)
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error("Failed to assign shift for %s on %s: %s", user_id, day, e)
            raise StoreError("Could not assign shift") from e

        logger.info("Assigned template %s to %s on %s", template.id, user_id, day)
        return assignment

    def remove_shift(self, actor, user_id: str, day) -> bool:
        """
        Delete the assignment for (user_id, day). Absence is not an error.

        Returns:
            True if a row was deleted
        """
        require_admin(actor, self.cfg, "remove shifts")
        day = coerce_date(day)
        try:
            deleted = ShiftAssignmentRepository.delete(self.session, user_id, day)
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error("Failed to remove shift for %s on %s: %s", user_id, day, e)
            raise StoreError("Could not remove shift") from e

        if deleted:
            logger.info("Removed shift for %s on %s", user_id, day)
        return deleted > 0

    def bulk_assign_shifts(self, actor, user_ids: Iterable[str], days: Iterable, template_id: int) -> BatchResult:
        """Assign one template to every (user, date) pair of ``user_ids`` x ``days``."""
        require_admin(actor, self.cfg, "assign shifts")
        dates = [coerce_date(d) for d in days]
        template = self._load_template(template_id)

        created_by = getattr(actor, "id", None)
        rows = [
            snapshot_row(template, user_id, day, created_by, template.id)
            for user_id in user_ids
            for day in dates
        ]
        result = self._write_batch(rows)
        logger.info(
            "Bulk assigned template %s: %d/%d rows written", template.id, result.written, result.requested
        )
        return result

    def copy_shifts(self, actor, source_user_id: str, target_user_ids: Iterable[str], start, end) -> BatchResult:
        """
        Copy the source user's assignments in [start, end] to each target user.

        A source with no assignments in range is a no-op.
        """
        require_admin(actor, self.cfg, "copy shifts")
        start, end = coerce_date(start, "start date"), coerce_date(end, "end date")
        if end < start:
            raise ValidationError(f"End date {end} is before start date {start}")

        try:
            source_rows = ShiftAssignmentRepository.get_for_user_between(self.session, source_user_id, start, end)
        except SQLAlchemyError as e:
            logger.error("Failed to read shifts of %s: %s", source_user_id, e)
            raise StoreError("Could not read source shifts") from e

        targets = list(target_user_ids)
        if not source_rows:
            logger.info("No shifts for %s between %s and %s, nothing copied", source_user_id, start, end)
            return BatchResult()

        created_by = getattr(actor, "id", None)
        rows = [
            snapshot_row(src, target, src.date, created_by, src.shift_template_id)
            for target in targets
            for src in source_rows
        ]
        result = self._write_batch(rows)
        logger.info(
            "Copied %d shifts from %s to %d users (%d rows written)",
            len(source_rows),
            source_user_id,
            len(targets),
            result.written,
        )
        return result

    def _write_batch(self, rows: List[Dict]) -> BatchResult:
        rows = _dedupe(rows)
        result = BatchResult(requested=len(rows))
        if not rows:
            return result

        if self.cfg.atomic_batch:
            try:
                result.written = ShiftAssignmentRepository.upsert_many(self.session, rows)
                self.session.commit()
            except SQLAlchemyError as e:
                self.session.rollback()
                logger.error("Batch of %d assignments rolled back: %s", len(rows), e)
                raise StoreError(f"Batch of {len(rows)} assignments failed, nothing was written") from e
            return result

        # Non-atomic: each row commits on its own, failures are collected
        for row in rows:
            try:
                ShiftAssignmentRepository.upsert_many(self.session, [row])
                self.session.commit()
                result.written += 1
            except SQLAlchemyError as e:
                self.session.rollback()
                result.failed.append(FailedRow(user_id=row["user_id"], date=row["date"], error=str(getattr(e, "orig", None) or e)))

        if result.failed:
            logger.warning("%d of %d assignments failed", len(result.failed), result.requested)
        return result

