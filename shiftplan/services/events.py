"""Owner-managed personal events (leave, appointments) shown as availability context."""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from shiftplan.domain.models import EventStatus, PersonalEvent
from shiftplan.domain.repositories import PersonalEventRepository
from shiftplan.exceptions import NotFoundError, StoreError, ValidationError

from .access import require_owner
from .timeplan import coerce_date, coerce_time, format_hm, to_minutes

logger = logging.getLogger(__name__)

_EVENT_FIELDS = (
    "title",
    "event_type",
    "description",
    "start_date",
    "end_date",
    "is_all_day",
    "start_time",
    "end_time",
)


def validate_event_fields(values: Dict) -> Dict:
    """
    Normalize and check an event's fields.

    All-day events drop their times; timed events need both, and a timed
    event on a single date must end after it starts.

    Returns:
        The normalized values

    Raises:
        ValidationError: Missing title, end date before start date, or bad times
    """
    title = values.get("title")
    if not title or not str(title).strip():
        raise ValidationError("Event title is required")

    start_date = coerce_date(values.get("start_date"), "start_date")
    end_date = coerce_date(values.get("end_date"), "end_date")
    if end_date < start_date:
        raise ValidationError(f"End date {end_date} is before start date {start_date}")

    is_all_day = bool(values.get("is_all_day", True))
    start_time = end_time = None
    if not is_all_day:
        if values.get("start_time") is None or values.get("end_time") is None:
            raise ValidationError("Timed events need a start and end time")
        start_time = coerce_time(values["start_time"], "start_time")
        end_time = coerce_time(values["end_time"], "end_time")
        if start_date == end_date and to_minutes(end_time) <= to_minutes(start_time):
            raise ValidationError(
                f"End time {format_hm(end_time)} must be after start time {format_hm(start_time)}"
            )

    event_type = values.get("event_type")
    return {
        "title": str(title).strip(),
        "event_type": str(event_type).strip().lower() if event_type and str(event_type).strip() else "other",
        "description": values.get("description") or None,
        "start_date": start_date,
        "end_date": end_date,
        "is_all_day": is_all_day,
        "start_time": start_time,
        "end_time": end_time,
    }


class PersonalEventService:
    """Create, edit, delete and list a user's own personal events."""

    def __init__(self, session: Session):
        self.session = session

    def _get(self, event_id: int) -> PersonalEvent:
        try:
            event = PersonalEventRepository.get_by_id(self.session, event_id)
        except SQLAlchemyError as e:
            raise StoreError("Could not load personal event") from e
        if event is None:
            raise NotFoundError(f"Personal event {event_id} not found")
        return event

    def create_event(
        self,
        actor,
        title: str,
        start_date,
        end_date,
        event_type: str = "other",
        description: Optional[str] = None,
        is_all_day: bool = True,
        start_time=None,
        end_time=None,
    ) -> PersonalEvent:
        """
        Record an event for the actor. New events start out pending.

        Raises:
            ValidationError: See validate_event_fields
            StoreError: If the store fails
        """
        values = validate_event_fields(
            {
                "title": title,
                "event_type": event_type,
                "description": description,
                "start_date": start_date,
                "end_date": end_date,
                "is_all_day": is_all_day,
                "start_time": start_time,
                "end_time": end_time,
            }
        )
        event = PersonalEvent(user_id=actor.id, status=EventStatus.PENDING, **values)
        try:
            PersonalEventRepository.create(self.session, event)
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error("Failed to create event for %s: %s", actor.id, e)
            raise StoreError("Could not create personal event") from e

        logger.info("Created event %s for %s (%s..%s)", event.id, actor.id, event.start_date, event.end_date)
        return event

    def update_event(self, actor, event_id: int, **changes) -> PersonalEvent:
        """Edit an owned event. The merged fields are validated as a whole."""
        unknown = set(changes) - set(_EVENT_FIELDS)
        if unknown:
            raise ValidationError(f"Unknown event fields: {', '.join(sorted(unknown))}")

        event = self._get(event_id)
        require_owner(actor, event, "edit this event")

        merged = {field: getattr(event, field) for field in _EVENT_FIELDS}
        merged.update(changes)
        values = validate_event_fields(merged)

        for field, value in values.items():
            setattr(event, field, value)
        try:
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise StoreError("Could not update personal event") from e
        logger.info("Updated event %s", event_id)
        return event

    def delete_event(self, actor, event_id: int) -> None:
        event = self._get(event_id)
        require_owner(actor, event, "delete this event")
        try:
            PersonalEventRepository.delete(self.session, event)
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise StoreError("Could not delete personal event") from e
        logger.info("Deleted event %s", event_id)

    def events_for_user(self, user_id: str) -> List[PersonalEvent]:
        """All of the user's events, latest start date first."""
        try:
            return PersonalEventRepository.get_for_user(self.session, user_id)
        except SQLAlchemyError as e:
            raise StoreError("Could not load personal events") from e

    def events_on(self, user_id: str, day) -> List[PersonalEvent]:
        """The user's events covering ``day``."""
        day = coerce_date(day)
        try:
            return PersonalEventRepository.get_covering(self.session, user_id, day)
        except SQLAlchemyError as e:
            raise StoreError("Could not load personal events") from e
