import logging
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session

from models import Event, EventAttendee, User
from schemas import (
    AttendeeResponse,
    EventCreateRequest,
    EventDetailResponse,
    EventResponse,
    UserResponse,
)
from time_utils import ensure_timezone, now_tz
from utils import dialect_insert

logger = logging.getLogger(__name__)

NON_NULLABLE_EVENT_FIELDS = {"title", "start_date", "category", "is_virtual"}


def get_event_row(db: Session, event_id: int) -> Optional[Event]:
    return db.query(Event).filter(Event.id == event_id).first()


def get_owned_event(db: Session, event_id: int, user_id: str) -> Optional[Event]:
    # Non-organizers get the same answer as for a missing event.
    return db.query(Event).filter(Event.id == event_id, Event.organizer_id == user_id).first()


def _annotated_events_query(db: Session) -> Query:
    attendees_count = func.count(EventAttendee.id).label("attendees_count")
    return (
        db.query(Event, User, attendees_count)
        .join(User, Event.organizer_id == User.id)
        .outerjoin(EventAttendee, EventAttendee.event_id == Event.id)
        .group_by(Event.id, User.id)
    )


def _attendance_statuses(db: Session, event_ids: Sequence[int], viewer_id: str) -> Dict[int, str]:
    if not event_ids:
        return {}
    return {
        event_id: status
        for event_id, status in (
            db.query(EventAttendee.event_id, EventAttendee.status)
            .filter(
                EventAttendee.user_id == viewer_id,
                EventAttendee.event_id.in_(list(event_ids)),
            )
            .all()
        )
    }


def _build_event_details(db: Session, rows, viewer_id: Optional[str]) -> List[EventDetailResponse]:
    statuses: Dict[int, str] = {}
    if viewer_id:
        statuses = _attendance_statuses(db, [event.id for event, _, _ in rows], viewer_id)
    return [
        EventDetailResponse(
            **EventResponse.model_validate(event).model_dump(),
            organizer=UserResponse.model_validate(organizer),
            attendees_count=int(count or 0),
            user_attendance_status=statuses.get(event.id),
        )
        for event, organizer, count in rows
    ]


def list_college_events(
    db: Session,
    college_id: int,
    limit: int = 20,
    offset: int = 0,
    viewer_id: Optional[str] = None,
) -> List[EventDetailResponse]:
    rows = (
        _annotated_events_query(db)
        .filter(Event.college_id == college_id)
        .order_by(Event.start_date.desc(), Event.id.desc())
        .offset(offset)
        .limit(limit)
        .all()
    )
    return _build_event_details(db, rows, viewer_id)


def get_event(db: Session, event_id: int, viewer_id: Optional[str] = None) -> Optional[EventDetailResponse]:
    row = _annotated_events_query(db).filter(Event.id == event_id).first()
    if not row:
        return None
    return _build_event_details(db, [row], viewer_id)[0]


def create_event(db: Session, organizer: User, payload: EventCreateRequest) -> Event:
    event = Event(
        **payload.model_dump(),
        organizer_id=organizer.id,
        college_id=organizer.college_id,
    )
    db.add(event)
    db.commit()
    db.refresh(event)
    logger.info("User %s created event %s in college %s", organizer.id, event.id, event.college_id)
    return event


def update_event(db: Session, event_id: int, user_id: str, updates: Dict[str, Any]) -> Optional[Event]:
    event = get_owned_event(db, event_id, user_id)
    if not event:
        return None

    for field, value in updates.items():
        if value is None and field in NON_NULLABLE_EVENT_FIELDS:
            continue
        setattr(event, field, value)
    if event.end_date and ensure_timezone(event.end_date) < ensure_timezone(event.start_date):
        db.rollback()
        raise ValueError("endDate must not be before startDate")
    event.updated_at = now_tz()

    db.commit()
    db.refresh(event)
    return event


def delete_event(db: Session, event_id: int, user_id: str) -> bool:
    event = get_owned_event(db, event_id, user_id)
    if not event:
        return False

    db.query(EventAttendee).filter(EventAttendee.event_id == event.id).delete(synchronize_session=False)
    db.delete(event)
    db.commit()
    logger.info("User %s deleted event %s", user_id, event_id)
    return True


def update_event_attendance(db: Session, event_id: int, user_id: str, status: str) -> bool:
    stmt = dialect_insert(db, EventAttendee).values(
        event_id=event_id,
        user_id=user_id,
        status=status,
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=[EventAttendee.event_id, EventAttendee.user_id],
        set_={"status": stmt.excluded.status, "created_at": func.now()},
    )
    try:
        db.execute(stmt)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Error updating attendance for event %s user %s", event_id, user_id)
        return False
    return True


def list_event_attendees(db: Session, event_id: int) -> List[AttendeeResponse]:
    rows = (
        db.query(EventAttendee, User)
        .join(User, EventAttendee.user_id == User.id)
        .filter(EventAttendee.event_id == event_id)
        .order_by(EventAttendee.created_at.desc(), EventAttendee.id.desc())
        .all()
    )
    return [
        AttendeeResponse(
            id=attendee.id,
            status=attendee.status,
            created_at=attendee.created_at,
            user=UserResponse.model_validate(user),
        )
        for attendee, user in rows
    ]
