import csv
import io
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import StreamingResponse
from openpyxl import Workbook
from sqlalchemy.orm import Session

from database import get_db
from event_service import (
    create_event,
    delete_event,
    get_event,
    get_event_row,
    get_owned_event,
    list_college_events,
    list_event_attendees,
    update_event,
    update_event_attendance,
)
from models import User
from schemas import (
    ATTENDANCE_STATUS_VALUES,
    AttendanceRequest,
    AttendeeResponse,
    EventCreateRequest,
    EventDetailResponse,
    EventResponse,
    EventUpdateRequest,
    MessageResponse,
)
from security import require_college_member, require_user
from time_utils import format_local

logger = logging.getLogger(__name__)

router = APIRouter()

ATTENDEE_EXPORT_HEADERS = ["Name", "Email", "Department", "Batch", "Role", "Status", "Responded At"]


def _get_event_or_404(db: Session, event_id: int):
    event = get_event_row(db, event_id)
    if not event:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Event not found")
    return event


@router.get("/events", response_model=List[EventDetailResponse])
def get_events(
    limit: int = Query(default=20, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    user: User = Depends(require_college_member),
    db: Session = Depends(get_db),
):
    return list_college_events(db, user.college_id, limit=limit, offset=offset, viewer_id=user.id)


@router.get("/events/{event_id}", response_model=EventDetailResponse)
def get_event_detail(
    event_id: int,
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
):
    event = get_event(db, event_id, viewer_id=user.id)
    if not event:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Event not found")
    return event


@router.post("/events", response_model=EventResponse, status_code=status.HTTP_201_CREATED)
def add_event(
    payload: EventCreateRequest,
    user: User = Depends(require_college_member),
    db: Session = Depends(get_db),
):
    return create_event(db, user, payload)


@router.patch("/events/{event_id}", response_model=EventResponse)
def edit_event(
    event_id: int,
    payload: EventUpdateRequest,
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
):
    try:
        event = update_event(db, event_id, user.id, payload.model_dump(exclude_unset=True))
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    if not event:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Event not found or unauthorized")
    return event


@router.delete("/events/{event_id}", response_model=MessageResponse)
def remove_event(
    event_id: int,
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
):
    if not delete_event(db, event_id, user.id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Event not found or unauthorized")
    return MessageResponse(message="Event deleted successfully")


@router.post("/events/{event_id}/attendance", response_model=MessageResponse)
def set_attendance(
    event_id: int,
    payload: AttendanceRequest,
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
):
    if payload.status not in ATTENDANCE_STATUS_VALUES:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid attendance status")
    _get_event_or_404(db, event_id)
    if not update_event_attendance(db, event_id, user.id, payload.status):
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to update attendance")
    return MessageResponse(message="Attendance updated successfully")


@router.get("/events/{event_id}/attendees", response_model=List[AttendeeResponse])
def get_attendees(
    event_id: int,
    _: User = Depends(require_user),
    db: Session = Depends(get_db),
):
    _get_event_or_404(db, event_id)
    return list_event_attendees(db, event_id)


@router.get("/events/{event_id}/attendees/export")
def export_attendees(
    event_id: int,
    format: str = Query(default="csv", pattern="^(csv|xlsx)$"),
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
):
    event = get_owned_event(db, event_id, user.id)
    if not event:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Event not found or unauthorized")

    rows = []
    for attendee in list_event_attendees(db, event.id):
        person = attendee.user
        name = " ".join(part for part in [person.first_name, person.last_name] if part)
        rows.append([
            name,
            person.email or "",
            person.department or "",
            person.batch or "",
            person.role.value if person.role else "",
            attendee.status.value,
            format_local(attendee.created_at),
        ])
    filename = f"event_{event.id}_attendees"
    logger.info("User %s exported %s attendees of event %s as %s", user.id, len(rows), event.id, format)

    if format == "xlsx":
        wb = Workbook()
        ws = wb.active
        ws.title = "Attendees"
        ws.append(ATTENDEE_EXPORT_HEADERS)
        for row in rows:
            ws.append(row)

        output = io.BytesIO()
        wb.save(output)
        output.seek(0)

        return StreamingResponse(
            output,
            media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
            headers={"Content-Disposition": f"attachment; filename={filename}.xlsx"}
        )

    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow(ATTENDEE_EXPORT_HEADERS)
    writer.writerows(rows)

    return StreamingResponse(
        iter([output.getvalue()]),
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={filename}.csv"}
    )
