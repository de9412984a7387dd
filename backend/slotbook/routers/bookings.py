# backend/slotbook/routers/bookings.py
"""
Public booking creation.

200 {success, bookingId} | 400 invalid / duplicate | 409 slot full.
The confirmation mail is queued after admission and never delays or
fails the response.
"""

from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy.orm import Session

from ..database import get_db
from ..schemas.bookings import BookingCreate, BookingCreated
from ..services.admission import AdmissionRequest, admit_booking
from ..services.notifications import (
    dispatch_confirmation,
    notifications_enabled,
    prepare_confirmation,
)

router = APIRouter(prefix="/bookings", tags=["bookings"])


@router.post("", response_model=BookingCreated)
def create_booking(
    data: BookingCreate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
):
    booking = admit_booking(
        db,
        AdmissionRequest(
            slot_id=data.slot_id,
            subject_id=data.subject_id,
            student_name=data.student_name,
            student_id=data.student_id,
            student_email=data.student_email,
            custom_answers=data.custom_answers or {},
        ),
    )
    booking_id = booking.id

    if notifications_enabled():
        confirmation = prepare_confirmation(db, booking_id)
        if confirmation is not None:
            background_tasks.add_task(dispatch_confirmation, confirmation)

    return BookingCreated(booking_id=booking_id)
