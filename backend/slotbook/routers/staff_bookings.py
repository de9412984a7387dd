# backend/slotbook/routers/staff_bookings.py
# DELETE = cancellation: the seat goes back to the slot (floored at 0)
# clear-bookings = every booking gone, every counter back to 0

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..auth import require_staff
from ..database import get_db
from ..schemas.bookings import (
    ActivityEntryRead,
    BookingStats,
    BookingStatusUpdate,
    RosterEntryRead,
)
from ..schemas.common import CountResponse, SuccessResponse
from ..services.admission import cancel_booking
from ..services.bookings import (
    booking_stats,
    clear_all_bookings,
    list_roster,
    recent_activity,
    update_booking_status,
)

router = APIRouter(
    prefix="/staff",
    tags=["staff"],
    dependencies=[Depends(require_staff)],
)


@router.get("/bookings", response_model=list[RosterEntryRead])
def roster(
    subject_id: str | None = Query(None, alias="subjectId", max_length=36),
    db: Session = Depends(get_db),
):
    return list_roster(db, subject_id=subject_id)


@router.put("/bookings/{id}", response_model=SuccessResponse)
def set_booking_status(id: str, data: BookingStatusUpdate, db: Session = Depends(get_db)):
    update_booking_status(db, id, data.status)
    return SuccessResponse()


@router.delete("/bookings/{id}", response_model=SuccessResponse)
def cancel(id: str, db: Session = Depends(get_db)):
    cancel_booking(db, id)
    return SuccessResponse()


@router.get("/stats", response_model=BookingStats)
def stats(db: Session = Depends(get_db)):
    return booking_stats(db)


@router.post("/clear-bookings", response_model=CountResponse)
def clear_bookings(db: Session = Depends(get_db)):
    return CountResponse(count=clear_all_bookings(db))


@router.get("/logs", response_model=list[ActivityEntryRead])
def activity_log(db: Session = Depends(get_db)):
    return recent_activity(db)
