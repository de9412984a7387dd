# backend/slotbook/routers/staff_slots.py
"""
Staff slot management.

POST /staff/slots/generate - Calendar expansion -> batched insert
GET  /staff/slots          - Filtered listing (subjectId, dateFrom, dateTo,
                             availableOnly, showPast)
"""

from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..auth import require_staff
from ..database import get_db
from ..schemas.common import CountResponse, SuccessResponse
from ..schemas.slots import (
    SlotBulkDelete,
    SlotCreate,
    SlotCreated,
    SlotGenerateRequest,
    SlotUpdate,
    StaffSlotRead,
)
from ..services.slots import (
    clear_past_slots,
    create_slot,
    delete_slots,
    generate_slots,
    get_slot,
    list_slots,
    update_slot,
)

router = APIRouter(
    prefix="/staff/slots",
    tags=["staff"],
    dependencies=[Depends(require_staff)],
)


@router.get("", response_model=list[StaffSlotRead])
def list_staff_slots(
    subject_id: str | None = Query(None, alias="subjectId", max_length=36),
    date_from: date | None = Query(None, alias="dateFrom"),
    date_to: date | None = Query(None, alias="dateTo"),
    available_only: bool = Query(False, alias="availableOnly"),
    show_past: bool = Query(False, alias="showPast"),
    db: Session = Depends(get_db),
):
    return list_slots(
        db,
        subject_id=subject_id,
        date_from=date_from,
        date_to=date_to,
        available_only=available_only,
        include_past=show_past,
    )


@router.post("", response_model=SlotCreated)
def create_single_slot(data: SlotCreate, db: Session = Depends(get_db)):
    slot = create_slot(
        db,
        subject_id=data.subject_id,
        start_time=data.start_time,
        duration=data.duration,
        capacity=data.max_capacity,
        location=data.location,
    )
    return SlotCreated(id=slot.id)


@router.post("/generate", response_model=CountResponse)
def generate(data: SlotGenerateRequest, db: Session = Depends(get_db)):
    count = generate_slots(
        db,
        subject_id=data.subject_id,
        spec=data.to_schedule_spec(),
        capacity=data.capacity,
        location=data.location,
    )
    return CountResponse(count=count)


@router.post("/bulk-delete", response_model=CountResponse)
def bulk_delete(data: SlotBulkDelete, db: Session = Depends(get_db)):
    return CountResponse(count=delete_slots(db, data.slot_ids))


@router.post("/clear-past", response_model=CountResponse)
def clear_past(db: Session = Depends(get_db)):
    return CountResponse(count=clear_past_slots(db))


@router.get("/{id}", response_model=StaffSlotRead)
def get_staff_slot(id: str, db: Session = Depends(get_db)):
    return get_slot(db, id)


@router.put("/{id}", response_model=SuccessResponse)
def edit_slot(id: str, data: SlotUpdate, db: Session = Depends(get_db)):
    update_slot(db, id, data.model_dump(exclude_unset=True))
    return SuccessResponse()


@router.delete("/{id}", response_model=SuccessResponse)
def delete_slot(id: str, db: Session = Depends(get_db)):
    get_slot(db, id)
    delete_slots(db, [id])
    return SuccessResponse()
