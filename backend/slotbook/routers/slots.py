# backend/slotbook/routers/slots.py
"""
Public slot listing: upcoming slots of one subject, full ones included so
the client can show them as taken.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..database import get_db
from ..errors import InvalidSpecification
from ..schemas.slots import SlotRead
from ..services.slots import list_slots

router = APIRouter(prefix="/slots", tags=["slots"])


@router.get("/{subject_id}", response_model=list[SlotRead])
def get_subject_slots(subject_id: str, db: Session = Depends(get_db)):
    if len(subject_id) > 36:
        raise InvalidSpecification("Invalid subject ID")
    return list_slots(db, subject_id=subject_id)
