# backend/slotbook/routers/staff_subjects.py
# DELETE cascades by hand: bookings -> slots -> subject

import json
import logging

from fastapi import APIRouter, Depends
from sqlalchemy import delete
from sqlalchemy.orm import Session

from ..auth import require_staff
from ..database import commit_or_raise, get_db
from ..errors import NotFoundError
from ..models import Bookings, Slots
from ..models import Subjects as DBSubjects
from ..schemas.common import SuccessResponse
from ..schemas.subjects import SubjectCreate, SubjectCreated, SubjectRead, SubjectUpdate

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/staff/subjects",
    tags=["staff"],
    dependencies=[Depends(require_staff)],
)


def _columns(data: SubjectCreate | SubjectUpdate) -> dict:
    values = data.model_dump()
    values["custom_fields"] = json.dumps(values["custom_fields"])
    values["active"] = 1 if values["active"] else 0
    return values


@router.get("", response_model=list[SubjectRead])
def list_all_subjects(db: Session = Depends(get_db)):
    return db.query(DBSubjects).order_by(DBSubjects.name).all()


@router.post("", response_model=SubjectCreated)
def create_subject(data: SubjectCreate, db: Session = Depends(get_db)):
    obj = DBSubjects(**_columns(data))
    db.add(obj)
    commit_or_raise(db)
    db.refresh(obj)
    return SubjectCreated(id=obj.id)


@router.put("/{id}", response_model=SuccessResponse)
def update_subject(id: str, data: SubjectUpdate, db: Session = Depends(get_db)):
    obj = db.get(DBSubjects, id)
    if not obj:
        raise NotFoundError("Subject not found")

    for field, value in _columns(data).items():
        setattr(obj, field, value)

    commit_or_raise(db)
    return SuccessResponse()


@router.delete("/{id}", response_model=SuccessResponse)
def delete_subject(id: str, db: Session = Depends(get_db)):
    obj = db.get(DBSubjects, id)
    if not obj:
        raise NotFoundError("Subject not found")

    db.execute(delete(Bookings).where(Bookings.subject_id == id).execution_options(synchronize_session=False))
    db.execute(delete(Slots).where(Slots.subject_id == id).execution_options(synchronize_session=False))
    db.execute(delete(DBSubjects).where(DBSubjects.id == id).execution_options(synchronize_session=False))
    commit_or_raise(db)

    logger.info("Subject %s deleted with its slots and bookings", id)
    return SuccessResponse()
