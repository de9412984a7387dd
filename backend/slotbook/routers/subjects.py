# backend/slotbook/routers/subjects.py
# Public: active subjects only. Staff CRUD lives in staff_subjects.py

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..database import get_db
from ..models import Subjects as DBSubjects
from ..schemas.subjects import SubjectRead

router = APIRouter(prefix="/subjects", tags=["subjects"])


@router.get("", response_model=list[SubjectRead])
def list_subjects(db: Session = Depends(get_db)):
    return (
        db.query(DBSubjects)
        .filter((DBSubjects.active == 1) | (DBSubjects.active.is_(None)))
        .order_by(DBSubjects.name)
        .all()
    )
