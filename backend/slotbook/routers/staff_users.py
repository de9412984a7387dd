# backend/slotbook/routers/staff_users.py
# Staff accounts. Passwords are only ever stored hashed (auth.hash_password).

import logging

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.orm import Session

from ..auth import hash_password, require_staff
from ..database import commit_or_raise, get_db
from ..errors import InvalidSpecification, NotFoundError
from ..models import Users
from ..schemas.common import SuccessResponse
from ..schemas.users import UserCreate, UserCreated, UserRead, UserUpdate

logger = logging.getLogger(__name__)

MSG_USERNAME_TAKEN = "Username already exists"
MSG_USER_NOT_FOUND = "User not found"

router = APIRouter(
    prefix="/staff/users",
    tags=["staff"],
    dependencies=[Depends(require_staff)],
)


def _get_user(db: Session, id: str) -> Users:
    user = db.get(Users, id) if len(id) <= 36 else None
    if user is None:
        raise NotFoundError(MSG_USER_NOT_FOUND)
    return user


@router.get("", response_model=list[UserRead])
def list_users(db: Session = Depends(get_db)):
    return db.scalars(select(Users).order_by(Users.created_at.desc(), Users.username)).all()


@router.post("", response_model=UserCreated)
def create_user(data: UserCreate, db: Session = Depends(get_db)):
    taken = db.execute(
        select(Users.id).where(Users.username == data.username)
    ).scalar_one_or_none()
    if taken is not None:
        raise InvalidSpecification(MSG_USERNAME_TAKEN)

    user = Users(
        username=data.username,
        password=hash_password(data.password),
        role=data.role,
        name=data.name,
        email=data.email,
    )
    db.add(user)
    commit_or_raise(db)
    db.refresh(user)

    logger.info("Staff user %s created (role=%s)", user.username, user.role)
    return UserCreated(id=user.id)


@router.put("/{id}", response_model=SuccessResponse)
def update_user(id: str, data: UserUpdate, db: Session = Depends(get_db)):
    user = _get_user(db, id)

    user.name = data.name
    user.role = data.role
    user.email = data.email
    if data.password:
        user.password = hash_password(data.password)

    commit_or_raise(db)
    return SuccessResponse()


@router.delete("/{id}", response_model=SuccessResponse)
def delete_user(id: str, db: Session = Depends(get_db)):
    user = _get_user(db, id)
    username = user.username

    db.delete(user)
    commit_or_raise(db)

    logger.info("Staff user %s deleted", username)
    return SuccessResponse()
