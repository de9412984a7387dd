# backend/slotbook/routers/auth.py

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..auth import MSG_INVALID_CREDENTIALS, authenticate, create_access_token
from ..database import get_db
from ..errors import AuthenticationError
from ..schemas.auth import LoginRequest, LoginResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=LoginResponse)
def login(data: LoginRequest, db: Session = Depends(get_db)):
    principal = authenticate(db, data.username, data.password)
    if principal is None:
        logger.info("Failed login for %s", data.username)
        raise AuthenticationError(MSG_INVALID_CREDENTIALS)

    return LoginResponse(
        token=create_access_token(principal),
        name=principal.name,
        role=principal.role,
    )
