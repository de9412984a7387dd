# backend/slotbook/auth.py
"""
Staff authentication.

Passwords are stored as "salt_hex:hash_hex" (PBKDF2-HMAC-SHA256, 100k
iterations, 16-byte salt). Legacy plaintext values are still accepted and
rehashed on the next successful login.

Tokens are HS256 JWTs carrying username, role and name.
"""

import hashlib
import hmac
import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.orm import Session

from .config import settings
from .database import commit_or_raise
from .errors import AuthenticationError, DomainError
from .models import Users

logger = logging.getLogger(__name__)

PBKDF2_ITERATIONS = 100_000
SALT_BYTES = 16
JWT_ALGORITHM = "HS256"
MIN_SECRET_LENGTH = 32

MSG_INVALID_CREDENTIALS = "Invalid credentials"
MSG_CONFIG_ERROR = "Server configuration error"

_bearer = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Principal:
    username: str
    role: str
    name: str


# ── Passwords ────────────────────────────────────────────────────────────


def hash_password(password: str, salt: bytes | None = None) -> str:
    salt = salt or secrets.token_bytes(SALT_BYTES)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, PBKDF2_ITERATIONS)
    return f"{salt.hex()}:{digest.hex()}"


def verify_password(password: str, stored: str) -> bool:
    if ":" not in stored:
        # legacy plaintext
        return hmac.compare_digest(password.encode("utf-8"), stored.encode("utf-8"))

    salt_hex, hash_hex = stored.split(":", 1)
    try:
        salt = bytes.fromhex(salt_hex)
    except ValueError:
        return False
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, PBKDF2_ITERATIONS)
    return hmac.compare_digest(digest.hex(), hash_hex)


def authenticate(db: Session, username: str, password: str) -> Principal | None:
    """Check credentials. None on any mismatch."""
    user = db.execute(
        select(Users).where(Users.username == username.strip())
    ).scalar_one_or_none()
    if user is None or not verify_password(password, user.password):
        return None

    if ":" not in user.password:
        user.password = hash_password(password)
        commit_or_raise(db)
        logger.info("Upgraded plaintext password for user %s", user.username)

    return Principal(username=user.username, role=user.role, name=user.name)


# ── Tokens ───────────────────────────────────────────────────────────────


def _secret() -> str:
    if len(settings.jwt_secret) < MIN_SECRET_LENGTH:
        logger.error("JWT_SECRET missing or shorter than %d characters", MIN_SECRET_LENGTH)
        raise DomainError(MSG_CONFIG_ERROR)
    return settings.jwt_secret


def create_access_token(principal: Principal, now: datetime | None = None) -> str:
    now = now or datetime.now(timezone.utc)
    payload = {
        "username": principal.username,
        "role": principal.role,
        "name": principal.name,
        "iat": now,
        "exp": now + timedelta(hours=settings.jwt_expire_hours),
    }
    return jwt.encode(payload, _secret(), algorithm=JWT_ALGORITHM)


def decode_access_token(token: str) -> Principal | None:
    try:
        payload = jwt.decode(token, _secret(), algorithms=[JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        return None
    except jwt.InvalidTokenError:
        return None

    if not payload.get("username"):
        return None
    return Principal(
        username=payload["username"],
        role=payload.get("role", "staff"),
        name=payload.get("name", ""),
    )


def require_staff(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
) -> Principal:
    """FastAPI dependency guarding /staff routes."""
    if credentials is None:
        raise AuthenticationError()

    principal = decode_access_token(credentials.credentials)
    if principal is None:
        raise AuthenticationError()
    return principal
