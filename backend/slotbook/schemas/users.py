# backend/slotbook/schemas/users.py

from pydantic import field_validator

from .common import CamelModel, UtcDateTime, invalid, is_email, sanitize

DEFAULT_ROLE = "staff"


def _check_email(v: str | None) -> str:
    if v and not is_email(v):
        raise invalid("Invalid email")
    return sanitize(v or "")


def _check_password(v: str | None) -> str | None:
    if v is not None and not 8 <= len(v) <= 255:
        raise invalid("Password must be at least 8 characters")
    return v


class UserBase(CamelModel):
    name: str
    role: str | None = DEFAULT_ROLE
    email: str | None = ""

    @field_validator("name")
    @classmethod
    def check_name(cls, v: str) -> str:
        if not 1 <= len(v.strip()) <= 255:
            raise invalid("Name is required")
        return sanitize(v)

    @field_validator("role")
    @classmethod
    def default_role(cls, v: str | None) -> str:
        return sanitize(v or "", 50) or DEFAULT_ROLE

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str | None) -> str:
        return _check_email(v)


class UserCreate(UserBase):
    username: str
    password: str

    @field_validator("username")
    @classmethod
    def check_username(cls, v: str) -> str:
        if not 3 <= len(v.strip()) <= 100:
            raise invalid("Username must be 3-100 characters")
        return sanitize(v, 100)

    @field_validator("password")
    @classmethod
    def check_password(cls, v: str) -> str:
        return _check_password(v)


class UserUpdate(UserBase):
    # None or "" keeps the current password
    password: str | None = None

    @field_validator("password")
    @classmethod
    def check_password(cls, v: str | None) -> str | None:
        return _check_password(v or None)


class UserRead(CamelModel):
    id: str
    username: str
    role: str
    name: str
    email: str = ""
    created_at: UtcDateTime

    @field_validator("email", mode="before")
    @classmethod
    def none_to_empty(cls, v):
        return v or ""


class UserCreated(CamelModel):
    success: bool = True
    id: str
