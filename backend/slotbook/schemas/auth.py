# backend/slotbook/schemas/auth.py

from pydantic import field_validator

from .common import CamelModel, invalid


class LoginRequest(CamelModel):
    username: str
    password: str

    @field_validator("username", "password")
    @classmethod
    def check_length(cls, v: str) -> str:
        if not 1 <= len(v.strip()) <= 255:
            raise invalid("Invalid credentials")
        return v


class LoginResponse(CamelModel):
    token: str
    name: str
    role: str
