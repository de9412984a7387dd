# backend/slotbook/schemas/subjects.py

import json

from pydantic import field_validator

from .common import CamelModel, invalid, sanitize


class SubjectBase(CamelModel):
    name: str
    teacher: str = ""
    custom_fields: list[str] = []
    description: str = ""
    color: str = "#4F46E5"
    location: str = ""
    active: bool = True

    @field_validator("name")
    @classmethod
    def check_name(cls, v: str) -> str:
        if not 1 <= len(v.strip()) <= 255:
            raise invalid("Invalid subject name")
        return sanitize(v)

    @field_validator("teacher", "description", "location")
    @classmethod
    def trim(cls, v: str) -> str:
        return sanitize(v)


class SubjectCreate(SubjectBase):
    pass


class SubjectUpdate(SubjectBase):
    pass


class SubjectRead(CamelModel):
    id: str
    name: str
    teacher: str = ""
    custom_fields: list[str] = []
    description: str = ""
    color: str = "#4F46E5"
    location: str = ""
    active: bool = True

    @field_validator("custom_fields", mode="before")
    @classmethod
    def load_custom_fields(cls, v):
        # Stored as JSON text
        if isinstance(v, str):
            try:
                v = json.loads(v)
            except ValueError:
                return []
        return v if isinstance(v, list) else []

    @field_validator("teacher", "description", "location", mode="before")
    @classmethod
    def none_to_empty(cls, v):
        return v or ""


class SubjectCreated(CamelModel):
    success: bool = True
    id: str
