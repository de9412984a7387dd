# backend/slotbook/schemas/common.py
"""
Shared schema pieces: camelCase wire names, UTC timestamp rendering and
field errors that carry their own user-facing message.
"""

import re
from datetime import datetime, timezone
from typing import Annotated

from pydantic import BaseModel, PlainSerializer
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError

from ..errors import INVALID_INPUT

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def invalid(message: str) -> PydanticCustomError:
    return PydanticCustomError(INVALID_INPUT, message)


def is_email(value: str) -> bool:
    return len(value) <= 255 and bool(_EMAIL_RE.match(value))


def format_utc(value: datetime) -> str:
    """Naive UTC (storage convention) or aware -> "YYYY-MM-DDTHH:MM:SSZ"."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value.isoformat(timespec="seconds") + "Z"


UtcDateTime = Annotated[datetime, PlainSerializer(format_utc, return_type=str)]


def sanitize(value: str, limit: int = 255) -> str:
    return value.strip()[:limit]


class CamelModel(BaseModel):
    model_config = {
        "from_attributes": True,
        "alias_generator": to_camel,
        "populate_by_name": True,
    }


class SuccessResponse(CamelModel):
    success: bool = True


class CountResponse(SuccessResponse):
    count: int
