"""
backend/slotbook/client/api.py

Async HTTP client for the public endpoints.

The reservation flow needs the server's status and message, so every
non-2xx answer raises BookingApiError.
"""

import logging
from typing import Any, Optional

import httpx

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0


class BookingApiError(Exception):
    """
    Non-2xx answer or transport failure.

    status_code is None when no HTTP answer was received.
    """

    def __init__(self, status_code: Optional[int], message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(f"{status_code}: {message}")

    @property
    def is_slot_full(self) -> bool:
        return self.status_code == 409


class BookingApiClient:
    """Async client for the public API (subjects, slots, bookings)."""

    def __init__(
        self,
        base_url: str,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.base_url = base_url.rstrip("/")
        self.transport = transport
        self.timeout = timeout

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        url = f"{self.base_url}{path}"

        async with httpx.AsyncClient(transport=self.transport, timeout=self.timeout) as client:
            try:
                resp = await client.request(method, url, **kwargs)
            except httpx.HTTPError as e:
                logger.error(f"API request failed: {method} {path} -> {e}")
                raise BookingApiError(None, "Network error") from e

        if resp.status_code >= 400:
            message = _error_message(resp)
            logger.info(f"API error: {method} {path} -> {resp.status_code} {message}")
            raise BookingApiError(resp.status_code, message)

        return resp.json()

    # ------------------------------------------------------------------
    # Subjects / slots
    # ------------------------------------------------------------------

    async def get_subjects(self) -> list[dict]:
        """GET /subjects"""
        return await self._request("GET", "/subjects")

    async def get_slots(self, subject_id: str) -> list[dict]:
        """GET /slots/{subject_id}"""
        return await self._request("GET", f"/slots/{subject_id}")

    # ------------------------------------------------------------------
    # Bookings
    # ------------------------------------------------------------------

    async def create_booking(
        self,
        slot_id: str,
        subject_id: str,
        student_name: str,
        student_id: str,
        student_email: str,
        custom_answers: Optional[dict[str, str]] = None,
    ) -> dict:
        """POST /bookings -> {"success": true, "bookingId": ...}"""
        data = {
            "slotId": slot_id,
            "subjectId": subject_id,
            "studentName": student_name,
            "studentId": student_id,
            "studentEmail": student_email,
            "customAnswers": custom_answers or {},
        }
        return await self._request("POST", "/bookings", json=data)


def _error_message(resp: httpx.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return f"HTTP {resp.status_code}"
    if isinstance(body, dict) and isinstance(body.get("error"), str):
        return body["error"]
    return f"HTTP {resp.status_code}"
