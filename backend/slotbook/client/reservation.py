"""
backend/slotbook/client/reservation.py

Reservation flow: subject -> time -> details.

Two advisory availability checkpoints guard against booking a slot that
filled up while the user was deciding:
- confirm_slot(): when the user commits to a slot (TIME -> DETAILS)
- submit(): right before the booking request

Neither replaces the server's admission check. A 409 at submission sends
the user back to slot selection with a fresh list; nothing is retried.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Optional

from .api import BookingApiClient, BookingApiError

logger = logging.getLogger(__name__)

MSG_SLOT_UNAVAILABLE = "This slot is no longer available. Please select another."
MSG_SLOT_FULL = "Sorry, this slot just got fully booked!"
MSG_BOOKING_FAILED = "Booking failed. Please try again."
MSG_FORM_INCOMPLETE = "Please complete all required fields."
MSG_SELECT_SLOT = "Please select a time slot"


class Step(IntEnum):
    SUBJECT = 1
    TIME = 2
    DETAILS = 3


class SubmitOutcome(str, Enum):
    BOOKED = "booked"
    SLOT_UNAVAILABLE = "slot_unavailable"
    INCOMPLETE = "incomplete"
    FAILED = "failed"


@dataclass(frozen=True)
class SubmitResult:
    outcome: SubmitOutcome
    message: str = ""
    booking_id: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.outcome is SubmitOutcome.BOOKED


@dataclass
class BookingForm:
    name: str = ""
    student_id: str = ""
    email: str = ""
    custom_answers: dict[str, str] = field(default_factory=dict)

    @property
    def is_complete(self) -> bool:
        return bool(self.name.strip() and self.student_id.strip() and self.email.strip())


def has_room(slot: dict) -> bool:
    return slot["currentBookings"] < slot["maxCapacity"]


class ReservationFlow:
    def __init__(self, api: BookingApiClient):
        self.api = api
        self.subjects: list[dict] = []
        self.reset()

    # ── Derived ──────────────────────────────────────────────────────────

    @property
    def slots_by_date(self) -> dict[str, list[dict]]:
        """Slots grouped by the UTC date part of startTime, list order kept."""
        groups: dict[str, list[dict]] = {}
        for slot in self.slots:
            groups.setdefault(slot["startTime"].split("T")[0], []).append(slot)
        return groups

    @property
    def sorted_dates(self) -> list[str]:
        return sorted(self.slots_by_date)

    # ── Steps ────────────────────────────────────────────────────────────

    async def load_subjects(self) -> list[dict]:
        self.subjects = await self.api.get_subjects()
        return self.subjects

    async def select_subject(self, subject: dict) -> None:
        """Pick a subject and load its slots. Moves to the TIME step."""
        self.subject = subject
        self.date = None
        self.slot = None
        self.slots = await self.api.get_slots(subject["id"])
        self.step = Step.TIME

    def select_date(self, date: str) -> None:
        self.date = date
        self.slot = None

    def select_slot(self, slot: dict) -> bool:
        """Full slots can't be selected."""
        if not has_room(slot):
            return False
        self.slot = slot
        return True

    async def confirm_slot(self) -> tuple[bool, str]:
        """
        Checkpoint 1: the user commits to the selected slot.

        On success the selection is replaced by the fresh server copy and the
        flow moves to DETAILS. Otherwise the selection is cleared and the user
        has to pick again from the refreshed list.
        """
        if self.subject is None or self.slot is None:
            return False, MSG_SELECT_SLOT

        fresh = await self._fresh_slot()
        if fresh is None:
            self.slot = None
            return False, MSG_SLOT_UNAVAILABLE

        self.slot = fresh
        self.step = Step.DETAILS
        return True, ""

    def update_form(self, **changes) -> None:
        for name, value in changes.items():
            if not hasattr(self.form, name):
                raise AttributeError(f"Unknown form field: {name}")
            setattr(self.form, name, value)

    def go_to_step(self, step: Step) -> None:
        self.step = step

    async def submit(self) -> SubmitResult:
        """Checkpoint 2, then the booking request."""
        if not self.form.is_complete:
            return SubmitResult(SubmitOutcome.INCOMPLETE, MSG_FORM_INCOMPLETE)
        if self.subject is None or self.slot is None:
            return SubmitResult(SubmitOutcome.INCOMPLETE, MSG_SELECT_SLOT)

        fresh = await self._fresh_slot()
        if fresh is None:
            return self._back_to_time(MSG_SLOT_FULL)

        try:
            result = await self.api.create_booking(
                slot_id=fresh["id"],
                subject_id=self.subject["id"],
                student_name=self.form.name,
                student_id=self.form.student_id,
                student_email=self.form.email,
                custom_answers=self.form.custom_answers,
            )
        except BookingApiError as e:
            return await self._handle_rejection(e)

        self.booking_id = result.get("bookingId")
        logger.info(f"Booked slot {fresh['id']} as {self.booking_id}")
        return SubmitResult(SubmitOutcome.BOOKED, booking_id=self.booking_id)

    async def refresh_slots(self) -> None:
        """Reload the list; drop the selection if it filled up or vanished."""
        if self.subject is None:
            return
        self.slots = await self.api.get_slots(self.subject["id"])
        if self.slot is not None and self._find(self.slot["id"]) is None:
            self.slot = None

    def reset(self) -> None:
        self.step = Step.SUBJECT
        self.subject: Optional[dict] = None
        self.date: Optional[str] = None
        self.slot: Optional[dict] = None
        self.form = BookingForm()
        self.slots: list[dict] = []
        self.booking_id: Optional[str] = None

    # ── Internals ────────────────────────────────────────────────────────

    async def _fresh_slot(self) -> Optional[dict]:
        """Re-fetch the list; the selected slot if it still has room."""
        try:
            self.slots = await self.api.get_slots(self.subject["id"])
        except BookingApiError as e:
            logger.warning(f"Availability check failed: {e}")
            return None
        return self._find(self.slot["id"])

    def _find(self, slot_id: str) -> Optional[dict]:
        return next(
            (s for s in self.slots if s["id"] == slot_id and has_room(s)),
            None,
        )

    def _back_to_time(self, message: str) -> SubmitResult:
        self.slot = None
        self.step = Step.TIME
        return SubmitResult(SubmitOutcome.SLOT_UNAVAILABLE, message)

    async def _handle_rejection(self, error: BookingApiError) -> SubmitResult:
        selected_id = self.slot["id"]
        try:
            await self.refresh_slots()
        except BookingApiError as e:
            logger.warning(f"Slot refresh after rejection failed: {e}")
            if error.is_slot_full:
                return self._back_to_time(MSG_SLOT_FULL)
            return SubmitResult(SubmitOutcome.FAILED, error.message or MSG_BOOKING_FAILED)

        if error.is_slot_full or self._find(selected_id) is None:
            return self._back_to_time(MSG_SLOT_FULL)

        message = error.message if error.status_code is not None else MSG_BOOKING_FAILED
        return SubmitResult(SubmitOutcome.FAILED, message)
