"""
POST /bookings end to end through the FastAPI app.
"""

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from helpers import booking_payload
from slotbook.models import Bookings, Slots
from slotbook.services import admission


def test_capacity_one_booked_twice_sequentially(client, make_slot):
    slot = make_slot(capacity=1)

    first = client.post("/bookings", json=booking_payload(slot, "S-1"))
    second = client.post("/bookings", json=booking_payload(slot, "S-2"))

    assert first.status_code == 200
    body = first.json()
    assert body["success"] is True
    assert body["bookingId"]

    assert second.status_code == 409
    assert second.json() == {"error": "Sorry, this slot is fully booked!"}


def test_duplicate_booking_returns_400(client, db, make_slot):
    slot = make_slot(capacity=3)

    client.post("/bookings", json=booking_payload(slot, "S-1"))
    response = client.post("/bookings", json=booking_payload(slot, "S-1"))

    assert response.status_code == 400
    assert response.json() == {"error": "You have already booked this slot"}
    db.expire_all()
    assert db.get(Slots, slot.id).current_bookings == 1


def test_booking_stores_answers_and_trimmed_fields(client, db, make_slot):
    slot = make_slot(capacity=1)

    response = client.post(
        "/bookings",
        json=booking_payload(slot, "  S-7  ", studentName="  Ada Lovelace "),
    )

    booking = db.get(Bookings, response.json()["bookingId"])
    assert booking.student_id == "S-7"
    assert booking.student_name == "Ada Lovelace"
    assert booking.custom_answers == '{"Topic": "Integrals"}'
    assert booking.status == "confirmed"


@pytest.mark.parametrize(
    "overrides, message",
    [
        ({"studentName": "A"}, "Student name must be 2-255 characters"),
        ({"studentId": "   "}, "Invalid student ID"),
        ({"studentEmail": "not-an-email"}, "Invalid email address"),
        ({"slotId": ""}, "Invalid slot or subject ID"),
        ({"subjectId": "x" * 37}, "Invalid slot or subject ID"),
    ],
)
def test_invalid_input_rejected_without_mutation(client, db, make_slot, overrides, message):
    slot = make_slot(capacity=1)

    response = client.post("/bookings", json=booking_payload(slot, **overrides))

    assert response.status_code == 400
    assert response.json() == {"error": message}
    db.expire_all()
    assert db.get(Slots, slot.id).current_bookings == 0


def test_missing_fields_get_generic_message(client):
    response = client.post("/bookings", json={"slotId": "abc"})

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid request"}


def test_vanished_slot(client, make_slot):
    slot = make_slot()

    response = client.post("/bookings", json=booking_payload(slot, slotId="gone"))

    assert response.status_code == 400
    assert response.json() == {"error": "Slot no longer exists"}


def test_storage_failure_is_generic_500(client, db, make_slot, monkeypatch):
    def broken_insert(db, request):
        raise OperationalError("INSERT INTO bookings", {}, Exception("secret driver detail"))

    monkeypatch.setattr(admission, "_insert_booking", broken_insert)
    slot = make_slot(capacity=1)

    response = client.post("/bookings", json=booking_payload(slot))

    assert response.status_code == 500
    assert response.json() == {"error": "Server error"}
    db.expire_all()
    assert db.get(Slots, slot.id).current_bookings == 0
    assert db.execute(select(func.count(Bookings.id))).scalar_one() == 0


@pytest.mark.parametrize("answers", [None, {}])
def test_empty_custom_answers_accepted(client, db, make_slot, answers):
    slot = make_slot(capacity=1)

    response = client.post("/bookings", json=booking_payload(slot, customAnswers=answers))

    assert response.status_code == 200
    assert db.get(Bookings, response.json()["bookingId"]).custom_answers == "{}"


def test_omitted_custom_answers_accepted(client, db, make_slot):
    slot = make_slot(capacity=1)
    payload = booking_payload(slot)
    del payload["customAnswers"]

    response = client.post("/bookings", json=payload)

    assert response.status_code == 200
    assert db.get(Bookings, response.json()["bookingId"]).custom_answers == "{}"
