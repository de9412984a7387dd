"""
Confirmation mail: payload shape, failure isolation, disabled mode.
"""

import logging
from datetime import datetime

import httpx
import pytest
from sqlalchemy.exc import OperationalError

from helpers import booking_payload
from slotbook.config import settings
from slotbook.errors import NotificationError
from slotbook.models import Bookings
from slotbook.services import notifications

MAIL_URL = "https://mail.example.test/send"


@pytest.fixture
def mail_enabled(monkeypatch):
    monkeypatch.setattr(settings, "email_api_url", MAIL_URL)
    monkeypatch.setattr(settings, "email_api_secret", "mail-secret")


@pytest.fixture
def booked(db, make_slot):
    slot = make_slot(capacity=2, start=datetime(2032, 2, 29, 9, 0))
    slot.location = "Room 12"
    booking = Bookings(
        slot_id=slot.id,
        subject_id=slot.subject_id,
        student_name="Ada Lovelace",
        student_id="S-1001",
        student_email="ada@example.com",
    )
    db.add(booking)
    db.commit()
    return booking


def _record_posts(monkeypatch, status_code=200):
    sent = []

    def fake_post(self, url, json=None, **kwargs):
        sent.append((url, json))
        return httpx.Response(status_code, request=httpx.Request("POST", url))

    monkeypatch.setattr(httpx.Client, "post", fake_post)
    return sent


def test_confirmation_payload(db, booked, mail_enabled, monkeypatch):
    sent = _record_posts(monkeypatch)

    confirmation = notifications.build_confirmation(db, booked.id)
    notifications.send_confirmation(confirmation)

    assert sent == [
        (
            MAIL_URL,
            {
                "secret": "mail-secret",
                "to": "ada@example.com",
                "studentName": "Ada Lovelace",
                "subjectName": "Mathematics",
                "slotDate": "Sunday, February 29, 2032",
                "slotTime": "09:00 AM",
                "duration": 20,
                "location": "Room 12",
                "bookingId": booked.id,
            },
        )
    ]


def test_rejected_mail_raises_notification_error(db, booked, mail_enabled, monkeypatch):
    _record_posts(monkeypatch, status_code=502)
    confirmation = notifications.build_confirmation(db, booked.id)

    with pytest.raises(NotificationError):
        notifications.send_confirmation(confirmation)


def test_dispatch_swallows_failures(db, booked, mail_enabled, monkeypatch, caplog):
    def refuse(self, url, **kwargs):
        raise httpx.ConnectError("connection refused")

    monkeypatch.setattr(httpx.Client, "post", refuse)
    confirmation = notifications.build_confirmation(db, booked.id)

    with caplog.at_level(logging.WARNING, logger="slotbook.services.notifications"):
        notifications.dispatch_confirmation(confirmation)

    assert f"Confirmation for booking {booked.id} not sent" in caplog.text


def test_missing_booking_builds_nothing(db):
    assert notifications.build_confirmation(db, "no-such-booking") is None


def test_booking_succeeds_when_mail_fails(client, make_slot, mail_enabled, monkeypatch):
    attempts = []

    def failing_send(confirmation):
        attempts.append(confirmation.bookingId)
        raise NotificationError()

    monkeypatch.setattr(notifications, "send_confirmation", failing_send)
    slot = make_slot(capacity=1)

    response = client.post("/bookings", json=booking_payload(slot))

    assert response.status_code == 200
    assert attempts == [response.json()["bookingId"]]


def test_no_mail_when_disabled(client, make_slot, monkeypatch):
    attempts = []
    monkeypatch.setattr(notifications, "send_confirmation", attempts.append)
    slot = make_slot(capacity=1)

    assert client.post("/bookings", json=booking_payload(slot)).status_code == 200
    assert attempts == []


def test_booking_kept_when_confirmation_lookup_fails(client, db, make_slot, mail_enabled, monkeypatch, caplog):
    def lookup_fails(db, booking_id):
        raise OperationalError("SELECT bookings", {}, Exception("connection lost"))

    sent = []
    monkeypatch.setattr(notifications, "build_confirmation", lookup_fails)
    monkeypatch.setattr(notifications, "send_confirmation", sent.append)
    slot = make_slot(capacity=1)

    with caplog.at_level(logging.WARNING, logger="slotbook.services.notifications"):
        response = client.post("/bookings", json=booking_payload(slot))

    assert response.status_code == 200
    booking_id = response.json()["bookingId"]
    assert db.get(Bookings, booking_id) is not None
    assert sent == []
    assert f"Confirmation for booking {booking_id} skipped" in caplog.text
