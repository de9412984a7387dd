from datetime import datetime, timedelta, timezone

import jwt
import pytest

from slotbook.auth import (
    Principal,
    authenticate,
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)
from slotbook.config import settings
from slotbook.errors import DomainError
from slotbook.models import Users

STAFF = Principal(username="staff", role="staff", name="Staff User")


def test_password_hash_format_and_check():
    stored = hash_password("correct horse")

    salt_hex, hash_hex = stored.split(":")
    assert len(bytes.fromhex(salt_hex)) == 16
    assert len(hash_hex) == 64
    assert verify_password("correct horse", stored)
    assert not verify_password("wrong horse", stored)


def test_same_password_gets_different_salts():
    assert hash_password("pw") != hash_password("pw")


@pytest.mark.parametrize("stored", ["zz:abcd", "plain-other"])
def test_malformed_or_mismatched_hash_rejected(stored):
    assert not verify_password("pw", stored)


def test_authenticate_upgrades_plaintext(db):
    db.add(Users(username="legacy", password="letmein", name="Legacy"))
    db.commit()

    principal = authenticate(db, " legacy ", "letmein")

    assert principal == Principal(username="legacy", role="staff", name="Legacy")
    stored = db.query(Users).filter_by(username="legacy").one().password
    assert ":" in stored
    assert verify_password("letmein", stored)


def test_authenticate_unknown_user(db):
    assert authenticate(db, "ghost", "whatever") is None


def test_token_round_trip():
    assert decode_access_token(create_access_token(STAFF)) == STAFF


def test_expired_token_rejected():
    issued = datetime.now(timezone.utc) - timedelta(hours=settings.jwt_expire_hours + 1)
    assert decode_access_token(create_access_token(STAFF, now=issued)) is None


def test_foreign_signature_rejected():
    forged = jwt.encode({"username": "staff", "role": "admin"}, "x" * 40, algorithm="HS256")
    assert decode_access_token(forged) is None


def test_short_secret_is_a_configuration_error(monkeypatch):
    monkeypatch.setattr(settings, "jwt_secret", "short")

    with pytest.raises(DomainError) as exc_info:
        create_access_token(STAFF)

    assert exc_info.value.status_code == 500
    assert exc_info.value.message == "Server configuration error"
