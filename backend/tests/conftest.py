# backend/tests/conftest.py
"""
Pytest configuration.

Environment is set BEFORE any slotbook import: settings and the engine are
module-level singletons. Every test gets its own SQLite file so worker
threads in the concurrency tests can share it.
"""

import os
import tempfile

_TMP_DIR = tempfile.mkdtemp(prefix="slotbook-tests-")

os.environ["DATABASE_URL"] = f"sqlite:///{_TMP_DIR}/default.db"
os.environ["REDIS_URL"] = "redis://127.0.0.1:6399/0"
os.environ["JWT_SECRET"] = "test-secret-for-slotbook-tokens-0123456789"
os.environ["BOOKING_RATE_LIMIT"] = "0"
os.environ["LOGIN_RATE_LIMIT"] = "0"
os.environ["EMAIL_API_URL"] = ""
os.environ["EMAIL_API_SECRET"] = ""
os.environ["SCHEDULE_TIMEZONE"] = "UTC"

from datetime import timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session, sessionmaker

from slotbook.auth import Principal, create_access_token
from slotbook.database import build_engine, get_db
from slotbook.main import app
from slotbook.models import Base, Slots, Subjects, utc_now


@pytest.fixture
def engine(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'test.db'}")
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db(session_factory) -> Session:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def staff_headers() -> dict[str, str]:
    token = create_access_token(Principal(username="staff", role="staff", name="Staff User"))
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def subject(db: Session) -> Subjects:
    obj = Subjects(name="Mathematics", teacher="Dr. Noether", custom_fields='["Topic"]')
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj


@pytest.fixture
def make_slot(db: Session, subject: Subjects):
    """Factory: upcoming slot of `subject` (tomorrow, naive UTC)."""

    def _make(capacity: int = 1, current: int = 0, start=None, duration: int = 20) -> Slots:
        slot = Slots(
            subject_id=subject.id,
            start_time=start or (utc_now() + timedelta(days=1)).replace(microsecond=0),
            duration=duration,
            max_capacity=capacity,
            current_bookings=current,
        )
        db.add(slot)
        db.commit()
        db.refresh(slot)
        return slot

    return _make

