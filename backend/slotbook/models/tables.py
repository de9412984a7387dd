# backend/slotbook/models/tables.py

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()
metadata = Base.metadata


def new_id() -> str:
    return str(uuid.uuid4())


def utc_now() -> datetime:
    """Naive UTC, the storage convention for every timestamp column."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Users(Base):
    __tablename__ = 'users'

    id = Column(String(36), primary_key=True, default=new_id)
    username = Column(String(100), nullable=False, unique=True)
    password = Column(String(255), nullable=False)  # "salt_hex:hash_hex"
    role = Column(String(50), nullable=False, server_default=text("'staff'"))
    name = Column(String(255), nullable=False)
    email = Column(String(255))
    created_at = Column(DateTime, nullable=False, default=utc_now)


class Subjects(Base):
    __tablename__ = 'subjects'

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(255), nullable=False)
    teacher = Column(String(255), nullable=False, server_default=text("''"))
    custom_fields = Column(Text, nullable=False, server_default=text("'[]'"))
    description = Column(Text)
    color = Column(String(20), nullable=False, server_default=text("'#4F46E5'"))
    location = Column(String(255))
    active = Column(Integer, nullable=False, server_default=text('1'))
    created_at = Column(DateTime, nullable=False, default=utc_now)

    slots = relationship('Slots', back_populates='subject')
    bookings = relationship('Bookings', back_populates='subject')


class Slots(Base):
    __tablename__ = 'slots'
    __table_args__ = (
        CheckConstraint('current_bookings >= 0', name='ck_slots_current_bookings_non_negative'),
        Index('idx_slots_subject', 'subject_id'),
        Index('idx_slots_start_time', 'start_time'),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    subject_id = Column(ForeignKey('subjects.id'), nullable=False)
    start_time = Column(DateTime, nullable=False)  # naive UTC
    duration = Column(Integer, nullable=False)  # minutes
    max_capacity = Column(Integer, nullable=False, server_default=text('1'))
    current_bookings = Column(Integer, nullable=False, server_default=text('0'))
    location = Column(String(255))
    created_at = Column(DateTime, nullable=False, default=utc_now)

    subject = relationship('Subjects', back_populates='slots')
    bookings = relationship('Bookings', back_populates='slot')


class Bookings(Base):
    __tablename__ = 'bookings'
    __table_args__ = (
        UniqueConstraint('slot_id', 'student_id', name='uq_bookings_slot_student'),
        Index('idx_bookings_slot', 'slot_id'),
        Index('idx_bookings_subject', 'subject_id'),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    slot_id = Column(ForeignKey('slots.id'), nullable=False)
    subject_id = Column(ForeignKey('subjects.id'), nullable=False)
    student_name = Column(String(255), nullable=False)
    student_id = Column(String(100), nullable=False)
    student_email = Column(String(255), nullable=False)
    custom_answers = Column(Text, nullable=False, server_default=text("'{}'"))
    status = Column(String(50), nullable=False, server_default=text("'confirmed'"))
    created_at = Column(DateTime, nullable=False, default=utc_now)

    slot = relationship('Slots', back_populates='bookings')
    subject = relationship('Subjects', back_populates='bookings')
