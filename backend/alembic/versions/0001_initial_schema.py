"""initial schema: users, subjects, slots, bookings

Revision ID: 0001
Revises:
Create Date: 2024-01-15 00:00:00

"""
from alembic import op
import sqlalchemy as sa

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "users",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("username", sa.String(100), nullable=False, unique=True),
        sa.Column("password", sa.String(255), nullable=False),
        sa.Column("role", sa.String(50), nullable=False, server_default=sa.text("'staff'")),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255)),
        sa.Column("created_at", sa.DateTime, nullable=False),
    )

    op.create_table(
        "subjects",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("teacher", sa.String(255), nullable=False, server_default=sa.text("''")),
        sa.Column("custom_fields", sa.Text, nullable=False, server_default=sa.text("'[]'")),
        sa.Column("description", sa.Text),
        sa.Column("color", sa.String(20), nullable=False, server_default=sa.text("'#4F46E5'")),
        sa.Column("location", sa.String(255)),
        sa.Column("active", sa.Integer, nullable=False, server_default=sa.text("1")),
        sa.Column("created_at", sa.DateTime, nullable=False),
    )

    op.create_table(
        "slots",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("subject_id", sa.String(36), sa.ForeignKey("subjects.id"), nullable=False),
        sa.Column("start_time", sa.DateTime, nullable=False),
        sa.Column("duration", sa.Integer, nullable=False),
        sa.Column("max_capacity", sa.Integer, nullable=False, server_default=sa.text("1")),
        sa.Column("current_bookings", sa.Integer, nullable=False, server_default=sa.text("0")),
        sa.Column("location", sa.String(255)),
        sa.Column("created_at", sa.DateTime, nullable=False),
        sa.CheckConstraint("current_bookings >= 0", name="ck_slots_current_bookings_non_negative"),
    )
    op.create_index("idx_slots_subject", "slots", ["subject_id"])
    op.create_index("idx_slots_start_time", "slots", ["start_time"])

    op.create_table(
        "bookings",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("slot_id", sa.String(36), sa.ForeignKey("slots.id"), nullable=False),
        sa.Column("subject_id", sa.String(36), sa.ForeignKey("subjects.id"), nullable=False),
        sa.Column("student_name", sa.String(255), nullable=False),
        sa.Column("student_id", sa.String(100), nullable=False),
        sa.Column("student_email", sa.String(255), nullable=False),
        sa.Column("custom_answers", sa.Text, nullable=False, server_default=sa.text("'{}'")),
        sa.Column("status", sa.String(50), nullable=False, server_default=sa.text("'confirmed'")),
        sa.Column("created_at", sa.DateTime, nullable=False),
        sa.UniqueConstraint("slot_id", "student_id", name="uq_bookings_slot_student"),
    )
    op.create_index("idx_bookings_slot", "bookings", ["slot_id"])
    op.create_index("idx_bookings_subject", "bookings", ["subject_id"])


def downgrade():
    op.drop_index("idx_bookings_subject", table_name="bookings")
    op.drop_index("idx_bookings_slot", table_name="bookings")
    op.drop_table("bookings")
    op.drop_index("idx_slots_start_time", table_name="slots")
    op.drop_index("idx_slots_subject", table_name="slots")
    op.drop_table("slots")
    op.drop_table("subjects")
    op.drop_table("users")
