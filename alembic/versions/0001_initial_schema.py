"""initial schema

Revision ID: 0001
Revises:
Create Date: 2026-10-18 09:00:00

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("username", sa.String(100), nullable=False),
        sa.Column("full_name", sa.String(150), nullable=False),
        sa.Column("role", sa.String(20), server_default="teacher", nullable=False),
        sa.Column("rfid_card_id", sa.String(64), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_users_username", "users", ["username"], unique=True)
    op.create_index("ix_users_rfid_card_id", "users", ["rfid_card_id"], unique=True)

    op.create_table(
        "classes",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("subject", sa.String(100), nullable=False),
        sa.Column("teacher_id", sa.String(36), nullable=False),
        sa.Column("school_id", sa.String(36), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_classes_teacher_id", "classes", ["teacher_id"])

    op.create_table(
        "students",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("roll_no", sa.String(20), nullable=False),
        sa.Column("full_name", sa.String(150), nullable=False),
        sa.Column("class_id", sa.String(36), sa.ForeignKey("classes.id"), nullable=False),
        sa.Column("photo_url", sa.String(500), nullable=True),
        sa.Column("rfid_card_id", sa.String(64), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_students_class_id", "students", ["class_id"])
    op.create_index("ix_students_rfid_card_id", "students", ["rfid_card_id"], unique=True)

    op.create_table(
        "attendance_records",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("student_id", sa.String(36), sa.ForeignKey("students.id"), nullable=False),
        sa.Column("class_id", sa.String(36), sa.ForeignKey("classes.id"), nullable=False),
        sa.Column("date", sa.String(10), nullable=False),
        sa.Column("is_present", sa.Boolean(), nullable=False),
        sa.Column("marked_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("marked_by", sa.String(36), nullable=False),
        sa.Column("method", sa.String(20), server_default="manual", nullable=False),
    )
    op.create_index("ix_attendance_records_student_id", "attendance_records", ["student_id"])
    op.create_index("ix_attendance_records_class_id", "attendance_records", ["class_id"])
    op.create_index("ix_attendance_records_date", "attendance_records", ["date"])
    op.create_index("ix_attendance_records_class_date", "attendance_records", ["class_id", "date"])

    op.create_table(
        "attendance_stats",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("student_id", sa.String(36), sa.ForeignKey("students.id"), nullable=False),
        sa.Column("class_id", sa.String(36), sa.ForeignKey("classes.id"), nullable=False),
        sa.Column("total_days", sa.Integer(), server_default="0", nullable=False),
        sa.Column("present_days", sa.Integer(), server_default="0", nullable=False),
        sa.Column("attendance_rate", sa.Float(), server_default="0", nullable=False),
        sa.Column("last_updated", sa.DateTime(timezone=True), nullable=False),
    )
    # one stats row per student; target of the ON CONFLICT upsert
    op.create_index("ix_attendance_stats_student_id", "attendance_stats", ["student_id"], unique=True)


def downgrade() -> None:
    op.drop_table("attendance_stats")
    op.drop_table("attendance_records")
    op.drop_table("students")
    op.drop_table("classes")
    op.drop_table("users")
