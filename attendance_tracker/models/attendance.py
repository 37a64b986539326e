from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, UUIDPrimaryKeyMixin
from .enums import AttendanceMethod


class AttendanceRecord(Base, UUIDPrimaryKeyMixin):
    __tablename__ = "attendance_records"

    student_id: Mapped[str] = mapped_column(
        ForeignKey("students.id"), nullable=False, index=True
    )
    class_id: Mapped[str] = mapped_column(
        ForeignKey("classes.id"), nullable=False, index=True
    )

    # YYYY-MM-DD
    date: Mapped[str] = mapped_column(String(10), nullable=False, index=True)
    is_present: Mapped[bool] = mapped_column(nullable=False)
    marked_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    marked_by: Mapped[str] = mapped_column(String(36), nullable=False)
    method: Mapped[str] = mapped_column(
        String(20),
        default=AttendanceMethod.MANUAL.value,
        server_default=AttendanceMethod.MANUAL.value,
    )

    # No uniqueness on (student_id, date): a student may be marked more than
    # once per day through the single-mark endpoint.
    __table_args__ = (
        Index("ix_attendance_records_class_date", "class_id", "date"),
    )

    def __repr__(self):
        return f"<AttendanceRecord(student_id={self.student_id}, date='{self.date}')>"


class AttendanceStats(Base, UUIDPrimaryKeyMixin):
    __tablename__ = "attendance_stats"

    student_id: Mapped[str] = mapped_column(
        ForeignKey("students.id"), unique=True, nullable=False, index=True
    )
    class_id: Mapped[str] = mapped_column(ForeignKey("classes.id"), nullable=False)
    total_days: Mapped[int] = mapped_column(default=0, nullable=False)
    present_days: Mapped[int] = mapped_column(default=0, nullable=False)
    attendance_rate: Mapped[float] = mapped_column(default=0.0, nullable=False)
    last_updated: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    def __repr__(self):
        return (
            f"<AttendanceStats(student_id={self.student_id}, "
            f"rate={self.attendance_rate:.1f})>"
        )
