import datetime
from typing import List, Union

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from attendance_tracker.cache import CacheClient, remember_marked
from attendance_tracker.exceptions import NotFoundError, PersistenceError, ValidationError
from attendance_tracker.models.attendance import AttendanceRecord
from attendance_tracker.models.enums import AttendanceMethod
from attendance_tracker.models.student import Student
from attendance_tracker.services.roster import RosterService
from attendance_tracker.services.stats import StatsService, student_lock
from attendance_tracker.utils.logging import get_logger

logger = get_logger(__name__)

DateLike = Union[datetime.date, str]


def to_date_string(value: DateLike) -> str:
    """Normalizes a calendar date to YYYY-MM-DD, rejecting anything with a time part."""
    if isinstance(value, datetime.datetime):
        raise ValidationError("date must be a calendar date without a time component")
    if isinstance(value, datetime.date):
        return value.isoformat()
    if isinstance(value, str):
        try:
            return datetime.datetime.strptime(value, "%Y-%m-%d").date().isoformat()
        except ValueError:
            pass
    raise ValidationError("Invalid date format. Use YYYY-MM-DD")


def today_string() -> str:
    return datetime.date.today().isoformat()


def _require_id(name: str, value) -> str:
    if not isinstance(value, str) or not value:
        raise ValidationError(f"{name} is required")
    return value


class AttendanceService:
    def __init__(self, db: AsyncSession, cache: CacheClient | None = None):
        self.db = db
        self.cache = cache

    async def mark(
        self,
        student_id: str,
        class_id: str,
        date: DateLike,
        is_present: bool,
        marked_by: str,
        method: Union[AttendanceMethod, str],
    ) -> AttendanceRecord:
        """
        Inserts a new attendance record and recomputes the student's stats.

        There is no check for an existing record on the same day: every call
        adds a row. Duplicate detection only happens in the RFID batch path.
        """
        student_id = _require_id("studentId", student_id)
        class_id = _require_id("classId", class_id)
        marked_by = _require_id("markedBy", marked_by)
        day = to_date_string(date)
        if not isinstance(is_present, bool):
            raise ValidationError("isPresent must be a boolean")
        try:
            method = AttendanceMethod(method)
        except ValueError:
            raise ValidationError("method must be one of manual, facial, rfid")

        student = await self.db.get(Student, student_id)
        if student is None:
            raise NotFoundError(f"Student '{student_id}' not found")
        await RosterService(self.db).require_class(class_id)

        record = AttendanceRecord(
            student_id=student_id,
            class_id=class_id,
            date=day,
            is_present=is_present,
            marked_at=datetime.datetime.now(datetime.timezone.utc),
            marked_by=marked_by,
            method=method.value,
        )

        async with student_lock(student_id):
            try:
                self.db.add(record)
                # a failed flush leaves the stats untouched
                await self.db.flush()
                await StatsService(self.db).recompute(student_id, class_id)
                await self.db.commit()
            except SQLAlchemyError as error:
                await self.db.rollback()
                logger.error("Failed to save attendance for %s: %s", student_id, error)
                raise PersistenceError("Failed to save attendance record") from error

        await remember_marked(self.cache, class_id, student_id, day)
        logger.info(
            "Marked %s %s on %s via %s",
            student_id,
            "present" if is_present else "absent",
            day,
            method.value,
        )
        return record

    async def get_attendance_by_date(self, class_id: str, date: DateLike) -> List[AttendanceRecord]:
        result = await self.db.execute(
            select(AttendanceRecord)
            .where(
                AttendanceRecord.class_id == class_id,
                AttendanceRecord.date == to_date_string(date),
            )
            .order_by(AttendanceRecord.marked_at)
        )
        return list(result.scalars().all())

    async def get_attendance_between(
        self, class_id: str, start: DateLike, end: DateLike
    ) -> List[AttendanceRecord]:
        # ISO date strings sort chronologically
        result = await self.db.execute(
            select(AttendanceRecord)
            .where(
                AttendanceRecord.class_id == class_id,
                AttendanceRecord.date >= to_date_string(start),
                AttendanceRecord.date <= to_date_string(end),
            )
            .order_by(AttendanceRecord.date, AttendanceRecord.marked_at)
        )
        return list(result.scalars().all())

    async def get_attendance_history(
        self, student_id: str, limit: int = 30
    ) -> List[AttendanceRecord]:
        result = await self.db.execute(
            select(AttendanceRecord)
            .where(AttendanceRecord.student_id == student_id)
            .order_by(AttendanceRecord.date.desc(), AttendanceRecord.marked_at.desc())
            .limit(limit)
        )
        return list(result.scalars().all())
