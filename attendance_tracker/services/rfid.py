from typing import Iterable, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from attendance_tracker.cache import CacheClient, is_marked, remember_marked
from attendance_tracker.exceptions import NotFoundError, ValidationError
from attendance_tracker.models.attendance import AttendanceRecord
from attendance_tracker.models.enums import AttendanceMethod
from attendance_tracker.models.student import Student
from attendance_tracker.schemas.attendance import AttendanceRead
from attendance_tracker.schemas.rfid import BatchFailure, BatchResult, BatchSuccess
from attendance_tracker.schemas.roster import StudentSummary
from attendance_tracker.services.attendance import (
    AttendanceService,
    DateLike,
    to_date_string,
    today_string,
)
from attendance_tracker.services.roster import RosterService
from attendance_tracker.utils.logging import get_logger

logger = get_logger(__name__)

STUDENT_NOT_FOUND = "Student not found"
WRONG_CLASS = "Wrong class"
ALREADY_MARKED = "Already marked"
PROCESSING_ERROR = "Processing error"


class RfidService:
    def __init__(self, db: AsyncSession, cache: CacheClient | None = None):
        self.db = db
        self.cache = cache
        self.roster = RosterService(db)
        self.attendance = AttendanceService(db, cache)

    async def mark_by_card(
        self,
        card_id: str,
        class_id: str,
        marked_by: str,
        date: Optional[DateLike] = None,
    ) -> Tuple[Student, AttendanceRecord]:
        """Single scan: always marks present, and does not look for an earlier mark that day."""
        day = to_date_string(date) if date else today_string()

        student = await self.roster.get_student_by_card(card_id)
        if student is None:
            raise NotFoundError("Student not found for RFID card")
        if student.class_id != class_id:
            raise ValidationError("Student does not belong to this class")

        record = await self.attendance.mark(
            student.id, class_id, day, True, marked_by, AttendanceMethod.RFID
        )
        return student, record

    async def _already_marked(self, student_id: str, class_id: str, day: str) -> bool:
        if await is_marked(self.cache, class_id, student_id, day):
            return True
        records = await self.attendance.get_attendance_by_date(class_id, day)
        if any(record.student_id == student_id for record in records):
            await remember_marked(self.cache, class_id, student_id, day)
            return True
        return False

    async def process_batch(
        self,
        card_ids: Iterable[str],
        class_id: str,
        marked_by: str,
        date: Optional[DateLike] = None,
    ) -> BatchResult:
        """
        Marks every scanned card present, one card at a time.

        Each card ends up in exactly one of ``successful`` or ``failed``.
        A failing card never aborts the batch and never undoes records
        written for earlier cards.
        """
        card_ids = list(card_ids)
        day = to_date_string(date) if date else today_string()
        result = BatchResult(total=len(card_ids))

        for card_id in card_ids:
            try:
                student = await self.roster.get_student_by_card(card_id)
                if student is None:
                    result.failed.append(
                        BatchFailure(rfid_card_id=card_id, error=STUDENT_NOT_FOUND)
                    )
                    continue

                if student.class_id != class_id:
                    result.failed.append(
                        BatchFailure(
                            rfid_card_id=card_id,
                            student=student.full_name,
                            error=WRONG_CLASS,
                        )
                    )
                    continue

                if await self._already_marked(student.id, class_id, day):
                    result.failed.append(
                        BatchFailure(
                            rfid_card_id=card_id,
                            student=student.full_name,
                            error=ALREADY_MARKED,
                        )
                    )
                    continue

                record = await self.attendance.mark(
                    student.id, class_id, day, True, marked_by, AttendanceMethod.RFID
                )
                result.successful.append(
                    BatchSuccess(
                        rfid_card_id=card_id,
                        student=StudentSummary.model_validate(student),
                        attendance=AttendanceRead.model_validate(record),
                    )
                )
            except Exception:
                logger.exception("RFID batch item %s failed", card_id)
                result.failed.append(
                    BatchFailure(rfid_card_id=card_id, error=PROCESSING_ERROR)
                )

        logger.info(
            "RFID batch for class %s on %s: %d marked, %d failed of %d",
            class_id,
            day,
            len(result.successful),
            len(result.failed),
            result.total,
        )
        return result
