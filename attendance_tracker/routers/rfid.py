from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from attendance_tracker.cache import get_cache
from attendance_tracker.database import get_db
from attendance_tracker.exceptions import NotFoundError
from attendance_tracker.schemas.attendance import AttendanceRead
from attendance_tracker.schemas.rfid import (
    BatchResult,
    BulkScanRequest,
    RfidScanRequest,
    RfidScanResult,
)
from attendance_tracker.schemas.roster import StudentRead, StudentSummary, UserRead
from attendance_tracker.services.rfid import RfidService
from attendance_tracker.services.roster import RosterService

router = APIRouter(prefix="/api/rfid", tags=["rfid"])


@router.post("/attendance", response_model=RfidScanResult)
async def mark_rfid_attendance(
    payload: RfidScanRequest,
    db: AsyncSession = Depends(get_db),
    cache=Depends(get_cache),
):
    student, record = await RfidService(db, cache).mark_by_card(
        payload.rfid_card_id, payload.class_id, payload.marked_by, payload.date
    )
    return RfidScanResult(
        student=StudentSummary.model_validate(student),
        attendance=AttendanceRead.model_validate(record),
    )


@router.post("/bulk-attendance", response_model=BatchResult)
async def mark_bulk_rfid_attendance(
    payload: BulkScanRequest,
    db: AsyncSession = Depends(get_db),
    cache=Depends(get_cache),
):
    return await RfidService(db, cache).process_batch(
        payload.scans, payload.class_id, payload.marked_by, payload.date
    )


@router.get("/student/{rfid_card_id}", response_model=StudentRead)
async def get_student_by_card(rfid_card_id: str, db: AsyncSession = Depends(get_db)):
    student = await RosterService(db).get_student_by_card(rfid_card_id)
    if student is None:
        raise NotFoundError("Student not found for RFID card")
    return student


@router.get("/user/{rfid_card_id}", response_model=UserRead)
async def get_user_by_card(rfid_card_id: str, db: AsyncSession = Depends(get_db)):
    user = await RosterService(db).get_user_by_card(rfid_card_id)
    if user is None:
        raise NotFoundError("User not found for RFID card")
    return user
