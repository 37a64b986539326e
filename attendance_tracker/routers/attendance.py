from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from attendance_tracker.cache import get_cache
from attendance_tracker.database import get_db
from attendance_tracker.exceptions import NotFoundError
from attendance_tracker.schemas.attendance import (
    AttendanceCreate,
    AttendanceRead,
    AttendanceStatsRead,
)
from attendance_tracker.services.attendance import AttendanceService
from attendance_tracker.services.stats import StatsService

router = APIRouter(prefix="/api", tags=["attendance"])


@router.post("/attendance", response_model=AttendanceRead)
async def mark_attendance(
    payload: AttendanceCreate,
    db: AsyncSession = Depends(get_db),
    cache=Depends(get_cache),
):
    """Manual or facial mark. Does not reject a second mark for the same day."""
    service = AttendanceService(db, cache)
    return await service.mark(
        payload.student_id,
        payload.class_id,
        payload.date,
        payload.is_present,
        payload.marked_by,
        payload.method,
    )


@router.get("/class/{class_id}/attendance/{date}", response_model=List[AttendanceRead])
async def get_attendance_by_date(
    class_id: str, date: str, db: AsyncSession = Depends(get_db)
):
    return await AttendanceService(db).get_attendance_by_date(class_id, date)


@router.get(
    "/student/{student_id}/attendance-history", response_model=List[AttendanceRead]
)
async def get_attendance_history(
    student_id: str,
    limit: int = Query(30, ge=1, le=365),
    db: AsyncSession = Depends(get_db),
):
    return await AttendanceService(db).get_attendance_history(student_id, limit)


@router.get("/student/{student_id}/stats", response_model=AttendanceStatsRead)
async def get_student_stats(student_id: str, db: AsyncSession = Depends(get_db)):
    stats = await StatsService(db).get_for_student(student_id)
    if stats is None:
        raise NotFoundError("No attendance stats for this student")
    return stats
