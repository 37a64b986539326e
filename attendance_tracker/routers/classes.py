from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from attendance_tracker.config import settings
from attendance_tracker.database import get_db
from attendance_tracker.schemas.attendance import (
    DashboardStats,
    StudentWithStats,
    WeeklyAttendance,
)
from attendance_tracker.schemas.roster import ClassCreate, ClassRead, ClassWithStats
from attendance_tracker.services.dashboard import DashboardService
from attendance_tracker.services.roster import RosterService

router = APIRouter(prefix="/api", tags=["classes"])


@router.get("/class/{class_id}/dashboard-stats", response_model=DashboardStats)
async def get_dashboard_stats(class_id: str, db: AsyncSession = Depends(get_db)):
    return await DashboardService(db).dashboard_stats(class_id)


@router.get("/class/{class_id}/students", response_model=List[StudentWithStats])
async def get_students_with_stats(class_id: str, db: AsyncSession = Depends(get_db)):
    return await DashboardService(db).students_with_stats(class_id)


@router.get("/class/{class_id}/low-attendance", response_model=List[StudentWithStats])
async def get_low_attendance_students(
    class_id: str,
    threshold: Optional[float] = Query(None, ge=0, le=100),
    db: AsyncSession = Depends(get_db),
):
    if threshold is None:
        threshold = settings.LOW_ATTENDANCE_THRESHOLD
    return await DashboardService(db).low_attendance(class_id, threshold)


@router.get("/class/{class_id}/weekly-attendance", response_model=List[WeeklyAttendance])
async def get_weekly_attendance(class_id: str, db: AsyncSession = Depends(get_db)):
    return await DashboardService(db).weekly_attendance(class_id)


@router.get("/teacher/classes", response_model=List[ClassWithStats])
async def get_teacher_class_overview(db: AsyncSession = Depends(get_db)):
    return await DashboardService(db).class_overview()


@router.get("/teacher/{teacher_id}/classes", response_model=List[ClassRead])
async def get_classes_by_teacher(teacher_id: str, db: AsyncSession = Depends(get_db)):
    return await RosterService(db).get_classes_by_teacher(teacher_id)


@router.post("/classes", response_model=ClassRead)
async def create_class(payload: ClassCreate, db: AsyncSession = Depends(get_db)):
    return await RosterService(db).create_class(
        payload.name, payload.subject, payload.teacher_id, payload.school_id
    )
