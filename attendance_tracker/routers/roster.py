from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from attendance_tracker.config import settings
from attendance_tracker.database import get_db
from attendance_tracker.exceptions import NotFoundError
from attendance_tracker.schemas.roster import CardAssignment, StudentRead, UserRead
from attendance_tracker.services.roster import RosterService

router = APIRouter(prefix="/api", tags=["roster"])


@router.put("/student/{student_id}/rfid", response_model=StudentRead)
async def assign_student_card(
    student_id: str, payload: CardAssignment, db: AsyncSession = Depends(get_db)
):
    return await RosterService(db).assign_student_card(student_id, payload.rfid_card_id)


@router.put("/user/{user_id}/rfid", response_model=UserRead)
async def assign_user_card(
    user_id: str, payload: CardAssignment, db: AsyncSession = Depends(get_db)
):
    return await RosterService(db).assign_user_card(user_id, payload.rfid_card_id)


@router.get("/auth/me", response_model=UserRead)
async def get_current_user(db: AsyncSession = Depends(get_db)):
    """No real authentication: always the demo teacher."""
    user = await RosterService(db).get_user_by_username(settings.DEMO_TEACHER_USERNAME)
    if user is None:
        raise NotFoundError("Demo teacher has not been seeded")
    return user


@router.get("/settings")
async def get_system_settings():
    return {
        "attendanceThreshold": settings.LOW_ATTENDANCE_THRESHOLD,
        "rfidIntegration": True,
        "cacheBackend": settings.CACHE_BACKEND,
        "version": settings.VERSION,
    }
