from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from attendance_tracker.database import get_db
from attendance_tracker.schemas.report import Report, ReportRequest
from attendance_tracker.services.reports import ReportService

router = APIRouter(prefix="/api/reports", tags=["reports"])


@router.post("/generate", response_model=Report)
async def generate_report(payload: ReportRequest, db: AsyncSession = Depends(get_db)):
    return await ReportService(db).generate(
        payload.type, payload.class_id, payload.start_date, payload.end_date
    )
