import datetime
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from attendance_tracker.schemas.report import (
    Report,
    ReportPeriod,
    ReportStudentRow,
    ReportSummary,
)
from attendance_tracker.services.dashboard import DashboardService
from attendance_tracker.utils.logging import get_logger

logger = get_logger(__name__)


class ReportService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.dashboard = DashboardService(db)

    async def generate(
        self,
        report_type: str,
        class_id: str,
        start_date: Optional[datetime.date] = None,
        end_date: Optional[datetime.date] = None,
    ) -> Report:
        stats = await self.dashboard.dashboard_stats(class_id)
        students = await self.dashboard.students_with_stats(class_id)

        logger.info("Generated %s report for class %s", report_type, class_id)
        return Report(
            type=report_type,
            generated_at=datetime.datetime.now(datetime.timezone.utc),
            class_id=class_id,
            period=ReportPeriod(start_date=start_date, end_date=end_date),
            summary=ReportSummary(
                total_students=len(students),
                average_attendance=stats.attendance_rate,
                present_today=stats.present_today,
                absent_today=stats.absent_today,
            ),
            students=[
                ReportStudentRow(
                    roll_no=row.roll_no,
                    full_name=row.full_name,
                    attendance_rate=row.attendance_rate,
                    status=row.status,
                )
                for row in students
            ],
        )
