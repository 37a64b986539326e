import datetime
from typing import List, Optional

from .base import CamelModel


class ReportRequest(CamelModel):
    type: str = "attendance"
    class_id: str
    start_date: Optional[datetime.date] = None
    end_date: Optional[datetime.date] = None


class ReportPeriod(CamelModel):
    start_date: Optional[datetime.date] = None
    end_date: Optional[datetime.date] = None


class ReportSummary(CamelModel):
    total_students: int
    average_attendance: float
    present_today: int
    absent_today: int


class ReportStudentRow(CamelModel):
    roll_no: str
    full_name: str
    attendance_rate: int
    status: str


class Report(CamelModel):
    type: str
    generated_at: datetime.datetime
    class_id: str
    period: ReportPeriod
    summary: ReportSummary
    students: List[ReportStudentRow]
