import datetime  # Import module to avoid name collision with the field 'date'
from typing import Optional

from pydantic import Field, StrictBool

from attendance_tracker.models.enums import AttendanceMethod

from .base import CamelModel


# --- Create Schema (Input) ---
class AttendanceCreate(CamelModel):
    student_id: str = Field(..., min_length=1, max_length=36)
    class_id: str = Field(..., min_length=1, max_length=36)
    date: datetime.date = Field(..., examples=["2024-09-02"])
    is_present: StrictBool
    marked_by: str = Field(..., min_length=1, max_length=36)
    method: AttendanceMethod = Field(..., examples=["manual", "facial", "rfid"])


# --- Read Schema (Output) ---
class AttendanceRead(CamelModel):
    id: str
    student_id: str
    class_id: str
    date: str
    is_present: bool
    marked_at: datetime.datetime
    marked_by: str
    method: str


class AttendanceStatsRead(CamelModel):
    id: str
    student_id: str
    class_id: str
    total_days: int
    present_days: int
    attendance_rate: float
    last_updated: datetime.datetime


class DashboardStats(CamelModel):
    total_students: int
    present_today: int
    absent_today: int
    attendance_rate: float


class WeeklyAttendance(CamelModel):
    day: str
    date: str
    present: int
    absent: int
    percentage: int


class StudentWithStats(CamelModel):
    id: str
    roll_no: str
    full_name: str
    photo_url: Optional[str] = None
    attendance_rate: int
    is_present: bool
    status: str
