import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Iterable, List, Mapping, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from attendance_tracker.models.attendance import AttendanceRecord, AttendanceStats
from attendance_tracker.models.enums import StudentStatus
from attendance_tracker.models.student import Student
from attendance_tracker.schemas.attendance import (
    DashboardStats,
    StudentWithStats,
    WeeklyAttendance,
)
from attendance_tracker.schemas.roster import ClassWithStats
from attendance_tracker.services.attendance import AttendanceService, to_date_string
from attendance_tracker.services.roster import RosterService
from attendance_tracker.services.stats import StatsService

# Inclusive lower bounds, checked from the top.
STATUS_THRESHOLDS = (
    (95.0, StudentStatus.EXCELLENT),
    (85.0, StudentStatus.GOOD),
    (75.0, StudentStatus.WARNING),
)
WEEK_DAYS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat")


def round_half_up(value: float, digits: int = 0) -> float:
    quantum = Decimal(1).scaleb(-digits)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def classify_attendance(rate: float) -> StudentStatus:
    for lower_bound, status in STATUS_THRESHOLDS:
        if rate >= lower_bound:
            return status
    return StudentStatus.CRITICAL


def latest_by_student(records: Iterable[AttendanceRecord]) -> Dict[str, AttendanceRecord]:
    """The most recent mark per student. ``records`` must be in marking order."""
    latest: Dict[str, AttendanceRecord] = {}
    for record in records:
        latest[record.student_id] = record
    return latest


def build_dashboard_stats(
    total_students: int, today_records: Iterable[AttendanceRecord]
) -> DashboardStats:
    latest = latest_by_student(today_records).values()
    present = sum(1 for record in latest if record.is_present)
    absent = sum(1 for record in latest if not record.is_present)
    rate = present / total_students * 100 if total_students > 0 else 0.0
    return DashboardStats(
        total_students=total_students,
        present_today=present,
        absent_today=absent,
        attendance_rate=round_half_up(rate, 1),
    )


def build_student_rows(
    students: Iterable[Student],
    stats_by_student: Mapping[str, AttendanceStats],
    today_records: Iterable[AttendanceRecord],
) -> List[StudentWithStats]:
    latest = latest_by_student(today_records)
    rows = []
    for student in students:
        stats = stats_by_student.get(student.id)
        rate = stats.attendance_rate if stats else 0.0
        today = latest.get(student.id)
        rows.append(
            StudentWithStats(
                id=student.id,
                roll_no=student.roll_no,
                full_name=student.full_name,
                photo_url=student.photo_url,
                attendance_rate=int(round_half_up(rate)),
                is_present=bool(today and today.is_present),
                status=classify_attendance(rate).value,
            )
        )
    return rows


def filter_low_attendance(
    rows: Iterable[StudentWithStats], threshold: float = 75.0
) -> List[StudentWithStats]:
    # Compares the rate shown in the row, so a row never contradicts the threshold.
    return [row for row in rows if row.attendance_rate < threshold]


def week_start(reference: datetime.date) -> datetime.date:
    return reference - datetime.timedelta(days=reference.weekday())


def build_weekly_attendance(
    total_students: int,
    records: Iterable[AttendanceRecord],
    reference: datetime.date,
) -> List[WeeklyAttendance]:
    """Present/absent per school day (Mon-Sat) of the week containing ``reference``."""
    by_day: Dict[str, List[AttendanceRecord]] = {}
    for record in records:
        by_day.setdefault(record.date, []).append(record)

    monday = week_start(reference)
    week = []
    for offset, label in enumerate(WEEK_DAYS):
        day = (monday + datetime.timedelta(days=offset)).isoformat()
        latest = latest_by_student(by_day.get(day, [])).values()
        present = sum(1 for record in latest if record.is_present)
        percentage = present / total_students * 100 if total_students > 0 else 0.0
        week.append(
            WeeklyAttendance(
                day=label,
                date=day,
                present=present,
                absent=max(total_students - present, 0),
                percentage=int(round_half_up(percentage)),
            )
        )
    return week


class DashboardService:
    """Read-only views over the stored records; nothing here is cached."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.roster = RosterService(db)
        self.attendance = AttendanceService(db)
        self.stats = StatsService(db)

    async def dashboard_stats(
        self, class_id: str, today: Optional[datetime.date] = None
    ) -> DashboardStats:
        await self.roster.require_class(class_id)
        day = today or datetime.date.today()
        students = await self.roster.get_students_by_class(class_id)
        records = await self.attendance.get_attendance_by_date(class_id, day)
        return build_dashboard_stats(len(students), records)

    async def students_with_stats(
        self, class_id: str, today: Optional[datetime.date] = None
    ) -> List[StudentWithStats]:
        await self.roster.require_class(class_id)
        day = today or datetime.date.today()
        students = await self.roster.get_students_by_class(class_id)
        stats = await self.stats.get_for_students([student.id for student in students])
        records = await self.attendance.get_attendance_by_date(class_id, day)
        return build_student_rows(students, stats, records)

    async def low_attendance(
        self,
        class_id: str,
        threshold: float = 75.0,
        today: Optional[datetime.date] = None,
    ) -> List[StudentWithStats]:
        rows = await self.students_with_stats(class_id, today)
        return filter_low_attendance(rows, threshold)

    async def weekly_attendance(
        self, class_id: str, reference: Optional[datetime.date] = None
    ) -> List[WeeklyAttendance]:
        await self.roster.require_class(class_id)
        reference = reference or datetime.date.today()
        monday = week_start(reference)
        saturday = monday + datetime.timedelta(days=len(WEEK_DAYS) - 1)
        students = await self.roster.get_students_by_class(class_id)
        records = await self.attendance.get_attendance_between(
            class_id, to_date_string(monday), to_date_string(saturday)
        )
        return build_weekly_attendance(len(students), records, reference)

    async def class_overview(self, teacher_id: Optional[str] = None) -> List[ClassWithStats]:
        if teacher_id:
            classes = await self.roster.get_classes_by_teacher(teacher_id)
        else:
            classes = await self.roster.get_all_classes()

        overview = []
        for school_class in classes:
            stats = await self.dashboard_stats(school_class.id)
            overview.append(
                ClassWithStats(
                    id=school_class.id,
                    name=school_class.name,
                    subject=school_class.subject,
                    total_students=stats.total_students,
                    attendance_rate=stats.attendance_rate,
                )
            )
        return overview
