from .attendance import (
    AttendanceCreate,
    AttendanceRead,
    AttendanceStatsRead,
    DashboardStats,
    StudentWithStats,
    WeeklyAttendance,
)
from .rfid import (
    BatchFailure,
    BatchResult,
    BatchSuccess,
    BulkScanRequest,
    RfidScanRequest,
    RfidScanResult,
)
from .roster import (
    CardAssignment,
    ClassCreate,
    ClassRead,
    ClassWithStats,
    StudentRead,
    StudentSummary,
    UserRead,
)
from .report import Report, ReportRequest

__all__ = [
    "AttendanceCreate",
    "AttendanceRead",
    "AttendanceStatsRead",
    "DashboardStats",
    "StudentWithStats",
    "WeeklyAttendance",
    "BatchFailure",
    "BatchResult",
    "BatchSuccess",
    "BulkScanRequest",
    "RfidScanRequest",
    "RfidScanResult",
    "CardAssignment",
    "ClassCreate",
    "ClassRead",
    "ClassWithStats",
    "StudentRead",
    "StudentSummary",
    "UserRead",
    "Report",
    "ReportRequest",
]
