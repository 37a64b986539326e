from enum import Enum


class UserRole(str, Enum):
    TEACHER = "teacher"
    ADMIN = "admin"
    GOVERNMENT = "government"


class AttendanceMethod(str, Enum):
    MANUAL = "manual"
    FACIAL = "facial"
    RFID = "rfid"


class StudentStatus(str, Enum):
    """Bucket of a student's attendance rate shown on the dashboard."""

    EXCELLENT = "excellent"
    GOOD = "good"
    WARNING = "warning"
    CRITICAL = "critical"
