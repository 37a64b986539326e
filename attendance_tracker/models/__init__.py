from .base import Base
from .user import User
from .school_class import SchoolClass
from .student import Student
from .attendance import AttendanceRecord, AttendanceStats
from .enums import AttendanceMethod, StudentStatus, UserRole

# for wildcard imports
__all__ = [
    "Base",
    "User",
    "SchoolClass",
    "Student",
    "AttendanceRecord",
    "AttendanceStats",
    "AttendanceMethod",
    "StudentStatus",
    "UserRole",
]
