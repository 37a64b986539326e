from .attendance import router as attendance_router
from .classes import router as classes_router
from .health import router as health_router
from .reports import router as reports_router
from .rfid import router as rfid_router
from .roster import router as roster_router

__all__ = [
    "attendance_router",
    "classes_router",
    "health_router",
    "reports_router",
    "rfid_router",
    "roster_router",
]
