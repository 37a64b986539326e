import datetime
from typing import List, Optional

from pydantic import Field

from .attendance import AttendanceRead
from .base import CamelModel
from .roster import StudentSummary


class RfidScanRequest(CamelModel):
    rfid_card_id: str = Field(..., min_length=1, max_length=64)
    class_id: str = Field(..., min_length=1)
    marked_by: str = Field(..., min_length=1)
    date: Optional[datetime.date] = None


class RfidScanResult(CamelModel):
    success: bool = True
    student: StudentSummary
    attendance: AttendanceRead


class BulkScanRequest(CamelModel):
    scans: List[str]
    class_id: str = Field(..., min_length=1)
    marked_by: str = Field(..., min_length=1)
    date: Optional[datetime.date] = None


class BatchSuccess(CamelModel):
    rfid_card_id: str
    student: StudentSummary
    attendance: AttendanceRead


class BatchFailure(CamelModel):
    rfid_card_id: str
    student: Optional[str] = None
    error: str


class BatchResult(CamelModel):
    successful: List[BatchSuccess] = Field(default_factory=list)
    failed: List[BatchFailure] = Field(default_factory=list)
    total: int = 0
