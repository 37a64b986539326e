from typing import Optional

from pydantic import Field

from .base import CamelModel


class StudentSummary(CamelModel):
    id: str
    full_name: str
    roll_no: str


class StudentRead(StudentSummary):
    class_id: str
    photo_url: Optional[str] = None
    rfid_card_id: Optional[str] = None


class UserRead(CamelModel):
    id: str
    username: str
    full_name: str
    role: str
    rfid_card_id: Optional[str] = None


class ClassCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    subject: str = Field(..., min_length=1, max_length=100)
    teacher_id: Optional[str] = Field(None, max_length=36)
    school_id: Optional[str] = Field(None, max_length=36)


class ClassRead(CamelModel):
    id: str
    name: str
    subject: str
    teacher_id: str
    school_id: str


class ClassWithStats(CamelModel):
    id: str
    name: str
    subject: str
    total_students: int
    attendance_rate: float


class CardAssignment(CamelModel):
    rfid_card_id: str = Field(..., max_length=64)
