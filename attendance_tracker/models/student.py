from typing import Optional

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, TimestampMixin, UUIDPrimaryKeyMixin


class Student(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    __tablename__ = "students"

    roll_no: Mapped[str] = mapped_column(String(20), nullable=False)
    full_name: Mapped[str] = mapped_column(String(150), nullable=False)
    class_id: Mapped[str] = mapped_column(
        ForeignKey("classes.id"), nullable=False, index=True
    )
    photo_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    # Unique across students, not across students and users.
    rfid_card_id: Mapped[Optional[str]] = mapped_column(
        String(64), unique=True, index=True, nullable=True
    )

    def __repr__(self):
        return f"<Student(id={self.id}, roll_no='{self.roll_no}')>"
