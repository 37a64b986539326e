from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, TimestampMixin, UUIDPrimaryKeyMixin


class SchoolClass(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    __tablename__ = "classes"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    subject: Mapped[str] = mapped_column(String(100), nullable=False)

    # Plain references; teachers and schools are looked up explicitly.
    teacher_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    school_id: Mapped[str] = mapped_column(String(36), nullable=False)

    def __repr__(self):
        return f"<SchoolClass(id={self.id}, name='{self.name}')>"
