from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from attendance_tracker.exceptions import (
    ConflictError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from attendance_tracker.models.school_class import SchoolClass
from attendance_tracker.models.student import Student
from attendance_tracker.models.user import User
from attendance_tracker.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_TEACHER_ID = "teacher-demo"
DEFAULT_SCHOOL_ID = "demo-school"


class RosterService:
    """Users, classes and students: lookups plus the few writes the API exposes."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # --- Users ---
    async def get_user(self, user_id: str) -> Optional[User]:
        return await self.db.get(User, user_id)

    async def get_user_by_username(self, username: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.username == username))
        return result.scalar_one_or_none()

    async def get_user_by_card(self, card_id: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.rfid_card_id == card_id))
        return result.scalar_one_or_none()

    # --- Classes ---
    async def get_class(self, class_id: str) -> Optional[SchoolClass]:
        return await self.db.get(SchoolClass, class_id)

    async def require_class(self, class_id: str) -> SchoolClass:
        school_class = await self.get_class(class_id)
        if school_class is None:
            raise NotFoundError(f"Class '{class_id}' not found")
        return school_class

    async def get_classes_by_teacher(self, teacher_id: str) -> List[SchoolClass]:
        result = await self.db.execute(
            select(SchoolClass)
            .where(SchoolClass.teacher_id == teacher_id)
            .order_by(SchoolClass.name)
        )
        return list(result.scalars().all())

    async def get_all_classes(self) -> List[SchoolClass]:
        result = await self.db.execute(select(SchoolClass).order_by(SchoolClass.name))
        return list(result.scalars().all())

    async def create_class(
        self,
        name: str,
        subject: str,
        teacher_id: Optional[str] = None,
        school_id: Optional[str] = None,
    ) -> SchoolClass:
        if not name or not subject:
            raise ValidationError("Class name and subject are required")
        school_class = SchoolClass(
            name=name,
            subject=subject,
            teacher_id=teacher_id or DEFAULT_TEACHER_ID,
            school_id=school_id or DEFAULT_SCHOOL_ID,
        )
        self.db.add(school_class)
        await self._commit("Failed to create class")
        logger.info("Created class %s (%s)", school_class.id, school_class.name)
        return school_class

    # --- Students ---
    async def get_student(self, student_id: str) -> Optional[Student]:
        return await self.db.get(Student, student_id)

    async def get_student_by_card(self, card_id: str) -> Optional[Student]:
        result = await self.db.execute(
            select(Student).where(Student.rfid_card_id == card_id)
        )
        return result.scalar_one_or_none()

    async def get_students_by_class(self, class_id: str) -> List[Student]:
        result = await self.db.execute(
            select(Student).where(Student.class_id == class_id).order_by(Student.roll_no)
        )
        return list(result.scalars().all())

    # --- RFID card assignment ---
    async def assign_student_card(self, student_id: str, card_id: str) -> Student:
        if not card_id:
            raise ValidationError("RFID card ID is required")

        existing = await self.get_student_by_card(card_id)
        if existing is not None and existing.id != student_id:
            raise ConflictError("RFID card already assigned to another student")

        student = await self.get_student(student_id)
        if student is None:
            raise NotFoundError("Student not found")

        student.rfid_card_id = card_id
        await self._commit(
            "Failed to assign RFID card",
            conflict="RFID card already assigned to another student",
        )
        logger.info("Assigned RFID card %s to student %s", card_id, student_id)
        return student

    async def assign_user_card(self, user_id: str, card_id: str) -> User:
        if not card_id:
            raise ValidationError("RFID card ID is required")

        existing = await self.get_user_by_card(card_id)
        if existing is not None and existing.id != user_id:
            raise ConflictError("RFID card already assigned to another user")

        user = await self.get_user(user_id)
        if user is None:
            raise NotFoundError("User not found")

        user.rfid_card_id = card_id
        await self._commit(
            "Failed to assign RFID card",
            conflict="RFID card already assigned to another user",
        )
        logger.info("Assigned RFID card %s to user %s", card_id, user_id)
        return user

    async def _commit(self, message: str, conflict: Optional[str] = None) -> None:
        try:
            await self.db.commit()
        except IntegrityError as error:
            await self.db.rollback()
            # lost a race against a concurrent assignment of the same card
            if conflict:
                raise ConflictError(conflict) from error
            raise PersistenceError(message) from error
        except SQLAlchemyError as error:
            await self.db.rollback()
            raise PersistenceError(message) from error
