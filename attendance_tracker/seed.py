import datetime
import random

from sqlalchemy.ext.asyncio import AsyncSession

from attendance_tracker.models.attendance import AttendanceRecord
from attendance_tracker.models.enums import AttendanceMethod, UserRole
from attendance_tracker.models.school_class import SchoolClass
from attendance_tracker.models.student import Student
from attendance_tracker.models.user import User
from attendance_tracker.services.roster import DEFAULT_SCHOOL_ID, RosterService
from attendance_tracker.services.stats import StatsService
from attendance_tracker.utils.logging import get_logger

logger = get_logger(__name__)

DEMO_CLASS_ID = "demo"
DEMO_STUDENT_NAMES = [
    "Aarav Kumar", "Priya Sharma", "Rohan Singh", "Sneha Patel", "Arjun Reddy",
    "Kavya Nair", "Vikram Gupta", "Ananya Joshi", "Rahul Verma", "Divya Rao",
    "Karthik Iyer", "Meera Agarwal", "Siddharth Shah", "Pooja Mishra", "Aryan Das",
    "Tanya Malhotra", "Varun Khanna", "Ishita Bansal", "Nikhil Sinha", "Ritika Jain",
    "Aditya Pandey", "Shreya Saxena", "Manish Kumar", "Neha Singh", "Raj Patel",
    "Swati Gupta", "Akash Sharma", "Riya Agarwal", "Deepak Yadav", "Sakshi Tiwari",
    "Rohit Chandra", "Nisha Kapoor",
]


async def seed_demo_data(
    session: AsyncSession,
    teacher_username: str = "anita.sharma",
    present_probability: float = 0.85,
) -> bool:
    """
    Creates the demo teacher, class and roster with today's attendance.

    Runs once: returns False without touching anything when the demo
    teacher already exists.
    """
    roster = RosterService(session)
    if await roster.get_user_by_username(teacher_username):
        logger.info("Demo data already present. Skipping seed.")
        return False

    teacher = User(
        username=teacher_username,
        full_name="Anita Sharma",
        role=UserRole.TEACHER.value,
    )
    session.add(teacher)
    await session.flush()

    if await roster.get_class(DEMO_CLASS_ID) is None:
        session.add(
            SchoolClass(
                id=DEMO_CLASS_ID,
                name="Class 5A",
                subject="Mathematics",
                teacher_id=teacher.id,
                school_id=DEFAULT_SCHOOL_ID,
            )
        )

    today = datetime.date.today().isoformat()
    now = datetime.datetime.now(datetime.timezone.utc)
    students = []
    for index, name in enumerate(DEMO_STUDENT_NAMES):
        student = Student(roll_no=str(101 + index), full_name=name, class_id=DEMO_CLASS_ID)
        students.append(student)
        session.add(student)
    await session.flush()

    for student in students:
        session.add(
            AttendanceRecord(
                student_id=student.id,
                class_id=DEMO_CLASS_ID,
                date=today,
                is_present=random.random() < present_probability,
                marked_at=now,
                marked_by=teacher.id,
                method=AttendanceMethod.MANUAL.value,
            )
        )
    await session.flush()

    stats = StatsService(session)
    for student in students:
        await stats.recompute(student.id, DEMO_CLASS_ID)

    await session.commit()
    logger.info(
        "Seeded teacher %s, class %s and %d students",
        teacher_username,
        DEMO_CLASS_ID,
        len(students),
    )
    return True
