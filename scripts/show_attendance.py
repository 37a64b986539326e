import argparse
import asyncio
import logging
import os
import sys

from dotenv import load_dotenv
from sqlalchemy import select

script_dir = os.path.dirname(os.path.abspath(__file__))
project_root = os.path.dirname(script_dir)

sys.path.append(project_root)
env_path = os.path.join(project_root, ".env")
if os.path.exists(env_path):
    load_dotenv(env_path)

# Keep SQL echo out of the table
os.environ.setdefault("DEBUG", "false")
logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

from attendance_tracker.database import AsyncSessionLocal
from attendance_tracker.models import AttendanceRecord, Student


async def show_attendance(class_id: str | None, date: str | None):
    print("\n" + "=" * 95)
    print(f" {'Date':<12} | {'Time':<10} | {'Roll':<6} | {'Name':<24} | {'Status':<8} | {'Method':<8}")
    print("=" * 95)

    async with AsyncSessionLocal() as session:
        query = (
            select(AttendanceRecord, Student)
            .join(Student, Student.id == AttendanceRecord.student_id)
            .order_by(AttendanceRecord.date.desc(), AttendanceRecord.marked_at.desc())
        )
        if class_id:
            query = query.where(AttendanceRecord.class_id == class_id)
        if date:
            query = query.where(AttendanceRecord.date == date)

        result = await session.execute(query)
        rows = result.all()

        if not rows:
            print(f" {'No records found.':<90}")
        for record, student in rows:
            time_str = record.marked_at.strftime("%H:%M:%S")
            status = "present" if record.is_present else "absent"
            print(
                f" {record.date:<12} | {time_str:<10} | {student.roll_no:<6} | "
                f"{student.full_name:<24} | {status:<8} | {record.method:<8}"
            )

    print("=" * 95 + "\n")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Print stored attendance records.")
    parser.add_argument("--class-id", default=None)
    parser.add_argument("--date", default=None, help="YYYY-MM-DD")
    args = parser.parse_args()
    try:
        asyncio.run(show_attendance(args.class_id, args.date))
    except KeyboardInterrupt:
        pass
