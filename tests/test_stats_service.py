import asyncio

import pytest
from sqlalchemy import func, select

from attendance_tracker.models import AttendanceStats
from attendance_tracker.services.attendance import AttendanceService
from attendance_tracker.services.stats import (
    StatsService,
    _student_locks,
    attendance_rate,
    student_lock,
)


def test_attendance_rate_is_zero_without_history():
    assert attendance_rate(0, 0) == 0.0


def test_attendance_rate_is_percentage_of_present_days():
    assert attendance_rate(2, 3) == pytest.approx(66.6666, rel=1e-4)
    assert attendance_rate(3, 3) == 100.0


async def test_recompute_without_records_writes_zero_row(db, school):
    stats = await StatsService(db).recompute(school.rohan.id, school.class_5a.id)
    await db.commit()

    assert stats.total_days == 0
    assert stats.present_days == 0
    assert stats.attendance_rate == 0.0


async def test_stats_follow_full_history(db, school):
    service = AttendanceService(db)
    days = ["2024-09-02", "2024-09-03", "2024-09-04", "2024-09-05"]
    presence = [True, True, False, True]
    for day, present in zip(days, presence):
        await service.mark(school.aarav.id, school.class_5a.id, day, present, school.teacher.id, "manual")

    stats = await StatsService(db).get_for_student(school.aarav.id)
    assert stats.total_days == 4
    assert stats.present_days == 3
    assert stats.attendance_rate == pytest.approx(100 * 3 / 4)


async def test_recompute_is_idempotent_and_keeps_one_row(db, school):
    service = AttendanceService(db)
    await service.mark(school.priya.id, school.class_5a.id, "2024-09-02", False, school.teacher.id, "manual")

    stats_service = StatsService(db)
    first = await stats_service.recompute(school.priya.id, school.class_5a.id)
    first_values = (first.total_days, first.present_days, first.attendance_rate)
    second = await stats_service.recompute(school.priya.id, school.class_5a.id)
    await db.commit()

    assert (second.total_days, second.present_days, second.attendance_rate) == first_values
    count = await db.execute(
        select(func.count(AttendanceStats.id)).where(AttendanceStats.student_id == school.priya.id)
    )
    assert count.scalar_one() == 1


async def test_recompute_counts_only_the_given_class(db, school):
    service = AttendanceService(db)
    await service.mark(school.aarav.id, school.class_5a.id, "2024-09-02", True, school.teacher.id, "manual")
    await service.mark(school.aarav.id, school.class_6b.id, "2024-09-02", False, school.teacher.id, "manual")

    stats = await StatsService(db).recompute(school.aarav.id, school.class_5a.id)
    await db.commit()

    assert stats.total_days == 1
    assert stats.present_days == 1
    assert stats.class_id == school.class_5a.id


async def test_concurrent_marks_keep_one_stats_row(session_factory, school):
    student_id, class_id, teacher_id = school.aarav.id, school.class_5a.id, school.teacher.id
    days = 8

    async def mark(day: int):
        async with session_factory() as session:
            await AttendanceService(session).mark(
                student_id, class_id, f"2024-09-{day:02d}", day % 2 == 0, teacher_id, "manual"
            )

    await asyncio.gather(*(mark(day) for day in range(1, days + 1)))

    async with session_factory() as session:
        rows = (
            await session.execute(
                select(AttendanceStats).where(AttendanceStats.student_id == student_id)
            )
        ).scalars().all()

    assert len(rows) == 1
    assert rows[0].total_days == days
    assert rows[0].present_days == days // 2


async def test_student_lock_is_shared_while_held_and_released_after(db, school):
    held = student_lock("lock-student")
    assert student_lock("lock-student") is held

    await AttendanceService(db).mark(
        school.aarav.id, school.class_5a.id, "2024-09-02", True, school.teacher.id, "manual"
    )
    assert school.aarav.id not in _student_locks
