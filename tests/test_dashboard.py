import datetime

import pytest

from attendance_tracker.exceptions import NotFoundError
from attendance_tracker.models import AttendanceRecord, AttendanceStats, Student, StudentStatus
from attendance_tracker.services.attendance import AttendanceService
from attendance_tracker.services.dashboard import (
    DashboardService,
    build_dashboard_stats,
    build_student_rows,
    build_weekly_attendance,
    classify_attendance,
    filter_low_attendance,
    round_half_up,
)

NOON = datetime.datetime(2024, 9, 2, 12, 0, tzinfo=datetime.timezone.utc)


def _record(student_id, is_present, date="2024-09-02", minutes=0):
    return AttendanceRecord(
        student_id=student_id,
        class_id="class-5a",
        date=date,
        is_present=is_present,
        marked_at=NOON + datetime.timedelta(minutes=minutes),
        marked_by="teacher",
        method="manual",
    )


def _stats(student_id, rate):
    return AttendanceStats(
        student_id=student_id,
        class_id="class-5a",
        total_days=0,
        present_days=0,
        attendance_rate=rate,
        last_updated=NOON,
    )


@pytest.mark.parametrize(
    "rate, status",
    [
        (100, StudentStatus.EXCELLENT),
        (95, StudentStatus.EXCELLENT),
        (94.999, StudentStatus.GOOD),
        (85, StudentStatus.GOOD),
        (84.999, StudentStatus.WARNING),
        (75, StudentStatus.WARNING),
        (74.999, StudentStatus.CRITICAL),
        (0, StudentStatus.CRITICAL),
    ],
)
def test_status_thresholds(rate, status):
    assert classify_attendance(rate) == status


def test_round_half_up():
    assert round_half_up(200 / 3, 1) == 66.7
    assert round_half_up(2.5) == 3.0
    assert round_half_up(0.5) == 1.0


def test_dashboard_stats_two_of_three_present():
    records = [_record("s1", True), _record("s2", True), _record("s3", False)]
    stats = build_dashboard_stats(3, records)
    assert stats.model_dump(by_alias=True) == {
        "totalStudents": 3,
        "presentToday": 2,
        "absentToday": 1,
        "attendanceRate": 66.7,
    }


def test_dashboard_stats_uses_latest_mark_per_student():
    records = [_record("s1", False, minutes=0), _record("s1", True, minutes=5)]
    stats = build_dashboard_stats(2, records)
    assert stats.present_today == 1
    assert stats.absent_today == 0
    assert stats.attendance_rate == 50.0


def test_dashboard_stats_for_empty_roster():
    stats = build_dashboard_stats(0, [])
    assert stats.attendance_rate == 0.0
    assert stats.present_today == 0


def test_student_rows_round_rate_but_classify_raw_rate():
    student = Student(id="s1", roll_no="101", full_name="Aarav Kumar", class_id="class-5a")
    rows = build_student_rows([student], {"s1": _stats("s1", 94.6)}, [_record("s1", True)])

    assert rows[0].attendance_rate == 95
    assert rows[0].status == "good"
    assert rows[0].is_present is True


def test_student_without_stats_or_mark_today():
    student = Student(id="s2", roll_no="102", full_name="Priya Sharma", class_id="class-5a")
    rows = build_student_rows([student], {}, [])

    assert rows[0].attendance_rate == 0
    assert rows[0].status == "critical"
    assert rows[0].is_present is False


def test_low_attendance_is_strictly_below_threshold():
    students = [
        Student(id=f"s{i}", roll_no=str(100 + i), full_name=f"Student {i}", class_id="class-5a")
        for i in range(3)
    ]
    stats = {"s0": _stats("s0", 75.0), "s1": _stats("s1", 74.4), "s2": _stats("s2", 90.0)}
    rows = build_student_rows(students, stats, [])

    assert [row.id for row in filter_low_attendance(rows)] == ["s1"]
    assert [row.id for row in filter_low_attendance(rows, threshold=95)] == ["s0", "s1", "s2"]


def test_low_attendance_uses_the_displayed_rate():
    student = Student(id="s0", roll_no="100", full_name="Student 0", class_id="class-5a")
    rows = build_student_rows([student], {"s0": _stats("s0", 74.6)}, [])

    assert rows[0].attendance_rate == 75
    assert rows[0].status == "critical"
    assert filter_low_attendance(rows) == []


def test_weekly_attendance_counts_real_records():
    # 2024-09-04 is a Wednesday; its week starts Monday 2024-09-02.
    records = [
        _record("s1", True, date="2024-09-02"),
        _record("s2", True, date="2024-09-02"),
        _record("s3", False, date="2024-09-02"),
        _record("s1", True, date="2024-09-04"),
        _record("s9", True, date="2024-08-30"),
    ]
    week = build_weekly_attendance(3, records, datetime.date(2024, 9, 4))

    assert [entry.day for entry in week] == ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]
    assert week[0].date == "2024-09-02"
    assert (week[0].present, week[0].absent, week[0].percentage) == (2, 1, 67)
    assert (week[1].present, week[1].absent, week[1].percentage) == (0, 3, 0)
    assert (week[2].present, week[2].absent, week[2].percentage) == (1, 2, 33)
    assert week[5].date == "2024-09-07"


async def test_dashboard_service_reads_todays_records(db, school):
    today = datetime.date.today()
    service = AttendanceService(db)
    await service.mark(school.aarav.id, school.class_5a.id, today, True, school.teacher.id, "manual")
    await service.mark(school.priya.id, school.class_5a.id, today, True, school.teacher.id, "manual")
    await service.mark(school.rohan.id, school.class_5a.id, today, False, school.teacher.id, "manual")

    stats = await DashboardService(db).dashboard_stats(school.class_5a.id)
    assert (stats.total_students, stats.present_today, stats.absent_today) == (3, 2, 1)
    assert stats.attendance_rate == 66.7

    rows = await DashboardService(db).students_with_stats(school.class_5a.id)
    by_name = {row.full_name: row for row in rows}
    assert by_name["Aarav Kumar"].status == "excellent"
    assert by_name["Rohan Singh"].status == "critical"
    assert by_name["Rohan Singh"].is_present is False

    low = await DashboardService(db).low_attendance(school.class_5a.id)
    assert [row.full_name for row in low] == ["Rohan Singh"]


async def test_dashboard_service_unknown_class(db, school):
    with pytest.raises(NotFoundError):
        await DashboardService(db).dashboard_stats("nope")


async def test_class_overview_lists_every_class(db, school):
    overview = await DashboardService(db).class_overview()
    assert {(item.id, item.total_students) for item in overview} == {
        ("class-5a", 3),
        ("class-6b", 1),
    }
