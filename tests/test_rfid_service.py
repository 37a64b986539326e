import datetime

import pytest

from attendance_tracker.exceptions import NotFoundError, ValidationError
from attendance_tracker.services.attendance import AttendanceService
from attendance_tracker.services.rfid import RfidService

DAY = "2024-09-02"


def _failures(result):
    return [(item.rfid_card_id, item.error) for item in result.failed]


async def test_batch_partitions_known_unknown_and_repeated_cards(db, school, cache):
    result = await RfidService(db, cache).process_batch(
        ["A", "B", "A"], school.class_5a.id, school.teacher.id, DAY
    )

    assert result.total == 3
    assert [item.rfid_card_id for item in result.successful] == ["A"]
    assert result.successful[0].student.full_name == "Aarav Kumar"
    assert result.successful[0].student.roll_no == "101"
    assert result.successful[0].attendance.method == "rfid"
    assert result.successful[0].attendance.is_present is True
    assert result.successful[0].attendance.date == DAY
    assert _failures(result) == [("B", "Student not found"), ("A", "Already marked")]


async def test_batch_without_cache_detects_duplicates_from_database(db, school):
    result = await RfidService(db).process_batch(
        ["A", "A"], school.class_5a.id, school.teacher.id, DAY
    )
    assert len(result.successful) == 1
    assert _failures(result) == [("A", "Already marked")]


async def test_batch_rejects_student_marked_manually_earlier(db, school):
    await AttendanceService(db).mark(
        school.aarav.id, school.class_5a.id, DAY, False, school.teacher.id, "manual"
    )

    result = await RfidService(db).process_batch(
        ["A"], school.class_5a.id, school.teacher.id, DAY
    )
    assert result.successful == []
    assert result.failed[0].student == "Aarav Kumar"
    assert result.failed[0].error == "Already marked"


async def test_batch_backfills_cache_from_database(db, school, cache):
    await AttendanceService(db).mark(
        school.priya.id, school.class_5a.id, DAY, True, school.teacher.id, "manual"
    )
    assert cache.values == {}

    await RfidService(db, cache).process_batch(["C"], school.class_5a.id, school.teacher.id, DAY)
    assert f"attendance:class-5a:{school.priya.id}:{DAY}" in cache.values


async def test_batch_reports_wrong_class_with_student_name(db, school):
    result = await RfidService(db).process_batch(
        ["K6"], school.class_5a.id, school.teacher.id, DAY
    )
    assert result.failed[0].rfid_card_id == "K6"
    assert result.failed[0].student == "Kavya Nair"
    assert result.failed[0].error == "Wrong class"


async def test_empty_batch(db, school):
    result = await RfidService(db).process_batch([], school.class_5a.id, school.teacher.id, DAY)
    assert result.total == 0
    assert result.successful == []
    assert result.failed == []


@pytest.mark.parametrize(
    "cards",
    [
        [],
        ["A"],
        ["A", "A", "A"],
        ["Z", "Y"],
        ["A", "C", "K6", "nope", "C"],
    ],
)
async def test_every_card_lands_in_exactly_one_bucket(db, school, cards):
    result = await RfidService(db).process_batch(cards, school.class_5a.id, school.teacher.id, DAY)
    assert result.total == len(cards)
    assert len(result.successful) + len(result.failed) == result.total


async def test_unexpected_error_fails_one_card_and_batch_continues(db, school):
    service = RfidService(db)
    original_mark = service.attendance.mark
    calls = []

    async def flaky_mark(*args, **kwargs):
        calls.append(args)
        if len(calls) == 1:
            raise RuntimeError("boom")
        return await original_mark(*args, **kwargs)

    service.attendance.mark = flaky_mark

    result = await service.process_batch(["A", "C"], school.class_5a.id, school.teacher.id, DAY)
    assert _failures(result) == [("A", "Processing error")]
    assert [item.rfid_card_id for item in result.successful] == ["C"]


async def test_batch_defaults_to_today(db, school):
    result = await RfidService(db).process_batch(["A"], school.class_5a.id, school.teacher.id)
    assert result.successful[0].attendance.date == datetime.date.today().isoformat()


async def test_single_scan_marks_present(db, school):
    student, record = await RfidService(db).mark_by_card(
        "A", school.class_5a.id, school.teacher.id, DAY
    )
    assert student.id == school.aarav.id
    assert record.is_present is True
    assert record.method == "rfid"


async def test_single_scan_does_not_reject_duplicates(db, school):
    service = RfidService(db)
    await service.mark_by_card("A", school.class_5a.id, school.teacher.id, DAY)
    _, second = await service.mark_by_card("A", school.class_5a.id, school.teacher.id, DAY)
    assert second.date == DAY


async def test_single_scan_unknown_card(db, school):
    with pytest.raises(NotFoundError):
        await RfidService(db).mark_by_card("B", school.class_5a.id, school.teacher.id, DAY)


async def test_single_scan_wrong_class(db, school):
    with pytest.raises(ValidationError):
        await RfidService(db).mark_by_card("K6", school.class_5a.id, school.teacher.id, DAY)
