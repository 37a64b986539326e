import asyncio
import weakref
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import case, func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from attendance_tracker.models.attendance import AttendanceRecord, AttendanceStats
from attendance_tracker.models.base import new_id

# One writer per student inside this process. Across processes the
# ON CONFLICT upsert keeps a single stats row per student. Entries vanish
# once no coroutine holds or waits on the lock.
_student_locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = weakref.WeakValueDictionary()


def student_lock(student_id: str) -> asyncio.Lock:
    lock = _student_locks.get(student_id)
    if lock is None:
        lock = asyncio.Lock()
        _student_locks[student_id] = lock
    return lock


def attendance_rate(present_days: int, total_days: int) -> float:
    if total_days <= 0:
        return 0.0
    return present_days / total_days * 100


class StatsService:
    def __init__(self, db: AsyncSession):
        self.db = db

    def _insert(self):
        dialect = self.db.bind.dialect.name if self.db.bind is not None else ""
        if dialect == "sqlite":
            return sqlite_insert(AttendanceStats)
        return pg_insert(AttendanceStats)

    async def recompute(self, student_id: str, class_id: str) -> AttendanceStats:
        """
        Rebuilds the stats row of a student from the full history of
        (student_id, class_id) and upserts it.

        Idempotent: never applies deltas, so calling it again with no new
        records writes the same numbers. The caller owns the transaction
        and should hold ``student_lock(student_id)`` around the write.
        """
        totals = await self.db.execute(
            select(
                func.count(AttendanceRecord.id),
                func.coalesce(
                    func.sum(case((AttendanceRecord.is_present.is_(True), 1), else_=0)),
                    0,
                ),
            ).where(
                AttendanceRecord.student_id == student_id,
                AttendanceRecord.class_id == class_id,
            )
        )
        total_days, present_days = totals.one()
        total_days, present_days = int(total_days), int(present_days)

        values = {
            "class_id": class_id,
            "total_days": total_days,
            "present_days": present_days,
            "attendance_rate": attendance_rate(present_days, total_days),
            "last_updated": datetime.now(timezone.utc),
        }
        stmt = self._insert().values(id=new_id(), student_id=student_id, **values)
        stmt = stmt.on_conflict_do_update(
            index_elements=[AttendanceStats.student_id],
            set_={key: getattr(stmt.excluded, key) for key in values},
        )
        await self.db.execute(stmt)

        result = await self.db.execute(
            select(AttendanceStats)
            .where(AttendanceStats.student_id == student_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one()

    async def get_for_student(self, student_id: str) -> Optional[AttendanceStats]:
        result = await self.db.execute(
            select(AttendanceStats).where(AttendanceStats.student_id == student_id)
        )
        return result.scalar_one_or_none()

    async def get_for_students(self, student_ids: list[str]) -> dict[str, AttendanceStats]:
        if not student_ids:
            return {}
        result = await self.db.execute(
            select(AttendanceStats).where(AttendanceStats.student_id.in_(student_ids))
        )
        return {stats.student_id: stats for stats in result.scalars().all()}
