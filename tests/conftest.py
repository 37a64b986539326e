from types import SimpleNamespace

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from attendance_tracker.cache import get_cache
from attendance_tracker.database import get_db
from attendance_tracker.main import app
from attendance_tracker.models import Base, SchoolClass, Student, User


class InMemoryCache:
    def __init__(self):
        self.values: dict[str, str] = {}
        self.ttls: dict[str, int] = {}

    async def get(self, key: str) -> str | None:
        return self.values.get(key)

    async def setex(self, key: str, ttl_seconds: int, value: str) -> None:
        self.values[key] = value
        self.ttls[key] = ttl_seconds

    async def close(self) -> None:
        self.values.clear()


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(
        bind=engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
    )


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def cache():
    return InMemoryCache()


@pytest.fixture
async def school(db):
    """Teacher with class 5A (three students) and class 6B (one student)."""
    teacher = User(username="anita.sharma", full_name="Anita Sharma", role="teacher")
    db.add(teacher)
    await db.flush()

    class_5a = SchoolClass(
        id="class-5a", name="Class 5A", subject="Mathematics",
        teacher_id=teacher.id, school_id="school-1",
    )
    class_6b = SchoolClass(
        id="class-6b", name="Class 6B", subject="Science",
        teacher_id=teacher.id, school_id="school-1",
    )
    db.add_all([class_5a, class_6b])
    await db.flush()

    aarav = Student(roll_no="101", full_name="Aarav Kumar", class_id="class-5a", rfid_card_id="A")
    priya = Student(roll_no="102", full_name="Priya Sharma", class_id="class-5a", rfid_card_id="C")
    rohan = Student(roll_no="103", full_name="Rohan Singh", class_id="class-5a")
    kavya = Student(roll_no="201", full_name="Kavya Nair", class_id="class-6b", rfid_card_id="K6")
    db.add_all([aarav, priya, rohan, kavya])
    await db.commit()

    return SimpleNamespace(
        teacher=teacher,
        class_5a=class_5a,
        class_6b=class_6b,
        aarav=aarav,
        priya=priya,
        rohan=rohan,
        kavya=kavya,
    )


@pytest.fixture
async def client(session_factory, cache):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    async def override_get_cache():
        yield cache

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_cache] = override_get_cache
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
