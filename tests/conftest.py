"""Shared fixtures: in-memory database, API client and user factories."""
import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from ecoplay.database import Base, enable_sqlite_foreign_keys, get_db
from ecoplay.main import app
from ecoplay.models import database_models  # noqa: F401
from ecoplay.models.database_models import Lesson, User
from ecoplay.services.ledger_service import user_locks


@pytest.fixture
async def engine():
    test_engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(test_engine)
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield test_engine

    await test_engine.dispose()


@pytest.fixture
def session_maker(engine):
    user_locks.reset()
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_maker):
    async with session_maker() as session:
        yield session


@pytest.fixture
async def client(session_maker):
    async def override_get_db():
        async with session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(session_maker):
    """Create a committed user and return its id."""
    counter = {"n": 0}

    async def _make(role: str = "user", points: int = 0, **fields) -> int:
        counter["n"] += 1
        n = counter["n"]
        async with session_maker() as session:
            user = User(
                full_name=fields.get("full_name", f"Player {n}"),
                username=fields.get("username", f"player{n}"),
                email=fields.get("email", f"player{n}@school.test"),
                school=fields.get("school"),
                role=role,
                points=points,
                watering_streak=0,
            )
            session.add(user)
            await session.commit()
            return user.id

    return _make


@pytest.fixture
def make_lesson(session_maker):
    async def _make(points_reward: int = 20, title: str = "Why Water Matters") -> int:
        async with session_maker() as session:
            lesson = Lesson(title=title, type="text", content="Plants need water.", points_reward=points_reward)
            session.add(lesson)
            await session.commit()
            return lesson.id

    return _make
