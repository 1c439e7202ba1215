import os

# Settings are read at import time, configure them before importing tifpoint
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ["BREVO_API_KEY"] = ""
os.environ["TARGET_POINTS"] = "36"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import tifpoint.models  # noqa: F401
from tifpoint.core.database import Base, get_db
from tifpoint.core.security import create_access_token, hash_password
from tifpoint.main import app
from tifpoint.models import (
    Activity,
    ActivityStatus,
    ActivityType,
    Competency,
    User,
    UserRole,
)

TEST_PASSWORD = "secret123"
TEST_PASSWORD_HASH = hash_password(TEST_PASSWORD)


@pytest_asyncio.fixture
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
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


# ─────────────────────────────────────────────────────────────
# Factories
# ─────────────────────────────────────────────────────────────
async def make_user(db, username: str, role: UserRole = UserRole.MAHASISWA, nim: str | None = None) -> User:
    user = User(
        username=username,
        email=f"{username}@example.com",
        name=username.title(),
        nim=nim,
        password_hash=TEST_PASSWORD_HASH,
        role=role,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


async def make_activity(
    db,
    user: User,
    competency_id: int,
    activity_type_id: int,
    status: ActivityStatus = ActivityStatus.APPROVED,
    point: int | None = None,
    title: str = "Activity",
) -> Activity:
    activity = Activity(
        title=title,
        user_id=user.id,
        competency_id=competency_id,
        activity_type_id=activity_type_id,
        document_url="https://files.example.com/evidence.pdf",
        status=status,
        point=point,
    )
    db.add(activity)
    await db.commit()
    await db.refresh(activity)
    return activity


def auth_headers(user: User) -> dict:
    token = create_access_token(user.id, user.username, user.email, user.role.value)
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def reference(db):
    """Four competencies and the activity types, keyed by name. Workshop has no configured range."""
    competencies = [
        Competency(name=name)
        for name in ("Artificial Intelligence", "Network Technology", "Soft Skills", "Software Developer")
    ]
    types = [
        ActivityType(name=name)
        for name in ("Seminar", "Course", "Program", "Research", "Achievement", "Workshop")
    ]
    db.add_all(competencies + types)
    await db.commit()
    return {
        "competencies": {c.name: c for c in competencies},
        "types": {t.name: t for t in types},
    }


@pytest_asyncio.fixture
async def student(db):
    return await make_user(db, "student", nim="2100001")


@pytest_asyncio.fixture
async def admin(db):
    return await make_user(db, "admin", role=UserRole.ADMIN)
