"""Shared pytest fixtures for Dietwise tests."""
import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from dietwise.database import Base, get_db
from dietwise.models import Gender, ParticipantCategory
from dietwise.services.answer_lookup import AnsweredQuestion
from dietwise.services.participant_service import ParticipantService
from dietwise.services.survey_service import SurveyService


# ──────────────────────────────────────────────────────────────────────────────
# Pure fixtures
# ──────────────────────────────────────────────────────────────────────────────

@pytest.fixture
def healthy_answers():
    """Answers to the default survey that score 8."""
    return [
        AnsweredQuestion("What is your typical daily meal pattern?", "3 meals per day"),
        AnsweredQuestion("How many servings of fruits do you consume daily?", "2"),
        AnsweredQuestion("How many servings of vegetables do you consume daily?", "3"),
        AnsweredQuestion("How often do you drink water?", "7-8 glasses per day"),
    ]


@pytest.fixture
def poor_answers():
    """Answers to the default survey that score 2."""
    return [
        AnsweredQuestion("What is your typical daily meal pattern?", "Irregular eating pattern"),
        AnsweredQuestion("How many servings of fruits do you consume daily?", "0"),
        AnsweredQuestion("How many servings of vegetables do you consume daily?", "1"),
        AnsweredQuestion("How often do you drink water?", "Less than 4 glasses per day"),
    ]


@pytest.fixture
def participant_data():
    return {
        "email": "ada.obi@university.edu",
        "name": "Ada Obi",
        "category": ParticipantCategory.STUDENT,
        "gender": Gender.FEMALE,
        "age": 21,
        "department": "Computer Science",
        "student_id": "CSC/2021/014",
        "staff_id": None,
    }


# ──────────────────────────────────────────────────────────────────────────────
# Database fixtures
# ──────────────────────────────────────────────────────────────────────────────

@pytest_asyncio.fixture
async def db_engine():
    """Fresh in-memory SQLite database per test."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(db_engine):
    return async_sessionmaker(bind=db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def survey(db_session):
    """The default eating-habits survey, committed."""
    created = await SurveyService().get_or_create_default(db_session)
    await db_session.commit()
    return created


@pytest_asyncio.fixture
async def participant(db_session, participant_data):
    created = await ParticipantService().create(participant_data, db_session)
    await db_session.commit()
    return created


# ──────────────────────────────────────────────────────────────────────────────
# HTTP client
# ──────────────────────────────────────────────────────────────────────────────

@pytest_asyncio.fixture
async def client(session_factory):
    """httpx client bound to the app, with ``get_db`` pointed at the test DB."""
    from dietwise.main import app

    async def _override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = _override_get_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
