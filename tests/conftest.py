"""Shared test fixtures for MediSlot API tests.

Uses an in-memory SQLite async engine so tests run without PostgreSQL.
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

from datetime import date, timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import sessionmaker

from app.core.database import Base, get_db
from app.core.deps import get_notifier
from app.main import app

# Import all models to ensure they're registered with Base.metadata
from app.models.admin import Admin
from app.models.agenda import Agenda
from app.models.creneau import Creneau, TimeSlot
from app.models.doctor import Doctor
from app.models.notification import Notification
from app.models.patient import Patient
from app.services.agenda_service import get_or_create_agenda
from app.services.creneau_service import generate_and_store


# Use aiosqlite for fast, isolated tests
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

engine = create_async_engine(TEST_DATABASE_URL, echo=False)
TestSession = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

# A week ahead, so past-date checks never trip
FUTURE_DAY = date.today() + timedelta(days=7)
BLOCKED = ["12:00", "12:30"]


@pytest_asyncio.fixture(autouse=True)
async def setup_db():
    """Create all tables before each test, drop after."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


async def override_get_db():
    async with TestSession() as session:
        yield session


app.dependency_overrides[get_db] = override_get_db


@pytest.fixture
def notifier():
    """Notification hook that records calls instead of sending anything."""
    hook = MagicMock()
    hook.on_booked = AsyncMock()
    hook.on_cancelled = AsyncMock()
    app.dependency_overrides[get_notifier] = lambda: hook
    yield hook
    app.dependency_overrides.pop(get_notifier, None)


@pytest_asyncio.fixture
async def client(notifier):
    """Async HTTP test client."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def session_factory():
    """Session factory bound to the test database, for code that opens its own sessions."""
    return TestSession


@pytest_asyncio.fixture
async def db():
    """Direct DB session for test setup/assertions."""
    async with TestSession() as session:
        yield session


@pytest_asyncio.fixture
async def doctor(db):
    doctor = Doctor(
        first_name="Amina",
        last_name="Benali",
        email="dr.benali@example.com",
        phone="+15550001111",
        specialty="Cardiology",
    )
    db.add(doctor)
    await db.commit()
    return doctor


@pytest_asyncio.fixture
async def patient(db):
    patient = Patient(
        first_name="Lucas",
        last_name="Martin",
        email="lucas.martin@example.com",
        phone="+15550002222",
    )
    db.add(patient)
    await db.commit()
    return patient


@pytest_asyncio.fixture
async def other_patient(db):
    patient = Patient(first_name="Chloe", last_name="Durand", email="chloe.durand@example.com")
    db.add(patient)
    await db.commit()
    return patient


@pytest_asyncio.fixture
async def admin(db):
    admin = Admin(email="frontdesk@example.com", full_name="Front Desk", is_active=True)
    db.add(admin)
    await db.commit()
    return admin


@pytest_asyncio.fixture
async def agenda(db, doctor):
    agenda, _ = await get_or_create_agenda(db, doctor.id, FUTURE_DAY)
    return agenda


@pytest_asyncio.fixture
async def creneau(db, agenda):
    """A generated day with 12:00 and 12:30 blocked."""
    creneau, _ = await generate_and_store(db, agenda.id, FUTURE_DAY, BLOCKED)
    return creneau
