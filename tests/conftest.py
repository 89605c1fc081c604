"""
Pytest Configuration and Shared Fixtures
========================================

This module provides shared fixtures for all PillTracker tests.
Fixtures include database sessions, test clients, users, medications and
a notification queue per test.
"""

import os
import sys
from datetime import datetime
from typing import Generator, Dict, List

# Keep the application engine off the developer database
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from database import Base
from models import User, Medication, DoseLog, TimingStatus
from config import settings
from api.deps import get_db, get_notification_backend
from actions.reminder_engine import ReminderEngine
from services.medication_service import MedicationService
from tools.identity_provider import DatabaseIdentityProvider
from tools.notification_service import LocalNotificationQueue
from app import app


# ==================== DATABASE FIXTURES ====================

@pytest.fixture(scope="function")
def test_engine():
    """Create a test database engine with in-memory SQLite"""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False
    )

    # Enable foreign keys for SQLite
    @event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    # Create all tables
    Base.metadata.create_all(bind=engine)

    yield engine

    # Cleanup
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db_session(test_engine) -> Generator[Session, None, None]:
    """Create a test database session"""
    TestingSessionLocal = sessionmaker(
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
        bind=test_engine
    )

    session = TestingSessionLocal()

    try:
        yield session
    finally:
        session.rollback()
        session.close()


# ==================== NOTIFICATION FIXTURES ====================

@pytest.fixture
def notification_queue() -> LocalNotificationQueue:
    """Fresh notification queue per test"""
    return LocalNotificationQueue()


@pytest.fixture
def reminder_engine(notification_queue: LocalNotificationQueue) -> ReminderEngine:
    return ReminderEngine(notification_queue)


# ==================== CLIENT FIXTURES ====================

@pytest.fixture(scope="function")
def client(db_session: Session, notification_queue: LocalNotificationQueue) -> Generator[TestClient, None, None]:
    """Create a FastAPI test client with database and notification overrides"""

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notification_backend] = lambda: notification_queue

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


# ==================== USER FIXTURES ====================

@pytest.fixture
def test_user(db_session: Session) -> User:
    """Create and return a signed-in test user"""
    user = User(
        email="jane.doe@example.com",
        access_token="token-jane",
        user_metadata={"first_name": "Jane", "last_name": "Doe"}
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def other_user(db_session: Session) -> User:
    """A second user whose data must stay invisible to test_user"""
    user = User(
        email="sam_lee@example.com",
        access_token="token-sam",
        user_metadata={"full_name": "Sam Lee"}
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def auth_headers(test_user: User) -> Dict[str, str]:
    return {"Authorization": f"Bearer {test_user.access_token}"}


@pytest.fixture
def admin_headers() -> Dict[str, str]:
    return {"X-Admin-Key": settings.ADMIN_API_KEY}


@pytest.fixture
def identity(db_session: Session, test_user: User) -> DatabaseIdentityProvider:
    """Identity provider signed in as test_user"""
    return DatabaseIdentityProvider(db_session, test_user.access_token)


@pytest.fixture
def anonymous_identity(db_session: Session) -> DatabaseIdentityProvider:
    """Identity provider with nobody signed in"""
    return DatabaseIdentityProvider(db_session, None)


# ==================== SERVICE FIXTURES ====================

class FixedClock:
    """Settable clock for deterministic timestamps"""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(datetime(2024, 3, 1, 9, 0))


@pytest.fixture
def medication_service(reminder_engine: ReminderEngine, clock: FixedClock) -> MedicationService:
    return MedicationService(reminders=reminder_engine, clock=clock)


# ==================== SAMPLE DATA FIXTURES ====================

@pytest.fixture
def test_medications(db_session: Session, test_user: User) -> List[Medication]:
    """Three of test_user's medications"""
    medications = [
        Medication(user_id=test_user.id, name="Metformin", time="08:00",
                   created_at=datetime(2024, 2, 1, 10, 0)),
        Medication(user_id=test_user.id, name="Lisinopril", time="12:30",
                   created_at=datetime(2024, 2, 2, 10, 0)),
        Medication(user_id=test_user.id, name="Atorvastatin", time="21:00",
                   created_at=datetime(2024, 2, 3, 10, 0)),
    ]
    db_session.add_all(medications)
    db_session.commit()
    return medications


@pytest.fixture
def test_dose_log(db_session: Session, test_medications: List[Medication]) -> DoseLog:
    """A late dose of the first medication"""
    medication = test_medications[0]
    log = DoseLog(
        medication_id=medication.id,
        user_id=medication.user_id,
        taken_at=datetime(2024, 3, 1, 8, 25),
        scheduled_time="08:00",
        status=TimingStatus.LATE,
        minutes_difference=25
    )
    db_session.add(log)
    db_session.commit()
    db_session.refresh(log)
    return log
