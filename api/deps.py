"""
API Dependencies
Common dependencies for FastAPI endpoints
"""

from contextlib import contextmanager
from typing import AsyncGenerator, Generator, Optional
from fastapi import Depends, HTTPException, status, Header
from sqlalchemy.orm import Session

from database import SessionLocal
from config import settings
from errors import (
    InvalidMedicationNameError,
    InvalidScheduledTimeError,
    MedicationNotFoundError,
    NotAuthenticatedError,
)
from actions.reminder_engine import ReminderEngine
from tools.identity_provider import DatabaseIdentityProvider, HttpIdentityProvider, IdentityProvider
from tools.notification_service import NotificationBackend, local_notification_queue


def get_db() -> Generator[Session, None, None]:
    """
    Database session dependency
    Yields a SQLAlchemy session and ensures cleanup
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


async def get_access_token(
    authorization: Optional[str] = Header(None)
) -> Optional[str]:
    """
    Bearer token from the Authorization header
    Returns None when the header is missing or not a bearer token
    """
    if not authorization:
        return None

    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


async def get_identity_provider(
    access_token: Optional[str] = Depends(get_access_token),
    db: Session = Depends(get_db)
) -> AsyncGenerator[IdentityProvider, None]:
    """
    Identity provider bound to the caller's access token
    """
    if settings.IDENTITY_PROVIDER == "http":
        provider = HttpIdentityProvider(access_token=access_token)
        try:
            yield provider
        finally:
            await provider.close()
    else:
        yield DatabaseIdentityProvider(db, access_token)


async def verify_admin_key(
    x_admin_key: Optional[str] = Header(None, alias="X-Admin-Key")
) -> str:
    """
    Verify the administrator key
    Raises HTTPException if missing or invalid
    """
    if not x_admin_key:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Admin key required",
            headers={"WWW-Authenticate": "Admin-Key"},
        )

    if x_admin_key != settings.ADMIN_API_KEY:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid admin key",
        )

    return x_admin_key


def get_notification_backend() -> NotificationBackend:
    """Notification backend shared by the process"""
    return local_notification_queue


def get_reminder_engine(
    backend: NotificationBackend = Depends(get_notification_backend)
) -> ReminderEngine:
    return ReminderEngine(backend)


@contextmanager
def service_errors():
    """
    Translate service exceptions into HTTP errors
    """
    try:
        yield
    except NotAuthenticatedError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        )
    except (InvalidScheduledTimeError, InvalidMedicationNameError) as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e),
        )
    except MedicationNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e),
        )


class ServiceDependency:
    """
    Dependency injection for services
    """

    @staticmethod
    def get_medication_service(reminders: Optional[ReminderEngine] = None):
        from services.medication_service import MedicationService, medication_service
        if reminders is None:
            return medication_service
        return MedicationService(reminders=reminders)

    @staticmethod
    def get_adherence_service():
        from services.adherence_service import adherence_service
        return adherence_service

    @staticmethod
    def get_admin_service():
        from services.admin_service import admin_service
        return admin_service


# Service dependency instances
services = ServiceDependency()
