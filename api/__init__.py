"""
API Module
FastAPI routers for the PillTracker application
"""

from config import settings
from api.medications import router as medications_router
from api.adherence import router as adherence_router
from api.admin import router as admin_router
from api.notifications import router as notifications_router

from api.deps import (
    get_db,
    get_access_token,
    get_identity_provider,
    verify_admin_key,
    get_notification_backend,
    get_reminder_engine,
    service_errors,
    services,
)


__all__ = [
    # Routers
    "medications_router",
    "adherence_router",
    "admin_router",
    "notifications_router",
    # Dependencies
    "get_db",
    "get_access_token",
    "get_identity_provider",
    "verify_admin_key",
    "get_notification_backend",
    "get_reminder_engine",
    "service_errors",
    "services",
]


def include_routers(app):
    """
    Include all API routers in the FastAPI app

    Usage:
        from api import include_routers
        include_routers(app)
    """
    app.include_router(medications_router, prefix=settings.API_PREFIX)
    app.include_router(adherence_router, prefix=settings.API_PREFIX)
    app.include_router(admin_router, prefix=settings.API_PREFIX)
    app.include_router(notifications_router, prefix=settings.API_PREFIX)
