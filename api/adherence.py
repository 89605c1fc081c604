"""
Adherence API Router
Endpoints for the signed-in user's adherence statistics
"""

from typing import Optional
from datetime import date
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from api.deps import get_db, get_identity_provider, service_errors, services
from api.schemas.adherence import UserAdherenceStats
from tools.identity_provider import IdentityProvider


router = APIRouter(prefix="/adherence", tags=["adherence"])


@router.get("/stats", response_model=UserAdherenceStats)
async def get_adherence_stats(
    day: Optional[date] = Query(None, description="Count doses taken on this date (defaults to today)"),
    all_history: bool = Query(False, description="Count every logged dose instead of one day"),
    identity: IdentityProvider = Depends(get_identity_provider),
    db: Session = Depends(get_db)
):
    """
    Get adherence statistics

    Each medication is expected once per day, so by default only doses
    logged today are counted.
    """
    adherence_service = services.get_adherence_service()

    if all_history:
        day = None
    elif day is None:
        day = date.today()

    with service_errors():
        summary = await adherence_service.get_adherence_stats(identity, day=day, db=db)

    return UserAdherenceStats(day=day, **summary.to_dict())
