"""
Admin API Router
Cross-patient views for administrators
"""

from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from api.deps import get_db, get_identity_provider, verify_admin_key, services
from api.schemas.adherence import AdherenceStats
from api.schemas.admin import (
    PatientStats,
    PatientAggregateResponse,
    AdminDoseLog,
    AdminMedication,
)
from api.schemas.medication import MedicationResponse, DoseLogResponse
from tools.identity_provider import IdentityProvider


router = APIRouter(
    prefix="/admin",
    tags=["admin"],
    dependencies=[Depends(verify_admin_key)]
)


@router.get("/patients", response_model=List[PatientAggregateResponse])
async def get_patients(
    include_log_only: Optional[bool] = Query(
        None,
        description="Include patients that only have dose logs (defaults to server setting)"
    ),
    identity: IdentityProvider = Depends(get_identity_provider),
    db: Session = Depends(get_db)
):
    """
    Get every patient's medications, logs and adherence, most medications first
    """
    admin_service = services.get_admin_service()

    patients = await admin_service.get_patient_aggregates(
        identity,
        include_log_only_owners=include_log_only,
        db=db
    )

    return [
        PatientAggregateResponse(
            id=patient.user_id,
            **patient.name.to_dict(),
            medications=[MedicationResponse.model_validate(m) for m in patient.medications],
            logs=[DoseLogResponse.model_validate(log) for log in patient.logs],
            stats=AdherenceStats(**patient.summary.to_dict())
        )
        for patient in patients
    ]


@router.get("/stats", response_model=List[PatientStats])
async def get_all_users_stats(
    identity: IdentityProvider = Depends(get_identity_provider),
    db: Session = Depends(get_db)
):
    """
    Get per-patient adherence statistics
    """
    admin_service = services.get_admin_service()
    return await admin_service.get_all_users_stats(identity, db=db)


@router.get("/logs", response_model=List[AdminDoseLog])
async def get_all_users_logs(
    identity: IdentityProvider = Depends(get_identity_provider),
    db: Session = Depends(get_db)
):
    """
    Get every dose log with patient and medication names
    """
    admin_service = services.get_admin_service()
    return await admin_service.get_all_users_logs(identity, db=db)


@router.get("/medications", response_model=List[AdminMedication])
async def get_all_users_medications(
    identity: IdentityProvider = Depends(get_identity_provider),
    db: Session = Depends(get_db)
):
    """
    Get every medication with its patient's name
    """
    admin_service = services.get_admin_service()
    return await admin_service.get_all_users_medications(identity, db=db)
