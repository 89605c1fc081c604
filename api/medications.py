"""
Medications API Router
Endpoints for the signed-in user's medications and dose logs
"""

from typing import List
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from actions.reminder_engine import ReminderEngine
from api.deps import get_db, get_identity_provider, get_reminder_engine, service_errors, services
from api.schemas.medication import (
    MedicationCreate,
    MedicationUpdate,
    MedicationStatusUpdate,
    DoseTakenRequest,
    MedicationResponse,
    MedicationList,
    DoseLogResponse,
    DoseTakenResponse,
    TimingResponse,
    MedicationDeleted,
)
from tools.identity_provider import IdentityProvider


router = APIRouter(prefix="/medications", tags=["medications"])


def _medication_list(medications) -> MedicationList:
    return MedicationList(
        medications=[MedicationResponse.model_validate(m) for m in medications],
        total=len(medications),
        taken_count=sum(1 for m in medications if m.taken)
    )


@router.get("", response_model=MedicationList)
async def get_user_medications(
    identity: IdentityProvider = Depends(get_identity_provider),
    db: Session = Depends(get_db)
):
    """
    Get the signed-in user's medications, newest first
    """
    medication_service = services.get_medication_service()

    with service_errors():
        medications = await medication_service.get_user_medications(identity, db=db)

    return _medication_list(medications)


@router.post("", response_model=MedicationResponse, status_code=status.HTTP_201_CREATED)
async def add_medication(
    medication_data: MedicationCreate,
    identity: IdentityProvider = Depends(get_identity_provider),
    reminders: ReminderEngine = Depends(get_reminder_engine),
    db: Session = Depends(get_db)
):
    """
    Add a medication and schedule its daily reminder

    - **name**: Medication name
    - **time**: Daily time, HH:MM
    """
    medication_service = services.get_medication_service(reminders)

    with service_errors():
        return await medication_service.add_medication(
            identity,
            name=medication_data.name,
            time=medication_data.time,
            db=db
        )


@router.get("/today", response_model=MedicationList)
async def get_today_schedule(
    identity: IdentityProvider = Depends(get_identity_provider),
    db: Session = Depends(get_db)
):
    """
    Get today's schedule ordered by time of day
    """
    medication_service = services.get_medication_service()

    with service_errors():
        medications = await medication_service.get_today_schedule(identity, db=db)

    return _medication_list(medications)


@router.post("/reset", response_model=MedicationList)
async def reset_daily_medications(
    identity: IdentityProvider = Depends(get_identity_provider),
    db: Session = Depends(get_db)
):
    """
    Mark every medication as not taken for a new day
    """
    medication_service = services.get_medication_service()

    with service_errors():
        medications = await medication_service.reset_daily_medications(identity, db=db)

    return _medication_list(medications)


@router.patch("/{medication_id}", response_model=MedicationResponse)
async def update_medication(
    medication_id: int,
    update_data: MedicationUpdate,
    identity: IdentityProvider = Depends(get_identity_provider),
    reminders: ReminderEngine = Depends(get_reminder_engine),
    db: Session = Depends(get_db)
):
    """
    Rename or retime a medication; its reminders are rescheduled
    """
    medication_service = services.get_medication_service(reminders)

    with service_errors():
        return await medication_service.update_medication(
            identity,
            medication_id,
            name=update_data.name,
            time=update_data.time,
            db=db
        )


@router.patch("/{medication_id}/status", response_model=MedicationResponse)
async def update_medication_status(
    medication_id: int,
    status_data: MedicationStatusUpdate,
    identity: IdentityProvider = Depends(get_identity_provider),
    reminders: ReminderEngine = Depends(get_reminder_engine),
    db: Session = Depends(get_db)
):
    """
    Mark a medication taken or not taken

    When taken with a scheduled time, the dose is logged as well.
    """
    medication_service = services.get_medication_service(reminders)

    with service_errors():
        return await medication_service.update_medication_status(
            identity,
            medication_id,
            taken=status_data.taken,
            scheduled_time=status_data.scheduled_time,
            db=db
        )


@router.post("/{medication_id}/taken", response_model=DoseTakenResponse, status_code=status.HTTP_201_CREATED)
async def log_pill_taken(
    medication_id: int,
    dose_data: DoseTakenRequest,
    identity: IdentityProvider = Depends(get_identity_provider),
    reminders: ReminderEngine = Depends(get_reminder_engine),
    db: Session = Depends(get_db)
):
    """
    Log a dose taken now against its scheduled time
    """
    medication_service = services.get_medication_service(reminders)

    with service_errors():
        result = await medication_service.log_pill_taken(
            identity,
            medication_id,
            scheduled_time=dose_data.scheduled_time,
            db=db
        )

    return DoseTakenResponse(
        log=DoseLogResponse.model_validate(result.log),
        timing=TimingResponse(**result.timing.to_dict())
    )


@router.get("/{medication_id}/logs", response_model=List[DoseLogResponse])
async def get_pill_logs(
    medication_id: int,
    identity: IdentityProvider = Depends(get_identity_provider),
    db: Session = Depends(get_db)
):
    """
    Get a medication's dose logs, newest first
    """
    medication_service = services.get_medication_service()

    with service_errors():
        return await medication_service.get_pill_logs(identity, medication_id, db=db)


@router.delete("/{medication_id}", response_model=MedicationDeleted)
async def delete_medication(
    medication_id: int,
    identity: IdentityProvider = Depends(get_identity_provider),
    reminders: ReminderEngine = Depends(get_reminder_engine),
    db: Session = Depends(get_db)
):
    """
    Delete a medication, its dose logs and its reminders
    """
    medication_service = services.get_medication_service(reminders)

    with service_errors():
        deleted = await medication_service.delete_medication(identity, medication_id, db=db)

    return MedicationDeleted(id=medication_id, deleted=deleted)
