"""
Admin Schemas
Pydantic models for the administrator views
"""

from typing import Optional, List
from datetime import datetime
from pydantic import BaseModel

from api.schemas.adherence import AdherenceStats, TimingStatusEnum
from api.schemas.medication import MedicationResponse, DoseLogResponse


class PatientIdentity(BaseModel):
    """Resolved display identity of a patient"""
    id: str
    first_name: str
    last_name: str
    full_name: str
    email: Optional[str] = None


class PatientStats(PatientIdentity, AdherenceStats):
    """Flat per-patient statistics row"""
    pass


class PatientAggregateResponse(PatientIdentity):
    """A patient's medications, logs and adherence summary"""
    medications: List[MedicationResponse]
    logs: List[DoseLogResponse]
    stats: AdherenceStats


class AdminDoseLog(BaseModel):
    """Dose log with owner and medication names"""
    id: int
    medication_id: int
    user_id: str
    taken_at: datetime
    scheduled_time: str
    status: TimingStatusEnum
    minutes_difference: int
    pill_name: str
    first_name: str
    last_name: str
    full_name: str
    email: Optional[str] = None


class AdminMedication(BaseModel):
    """Medication with owner name"""
    id: int
    user_id: str
    name: str
    time: str
    taken: bool
    taken_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    first_name: str
    last_name: str
    full_name: str
    email: Optional[str] = None
