"""
Medication Schemas
Pydantic models for medication-related API requests and responses
"""

from typing import Optional, List
from datetime import datetime
from pydantic import BaseModel, Field, ConfigDict

from api.schemas.adherence import TimingStatusEnum


# ==================== BASE SCHEMAS ====================

class MedicationBase(BaseModel):
    """Base medication schema"""
    name: str = Field(..., min_length=1, max_length=255)
    time: str = Field(..., min_length=1, max_length=8, description="Daily time, HH:MM")


# ==================== REQUEST SCHEMAS ====================

class MedicationCreate(MedicationBase):
    """Schema for adding a medication"""
    pass


class MedicationUpdate(BaseModel):
    """Schema for renaming or retiming a medication"""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    time: Optional[str] = Field(None, min_length=1, max_length=8)


class MedicationStatusUpdate(BaseModel):
    """Schema for marking a medication taken or not taken"""
    taken: bool
    scheduled_time: Optional[str] = Field(None, max_length=8)


class DoseTakenRequest(BaseModel):
    """Schema for logging a taken dose"""
    scheduled_time: str = Field(..., min_length=1, max_length=8)


# ==================== RESPONSE SCHEMAS ====================

class MedicationResponse(MedicationBase):
    """Schema for medication response"""
    id: int
    user_id: str
    taken: bool = False
    taken_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class MedicationList(BaseModel):
    """List of medications"""
    medications: List[MedicationResponse]
    total: int
    taken_count: int


class DoseLogResponse(BaseModel):
    """Schema for a dose log"""
    id: int
    medication_id: int
    user_id: str
    taken_at: datetime
    scheduled_time: str
    status: TimingStatusEnum
    minutes_difference: int

    model_config = ConfigDict(from_attributes=True)


class TimingResponse(BaseModel):
    """Timing classification of a taken dose"""
    status: TimingStatusEnum
    minutes: int


class DoseTakenResponse(BaseModel):
    """A logged dose and how it compares to the schedule"""
    log: DoseLogResponse
    timing: TimingResponse


class MedicationDeleted(BaseModel):
    """Result of deleting a medication"""
    id: int
    deleted: bool = True
