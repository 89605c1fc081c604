"""
Adherence Schemas
Pydantic models for adherence statistics responses
"""

from typing import Optional
from datetime import date
from pydantic import BaseModel, Field
from enum import Enum


class TimingStatusEnum(str, Enum):
    """Timing status values"""
    ON_TIME = "on_time"
    LATE = "late"
    EARLY = "early"


# ==================== RESPONSE SCHEMAS ====================

class AdherenceStats(BaseModel):
    """Adherence summary counters"""
    total: int = Field(..., ge=0)
    taken: int = Field(..., ge=0)
    on_time: int = Field(..., ge=0)
    late: int = Field(..., ge=0)
    early: int = Field(..., ge=0)
    missed: int = Field(..., ge=0)
    adherence_rate: int = Field(..., ge=0, le=100)


class UserAdherenceStats(AdherenceStats):
    """Adherence summary for the signed-in user"""
    day: Optional[date] = None
