"""
Database Models
SQLAlchemy ORM models for PillTracker
"""

from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, Enum, Index, JSON
from sqlalchemy.orm import relationship
from datetime import datetime
from enum import Enum as PyEnum
import uuid

from database import Base
from config import TableNames


# ==================== ENUMS ====================

class TimingStatus(str, PyEnum):
    """How a taken dose compares to its scheduled time"""
    ON_TIME = "on_time"
    LATE = "late"
    EARLY = "early"


class NotificationKind(str, PyEnum):
    """Discriminator carried in notification data"""
    DAILY_REMINDER = "daily_reminder"
    CONFIRMATION = "confirmation"


# ==================== MODELS ====================

def _new_user_id() -> str:
    return str(uuid.uuid4())


class User(Base):
    """
    Identity directory used by the database identity provider.
    Production deployments resolve identities from the external auth server
    instead; medications reference users by id only.
    """
    __tablename__ = TableNames.USERS

    id = Column(String(36), primary_key=True, default=_new_user_id)
    email = Column(String(255), unique=True, index=True)
    user_metadata = Column(JSON, default=dict)  # first_name, last_name, full_name
    access_token = Column(String(255), unique=True, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)


class Medication(Base):
    """A daily pill with its reminder time and today's taken flag"""
    __tablename__ = TableNames.MEDICATIONS

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(36), nullable=False, index=True)

    name = Column(String(255), nullable=False)
    time = Column(String(5), nullable=False)  # "HH:MM"

    taken = Column(Boolean, nullable=False, default=False)
    taken_at = Column(DateTime)

    created_at = Column(DateTime, default=datetime.now)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)

    dose_logs = relationship(
        "DoseLog",
        back_populates="medication",
        cascade="all, delete-orphan",
        passive_deletes=True
    )

    __table_args__ = (
        Index("ix_medications_user_created", "user_id", "created_at"),
    )


class DoseLog(Base):
    """Immutable record of one taken dose and its timing classification"""
    __tablename__ = TableNames.DOSE_LOGS

    id = Column(Integer, primary_key=True, index=True)
    medication_id = Column(
        Integer,
        ForeignKey(f"{TableNames.MEDICATIONS}.id", ondelete="CASCADE"),
        nullable=False
    )
    user_id = Column(String(36), nullable=False, index=True)

    taken_at = Column(DateTime, nullable=False)
    scheduled_time = Column(String(5), nullable=False)  # "HH:MM" compared against
    status = Column(Enum(TimingStatus), nullable=False)
    minutes_difference = Column(Integer, nullable=False, default=0)

    medication = relationship("Medication", back_populates="dose_logs")

    __table_args__ = (
        Index("ix_dose_logs_user_taken", "user_id", "taken_at"),
        Index("ix_dose_logs_medication", "medication_id"),
    )
