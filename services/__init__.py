"""
Services Module
Business logic layer for the PillTracker application
"""

from services.medication_service import MedicationService, DoseTakenResult, medication_service
from services.adherence_service import (
    AdherenceService,
    AdherenceSummary,
    compute_adherence_summary,
    adherence_service,
)
from services.admin_service import (
    AdminService,
    PatientAggregate,
    consolidate_patient_data,
    admin_service,
)


__all__ = [
    # Service classes
    "MedicationService",
    "AdherenceService",
    "AdminService",
    # Results
    "DoseTakenResult",
    "AdherenceSummary",
    "PatientAggregate",
    # Pure computations
    "compute_adherence_summary",
    "consolidate_patient_data",
    # Singleton instances
    "medication_service",
    "adherence_service",
    "admin_service",
]
