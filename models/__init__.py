"""Database models for saved CNV assessments."""

from models.audit_event import AuditEvent
from models.base import Base
from models.saved_assessment import SavedAssessment

__all__ = [
    "AuditEvent",
    "Base",
    "SavedAssessment",
]
