"""Durable storage of saved assessments (one row per CNV call).

The store only ever holds saved states. Loading goes through
``deserialize_assessment`` so a corrupt or incomplete row yields None rather
than a partially-populated assessment.
"""

from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from constants import AuditEventType

from assessment.audit import record_assessment_event, record_event
from assessment.records import Assessment
from assessment.serialization import deserialize_assessment, serialize_assessment

log = logging.getLogger(__name__)


class AssessmentStore:
    """Saves and loads assessments through a SQLAlchemy session.

    Args:
        session: SQLAlchemy database session
    """

    def __init__(self, session: Session):
        self.session = session

    def _row(self, cnv_id: str):
        from models.saved_assessment import SavedAssessment

        return (
            self.session.query(SavedAssessment)
            .filter(SavedAssessment.cnv_id == cnv_id)
            .first()
        )

    def save(self, assessment: Assessment, actor: str | None = None):
        """Insert or replace the saved assessment for its CNV call.

        Args:
            assessment: Assessment to persist
            actor: Reviewer saving the assessment (defaults to updated_by)

        Returns:
            The SavedAssessment row
        """
        from models.saved_assessment import SavedAssessment

        row = self._row(assessment.cnv_id)
        if row is None:
            row = SavedAssessment(id=assessment.id, cnv_id=assessment.cnv_id)
            self.session.add(row)
        elif row.id != assessment.id:
            log.info(
                "Replacing saved assessment %s for CNV %s with %s",
                row.id, assessment.cnv_id, assessment.id,
            )
            row.id = assessment.id

        row.cnv_type = assessment.cnv_type
        row.payload = serialize_assessment(assessment)
        row.total_score = assessment.total_score
        row.classification = assessment.classification
        row.is_user_modified = assessment.is_user_modified
        row.created_at = assessment.created_at
        row.updated_at = assessment.updated_at
        row.updated_by = assessment.updated_by

        record_assessment_event(
            self.session,
            AuditEventType.SAVED,
            assessment,
            actor=actor or assessment.updated_by,
        )
        self.session.commit()

        log.info(
            "Saved assessment %s for CNV %s (%s)",
            assessment.id, assessment.cnv_id, assessment.classification,
        )
        return row

    def load(self, cnv_id: str) -> Assessment | None:
        """Load the saved assessment for a CNV call.

        Returns:
            Assessment, or None if nothing is saved or the stored payload is
            unusable
        """
        row = self._row(cnv_id)
        if row is None:
            return None
        assessment = deserialize_assessment(row.payload)
        if assessment is None:
            log.warning("Saved assessment for CNV %s could not be restored", cnv_id)
            return None
        if assessment.cnv_id != cnv_id:
            log.warning(
                "Saved assessment row for CNV %s holds CNV %s; ignoring",
                cnv_id, assessment.cnv_id,
            )
            return None
        return assessment

    def delete(self, cnv_id: str, actor: str | None = None) -> bool:
        """Delete the saved assessment for a CNV call.

        Returns:
            True if a row was deleted
        """
        row = self._row(cnv_id)
        if row is None:
            return False
        record_event(
            self.session,
            AuditEventType.DELETED,
            cnv_id=cnv_id,
            assessment_id=row.id,
            actor=actor,
        )
        self.session.delete(row)
        self.session.commit()
        return True

    def list_by_classification(self, classification: str) -> list:
        """Saved assessment rows with the given classification, by CNV id."""
        from models.saved_assessment import SavedAssessment

        return (
            self.session.query(SavedAssessment)
            .filter(SavedAssessment.classification == classification)
            .order_by(SavedAssessment.cnv_id)
            .all()
        )

    def record(
        self,
        event_type: str,
        assessment: Assessment,
        actor: str | None = None,
        note: str | None = None,
    ) -> None:
        """Record a non-persisting lifecycle event (created, reset, loaded)."""
        record_assessment_event(self.session, event_type, assessment, actor=actor, note=note)
        self.session.commit()
