"""Audit trail recording for assessment operations.

Records key events (creation, save, reset, load, deletion) with actor,
timestamp, and detail for traceability of every classification shown to a
reviewer.
"""

from __future__ import annotations

import logging

log = logging.getLogger(__name__)


def record_event(
    session,
    event_type: str,
    cnv_id: str | None = None,
    assessment_id: str | None = None,
    actor: str | None = None,
    detail: str | None = None,
):
    """Record an audit event.

    Args:
        session: SQLAlchemy session
        event_type: One of the AuditEventType constants
        cnv_id: Optional CNV call ID
        assessment_id: Optional assessment ID
        actor: Optional actor name (reviewer or system)
        detail: Optional detail string

    Returns:
        The created AuditEvent object
    """
    from models.audit_event import AuditEvent

    event = AuditEvent(
        event_type=event_type,
        cnv_id=cnv_id,
        assessment_id=assessment_id,
        actor=actor or "system",
        detail=detail,
    )
    session.add(event)
    log.info(
        "Audit event: %s (cnv_id=%s, assessment_id=%s, actor=%s)",
        event_type, cnv_id, assessment_id, actor,
    )
    return event


def get_audit_trail(
    session,
    cnv_id: str | None = None,
    assessment_id: str | None = None,
    event_type: str | None = None,
    limit: int = 100,
) -> list:
    """Query the audit trail.

    Args:
        session: SQLAlchemy session
        cnv_id: Optional filter by CNV call ID
        assessment_id: Optional filter by assessment ID
        event_type: Optional filter by event type
        limit: Maximum number of events to return

    Returns:
        List of AuditEvent objects, most recent first
    """
    from models.audit_event import AuditEvent

    query = session.query(AuditEvent)

    if cnv_id is not None:
        query = query.filter(AuditEvent.cnv_id == cnv_id)
    if assessment_id is not None:
        query = query.filter(AuditEvent.assessment_id == assessment_id)
    if event_type is not None:
        query = query.filter(AuditEvent.event_type == event_type)

    return (
        query.order_by(AuditEvent.created_at.desc(), AuditEvent.id.desc())
        .limit(limit)
        .all()
    )


def assessment_detail(assessment, note: str | None = None) -> str:
    """Summarize the score shown to the reviewer at the time of an event."""
    detail = (
        f"total_score={assessment.total_score:.2f} "
        f"classification={assessment.classification}"
    )
    return f"{detail}; {note}" if note else detail


def record_assessment_event(
    session,
    event_type: str,
    assessment,
    actor: str | None = None,
    note: str | None = None,
):
    """Record an event for an assessment, with its score in the detail.

    Returns:
        The created AuditEvent object
    """
    return record_event(
        session,
        event_type,
        cnv_id=assessment.cnv_id,
        assessment_id=assessment.id,
        actor=actor,
        detail=assessment_detail(assessment, note),
    )
