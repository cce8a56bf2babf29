"""Assessment lifecycle transitions.

An assessment starts auto-calculated from default criteria. Every criteria
edit replaces the whole snapshot, re-runs aggregation and classification, and
flags the assessment as user-modified. Reset rebuilds the default assessment;
save stamps the updater without touching the provenance flags.

All transitions are pure: they return a new Assessment and leave their input
untouched.
"""

from __future__ import annotations

import copy
import logging
import uuid
from dataclasses import replace
from datetime import UTC, datetime, timedelta

from scoring.aggregator import aggregate
from scoring.criteria_schema import default_criteria, framework_for_cnv_type

from assessment.records import Assessment, CNVCall

log = logging.getLogger(__name__)

TIMESTAMP_RESOLUTION = timedelta(microseconds=1)


def generate_assessment_id() -> str:
    """Generate a unique assessment identifier."""
    return f"assessment-{uuid.uuid4().hex}"


def next_timestamp(previous: datetime | None = None) -> datetime:
    """Current UTC time, strictly later than ``previous``.

    Keeps ``updated_at`` monotonic so the timestamp-based dirty check sees
    every edit, even two made within the clock resolution.
    """
    now = datetime.now(UTC)
    if previous is not None and now <= previous:
        now = previous + TIMESTAMP_RESOLUTION
    return now


def create_assessment(cnv_call: CNVCall, created_by: str | None = None) -> Assessment:
    """Create the default, auto-calculated assessment for a CNV call.

    Args:
        cnv_call: CNV call being assessed
        created_by: Optional identity of the reviewer opening the assessment

    Returns:
        Assessment with nothing selected, all counters at zero

    Raises:
        ValueError: If the CNV type is not Deletion or Amplification
    """
    framework = framework_for_cnv_type(cnv_call.type)
    criteria = default_criteria(framework)
    now = next_timestamp()

    assessment = Assessment(
        id=generate_assessment_id(),
        cnv_id=cnv_call.id,
        cnv_type=cnv_call.type,
        criteria=criteria,
        score_result=aggregate(framework, criteria),
        created_at=now,
        updated_at=now,
        is_auto_calculated=True,
        is_user_modified=False,
        created_by=created_by,
    )
    log.debug("Created %s assessment %s for CNV %s", framework, assessment.id, cnv_call.id)
    return assessment


def update_criteria(assessment: Assessment, new_criteria: dict) -> Assessment:
    """Replace the criteria snapshot and re-score.

    The assessment becomes user-modified even when the new criteria score the
    same as the old ones: touching is tracked, not value change.

    Args:
        assessment: Current assessment
        new_criteria: Complete criteria snapshot (partial edits are merged by
            the caller)

    Returns:
        New Assessment consistent with ``new_criteria``
    """
    criteria = copy.deepcopy(new_criteria)
    score_result = aggregate(assessment.framework, criteria)
    updated = replace(
        assessment,
        criteria=criteria,
        score_result=score_result,
        is_auto_calculated=False,
        is_user_modified=True,
        updated_at=next_timestamp(assessment.updated_at),
    )
    log.debug(
        "Updated assessment %s: total=%.2f classification=%s",
        updated.id,
        updated.total_score,
        updated.classification,
    )
    return updated


def reset_assessment(cnv_call: CNVCall, created_by: str | None = None) -> Assessment:
    """Discard all edits and rebuild the default assessment for a CNV call."""
    return create_assessment(cnv_call, created_by=created_by)


def save_assessment(assessment: Assessment, updated_by: str | None = None) -> Assessment:
    """Stamp the assessment as saved.

    Provenance flags are kept: a saved user-modified assessment stays
    user-modified.
    """
    return replace(
        assessment,
        updated_at=next_timestamp(assessment.updated_at),
        updated_by=updated_by,
    )


def is_consistent(assessment: Assessment) -> bool:
    """Whether the cached score result matches a fresh aggregation of the criteria."""
    return aggregate(assessment.framework, assessment.criteria) == assessment.score_result


def load_assessment(payload) -> Assessment | None:
    """Restore a stored assessment, or None if the payload is unusable.

    The score result is recomputed from the stored criteria, so the restored
    assessment is always consistent.
    """
    from assessment.serialization import deserialize_assessment

    assessment = deserialize_assessment(payload)
    if assessment is not None:
        log.debug("Loaded assessment %s for CNV %s", assessment.id, assessment.cnv_id)
    return assessment
