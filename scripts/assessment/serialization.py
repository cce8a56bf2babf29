"""Serialization of assessments as plain structured data.

Stored assessments come back through ``deserialize_assessment``, which fails
closed: anything missing a required field returns None so the caller falls
back to a fresh assessment instead of working with a half-populated one.
"""

from __future__ import annotations

import copy
import json
import logging
from datetime import UTC, datetime

from constants import CNVType
from scoring.aggregator import aggregate
from scoring.criteria_schema import framework_for_cnv_type
from validators import ValidationError, validate_enum_value, validate_required_keys

from assessment.records import Assessment

log = logging.getLogger(__name__)

SERIALIZATION_VERSION = "1.0"
REQUIRED_FIELDS = ["id", "cnv_id", "cnv_type", "criteria"]


def _format_timestamp(value: datetime) -> str:
    return value.isoformat()


def _parse_timestamp(value) -> datetime | None:
    if not isinstance(value, str):
        return None
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def _parse_flag(value) -> bool:
    return value if isinstance(value, bool) else False


def assessment_to_dict(assessment: Assessment) -> dict:
    """Convert an assessment to a JSON-ready dict."""
    return {
        "version": SERIALIZATION_VERSION,
        "id": assessment.id,
        "cnv_id": assessment.cnv_id,
        "cnv_type": assessment.cnv_type,
        "criteria": assessment.criteria,
        "score_result": assessment.score_result.to_dict(),
        "is_auto_calculated": assessment.is_auto_calculated,
        "is_user_modified": assessment.is_user_modified,
        "created_at": _format_timestamp(assessment.created_at),
        "updated_at": _format_timestamp(assessment.updated_at),
        "created_by": assessment.created_by,
        "updated_by": assessment.updated_by,
    }


def serialize_assessment(assessment: Assessment) -> str:
    """Serialize an assessment to a JSON string."""
    return json.dumps(assessment_to_dict(assessment), sort_keys=True)


def _load_payload(payload) -> dict | None:
    if isinstance(payload, dict):
        return payload
    if isinstance(payload, (bytes, bytearray)):
        try:
            payload = payload.decode("utf-8")
        except UnicodeDecodeError:
            log.warning("Stored assessment is not valid UTF-8")
            return None
    if not isinstance(payload, str):
        log.warning("Unsupported stored assessment type: %s", type(payload).__name__)
        return None
    try:
        data = json.loads(payload)
    except json.JSONDecodeError as e:
        log.warning("Stored assessment is not valid JSON: %s", e)
        return None
    if not isinstance(data, dict):
        log.warning("Stored assessment is not a JSON object")
        return None
    return data


def deserialize_assessment(payload) -> Assessment | None:
    """Rebuild an assessment from a JSON string, bytes or dict.

    The score result is recomputed from the stored criteria so the cached
    result always matches the criteria; a stored result that disagrees is
    logged and replaced.

    Args:
        payload: Output of ``serialize_assessment`` or ``assessment_to_dict``

    Returns:
        Assessment, or None if the payload is unusable
    """
    data = _load_payload(payload)
    if data is None:
        return None

    try:
        validate_required_keys(data, REQUIRED_FIELDS, "Stored assessment")
        validate_enum_value(data["cnv_type"], CNVType.ALL, "cnv_type")
        if not isinstance(data["criteria"], dict):
            raise ValidationError("Stored assessment criteria must be a dictionary")
    except ValidationError as e:
        log.warning("Rejected stored assessment: %s", e)
        return None

    assessment_id = str(data["id"])
    created_at = _parse_timestamp(data.get("created_at"))
    updated_at = _parse_timestamp(data.get("updated_at"))
    if created_at is None or updated_at is None:
        log.warning("Stored assessment %s has missing or invalid timestamps", assessment_id)
        now = datetime.now(UTC)
        created_at = created_at or now
        updated_at = updated_at or now

    criteria = copy.deepcopy(data["criteria"])
    assessment = Assessment(
        id=assessment_id,
        cnv_id=str(data["cnv_id"]),
        cnv_type=data["cnv_type"],
        criteria=criteria,
        score_result=aggregate(framework_for_cnv_type(data["cnv_type"]), criteria),
        created_at=created_at,
        updated_at=updated_at,
        is_auto_calculated=_parse_flag(data.get("is_auto_calculated")),
        is_user_modified=_parse_flag(data.get("is_user_modified")),
        created_by=data.get("created_by"),
        updated_by=data.get("updated_by"),
    )

    stored = data.get("score_result")
    if isinstance(stored, dict) and (
        stored.get("total_score") != assessment.total_score
        or stored.get("classification") != assessment.classification
    ):
        log.warning(
            "Stored score for assessment %s (%s, %s) differs from recomputed (%.2f, %s)",
            assessment.id,
            stored.get("total_score"),
            stored.get("classification"),
            assessment.total_score,
            assessment.classification,
        )
    return assessment
