"""Per-CNV assessment ownership for one viewer context.

The manager is an arena of open assessments keyed by CNV id: callers look an
assessment up by id instead of threading it through their own state. Each
manager owns its own arena; there is no module-level instance shared between
unrelated viewers. Edits to one CNV must be serialized by the caller.
"""

from __future__ import annotations

import logging

from constants import AuditEventType, OutOfRangePolicy
from validators import validate_out_of_range_policy

from assessment.editing import enforce_score_policy, select_option, set_option_score
from assessment.lifecycle import (
    create_assessment,
    load_assessment,
    reset_assessment,
    save_assessment,
    update_criteria,
)
from assessment.records import Assessment, CNVCall
from assessment.store import AssessmentStore

log = logging.getLogger(__name__)


class AssessmentManager:
    """Owns the open assessment and its saved baseline for each CNV call.

    Args:
        store: Optional durable store; without one, saves stay in memory
        reviewer: Optional identity recorded as creator of new assessments
        policy: Out-of-range policy for reviewer-supplied scores, usually
            ``config["scoring"]["out_of_range_policy"]``

    Raises:
        ValidationError: If the policy is unknown
    """

    def __init__(
        self,
        store: AssessmentStore | None = None,
        reviewer: str | None = None,
        policy: str = OutOfRangePolicy.CLAMP,
    ):
        validate_out_of_range_policy(policy)
        self.store = store
        self.reviewer = reviewer
        self.policy = policy
        self._calls: dict[str, CNVCall] = {}
        self._current: dict[str, Assessment] = {}
        self._baseline: dict[str, Assessment] = {}

    def _require(self, cnv_id: str) -> Assessment:
        try:
            return self._current[cnv_id]
        except KeyError:
            raise ValueError(f"No open assessment for CNV {cnv_id!r}") from None

    def _adopt(self, assessment: Assessment) -> Assessment:
        self._current[assessment.cnv_id] = assessment
        self._baseline[assessment.cnv_id] = assessment
        return assessment

    def open(self, cnv_call: CNVCall, restore: bool = True) -> Assessment:
        """Open a CNV call for assessment.

        Returns the already open assessment if there is one. Otherwise the
        saved assessment is restored from the store (when ``restore`` is set
        and one exists for the same CNV type), falling back to a fresh default
        assessment.

        Raises:
            ValueError: If the CNV type is not Deletion or Amplification
        """
        if cnv_call.id in self._current:
            return self._current[cnv_call.id]

        self._calls[cnv_call.id] = cnv_call
        if restore and self.store is not None:
            saved = self.store.load(cnv_call.id)
            if saved is not None and saved.cnv_type == cnv_call.type:
                log.info("Restored saved assessment %s for CNV %s", saved.id, cnv_call.id)
                self.store.record(
                    AuditEventType.LOADED, saved, actor=self.reviewer, note="restored from store"
                )
                return self._adopt(saved)
            if saved is not None:
                log.warning(
                    "Saved assessment for CNV %s is %s but call is %s; starting fresh",
                    cnv_call.id, saved.cnv_type, cnv_call.type,
                )

        assessment = create_assessment(cnv_call, created_by=self.reviewer)
        if self.store is not None:
            self.store.record(AuditEventType.CREATED, assessment, actor=self.reviewer)
        return self._adopt(assessment)

    def get(self, cnv_id: str) -> Assessment | None:
        return self._current.get(cnv_id)

    def open_ids(self) -> list[str]:
        return sorted(self._current)

    def update_criteria(self, cnv_id: str, new_criteria: dict) -> Assessment:
        """Replace the criteria of an open assessment and re-score it.

        Raises:
            ValidationError: If a supplied score is out of range under the
                ``reject`` policy; the open assessment is left unchanged
        """
        current = self._require(cnv_id)
        enforce_score_policy(new_criteria, current.framework, self.policy)
        updated = update_criteria(current, new_criteria)
        self._current[cnv_id] = updated
        return updated

    def select(
        self,
        cnv_id: str,
        section: int,
        group_name: str,
        code: str,
        score: float | None = None,
    ) -> Assessment:
        """Select an option in a single-select group of an open assessment."""
        current = self._require(cnv_id)
        criteria = select_option(
            current.criteria, current.framework, section, group_name, code,
            score=score, policy=self.policy,
        )
        return self.update_criteria(cnv_id, criteria)

    def adjust_score(self, cnv_id: str, code: str, score: float | None) -> Assessment:
        """Set the score of an adjustable Section 4 option of an open assessment."""
        current = self._require(cnv_id)
        criteria = set_option_score(
            current.criteria, current.framework, code, score, policy=self.policy
        )
        return self.update_criteria(cnv_id, criteria)

    def reset(self, cnv_id: str) -> Assessment:
        """Discard all edits and restore the default assessment and baseline."""
        self._require(cnv_id)
        assessment = reset_assessment(self._calls[cnv_id], created_by=self.reviewer)
        if self.store is not None:
            self.store.record(AuditEventType.RESET, assessment, actor=self.reviewer)
        log.info("Reset assessment for CNV %s", cnv_id)
        return self._adopt(assessment)

    def save(self, cnv_id: str, updated_by: str | None = None) -> Assessment:
        """Commit the current state as the new baseline, then persist it.

        The in-memory commit happens before the store round-trip, so the
        value shown to the reviewer is already final if persistence fails.
        """
        saved = self._adopt(save_assessment(self._require(cnv_id), updated_by))
        if self.store is not None:
            self.store.save(saved, actor=updated_by)
        return saved

    def load(self, cnv_id: str, payload) -> Assessment | None:
        """Adopt a serialized assessment as both current state and baseline.

        Returns:
            The loaded assessment, or None (leaving state untouched) if the
            payload is unusable or belongs to another CNV call
        """
        assessment = load_assessment(payload)
        if assessment is None:
            return None
        if assessment.cnv_id != cnv_id:
            log.warning(
                "Refusing to load assessment for CNV %s into CNV %s",
                assessment.cnv_id, cnv_id,
            )
            return None
        known = self._calls.get(cnv_id)
        if known is not None and known.type != assessment.cnv_type:
            log.warning(
                "Refusing to load %s assessment into %s CNV %s",
                assessment.cnv_type, known.type, cnv_id,
            )
            return None
        self._calls[cnv_id] = CNVCall(id=cnv_id, type=assessment.cnv_type)
        if self.store is not None:
            self.store.record(AuditEventType.LOADED, assessment, actor=self.reviewer)
        return self._adopt(assessment)

    def has_unsaved_changes(self, cnv_id: str) -> bool:
        """True iff the current state was stamped after the last save or reset."""
        current = self._current.get(cnv_id)
        baseline = self._baseline.get(cnv_id)
        if current is None or baseline is None:
            return False
        return current.updated_at != baseline.updated_at

    def close(self, cnv_id: str) -> None:
        """Forget the open assessment for a CNV call; unsaved edits are dropped."""
        if self.has_unsaved_changes(cnv_id):
            log.info("Closing CNV %s with unsaved changes", cnv_id)
        self._current.pop(cnv_id, None)
        self._baseline.pop(cnv_id, None)
        self._calls.pop(cnv_id, None)
