"""Tests for the per-CNV assessment manager."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

SCRIPTS_DIR = str(Path(__file__).resolve().parent.parent.parent / "scripts")
if SCRIPTS_DIR not in sys.path:
    sys.path.insert(0, SCRIPTS_DIR)

PROJECT_ROOT = str(Path(__file__).resolve().parent.parent.parent)
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from assessment.audit import get_audit_trail  # noqa: E402
from assessment.editing import select_option, set_counter  # noqa: E402
from assessment.manager import AssessmentManager  # noqa: E402
from assessment.records import CNVCall  # noqa: E402
from assessment.serialization import serialize_assessment  # noqa: E402
from assessment.store import AssessmentStore  # noqa: E402
from constants import AuditEventType, Classification  # noqa: E402
from settings import load_config  # noqa: E402
from validators import ValidationError  # noqa: E402


@pytest.fixture
def manager():
    return AssessmentManager()


@pytest.fixture
def store(db_session):
    return AssessmentStore(db_session)


def _select_1b(manager, cnv_id):
    current = manager.get(cnv_id)
    criteria = select_option(current.criteria, current.framework, 1, "genomic_content", "1B")
    return manager.update_criteria(cnv_id, criteria)


class TestOpen:
    def test_fresh_assessment(self, manager, deletion_call):
        assessment = manager.open(deletion_call)
        assert assessment.total_score == 0.0
        assert assessment.classification == Classification.VUS
        assert assessment.is_auto_calculated is True
        assert manager.has_unsaved_changes(deletion_call.id) is False

    def test_open_twice_returns_current(self, manager, deletion_call):
        first = manager.open(deletion_call)
        _select_1b(manager, deletion_call.id)
        second = manager.open(deletion_call)
        assert second is not first
        assert second.total_score == -0.60

    def test_calls_are_independent(self, manager, deletion_call, amplification_call):
        manager.open(deletion_call)
        manager.open(amplification_call)
        _select_1b(manager, deletion_call.id)

        assert manager.get(amplification_call.id).total_score == 0.0
        assert manager.open_ids() == ["cnv-amp-1", "cnv-del-1"]

    def test_managers_do_not_share_state(self, deletion_call):
        first = AssessmentManager()
        second = AssessmentManager()
        first.open(deletion_call)
        assert second.get(deletion_call.id) is None

    def test_unsupported_type(self, manager):
        with pytest.raises(ValueError):
            manager.open(CNVCall(id="cnv-x", type="Inversion"))


class TestEdits:
    def test_update_marks_unsaved(self, manager, deletion_call):
        manager.open(deletion_call)
        updated = _select_1b(manager, deletion_call.id)
        assert updated.is_user_modified is True
        assert manager.get(deletion_call.id) is updated
        assert manager.has_unsaved_changes(deletion_call.id) is True

    def test_no_op_update_is_unsaved(self, manager, deletion_call):
        opened = manager.open(deletion_call)
        manager.update_criteria(deletion_call.id, opened.criteria)
        assert manager.has_unsaved_changes(deletion_call.id) is True

    def test_unknown_cnv(self, manager, loss_criteria):
        with pytest.raises(ValueError, match="No open assessment"):
            manager.update_criteria("cnv-missing", loss_criteria)

    def test_unknown_cnv_not_dirty(self, manager):
        assert manager.has_unsaved_changes("cnv-missing") is False


class TestOutOfRangePolicy:
    def test_select_clamps_by_default(self, manager, deletion_call):
        manager.open(deletion_call)
        updated = manager.select(deletion_call.id, 2, "hi_overlap", "2C-1", score=1.5)
        assert updated.criteria["section2"]["hi_overlap"]["score"] == 1.0
        assert updated.total_score == 1.0

    def test_reject_from_config(self, tmp_path, deletion_call):
        path = tmp_path / "scoring.yaml"
        path.write_text("scoring:\n  out_of_range_policy: reject\n")
        config = load_config(path)
        manager = AssessmentManager(policy=config["scoring"]["out_of_range_policy"])
        opened = manager.open(deletion_call)

        with pytest.raises(ValidationError, match="outside"):
            manager.select(deletion_call.id, 2, "hi_overlap", "2C-1", score=1.5)
        with pytest.raises(ValidationError, match="outside"):
            manager.adjust_score(deletion_call.id, "4D", -0.60)
        assert manager.get(deletion_call.id) is opened
        assert manager.has_unsaved_changes(deletion_call.id) is False

    def test_reject_whole_criteria_update(self, deletion_call, loss_criteria):
        manager = AssessmentManager(policy="reject")
        manager.open(deletion_call)
        loss_criteria["section2"]["hi_overlap"] = {"selected": "2C-1", "score": 1.5}
        with pytest.raises(ValidationError, match="out-of-range"):
            manager.update_criteria(deletion_call.id, loss_criteria)

    def test_adjust_within_range(self, deletion_call):
        manager = AssessmentManager(policy="reject")
        manager.open(deletion_call)
        updated = manager.adjust_score(deletion_call.id, "4D", -0.30)
        assert updated.total_score == -0.3

    def test_unknown_policy(self):
        with pytest.raises(ValidationError, match="out_of_range_policy"):
            AssessmentManager(policy="ignore")


class TestSave:
    def test_save_clears_dirty_flag(self, manager, deletion_call):
        manager.open(deletion_call)
        _select_1b(manager, deletion_call.id)
        saved = manager.save(deletion_call.id, updated_by="reviewer1")

        assert saved.updated_by == "reviewer1"
        assert saved.total_score == -0.60
        assert manager.has_unsaved_changes(deletion_call.id) is False

    def test_edit_after_save_is_dirty(self, manager, deletion_call):
        manager.open(deletion_call)
        manager.save(deletion_call.id)
        _select_1b(manager, deletion_call.id)
        assert manager.has_unsaved_changes(deletion_call.id) is True


class TestReset:
    def test_reset_restores_defaults(self, manager, amplification_call):
        opened = manager.open(amplification_call)
        current = manager.get(amplification_call.id)
        criteria = set_counter(current.criteria, "Gain", "4A", 2)
        manager.update_criteria(amplification_call.id, criteria)

        reset = manager.reset(amplification_call.id)
        assert reset.criteria == opened.criteria
        assert reset.total_score == 0.0
        assert reset.is_user_modified is False
        assert manager.has_unsaved_changes(amplification_call.id) is False

    def test_reset_idempotent(self, manager, deletion_call):
        manager.open(deletion_call)
        first = manager.reset(deletion_call.id)
        second = manager.reset(deletion_call.id)
        assert first.criteria == second.criteria
        assert first.score_result == second.score_result

    def test_reset_unknown(self, manager):
        with pytest.raises(ValueError):
            manager.reset("cnv-missing")


class TestLoad:
    def test_load_payload(self, manager, deletion_call):
        other = AssessmentManager()
        other.open(deletion_call)
        edited = _select_1b(other, deletion_call.id)

        loaded = manager.load(deletion_call.id, serialize_assessment(edited))
        assert loaded == edited
        assert manager.get(deletion_call.id) == edited
        assert manager.has_unsaved_changes(deletion_call.id) is False

    def test_invalid_payload_keeps_state(self, manager, deletion_call):
        opened = manager.open(deletion_call)
        assert manager.load(deletion_call.id, "{broken") is None
        assert manager.get(deletion_call.id) is opened

    def test_payload_for_other_cnv(self, manager, deletion_call, amplification_call):
        other = AssessmentManager()
        payload = serialize_assessment(other.open(amplification_call))
        assert manager.load(deletion_call.id, payload) is None

    def test_payload_with_other_type(self, manager):
        manager.open(CNVCall(id="cnv-1", type="Deletion"))
        other = AssessmentManager()
        payload = serialize_assessment(other.open(CNVCall(id="cnv-1", type="Amplification")))
        assert manager.load("cnv-1", payload) is None
        assert manager.get("cnv-1").cnv_type == "Deletion"

    def test_reset_after_load(self, manager, deletion_call):
        other = AssessmentManager()
        other.open(deletion_call)
        edited = _select_1b(other, deletion_call.id)
        manager.load(deletion_call.id, serialize_assessment(edited))
        assert manager.reset(deletion_call.id).total_score == 0.0


class TestClose:
    def test_close(self, manager, deletion_call):
        manager.open(deletion_call)
        _select_1b(manager, deletion_call.id)
        manager.close(deletion_call.id)
        assert manager.get(deletion_call.id) is None
        assert manager.open_ids() == []

    def test_reopen_after_close_is_fresh(self, manager, deletion_call):
        manager.open(deletion_call)
        _select_1b(manager, deletion_call.id)
        manager.close(deletion_call.id)
        assert manager.open(deletion_call).total_score == 0.0


class TestWithStore:
    def test_save_persists(self, store, deletion_call):
        manager = AssessmentManager(store=store, reviewer="reviewer1")
        manager.open(deletion_call)
        _select_1b(manager, deletion_call.id)
        saved = manager.save(deletion_call.id, updated_by="reviewer1")
        assert store.load(deletion_call.id) == saved

    def test_open_restores_saved(self, store, deletion_call):
        first = AssessmentManager(store=store)
        first.open(deletion_call)
        _select_1b(first, deletion_call.id)
        saved = first.save(deletion_call.id)

        second = AssessmentManager(store=store)
        restored = second.open(deletion_call)
        assert restored == saved
        assert second.has_unsaved_changes(deletion_call.id) is False

    def test_restore_skipped_for_type_change(self, store):
        first = AssessmentManager(store=store)
        first.open(CNVCall(id="cnv-1", type="Deletion"))
        _select_1b(first, "cnv-1")
        first.save("cnv-1")

        second = AssessmentManager(store=store)
        opened = second.open(CNVCall(id="cnv-1", type="Amplification"))
        assert opened.framework == "Gain"
        assert opened.total_score == 0.0

    def test_restore_disabled(self, store, deletion_call):
        first = AssessmentManager(store=store)
        first.open(deletion_call)
        _select_1b(first, deletion_call.id)
        first.save(deletion_call.id)

        second = AssessmentManager(store=store)
        assert second.open(deletion_call, restore=False).total_score == 0.0

    def test_audit_trail(self, store, db_session, deletion_call):
        manager = AssessmentManager(store=store, reviewer="reviewer1")
        manager.open(deletion_call)
        manager.save(deletion_call.id, updated_by="reviewer1")
        manager.reset(deletion_call.id)

        events = get_audit_trail(db_session, cnv_id=deletion_call.id)
        assert [e.event_type for e in events] == [
            AuditEventType.RESET,
            AuditEventType.SAVED,
            AuditEventType.CREATED,
        ]
        assert all(e.actor == "reviewer1" for e in events)

    def test_corrupt_saved_row_opens_fresh(self, store, db_session, deletion_call):
        from models.saved_assessment import SavedAssessment

        first = AssessmentManager(store=store)
        first.open(deletion_call)
        _select_1b(first, deletion_call.id)
        first.save(deletion_call.id)

        row = db_session.query(SavedAssessment).filter_by(cnv_id=deletion_call.id).one()
        row.payload = row.payload.replace('"cnv_type": "Deletion"', '"cnv_type": ["Deletion"]')
        db_session.commit()

        second = AssessmentManager(store=store)
        opened = second.open(deletion_call)
        assert opened.total_score == 0.0
        assert second.has_unsaved_changes(deletion_call.id) is False
