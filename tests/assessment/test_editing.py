"""Tests for the criteria edit helpers."""

from __future__ import annotations

import copy
import sys
from pathlib import Path

import pytest

SCRIPTS_DIR = str(Path(__file__).resolve().parent.parent.parent / "scripts")
if SCRIPTS_DIR not in sys.path:
    sys.path.insert(0, SCRIPTS_DIR)

from assessment.editing import (  # noqa: E402
    clear_selection,
    enforce_score_policy,
    select_option,
    set_counter,
    set_gene_count,
    set_option_score,
)
from scoring.aggregator import aggregate  # noqa: E402
from validators import ValidationError  # noqa: E402


class TestSelectOption:
    def test_default_score_stored(self, loss_criteria):
        updated = select_option(loss_criteria, "Loss", 2, "hi_overlap", "2C-1")
        assert updated["section2"]["hi_overlap"] == {"selected": "2C-1", "score": 0.90}

    def test_input_untouched(self, loss_criteria):
        before = copy.deepcopy(loss_criteria)
        select_option(loss_criteria, "Loss", 1, "genomic_content", "1B")
        assert loss_criteria == before

    def test_adjusted_score(self, loss_criteria):
        updated = select_option(loss_criteria, "Loss", 2, "hi_overlap", "2E", score=0.45)
        assert updated["section2"]["hi_overlap"]["score"] == 0.45

    def test_clamp_policy(self, loss_criteria):
        updated = select_option(loss_criteria, "Loss", 2, "hi_overlap", "2C-1", score=1.5)
        assert updated["section2"]["hi_overlap"]["score"] == 1.0

    def test_reject_policy(self, loss_criteria):
        with pytest.raises(ValidationError, match="outside"):
            select_option(
                loss_criteria, "Loss", 2, "hi_overlap", "2C-1", score=1.5, policy="reject"
            )

    def test_reject_policy_fixed_option(self, loss_criteria):
        with pytest.raises(ValidationError, match="fixed score"):
            select_option(
                loss_criteria, "Loss", 2, "hi_overlap", "2A", score=0.5, policy="reject"
            )
        updated = select_option(
            loss_criteria, "Loss", 2, "hi_overlap", "2A", score=1.0, policy="reject"
        )
        assert updated["section2"]["hi_overlap"]["score"] == 1.0

    def test_non_finite_score_rejected(self, loss_criteria):
        with pytest.raises(ValidationError, match="finite"):
            select_option(
                loss_criteria, "Loss", 2, "hi_overlap", "2C-1", score=float("nan")
            )

    def test_unknown_policy(self, loss_criteria):
        with pytest.raises(ValidationError, match="out_of_range_policy"):
            select_option(loss_criteria, "Loss", 1, "genomic_content", "1B", policy="ignore")

    def test_unknown_group(self, loss_criteria):
        with pytest.raises(ValidationError, match="Unknown group"):
            select_option(loss_criteria, "Loss", 2, "ts_overlap", "2A")

    def test_unknown_code(self, gain_criteria):
        with pytest.raises(ValidationError, match="Valid options are"):
            select_option(gain_criteria, "Gain", 2, "ts_overlap", "2C")

    def test_counter_group_is_not_single_select(self, loss_criteria):
        with pytest.raises(ValidationError, match="not single_select"):
            select_option(loss_criteria, "Loss", 4, "de_novo", "4A")

    def test_section5_groups_exclusive(self, loss_criteria):
        criteria = select_option(loss_criteria, "Loss", 5, "de_novo", "5A", score=0.30)
        criteria = select_option(criteria, "Loss", 5, "non_segregation", "5E", score=-0.20)
        criteria = select_option(criteria, "Loss", 5, "inherited", "5B")

        section5 = criteria["section5"]
        assert section5["de_novo"] == {"selected": None, "score": None}
        assert section5["other"] == {"selected": None, "score": None}
        assert section5["inherited"] == {"selected": "5B", "score": -0.30}
        assert section5["non_segregation"]["selected"] == "5E"
        assert aggregate("Loss", criteria).section_scores.section5 == pytest.approx(-0.50)

    def test_missing_section_created(self):
        updated = select_option({}, "Gain", 1, "genomic_content", "1A")
        assert updated == {"section1": {"genomic_content": {"selected": "1A", "score": 0.0}}}


class TestClearSelection:
    def test_clear(self, loss_criteria):
        criteria = select_option(loss_criteria, "Loss", 1, "genomic_content", "1B")
        cleared = clear_selection(criteria, "Loss", 1, "genomic_content")
        assert cleared["section1"]["genomic_content"] == {"selected": None, "score": None}
        assert criteria["section1"]["genomic_content"]["selected"] == "1B"


class TestSetCounter:
    def test_default_field(self, loss_criteria):
        updated = set_counter(loss_criteria, "Loss", "4I", 2)
        assert updated["section4"]["non_segregation"]["4I"] == {"family_count": 2}
        assert loss_criteria["section4"]["non_segregation"]["4I"] == {"family_count": 0}

    def test_named_field(self, loss_criteria):
        updated = set_counter(loss_criteria, "Loss", "4A", 1, field="assumed_count")
        assert updated["section4"]["de_novo"]["4A"] == {
            "confirmed_count": 0,
            "assumed_count": 1,
        }

    def test_unknown_field(self, loss_criteria):
        with pytest.raises(ValidationError, match="Valid counters are"):
            set_counter(loss_criteria, "Loss", "4A", 1, field="count")

    @pytest.mark.parametrize("count", [-1, 1.5, "2", True])
    def test_invalid_count(self, loss_criteria, count):
        with pytest.raises(ValidationError):
            set_counter(loss_criteria, "Loss", "4F", count)

    def test_adjustable_option_is_not_counted(self, loss_criteria):
        with pytest.raises(ValidationError, match="not a counted option"):
            set_counter(loss_criteria, "Loss", "4D", 1)

    def test_unknown_code(self, loss_criteria):
        with pytest.raises(ValidationError, match="Unknown section4 option"):
            set_counter(loss_criteria, "Loss", "4Z", 1)

    def test_empty_criteria(self):
        updated = set_counter({}, "Gain", "4A", 2)
        assert updated["section4"]["de_novo"]["4A"] == {
            "confirmed_count": 2,
            "assumed_count": 0,
        }


class TestSetOptionScore:
    def test_adjust(self, loss_criteria):
        updated = set_option_score(loss_criteria, "Loss", "4L", 0.30)
        assert updated["section4"]["case_control"]["4L"] == {"score": 0.30}

    def test_clamped(self, loss_criteria):
        updated = set_option_score(loss_criteria, "Loss", "4D", -0.50)
        assert updated["section4"]["de_novo"]["4D"] == {"score": -0.30}

    def test_rejected(self, loss_criteria):
        with pytest.raises(ValidationError):
            set_option_score(loss_criteria, "Loss", "4D", -0.50, policy="reject")

    def test_none_restores_default(self, loss_criteria):
        criteria = set_option_score(loss_criteria, "Loss", "4N", -0.45)
        restored = set_option_score(criteria, "Loss", "4N", None)
        assert restored["section4"]["case_control"]["4N"] == {"score": None}

    def test_counted_option(self, loss_criteria):
        with pytest.raises(ValidationError, match="use set_counter"):
            set_option_score(loss_criteria, "Loss", "4I", -0.45)


class TestSetGeneCount:
    def test_set(self, gain_criteria):
        updated = set_gene_count(gain_criteria, "Gain", 30)
        assert updated["section3"]["refseq_genes"] == {"gene_count": 30}
        assert aggregate("Gain", updated).section_scores.section3 == 0.45

    def test_negative(self, gain_criteria):
        with pytest.raises(ValidationError, match="non-negative"):
            set_gene_count(gain_criteria, "Gain", -1)


class TestEnforceScorePolicy:
    def _out_of_range(self, loss_criteria):
        criteria = copy.deepcopy(loss_criteria)
        criteria["section2"]["hi_overlap"] = {"selected": "2C-1", "score": 1.5}
        return criteria

    def test_clamp_accepts(self, loss_criteria):
        enforce_score_policy(self._out_of_range(loss_criteria), "Loss", "clamp")

    def test_reject_single_select(self, loss_criteria):
        with pytest.raises(ValidationError, match="2C-1 score 1.50 outside"):
            enforce_score_policy(self._out_of_range(loss_criteria), "Loss", "reject")

    def test_reject_adjustable_section4(self, loss_criteria):
        criteria = set_option_score(loss_criteria, "Loss", "4D", -0.30)
        enforce_score_policy(criteria, "Loss", "reject")
        group = next(name for name, state in criteria["section4"].items() if "4D" in state)
        criteria["section4"][group]["4D"]["score"] = -0.60
        with pytest.raises(ValidationError, match="1 out-of-range score"):
            enforce_score_policy(criteria, "Loss", "reject")

    def test_in_range_and_defaults_pass(self, loss_criteria):
        criteria = select_option(loss_criteria, "Loss", 2, "hi_overlap", "2C-1", score=0.60)
        enforce_score_policy(criteria, "Loss", "reject")
        enforce_score_policy(loss_criteria, "Loss", "reject")

    def test_unknown_policy(self, loss_criteria):
        with pytest.raises(ValidationError, match="out_of_range_policy"):
            enforce_score_policy(loss_criteria, "Loss", "ignore")
