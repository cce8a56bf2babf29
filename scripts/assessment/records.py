"""In-memory records for CNV calls and their pathogenicity assessments."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from scoring.aggregator import ScoreResult, SectionScores
from scoring.criteria_schema import framework_for_cnv_type


@dataclass(frozen=True)
class CNVCall:
    """A CNV call supplied by the data-loading layer.

    ``type`` is "Deletion" (scored with the Loss framework) or
    "Amplification" (scored with the Gain framework).
    """

    id: str
    type: str

    @property
    def framework(self) -> str:
        return framework_for_cnv_type(self.type)

    @classmethod
    def from_dict(cls, data: dict) -> "CNVCall":
        return cls(id=str(data["id"]), type=data["type"])


@dataclass(frozen=True)
class Assessment:
    """Pathogenicity assessment of one CNV call.

    ``score_result`` is always the aggregator output for ``criteria``; new
    instances are produced by the lifecycle transitions rather than by
    editing fields in place.
    """

    id: str
    cnv_id: str
    cnv_type: str
    criteria: dict
    score_result: ScoreResult
    created_at: datetime
    updated_at: datetime
    is_auto_calculated: bool = True
    is_user_modified: bool = False
    created_by: str | None = None
    updated_by: str | None = None

    @property
    def framework(self) -> str:
        return framework_for_cnv_type(self.cnv_type)

    @property
    def section_scores(self) -> SectionScores:
        return self.score_result.section_scores

    @property
    def total_score(self) -> float:
        return self.score_result.total_score

    @property
    def classification(self) -> str:
        return self.score_result.classification

    @property
    def warnings(self) -> tuple[str, ...]:
        return self.score_result.warnings

    def __repr__(self) -> str:
        return (
            f"<Assessment(cnv_id={self.cnv_id}, type={self.cnv_type}, "
            f"total={self.total_score:.2f}, classification={self.classification})>"
        )
