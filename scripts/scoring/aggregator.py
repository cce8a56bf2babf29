"""Score aggregation across the five evidence sections."""

from __future__ import annotations

import logging
import math
from dataclasses import asdict, dataclass, field

from scoring.classifier import classify
from scoring.section_scorers import SECTION_SCORERS
from utils import round_score

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class SectionScores:
    """Per-section scores. Derived, never edited directly."""

    section1: float = 0.0
    section2: float = 0.0
    section3: float = 0.0
    section4: float = 0.0
    section5: float = 0.0

    @property
    def total(self) -> float:
        return self.section1 + self.section2 + self.section3 + self.section4 + self.section5

    def to_dict(self) -> dict[str, float]:
        return asdict(self)


@dataclass(frozen=True)
class ScoreResult:
    """Section breakdown, total score and classification for one criteria snapshot.

    ``warnings`` carries non-fatal problems found while scoring (unknown codes,
    clamped adjustments, invalid counts).
    """

    section_scores: SectionScores
    total_score: float
    classification: str
    warnings: tuple[str, ...] = field(default=())

    def to_dict(self) -> dict:
        return {
            "section_scores": self.section_scores.to_dict(),
            "total_score": self.total_score,
            "classification": self.classification,
            "warnings": list(self.warnings),
        }


def aggregate(framework: str, criteria: dict) -> ScoreResult:
    """Score all sections, sum them, and classify the total.

    Inputs are never mutated. A section score that is not finite contributes
    0, so ``total_score`` is always finite.

    Args:
        framework: Framework.LOSS or Framework.GAIN
        criteria: Criteria snapshot for the framework

    Returns:
        ScoreResult for the snapshot
    """
    warnings: list[str] = []
    scores: dict[str, float] = {}
    for section, scorer in SECTION_SCORERS.items():
        score = scorer(framework, criteria, warnings)
        if not math.isfinite(score):
            message = f"section{section}: non-finite section score treated as 0"
            log.warning("%s", message)
            warnings.append(message)
            score = 0.0
        scores[f"section{section}"] = score

    section_scores = SectionScores(**scores)
    total_score = round_score(section_scores.total)
    classification = classify(total_score)

    log.debug(
        "Aggregated %s criteria: total=%.2f classification=%s warnings=%d",
        framework,
        total_score,
        classification,
        len(warnings),
    )
    return ScoreResult(
        section_scores=section_scores,
        total_score=total_score,
        classification=classification,
        warnings=tuple(warnings),
    )
