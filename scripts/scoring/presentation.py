"""Display metadata for classifications and scores.

Labels, colour categories and threshold bands carry no scoring logic; the
bands are generated from ClassificationThreshold so they cannot drift from
the classifier.
"""

from __future__ import annotations

import math

from constants import Classification, ClassificationThreshold

# Scores outside this interval are implausible for the ClinGen rubric
VALID_SCORE_MIN = -5.0
VALID_SCORE_MAX = 5.0

# Display step between the upper edge of one band and the next threshold
BAND_STEP = 0.01

CLASSIFICATION_LABELS = {
    Classification.PATHOGENIC: "Pathogenic",
    Classification.LIKELY_PATHOGENIC: "Likely Pathogenic",
    Classification.VUS: "Uncertain Significance",
    Classification.LIKELY_BENIGN: "Likely Benign",
    Classification.BENIGN: "Benign",
}

CLASSIFICATION_VARIANTS = {
    Classification.PATHOGENIC: "danger",
    Classification.LIKELY_PATHOGENIC: "warning",
    Classification.VUS: "neutral",
    Classification.LIKELY_BENIGN: "info",
    Classification.BENIGN: "success",
}


def _band(low: float, high: float) -> str:
    return f"{low:.2f} ~ {high:.2f}"


CLASSIFICATION_SCORE_RANGES = {
    Classification.PATHOGENIC: f"≥ {ClassificationThreshold.PATHOGENIC:.2f}",
    Classification.LIKELY_PATHOGENIC: _band(
        ClassificationThreshold.LIKELY_PATHOGENIC,
        ClassificationThreshold.PATHOGENIC - BAND_STEP,
    ),
    Classification.VUS: _band(
        ClassificationThreshold.LIKELY_BENIGN + BAND_STEP,
        ClassificationThreshold.LIKELY_PATHOGENIC - BAND_STEP,
    ),
    Classification.LIKELY_BENIGN: _band(
        ClassificationThreshold.LIKELY_BENIGN,
        ClassificationThreshold.BENIGN + BAND_STEP,
    ),
    Classification.BENIGN: f"≤ {ClassificationThreshold.BENIGN:.2f}",
}


def _lookup(table: dict[str, str], classification: str) -> str:
    try:
        return table[classification]
    except KeyError:
        raise ValueError(f"Unknown classification: {classification!r}") from None


def get_classification_label(classification: str) -> str:
    """Human-readable display string for a classification."""
    return _lookup(CLASSIFICATION_LABELS, classification)


def get_classification_variant(classification: str) -> str:
    """Colour category used to render a classification tag."""
    return _lookup(CLASSIFICATION_VARIANTS, classification)


def get_classification_score_range(classification: str) -> str:
    """Threshold band of a classification, e.g. ``"0.90 ~ 0.98"``."""
    return _lookup(CLASSIFICATION_SCORE_RANGES, classification)


def format_score(score) -> str:
    """Format a score with two decimals; ``-`` for missing or non-finite input.

    Examples:
        >>> format_score(-0.6)
        '-0.60'
        >>> format_score(float("nan"))
        '-'
    """
    if isinstance(score, bool) or not isinstance(score, (int, float)):
        return "-"
    if not math.isfinite(score):
        return "-"
    return f"{score:.2f}"


def is_score_in_valid_range(score) -> bool:
    """Whether a score is finite and within the plausible rubric interval."""
    if isinstance(score, bool) or not isinstance(score, (int, float)):
        return False
    return math.isfinite(score) and VALID_SCORE_MIN <= score <= VALID_SCORE_MAX
