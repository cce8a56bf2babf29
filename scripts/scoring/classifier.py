"""ClinGen CNV pathogenicity classifier.

Maps a total evidence score onto the five-tier classification:

- Pathogenic: >= 0.99
- Likely Pathogenic: 0.90 to 0.98
- VUS: -0.89 to 0.89
- Likely Benign: -0.90 to -0.98
- Benign: <= -0.99
"""

from __future__ import annotations

import math
import numbers

from constants import Classification, ClassificationThreshold


def classify(total_score: float) -> str:
    """Classify a total score, first matching threshold wins.

    Non-finite or non-numeric input is classified as VUS rather than raising.

    Args:
        total_score: Sum of all section scores

    Returns:
        One of the Classification constants
    """
    if isinstance(total_score, bool) or not isinstance(total_score, numbers.Real):
        return Classification.VUS
    if not math.isfinite(total_score):
        return Classification.VUS

    if total_score >= ClassificationThreshold.PATHOGENIC:
        return Classification.PATHOGENIC
    if total_score >= ClassificationThreshold.LIKELY_PATHOGENIC:
        return Classification.LIKELY_PATHOGENIC
    if total_score <= ClassificationThreshold.BENIGN:
        return Classification.BENIGN
    if total_score <= ClassificationThreshold.LIKELY_BENIGN:
        return Classification.LIKELY_BENIGN
    return Classification.VUS
