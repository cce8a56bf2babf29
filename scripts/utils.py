"""Shared numeric helpers for the scoring engine.

Scoring inputs arrive from a UI collaborator or from stored JSON, so every
number is coerced through these helpers before it reaches arithmetic.
"""

import math
from typing import Any

from constants import SCORE_PRECISION


def safe_float(val: Any, default: float | None = None) -> float | None:
    """Convert value to float, returning default for invalid values.

    Args:
        val: Value to convert to float
        default: Default value to return if conversion fails

    Returns:
        Float value or default if conversion fails or the result is not finite

    Examples:
        >>> safe_float("0.45")
        0.45
        >>> safe_float("invalid")
        None
        >>> safe_float(float("nan"), default=0.0)
        0.0
    """
    if isinstance(val, bool):
        return default
    try:
        result = float(val)
    except (ValueError, TypeError):
        return default
    if math.isnan(result) or math.isinf(result):
        return default
    return result


def safe_int(val: Any, default: int | None = None) -> int | None:
    """Convert value to int, returning default for invalid values.

    Handles float strings by truncating to int (e.g., "3.14" -> 3).

    Args:
        val: Value to convert to int
        default: Default value to return if conversion fails

    Returns:
        Integer value or default if conversion fails

    Examples:
        >>> safe_int("2")
        2
        >>> safe_int("3.14")
        3
        >>> safe_int(float("inf"), default=0)
        0
    """
    if isinstance(val, bool):
        return default
    try:
        return int(val)
    except (ValueError, TypeError, OverflowError):
        try:
            return int(float(val))
        except (ValueError, TypeError, OverflowError):
            return default


def clamp_to_cap(value: float, cap: float | None) -> float:
    """Clamp a score so its magnitude never exceeds the cap.

    Positive caps bound from above, negative caps bound from below, so a
    capped score keeps its sign direction.

    Examples:
        >>> clamp_to_cap(-2.25, -0.90)
        -0.9
        >>> clamp_to_cap(1.2, 0.90)
        0.9
        >>> clamp_to_cap(-0.30, 0.90)
        -0.3
    """
    if cap is None:
        return value
    if cap >= 0:
        return min(value, cap)
    return max(value, cap)


def round_score(value: float) -> float:
    """Round a score to the engine precision.

    Removes binary floating-point residue (3 * 0.30 -> 0.9) so totals land on
    the intended side of a classification threshold.
    """
    rounded = round(value, SCORE_PRECISION)
    # Normalise -0.0
    return rounded + 0.0
