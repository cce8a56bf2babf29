"""Section scorers for the ClinGen CNV frameworks.

Each ``score_sectionN`` function resolves the selected options and counters
of one evidence section against the criteria schema and returns the summed
section score. Scoring never raises on bad criteria: unknown codes,
out-of-range adjustments, negative counts and non-finite values degrade to a
safe score and are reported through the optional ``warnings`` list.
"""

from __future__ import annotations

import logging
import math

from constants import GroupKind
from scoring.criteria_schema import (
    GENE_COUNT_BUCKETS,
    CriteriaGroup,
    CriteriaOption,
    get_section_schema,
    section_key,
)
from utils import clamp_to_cap, round_score, safe_float, safe_int

log = logging.getLogger(__name__)

SCORE_TOLERANCE = 1e-9


def _warn(warnings: list[str] | None, message: str) -> None:
    log.warning("%s", message)
    if warnings is not None:
        warnings.append(message)


def _finite_or_zero(value: float, where: str, warnings: list[str] | None) -> float:
    if not math.isfinite(value):
        _warn(warnings, f"{where}: non-finite score {value!r} treated as 0")
        return 0.0
    return value


def resolve_option_score(
    option: CriteriaOption,
    raw_score,
    where: str = "",
    warnings: list[str] | None = None,
) -> float:
    """Resolve the effective score of a selected option.

    ``None`` means the option's default score. Adjustable options are clamped
    into their range; fixed options always score their default.

    Args:
        option: Schema option being scored
        raw_score: Score supplied with the selection, or None
        where: Location prefix for warning messages
        warnings: Optional list collecting non-fatal warnings

    Returns:
        Finite resolved score
    """
    where = where or option.code
    if raw_score is None:
        return option.default_score

    score = safe_float(raw_score)
    if score is None:
        _warn(warnings, f"{where}: invalid score {raw_score!r} treated as 0")
        return 0.0

    if option.score_range is None:
        if abs(score - option.default_score) > SCORE_TOLERANCE:
            _warn(
                warnings,
                f"{where}: fixed option scores {option.default_score:.2f}, "
                f"ignoring supplied {score:.2f}",
            )
        return option.default_score

    if not option.score_range.contains(score):
        clamped = option.score_range.clamp(score)
        _warn(
            warnings,
            f"{where}: score {score:.2f} outside "
            f"[{option.score_range.min:.2f}, {option.score_range.max:.2f}], "
            f"clamped to {clamped:.2f}",
        )
        return clamped
    return score


def score_counter_option(
    option: CriteriaOption,
    state,
    where: str = "",
    warnings: list[str] | None = None,
) -> float:
    """Score a per-occurrence counter option, clamped to its cap.

    Each counter field contributes ``count * weight``; the sum is then
    clamped toward zero so its magnitude never exceeds ``option.cap``.
    """
    where = where or option.code
    if not isinstance(state, dict):
        _warn(warnings, f"{where}: malformed counter state treated as 0")
        return 0.0

    total = 0.0
    for counter in option.counters:
        raw = state.get(counter.field, 0)
        count = safe_int(raw)
        if count is None or count < 0:
            _warn(warnings, f"{where}: invalid {counter.field} {raw!r} treated as 0")
            continue
        try:
            total += count * counter.weight
        except OverflowError:
            _warn(warnings, f"{where}: {counter.field} {raw!r} overflows, treated as 0")

    total = _finite_or_zero(total, where, warnings)
    return clamp_to_cap(total, option.cap)


def score_gene_count(state, where: str = "", warnings: list[str] | None = None) -> float:
    """Score the number of protein-coding genes via explicit bucket boundaries."""
    raw = state.get("gene_count", 0) if isinstance(state, dict) else None
    count = safe_int(raw)
    if count is None or count < 0:
        _warn(warnings, f"{where}: invalid gene_count {raw!r} treated as 0")
        return 0.0
    for bucket in GENE_COUNT_BUCKETS:
        if bucket.matches(count):
            return bucket.score
    return 0.0


def score_group(
    group: CriteriaGroup,
    state,
    where: str = "",
    warnings: list[str] | None = None,
) -> tuple[float, dict[str, float]]:
    """Score one criteria group.

    Returns:
        Tuple of (group score after the group cap, resolved score per option
        code that contributed)
    """
    where = where or group.name
    contributions: dict[str, float] = {}

    if state is None:
        _warn(warnings, f"{where}: missing criteria treated as 0")
        return 0.0, contributions

    if group.kind == GroupKind.GENE_COUNT:
        score = score_gene_count(state, where, warnings)
        return score, {"gene_count": score}

    if not isinstance(state, dict):
        _warn(warnings, f"{where}: malformed criteria treated as 0")
        return 0.0, contributions

    if group.kind == GroupKind.SINGLE_SELECT:
        code = state.get("selected")
        if not code:
            # Nothing selected yet contributes exactly 0
            return 0.0, contributions
        option = group.find(code)
        if option is None:
            _warn(warnings, f"{where}: unknown option code {code!r} scored as 0")
            return 0.0, contributions
        score = resolve_option_score(option, state.get("score"), f"{where}.{code}", warnings)
        contributions[code] = score
        return clamp_to_cap(score, group.cap), contributions

    for code in state:
        if group.find(code) is None:
            _warn(warnings, f"{where}: unknown option code {code!r} scored as 0")

    total = 0.0
    for option in group.options:
        option_state = state.get(option.code)
        if option_state is None:
            continue
        option_where = f"{where}.{option.code}"
        if option.is_counter:
            score = score_counter_option(option, option_state, option_where, warnings)
        elif isinstance(option_state, dict):
            score = resolve_option_score(
                option, option_state.get("score"), option_where, warnings
            )
        else:
            _warn(warnings, f"{option_where}: malformed criteria treated as 0")
            score = 0.0
        contributions[option.code] = score
        total += score

    return clamp_to_cap(total, group.cap), contributions


def _score_section(
    framework: str,
    section: int,
    criteria: dict,
    warnings: list[str] | None,
) -> float:
    key = section_key(section)
    section_state = criteria.get(key) if isinstance(criteria, dict) else None
    if not isinstance(section_state, dict):
        if section_state is not None:
            _warn(warnings, f"{key}: malformed criteria treated as 0")
        return 0.0

    total = 0.0
    for group in get_section_schema(framework, section):
        group_score, _ = score_group(
            group, section_state.get(group.name), f"{key}.{group.name}", warnings
        )
        total += group_score
    return round_score(_finite_or_zero(total, key, warnings))


def score_section1(framework: str, criteria: dict, warnings: list[str] | None = None) -> float:
    """Section 1: initial assessment of genomic content."""
    return _score_section(framework, 1, criteria, warnings)


def score_section2(framework: str, criteria: dict, warnings: list[str] | None = None) -> float:
    """Section 2: overlap with established or predicted HI/TS genes or regions."""
    return _score_section(framework, 2, criteria, warnings)


def score_section3(framework: str, criteria: dict, warnings: list[str] | None = None) -> float:
    """Section 3: number of protein-coding genes."""
    return _score_section(framework, 3, criteria, warnings)


def score_section4(framework: str, criteria: dict, warnings: list[str] | None = None) -> float:
    """Section 4: case evidence from literature, databases and internal lab data."""
    return _score_section(framework, 4, criteria, warnings)


def score_section5(framework: str, criteria: dict, warnings: list[str] | None = None) -> float:
    """Section 5: inheritance pattern and family history of the patient."""
    return _score_section(framework, 5, criteria, warnings)


SECTION_SCORERS = {
    1: score_section1,
    2: score_section2,
    3: score_section3,
    4: score_section4,
    5: score_section5,
}


def score_breakdown(framework: str, criteria: dict) -> dict[str, dict]:
    """Resolved score of every contributing group and option, per section.

    Used for audit display of how a total was reached.

    Returns:
        ``{"section1": {"genomic_content": {"score": -0.6, "options": {"1B": -0.6}}, ...}, ...}``
    """
    breakdown: dict[str, dict] = {}
    for section in SECTION_SCORERS:
        key = section_key(section)
        section_state = criteria.get(key) if isinstance(criteria, dict) else None
        if not isinstance(section_state, dict):
            section_state = {}
        groups = {}
        for group in get_section_schema(framework, section):
            group_score, contributions = score_group(group, section_state.get(group.name))
            groups[group.name] = {
                "score": round_score(group_score),
                "options": {c: round_score(s) for c, s in contributions.items()},
            }
        breakdown[key] = groups
    return breakdown
