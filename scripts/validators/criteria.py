"""Validation of the criteria schema and of reviewer-supplied criteria.

Scoring itself never raises on bad criteria; these validators are the strict
counterpart used by the schema tests, the command-line entry point and the
``reject`` out-of-range policy.
"""

from constants import SECTIONS, Framework
from scoring.criteria_schema import (
    GENE_COUNT_BUCKETS,
    CriteriaOption,
    iter_options,
    section_key,
)
from scoring.section_scorers import SECTION_SCORERS

from .base import ValidationError, validate_enum_value, validate_finite_number


def _same_direction(a: float, b: float) -> bool:
    return a * b >= 0


def _check_option(option: CriteriaOption, where: str) -> list[str]:
    problems = []
    rng = option.score_range
    if rng is not None:
        if rng.min > rng.max:
            problems.append(f"{where}: range min {rng.min} exceeds max {rng.max}")
        elif not rng.min <= option.default_score <= rng.max:
            problems.append(
                f"{where}: default score {option.default_score} outside "
                f"[{rng.min}, {rng.max}]"
            )
    if option.cap is not None:
        for counter in option.counters:
            if not _same_direction(counter.weight, option.cap):
                problems.append(
                    f"{where}: cap {option.cap} and {counter.field} weight "
                    f"{counter.weight} differ in sign"
                )
    if option.is_counter and option.is_adjustable:
        problems.append(f"{where}: option cannot be both counted and adjustable")
    return problems


def _check_gene_count_buckets() -> list[str]:
    problems = []
    expected_min = 0
    for i, bucket in enumerate(GENE_COUNT_BUCKETS):
        if bucket.min_count != expected_min:
            problems.append(
                f"gene count bucket {bucket.code} starts at {bucket.min_count}, "
                f"expected {expected_min}"
            )
        if bucket.max_count is None:
            if i != len(GENE_COUNT_BUCKETS) - 1:
                problems.append("only the last gene count bucket may be open-ended")
            break
        if bucket.max_count < bucket.min_count:
            problems.append(f"gene count bucket {bucket.code} is empty")
        expected_min = bucket.max_count + 1
    else:
        problems.append("last gene count bucket must be open-ended")
    return problems


def validate_schema() -> None:
    """Check the schema invariants for both frameworks.

    - every adjustable option satisfies ``min <= default <= max``
    - option codes are unique within a section
    - caps point in the same direction as their per-occurrence weights
    - gene-count buckets are contiguous from 0 and end open-ended

    Raises:
        ValidationError: Listing every violated invariant
    """
    problems: list[str] = []
    for framework in sorted(Framework.ALL):
        seen: set[tuple[int, str]] = set()
        for section, group, option in iter_options(framework):
            where = f"{framework} {section_key(section)}.{group.name}.{option.code}"
            if (section, option.code) in seen:
                problems.append(f"{where}: duplicate option code")
            seen.add((section, option.code))
            problems.extend(_check_option(option, where))
            if group.cap is not None:
                for counter in option.counters:
                    if not _same_direction(counter.weight, group.cap):
                        problems.append(
                            f"{where}: group cap {group.cap} opposes {counter.field} weight"
                        )
    problems.extend(_check_gene_count_buckets())

    if problems:
        listing = "\n".join(f"  {i + 1}. {p}" for i, p in enumerate(problems))
        raise ValidationError(
            f"Criteria schema failed validation with {len(problems)} problem(s):\n{listing}"
        )


def validate_option_score(option: CriteriaOption, score) -> float:
    """Validate a reviewer-adjusted score for an option.

    Returns:
        The validated score as float

    Raises:
        ValidationError: If the score is not finite, outside the option range,
            or differs from the fixed score of a non-adjustable option
    """
    value = validate_finite_number(score, f"{option.code} score")
    if option.score_range is None:
        if abs(value - option.default_score) > 1e-9:
            raise ValidationError(
                f"{option.code} has a fixed score of {option.default_score:.2f}, "
                f"got: {value:.2f}"
            )
        return value
    if not option.score_range.contains(value):
        raise ValidationError(
            f"{option.code} score {value:.2f} outside "
            f"[{option.score_range.min:.2f}, {option.score_range.max:.2f}]"
        )
    return value


def validate_criteria(framework: str, criteria: dict) -> None:
    """Strictly validate a criteria snapshot.

    Runs every section scorer and fails if any of them reported a warning
    (unknown code, out-of-range score, invalid count).

    Raises:
        ValidationError: Listing every problem found
    """
    validate_enum_value(framework, Framework.ALL, "framework")
    if not isinstance(criteria, dict):
        raise ValidationError(
            f"Criteria must be a dictionary, got: {type(criteria).__name__}"
        )

    problems = [
        f"{section_key(s)}: missing section" for s in SECTIONS if section_key(s) not in criteria
    ]
    for scorer in SECTION_SCORERS.values():
        scorer(framework, criteria, problems)

    if problems:
        listing = "\n".join(f"  {i + 1}. {p}" for i, p in enumerate(problems))
        raise ValidationError(
            f"Criteria failed validation with {len(problems)} problem(s):\n{listing}"
        )
