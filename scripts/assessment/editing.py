"""Criteria edit helpers.

Each helper applies one reviewer action to a criteria snapshot and returns a
new snapshot, ready to pass whole to ``update_criteria``. Scores are checked
at the point of assignment: with the ``clamp`` policy an out-of-range score is
clamped into the option's range, with ``reject`` it raises ValidationError.
"""

from __future__ import annotations

import copy

from constants import SECTIONS, GroupKind, OutOfRangePolicy
from scoring.criteria_schema import (
    SECTION5_EXCLUSIVE_GROUPS,
    CriteriaGroup,
    CriteriaOption,
    get_group,
    get_section_schema,
    section_key,
)
from scoring.section_scorers import resolve_option_score
from validators import (
    ValidationError,
    validate_finite_number,
    validate_non_negative_int,
    validate_option_score,
    validate_out_of_range_policy,
)


def _require_group(framework: str, section: int, group_name: str, kind: str) -> CriteriaGroup:
    group = get_group(framework, section, group_name)
    if group is None:
        raise ValidationError(
            f"Unknown group '{group_name}' in {framework} {section_key(section)}"
        )
    if group.kind != kind:
        raise ValidationError(
            f"Group '{group_name}' in {section_key(section)} is {group.kind}, not {kind}"
        )
    return group


def _require_option(group: CriteriaGroup, code: str, section: int) -> CriteriaOption:
    option = group.find(code)
    if option is None:
        raise ValidationError(
            f"Unknown option '{code}' in {section_key(section)}.{group.name}. "
            f"Valid options are: {[o.code for o in group.options]}"
        )
    return option


def _checked_score(option: CriteriaOption, score, policy: str) -> float:
    validate_out_of_range_policy(policy)
    if score is None:
        return option.default_score
    if policy == OutOfRangePolicy.REJECT:
        return validate_option_score(option, score)
    validate_finite_number(score, f"{option.code} score")
    return resolve_option_score(option, score)


def _section_state(criteria: dict, section: int) -> dict:
    key = section_key(section)
    state = criteria.get(key)
    if not isinstance(state, dict):
        state = {}
        criteria[key] = state
    return state


def select_option(
    criteria: dict,
    framework: str,
    section: int,
    group_name: str,
    code: str,
    score: float | None = None,
    policy: str = OutOfRangePolicy.CLAMP,
) -> dict:
    """Select an option in a single-select group.

    Selecting a Section 5 de novo, inherited or other option clears the
    other two of those groups.

    Args:
        criteria: Current criteria snapshot (not modified)
        framework: Framework.LOSS or Framework.GAIN
        section: Section number
        group_name: Group within the section, e.g. "hi_overlap"
        code: Option code, e.g. "2C-1"
        score: Reviewer-adjusted score; None uses the option default
        policy: OutOfRangePolicy.CLAMP or OutOfRangePolicy.REJECT

    Returns:
        New criteria snapshot

    Raises:
        ValidationError: Unknown group or code, non-finite score, or an
            out-of-range score under the reject policy
    """
    group = _require_group(framework, section, group_name, GroupKind.SINGLE_SELECT)
    option = _require_option(group, code, section)
    resolved = _checked_score(option, score, policy)

    updated = copy.deepcopy(criteria)
    state = _section_state(updated, section)
    state[group_name] = {"selected": code, "score": resolved}

    if section == 5 and group_name in SECTION5_EXCLUSIVE_GROUPS:
        for other in SECTION5_EXCLUSIVE_GROUPS:
            if other != group_name:
                state[other] = {"selected": None, "score": None}
    return updated


def clear_selection(criteria: dict, framework: str, section: int, group_name: str) -> dict:
    """Deselect whatever is selected in a single-select group."""
    _require_group(framework, section, group_name, GroupKind.SINGLE_SELECT)
    updated = copy.deepcopy(criteria)
    _section_state(updated, section)[group_name] = {"selected": None, "score": None}
    return updated


def _find_counter_group(framework: str, code: str) -> tuple[CriteriaGroup, CriteriaOption]:
    for group in get_section_schema(framework, 4):
        option = group.find(code)
        if option is not None:
            return group, option
    raise ValidationError(f"Unknown section4 option '{code}'")


def set_counter(
    criteria: dict,
    framework: str,
    code: str,
    count: int,
    field: str | None = None,
) -> dict:
    """Set a Section 4 per-occurrence count.

    Args:
        criteria: Current criteria snapshot (not modified)
        framework: Framework.LOSS or Framework.GAIN
        code: Counter option code, e.g. "4I"
        count: Non-negative number of occurrences
        field: Counter field for options with two sub-counts
            ("confirmed_count" or "assumed_count"); defaults to the first

    Returns:
        New criteria snapshot
    """
    group, option = _find_counter_group(framework, code)
    if not option.is_counter:
        raise ValidationError(f"{code} is not a counted option")
    fields = [c.field for c in option.counters]
    field = field or fields[0]
    if field not in fields:
        raise ValidationError(f"{code} has no counter '{field}'. Valid counters are: {fields}")
    validate_non_negative_int(count, f"{code} {field}")

    updated = copy.deepcopy(criteria)
    state = _section_state(updated, 4)
    group_state = state.setdefault(group.name, {})
    option_state = group_state.setdefault(code, {f: 0 for f in fields})
    option_state[field] = count
    return updated


def set_option_score(
    criteria: dict,
    framework: str,
    code: str,
    score: float | None,
    policy: str = OutOfRangePolicy.CLAMP,
) -> dict:
    """Set the score of an adjustable Section 4 option such as 4D or 4L.

    ``None`` restores the option default.
    """
    group, option = _find_counter_group(framework, code)
    if option.is_counter:
        raise ValidationError(f"{code} is a counted option; use set_counter")
    resolved = None if score is None else _checked_score(option, score, policy)

    updated = copy.deepcopy(criteria)
    state = _section_state(updated, 4)
    group_state = state.setdefault(group.name, {})
    option_state = group_state.setdefault(code, {})
    option_state["score"] = resolved
    return updated


def set_gene_count(criteria: dict, framework: str, gene_count: int) -> dict:
    """Set the Section 3 number of protein-coding genes."""
    (group,) = get_section_schema(framework, 3)
    validate_non_negative_int(gene_count, "gene_count")
    updated = copy.deepcopy(criteria)
    _section_state(updated, 3)[group.name] = {"gene_count": gene_count}
    return updated


def _supplied_scores(criteria: dict, framework: str):
    if not isinstance(criteria, dict):
        return
    for section in SECTIONS:
        state = criteria.get(section_key(section))
        if not isinstance(state, dict):
            continue
        for group in get_section_schema(framework, section):
            group_state = state.get(group.name)
            if not isinstance(group_state, dict):
                continue
            if group.kind == GroupKind.SINGLE_SELECT:
                option = group.find(group_state.get("selected"))
                if option is not None and group_state.get("score") is not None:
                    yield option, group_state["score"]
            elif group.kind == GroupKind.COUNTERS:
                for option in group.options:
                    option_state = group_state.get(option.code)
                    if (
                        not option.is_counter
                        and isinstance(option_state, dict)
                        and option_state.get("score") is not None
                    ):
                        yield option, option_state["score"]


def enforce_score_policy(criteria: dict, framework: str, policy: str) -> None:
    """Check every reviewer-supplied score in a whole criteria snapshot.

    Under ``clamp`` this only validates the policy name; the scorers clamp
    and warn. Under ``reject`` any supplied score outside its option's range
    raises.

    Raises:
        ValidationError: Unknown policy, or a rejected score
    """
    validate_out_of_range_policy(policy)
    if policy != OutOfRangePolicy.REJECT:
        return
    problems = []
    for option, score in _supplied_scores(criteria, framework):
        try:
            validate_option_score(option, score)
        except ValidationError as e:
            problems.append(str(e))
    if problems:
        listing = "\n".join(f"  {i + 1}. {p}" for i, p in enumerate(problems))
        raise ValidationError(
            f"Criteria rejected with {len(problems)} out-of-range score(s):\n{listing}"
        )
