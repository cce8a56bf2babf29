"""Validation utilities for the CNV scoring engine.

This package provides the strict validators that sit beside the lenient
scoring path: schema invariants, reviewer-adjusted scores, whole criteria
snapshots, and the YAML configuration.

Modules:
    base: Core validators (required keys, enums, finite numbers, counts)
    criteria: Schema invariants and criteria snapshot validation
    config: Configuration structure validation

Example:
    >>> from validators import ValidationError, validate_criteria
    >>> try:
    ...     validate_criteria("Loss", criteria)
    ... except ValidationError as e:
    ...     print(f"Validation failed: {e}")
"""

from .base import (
    ValidationError,
    validate_file_exists,
    validate_required_keys,
    validate_enum_value,
    validate_finite_number,
    validate_non_negative_int,
)

from .criteria import (
    validate_schema,
    validate_option_score,
    validate_criteria,
)

from .config import (
    validate_out_of_range_policy,
    validate_scoring_config,
    validate_logging_config,
    validate_config,
)

__all__ = [
    # Exception
    "ValidationError",
    # Base validators
    "validate_file_exists",
    "validate_required_keys",
    "validate_enum_value",
    "validate_finite_number",
    "validate_non_negative_int",
    # Criteria validators
    "validate_schema",
    "validate_option_score",
    "validate_criteria",
    # Config validators
    "validate_out_of_range_policy",
    "validate_scoring_config",
    "validate_logging_config",
    "validate_config",
]
