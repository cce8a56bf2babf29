"""Base validation utilities.

This module provides core validation functions used by the criteria and
configuration validators, so invalid input fails with a clear message
instead of silently producing a wrong score.
"""

import math
from pathlib import Path


class ValidationError(Exception):
    """Custom exception for data validation failures."""

    pass


def validate_file_exists(file_path: str | Path, file_description: str) -> Path:
    """Validate that a file exists and is readable.

    Args:
        file_path: Path to file
        file_description: Description of file for error messages

    Returns:
        Resolved Path object

    Raises:
        ValidationError: If file doesn't exist or isn't readable
    """
    path = Path(file_path)
    if not path.exists():
        raise ValidationError(f"{file_description} not found: {path}")
    if not path.is_file():
        raise ValidationError(f"{file_description} is not a file: {path}")
    return path


def validate_required_keys(data: dict, required: list[str], name: str) -> None:
    """Validate that a mapping has all required keys with non-empty values.

    Args:
        data: Mapping to validate
        required: List of required key names
        name: Name of the structure being validated (for error messages)

    Raises:
        ValidationError: If data is not a dict or required keys are missing
    """
    if not isinstance(data, dict):
        raise ValidationError(
            f"{name} must be a dictionary, got: {type(data).__name__}"
        )
    missing = [key for key in required if data.get(key) in (None, "")]
    if missing:
        raise ValidationError(f"{name} missing required fields: {sorted(missing)}")


def validate_enum_value(value, valid_values: set[str], field_name: str) -> None:
    """Validate that a value is one of a closed set.

    Raises:
        ValidationError: If the value is not a string in valid_values
    """
    if not isinstance(value, str) or value not in valid_values:
        raise ValidationError(
            f"Invalid {field_name} {value!r}. "
            f"Valid options are: {sorted(valid_values)}"
        )


def validate_finite_number(value, field_name: str) -> float:
    """Validate that a value is a finite real number.

    Returns:
        The value as float

    Raises:
        ValidationError: If value is not numeric, NaN or infinite
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(
            f"{field_name} must be a number, got: {type(value).__name__}"
        )
    if not math.isfinite(value):
        raise ValidationError(f"{field_name} must be finite, got: {value}")
    return float(value)


def validate_non_negative_int(value, field_name: str) -> int:
    """Validate that a value is a non-negative integer count.

    Raises:
        ValidationError: If value is not an int or is negative
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(
            f"{field_name} must be an integer, got: {type(value).__name__}"
        )
    if value < 0:
        raise ValidationError(f"{field_name} must be non-negative, got: {value}")
    return value
