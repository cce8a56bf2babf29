"""Configuration validation for scoring.yaml.

This module provides validators to ensure the scoring configuration has
required fields, valid values, and proper structure before use.
"""

from constants import OutOfRangePolicy

from .base import ValidationError

VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def validate_out_of_range_policy(policy: str) -> None:
    """Validate the out-of-range policy is 'clamp' or 'reject'.

    Args:
        policy: Policy string

    Raises:
        ValidationError: If policy is not valid
    """
    if policy not in OutOfRangePolicy.ALL:
        raise ValidationError(
            f"Invalid out_of_range_policy '{policy}'. "
            f"Valid options are: {sorted(OutOfRangePolicy.ALL)}"
        )


def validate_scoring_config(scoring: dict) -> None:
    """Validate the scoring configuration block.

    Args:
        scoring: Scoring configuration dictionary

    Raises:
        ValidationError: If scoring config is invalid
    """
    if not isinstance(scoring, dict):
        raise ValidationError(
            f"Config field 'scoring' must be a dictionary, "
            f"got: {type(scoring).__name__}"
        )
    if "out_of_range_policy" in scoring:
        validate_out_of_range_policy(scoring["out_of_range_policy"])


def validate_logging_config(logging_config: dict) -> None:
    """Validate the logging configuration block.

    Args:
        logging_config: Logging configuration dictionary

    Raises:
        ValidationError: If logging config is invalid
    """
    if not isinstance(logging_config, dict):
        raise ValidationError(
            f"Config field 'logging' must be a dictionary, "
            f"got: {type(logging_config).__name__}"
        )

    level = logging_config.get("level", "INFO")
    if not isinstance(level, str) or level.upper() not in VALID_LOG_LEVELS:
        raise ValidationError(
            f"Invalid logging level '{level}'. "
            f"Valid options are: {sorted(VALID_LOG_LEVELS)}"
        )

    log_file = logging_config.get("file")
    if log_file is not None and (not isinstance(log_file, str) or not log_file):
        raise ValidationError(
            f"Config field 'logging.file' must be a non-empty string or null, "
            f"got: {log_file}"
        )


def validate_config(config: dict) -> None:
    """Comprehensive configuration validation.

    Validates:
    - Required fields are present
    - Database URL is a non-empty string (or null to disable persistence)
    - Scoring and logging blocks have valid values

    Args:
        config: Configuration dictionary from scoring.yaml

    Raises:
        ValidationError: If configuration is invalid

    Example:
        >>> validate_config({
        ...     "database": "sqlite:///data/assessments.db",
        ...     "scoring": {"out_of_range_policy": "clamp"},
        ...     "logging": {"level": "INFO", "file": None},
        ... })
    """
    if not isinstance(config, dict):
        raise ValidationError(
            f"Config must be a dictionary, got: {type(config).__name__}"
        )

    required_fields = {"database", "scoring", "logging"}
    missing = required_fields - set(config.keys())
    if missing:
        raise ValidationError(
            f"Config missing required fields: {sorted(missing)}"
        )

    database = config["database"]
    if database is not None and (not isinstance(database, str) or not database):
        raise ValidationError(
            f"Config field 'database' must be a non-empty string or null, "
            f"got: {database}"
        )

    validate_scoring_config(config["scoring"])
    validate_logging_config(config["logging"])
