"""Configuration loading and logging setup for the scoring engine."""

from __future__ import annotations

import copy
import logging
from pathlib import Path

import yaml

from validators import ValidationError, validate_config, validate_file_exists

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent.parent / "config" / "scoring.yaml"

DEFAULT_CONFIG = {
    "database": None,
    "scoring": {"out_of_range_policy": "clamp"},
    "logging": {"level": "INFO", "file": None},
}

LOG_FORMAT = "%(asctime)s %(levelname)s %(message)s"


def _merge(defaults: dict, overrides: dict) -> dict:
    merged = copy.deepcopy(defaults)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(config_path: str | Path | None = None) -> dict:
    """Load configuration from YAML, merged over the defaults and validated.

    Args:
        config_path: Path to scoring.yaml (DEFAULT_CONFIG_PATH for the shipped
            one); None returns the built-in defaults

    Returns:
        Configuration dictionary

    Raises:
        ValidationError: If the file is missing, unparsable or invalid
    """
    if config_path is None:
        return copy.deepcopy(DEFAULT_CONFIG)

    path = validate_file_exists(config_path, "Configuration file")

    try:
        with open(path) as f:
            loaded = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValidationError(f"Failed to parse configuration file {path}: {e}") from e

    if loaded is None:
        loaded = {}
    if not isinstance(loaded, dict):
        raise ValidationError(
            f"Configuration file {path} does not contain a valid YAML dictionary"
        )

    config = _merge(DEFAULT_CONFIG, loaded)
    validate_config(config)
    return config


def configure_logging(config: dict) -> None:
    """Configure root logging from the ``logging`` block of a loaded config."""
    logging_config = config.get("logging") or {}
    level = getattr(logging, str(logging_config.get("level", "INFO")).upper())
    kwargs = {"level": level, "format": LOG_FORMAT}
    if logging_config.get("file"):
        kwargs["filename"] = logging_config["file"]
    logging.basicConfig(**kwargs)
