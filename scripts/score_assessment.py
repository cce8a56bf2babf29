"""Score a CNV call's criteria from the command line.

Reads a criteria JSON file, scores it with the framework for the CNV type,
optionally saves the assessment to the configured database, and prints a JSON
summary with the section breakdown.

Usage:
    python scripts/score_assessment.py criteria.json --cnv-id cnv-1 --cnv-type Deletion
    python scripts/score_assessment.py criteria.json --cnv-id cnv-1 --cnv-type Amplification \\
        --config config/scoring.yaml --save --reviewer jdoe
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

# Add scripts directory to path
SCRIPTS_DIR = str(Path(__file__).resolve().parent)
if SCRIPTS_DIR not in sys.path:
    sys.path.insert(0, SCRIPTS_DIR)

PROJECT_ROOT = str(Path(__file__).resolve().parent.parent)
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from constants import CNVType, OutOfRangePolicy  # noqa: E402
from scoring.criteria_schema import (  # noqa: E402
    default_criteria,
    framework_for_cnv_type,
)
from scoring.presentation import (  # noqa: E402
    format_score,
    get_classification_label,
)
from scoring.section_scorers import score_breakdown  # noqa: E402
from settings import DEFAULT_CONFIG_PATH, configure_logging, load_config  # noqa: E402
from validators import (  # noqa: E402
    ValidationError,
    validate_criteria,
    validate_file_exists,
    validate_schema,
)

log = logging.getLogger(__name__)


def read_criteria(path: str | Path, framework: str) -> dict:
    """Read a criteria JSON file, filling groups it leaves out with defaults.

    Raises:
        ValidationError: If the file is missing or not a JSON object
    """
    path = validate_file_exists(path, "Criteria file")
    try:
        with open(path) as f:
            supplied = json.load(f)
    except json.JSONDecodeError as e:
        raise ValidationError(f"Failed to parse criteria file {path}: {e}") from e
    if not isinstance(supplied, dict):
        raise ValidationError(f"Criteria file {path} does not contain a JSON object")

    criteria = default_criteria(framework)
    for section_key, groups in supplied.items():
        if section_key in criteria and isinstance(groups, dict):
            criteria[section_key].update(groups)
        else:
            criteria[section_key] = groups
    return criteria


def _open_store(database: str):
    from sqlalchemy import create_engine
    from sqlalchemy.orm import sessionmaker

    from models.base import Base

    from assessment.store import AssessmentStore

    if database.startswith("sqlite:///") and database != "sqlite:///:memory:":
        Path(database[len("sqlite:///"):]).parent.mkdir(parents=True, exist_ok=True)
    engine = create_engine(database)
    Base.metadata.create_all(engine)
    Session = sessionmaker(bind=engine)
    return AssessmentStore(Session())


def score_assessment(
    criteria_path: str | Path,
    cnv_id: str,
    cnv_type: str,
    config: dict,
    save: bool = False,
    reviewer: str | None = None,
    strict: bool = False,
) -> dict:
    """Score a criteria file and optionally save the assessment.

    Args:
        criteria_path: Path to the criteria JSON file
        cnv_id: CNV call identifier
        cnv_type: "Deletion" or "Amplification"
        config: Loaded configuration; ``scoring.out_of_range_policy`` decides
            whether out-of-range scores in the file are clamped or rejected
        save: Persist the assessment to ``config["database"]``
        reviewer: Reviewer recorded as creator and saver
        strict: Reject criteria with any scoring warning instead of scoring

    Returns:
        Summary dict with the score result and per-group breakdown

    Raises:
        ValidationError: Invalid input, a rejected score, or warnings under
            ``strict``
    """
    from assessment.manager import AssessmentManager
    from assessment.records import CNVCall

    if cnv_type not in CNVType.ALL:
        raise ValidationError(
            f"Invalid cnv_type '{cnv_type}'. Valid options are: {sorted(CNVType.ALL)}"
        )
    framework = framework_for_cnv_type(cnv_type)
    criteria = read_criteria(criteria_path, framework)
    if strict:
        validate_criteria(framework, criteria)

    store = None
    if save:
        if not config.get("database"):
            raise ValidationError("Cannot save: no database configured")
        store = _open_store(config["database"])

    try:
        policy = (config.get("scoring") or {}).get(
            "out_of_range_policy", OutOfRangePolicy.CLAMP
        )
        manager = AssessmentManager(store=store, reviewer=reviewer, policy=policy)
        manager.open(CNVCall(id=cnv_id, type=cnv_type), restore=False)
        assessment = manager.update_criteria(cnv_id, criteria)
        if save:
            assessment = manager.save(cnv_id, updated_by=reviewer)
    finally:
        if store is not None:
            store.session.close()

    summary = {
        "assessment_id": assessment.id,
        "cnv_id": assessment.cnv_id,
        "cnv_type": assessment.cnv_type,
        "framework": framework,
        **assessment.score_result.to_dict(),
        "label": get_classification_label(assessment.classification),
        "breakdown": score_breakdown(framework, assessment.criteria),
        "saved": save,
    }
    log.info(
        "CNV %s scored %s (%s)",
        cnv_id,
        format_score(assessment.total_score),
        summary["label"],
    )
    return summary


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Score ClinGen CNV criteria for a CNV call"
    )
    parser.add_argument("criteria", help="Criteria JSON file")
    parser.add_argument("--cnv-id", required=True, help="CNV call identifier")
    parser.add_argument(
        "--cnv-type",
        required=True,
        choices=sorted(CNVType.ALL),
        help="CNV call type",
    )
    parser.add_argument(
        "--config",
        default=str(DEFAULT_CONFIG_PATH),
        help="Path to scoring.yaml (default: %(default)s)",
    )
    parser.add_argument(
        "--save", action="store_true", help="Save the assessment to the configured database"
    )
    parser.add_argument("--reviewer", default=None, help="Reviewer identity for the audit trail")
    parser.add_argument(
        "--strict", action="store_true", help="Fail on any criteria warning"
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args.config)
    except ValidationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1
    configure_logging(config)

    try:
        validate_schema()
        summary = score_assessment(
            args.criteria,
            cnv_id=args.cnv_id,
            cnv_type=args.cnv_type,
            config=config,
            save=args.save,
            reviewer=args.reviewer,
            strict=args.strict,
        )
    except ValidationError as e:
        log.error("Scoring failed: %s", e)
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(json.dumps(summary, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
