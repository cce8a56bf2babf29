"""Constants and enumerations for the CNV scoring engine.

Centralizes magic strings into named constants for type safety and IDE support.
"""


class CNVType:
    """CNV call types as reported by the caller."""

    DELETION = "Deletion"
    AMPLIFICATION = "Amplification"

    ALL = {DELETION, AMPLIFICATION}


class Framework:
    """ClinGen scoring frameworks."""

    LOSS = "Loss"
    GAIN = "Gain"

    ALL = {LOSS, GAIN}

    BY_CNV_TYPE = {
        CNVType.DELETION: LOSS,
        CNVType.AMPLIFICATION: GAIN,
    }


class Classification:
    """Five-tier ClinGen pathogenicity classification."""

    PATHOGENIC = "Pathogenic"
    LIKELY_PATHOGENIC = "Likely_Pathogenic"
    VUS = "VUS"
    LIKELY_BENIGN = "Likely_Benign"
    BENIGN = "Benign"

    # Most to least pathogenic
    ORDERED = (PATHOGENIC, LIKELY_PATHOGENIC, VUS, LIKELY_BENIGN, BENIGN)
    ALL = set(ORDERED)


class ClassificationThreshold:
    """Total score thresholds for classification."""

    PATHOGENIC = 0.99
    LIKELY_PATHOGENIC = 0.90
    LIKELY_BENIGN = -0.90
    BENIGN = -0.99


class GroupKind:
    """How a criteria group within a section is scored."""

    SINGLE_SELECT = "single_select"
    COUNTERS = "counters"
    GENE_COUNT = "gene_count"

    ALL = {SINGLE_SELECT, COUNTERS, GENE_COUNT}


class OutOfRangePolicy:
    """Handling of reviewer-adjusted scores outside an option's range."""

    CLAMP = "clamp"
    REJECT = "reject"

    ALL = {CLAMP, REJECT}


class AuditEventType:
    """Audit trail event types for assessments."""

    CREATED = "assessment_created"
    SAVED = "assessment_saved"
    RESET = "assessment_reset"
    LOADED = "assessment_loaded"
    DELETED = "assessment_deleted"

    ALL = {CREATED, SAVED, RESET, LOADED, DELETED}


SECTIONS = (1, 2, 3, 4, 5)

# Section and total scores are rounded to this many decimal places
SCORE_PRECISION = 10
FLOAT_TOLERANCE = 1e-9
