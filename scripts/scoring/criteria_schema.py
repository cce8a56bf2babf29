"""ClinGen CNV criteria schema for the Loss and Gain frameworks.

Single source of truth for every scorable evidence option. Sections 1 and 2
differ between Loss (deletion) and Gain (duplication); sections 3, 4 and 5
are shared by both frameworks and live in one table keyed only by section.

References:
    https://cnvcalc.clinicalgenome.org/cnvcalc/cnv-loss
    https://cnvcalc.clinicalgenome.org/cnvcalc/cnv-gain
"""

from __future__ import annotations

from dataclasses import dataclass

from constants import SECTIONS, Framework, GroupKind


@dataclass(frozen=True)
class ScoreRange:
    """Closed interval a reviewer may move an option's score within."""

    min: float
    max: float

    def contains(self, score: float) -> bool:
        return self.min <= score <= self.max

    def clamp(self, score: float) -> float:
        return min(max(score, self.min), self.max)


@dataclass(frozen=True)
class CounterWeight:
    """Fixed score contributed by each occurrence counted in ``field``."""

    field: str
    weight: float


@dataclass(frozen=True)
class CriteriaOption:
    """A single selectable or countable evidence item."""

    code: str
    description: str
    default_score: float = 0.0
    score_range: ScoreRange | None = None
    counters: tuple[CounterWeight, ...] = ()
    cap: float | None = None

    @property
    def is_adjustable(self) -> bool:
        return self.score_range is not None

    @property
    def is_counter(self) -> bool:
        return bool(self.counters)

    @property
    def per_occurrence_weight(self) -> float | None:
        return self.counters[0].weight if self.counters else None


@dataclass(frozen=True)
class GeneCountBucket:
    """Inclusive gene-count interval; ``max_count=None`` is open-ended."""

    code: str
    min_count: int
    max_count: int | None
    score: float

    def matches(self, count: int) -> bool:
        if count < self.min_count:
            return False
        return self.max_count is None or count <= self.max_count


@dataclass(frozen=True)
class CriteriaGroup:
    """Ordered options scored together within a section.

    ``cap`` bounds the summed group score in magnitude (sign-aware).
    """

    name: str
    kind: str
    options: tuple[CriteriaOption, ...] = ()
    cap: float | None = None

    def find(self, code: str) -> CriteriaOption | None:
        for option in self.options:
            if option.code == code:
                return option
        return None


@dataclass(frozen=True)
class FrameworkSchema:
    """Framework-specific sections; shared sections are referenced, not copied."""

    framework: str
    section1: tuple[CriteriaGroup, ...]
    section2: tuple[CriteriaGroup, ...]


def _fixed(code: str, description: str, score: float) -> CriteriaOption:
    return CriteriaOption(code, description, default_score=score)


def _adjustable(
    code: str, description: str, score: float, low: float, high: float
) -> CriteriaOption:
    return CriteriaOption(
        code, description, default_score=score, score_range=ScoreRange(low, high)
    )


def _counted(
    code: str,
    description: str,
    weights: dict[str, float],
    cap: float | None = None,
) -> CriteriaOption:
    return CriteriaOption(
        code,
        description,
        counters=tuple(CounterWeight(f, w) for f, w in weights.items()),
        cap=cap,
    )


# ===== Section 1: initial assessment of genomic content =====

SECTION1_GROUPS = (
    CriteriaGroup(
        "genomic_content",
        GroupKind.SINGLE_SELECT,
        (
            _fixed("1A", "Contains protein-coding or other known functionally important elements", 0.0),
            _fixed("1B", "Does NOT contain protein-coding or any known functionally important elements", -0.60),
        ),
    ),
)

# ===== Section 2: overlap with established or predicted HI/TS genes or regions =====

SECTION2_LOSS_GROUPS = (
    CriteriaGroup(
        "hi_overlap",
        GroupKind.SINGLE_SELECT,
        (
            _fixed("2A", "Complete overlap of an established HI gene/genomic region", 1.00),
            _fixed("2B", "Partial overlap of an established HI genomic region", 0.0),
            _adjustable("2C-1", "Partial overlap with the 5' end of an established HI gene, coding sequence involved", 0.90, 0.45, 1.00),
            _adjustable("2C-2", "Partial overlap with the 5' end of an established HI gene, only the 5' UTR involved", 0.0, 0.0, 0.45),
            _fixed("2D-1", "Partial overlap with the 3' end of an established HI gene, only the 3' UTR involved", 0.0),
            _adjustable("2D-2", "Only the last exon involved, other established pathogenic variants reported in that exon", 0.90, 0.45, 0.90),
            _adjustable("2D-3", "Only the last exon involved, no other established pathogenic variants in that exon", 0.30, 0.0, 0.45),
            _adjustable("2D-4", "Includes exons other than the last exon, nonsense-mediated decay expected", 0.90, 0.45, 1.00),
            _adjustable("2E", "Both breakpoints within the same gene (gene-level sequence variant, see PVS1)", 0.0, 0.0, 0.90),
        ),
    ),
    CriteriaGroup(
        "benign_overlap",
        GroupKind.SINGLE_SELECT,
        (
            _fixed("2F", "Completely contained within an established benign CNV region", -1.00),
            _fixed("2G", "Overlaps an established benign CNV but includes additional genomic material", 0.0),
        ),
    ),
    CriteriaGroup(
        "hi_predictor",
        GroupKind.SINGLE_SELECT,
        (
            _fixed("2H", "Multiple HI predictors suggest at least one gene in the interval is haploinsufficient", 0.15),
        ),
    ),
)

SECTION2_GAIN_GROUPS = (
    CriteriaGroup(
        "ts_overlap",
        GroupKind.SINGLE_SELECT,
        (
            _fixed("2A", "Complete overlap of an established TS gene/genomic region", 1.00),
            _fixed("2B", "Partial overlap of an established TS genomic region", 0.0),
        ),
    ),
    CriteriaGroup(
        "benign_overlap",
        GroupKind.SINGLE_SELECT,
        (
            _fixed("2C", "Identical in gene content to an established benign copy-number gain", -1.00),
            _fixed("2D", "Smaller than an established benign gain, breakpoints do not interrupt protein-coding genes", -1.00),
            _fixed("2E", "Smaller than an established benign gain, breakpoints potentially interrupt a protein-coding gene", 0.0),
            _adjustable("2F", "Larger than an established benign gain, no additional protein-coding genes", -0.90, -1.00, 0.0),
            _fixed("2G", "Overlaps a benign gain but includes additional genomic material", 0.0),
        ),
    ),
    CriteriaGroup(
        "hi_overlap",
        GroupKind.SINGLE_SELECT,
        (
            _fixed("2H", "HI gene fully contained within the observed copy-number gain", 0.0),
            _adjustable("2I", "Both breakpoints within the same gene (gene-level sequence variant, possibly LOF)", 0.0, 0.0, 0.90),
            _fixed("2J", "One breakpoint within an established HI gene, phenotype inconsistent or unknown", 0.0),
            _fixed("2K", "One breakpoint within an established HI gene, highly specific consistent phenotype", 0.45),
            _fixed("2L", "One or both breakpoints within gene(s) of no established clinical significance", 0.0),
        ),
    ),
)

# ===== Section 3: number of protein-coding RefSeq genes =====

GENE_COUNT_BUCKETS = (
    GeneCountBucket("3A", 0, 0, 0.0),
    GeneCountBucket("3A", 1, 24, 0.0),
    GeneCountBucket("3B", 25, 34, 0.45),
    GeneCountBucket("3C", 35, None, 0.90),
)

SECTION3_GROUPS = (CriteriaGroup("refseq_genes", GroupKind.GENE_COUNT),)

# ===== Section 4: detailed evaluation of genomic content (literature, databases) =====

CONFIRMED = "confirmed_count"
ASSUMED = "assumed_count"

SECTION4_GROUPS = (
    CriteriaGroup(
        "de_novo",
        GroupKind.COUNTERS,
        (
            _counted("4A", "De novo, highly specific and relatively unique phenotype", {CONFIRMED: 0.45, ASSUMED: 0.30}),
            _counted("4B", "De novo, highly specific but not unique phenotype", {CONFIRMED: 0.30, ASSUMED: 0.15}),
            _counted("4C", "De novo, consistent but not highly specific phenotype", {CONFIRMED: 0.15, ASSUMED: 0.10}),
            _adjustable("4D", "Inconsistent phenotype", 0.0, -0.30, 0.0),
        ),
        cap=0.90,
    ),
    CriteriaGroup(
        "unknown_inheritance",
        GroupKind.COUNTERS,
        (
            _counted("4E", "Inheritance unknown, highly specific phenotype", {"count": 0.10}, cap=0.30),
        ),
    ),
    CriteriaGroup(
        "segregation",
        GroupKind.COUNTERS,
        (
            _counted("4F", "Segregation with 3+ affected family members (LOD >= 2)", {"count": 0.45}),
            _counted("4G", "Segregation with 2 affected family members", {"count": 0.30}),
            _counted("4H", "Segregation with 1 affected family member", {"count": 0.15}),
        ),
        cap=0.45,
    ),
    CriteriaGroup(
        "non_segregation",
        GroupKind.COUNTERS,
        (
            _counted("4I", "Not found in affected relatives", {"family_count": -0.45}, cap=-0.90),
            _counted("4J", "Found in unaffected relatives, specific phenotype", {"family_count": -0.30}, cap=-0.90),
            _counted("4K", "Found in unaffected relatives, non-specific phenotype", {"family_count": -0.15}, cap=-0.30),
        ),
    ),
    CriteriaGroup(
        "case_control",
        GroupKind.COUNTERS,
        (
            _adjustable("4L", "Statistically significant increase among cases, specific phenotype", 0.0, 0.0, 0.45),
            _adjustable("4M", "Statistically significant increase among cases, non-specific phenotype", 0.0, 0.0, 0.45),
            _adjustable("4N", "No statistically significant difference between cases and controls", 0.0, -0.90, 0.0),
            _adjustable("4O", "Overlap with common population variation", 0.0, -1.00, 0.0),
        ),
    ),
)

# ===== Section 5: evaluation of inheritance pattern / family history =====

SECTION5_GROUPS = (
    CriteriaGroup(
        "de_novo",
        GroupKind.SINGLE_SELECT,
        (
            _adjustable("5A", "Observed de novo in the patient (use de novo scoring from section 4)", 0.0, 0.0, 0.45),
        ),
    ),
    CriteriaGroup(
        "inherited",
        GroupKind.SINGLE_SELECT,
        (
            _adjustable("5B", "Specific phenotype, no family history, inherited from an unaffected parent", -0.30, -0.45, 0.0),
            _adjustable("5C", "Non-specific phenotype, no family history, inherited from an unaffected parent", -0.15, -0.30, 0.0),
            _adjustable("5D", "Segregates with a consistent phenotype in the family (use section 4 segregation scoring)", 0.0, 0.0, 0.45),
        ),
    ),
    CriteriaGroup(
        "non_segregation",
        GroupKind.SINGLE_SELECT,
        (
            _adjustable("5E", "Non-segregation (use section 4 non-segregation scoring)", 0.0, -0.45, 0.0),
        ),
    ),
    CriteriaGroup(
        "other",
        GroupKind.SINGLE_SELECT,
        (
            _fixed("5F", "Inheritance information unavailable or uninformative", 0.0),
            _adjustable("5G", "Inheritance unavailable, non-specific phenotype consistent with similar cases", 0.10, 0.0, 0.15),
            _adjustable("5H", "Inheritance unavailable, highly specific phenotype consistent with similar cases", 0.30, 0.0, 0.30),
        ),
    ),
)

# Section 5 groups a reviewer chooses between; picking one clears the others
SECTION5_EXCLUSIVE_GROUPS = ("de_novo", "inherited", "other")

FRAMEWORKS = {
    Framework.LOSS: FrameworkSchema(Framework.LOSS, SECTION1_GROUPS, SECTION2_LOSS_GROUPS),
    Framework.GAIN: FrameworkSchema(Framework.GAIN, SECTION1_GROUPS, SECTION2_GAIN_GROUPS),
}

SHARED_SECTIONS = {
    3: SECTION3_GROUPS,
    4: SECTION4_GROUPS,
    5: SECTION5_GROUPS,
}


def section_key(section: int) -> str:
    """Criteria dict key for a section number."""
    return f"section{section}"


def framework_for_cnv_type(cnv_type: str) -> str:
    """Map a CNV call type to its scoring framework.

    Raises:
        ValueError: If the CNV type is not Deletion or Amplification
    """
    try:
        return Framework.BY_CNV_TYPE[cnv_type]
    except KeyError:
        raise ValueError(f"Unsupported CNV type: {cnv_type!r}") from None


def get_section_schema(framework: str, section: int) -> tuple[CriteriaGroup, ...]:
    """Return the ordered criteria groups for a framework and section.

    Raises:
        ValueError: If the framework or section is unknown
    """
    if framework not in FRAMEWORKS:
        raise ValueError(f"Unknown framework: {framework!r}")
    if section == 1:
        return FRAMEWORKS[framework].section1
    if section == 2:
        return FRAMEWORKS[framework].section2
    if section in SHARED_SECTIONS:
        return SHARED_SECTIONS[section]
    raise ValueError(f"Unknown section: {section!r}")


def get_group(framework: str, section: int, group_name: str) -> CriteriaGroup | None:
    for group in get_section_schema(framework, section):
        if group.name == group_name:
            return group
    return None


def find_option(framework: str, section: int, code: str) -> CriteriaOption | None:
    """Look up an option by code within a section, or None if unknown."""
    for group in get_section_schema(framework, section):
        option = group.find(code)
        if option is not None:
            return option
    return None


def iter_options(framework: str):
    """Yield (section, group, option) for every option in a framework."""
    for section in SECTIONS:
        for group in get_section_schema(framework, section):
            for option in group.options:
                yield section, group, option


def _default_group_state(group: CriteriaGroup) -> dict:
    if group.kind == GroupKind.SINGLE_SELECT:
        return {"selected": None, "score": None}
    if group.kind == GroupKind.GENE_COUNT:
        return {"gene_count": 0}
    state = {}
    for option in group.options:
        if option.is_counter:
            state[option.code] = {c.field: 0 for c in option.counters}
        else:
            state[option.code] = {"score": None}
    return state


def default_criteria(framework: str) -> dict:
    """Build criteria with nothing selected and every counter at zero."""
    return {
        section_key(section): {
            group.name: _default_group_state(group)
            for group in get_section_schema(framework, section)
        }
        for section in SECTIONS
    }
