from typing import Annotated, Literal

from pydantic import ConfigDict, Field, model_validator

from gcnv_pipeline.models import EnumField, GcnvModel
from gcnv_pipeline.models.common import RunMode
from gcnv_pipeline.models.gcnv import EngineConfig
from gcnv_wrappers.interval_files import IntervalMergingRule


class IntervalRequest(GcnvModel):
    """
    Explicit interval request (``-L`` / ``-XL``).  Copy number tools only work on the exact
    intervals that were counted, so padding and merging of abutting intervals are rejected.
    """

    model_config = ConfigDict(frozen=True)

    intervals: Annotated[list[str], Field(min_length=1)]
    """Region strings or interval files to include"""

    exclude_intervals: list[str] = []
    """Region strings or interval files to exclude"""

    interval_merging_rule: IntervalMergingRule = EnumField(
        IntervalMergingRule, IntervalMergingRule.OVERLAPPING_ONLY
    )
    """Interval merging rule for abutting intervals"""

    interval_padding: int = 0
    """Amount of padding (in bp) to add to each interval"""

    interval_exclusion_padding: int = 0
    """Amount of padding (in bp) to add to each excluded interval"""

    @model_validator(mode="after")
    def ensure_copy_number_compatible(self):
        if self.interval_merging_rule != IntervalMergingRule.OVERLAPPING_ONLY:
            raise ValueError("Interval merging rule must be set to OVERLAPPING_ONLY.")
        if self.interval_padding != 0:
            raise ValueError("Interval padding must be set to 0.")
        if self.interval_exclusion_padding != 0:
            raise ValueError("Interval exclusion padding must be set to 0.")
        return self


class _RunBase(GcnvModel):
    model_config = ConfigDict(frozen=True, protected_namespaces=())

    read_count_files: Annotated[list[str], Field(min_length=1)]
    """Read-count files, one per sample"""

    contig_ploidy_calls: str
    """Contig-ploidy calls directory (output of ``DetermineGermlineContigPloidy``)"""

    output_dir: str
    """Existing output directory"""

    output_prefix: Annotated[str, Field(min_length=1)]
    """Prefix for the output model and calls directories"""

    engine: EngineConfig = EngineConfig()
    """Inference engine settings"""


class CohortRun(_RunBase):
    """Fit a coverage model and call CNVs jointly on a cohort."""

    run_mode: Literal[RunMode.COHORT] = RunMode.COHORT

    model: str | None = None
    """Model directory used for initialization; its intervals supersede any interval request"""

    intervals: IntervalRequest | None = None
    """Explicit interval request"""

    annotated_intervals: str | None = None
    """Annotated-interval file with GC content"""

    @model_validator(mode="after")
    def ensure_cohort_size(self):
        if len(self.read_count_files) < 2:
            raise ValueError("At least two samples must be provided in the COHORT mode")
        return self

    @property
    def explicit_gc_bias_modeling(self) -> bool:
        return self.annotated_intervals is not None and self.model is None


class CaseRun(_RunBase):
    """Call CNVs with a previously fit coverage model; intervals come from the model."""

    run_mode: Literal[RunMode.CASE] = RunMode.CASE

    model: str
    """Model directory from a previous COHORT run"""


#: Resolved configuration of one run
RunConfiguration = Annotated[CohortRun | CaseRun, Field(discriminator="run_mode")]
