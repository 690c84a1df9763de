"""Metric record types.

`CallingMetrics` is the summary-level record. `SampleMetrics` embeds a
`SampleIdentity` and a `CallingMetrics` and adds the sample-only fields.
Merge behavior for every field lives in `metrics.policy`, not here.

Derived fields hold `NOT_COMPUTED` until the resolver fills them in.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Union

from arrays_metrics.models import SampleIdentity


class NotComputed(Enum):
    """Marker for derived fields that have not been resolved yet."""

    NOT_COMPUTED = "NOT_COMPUTED"

    def __repr__(self) -> str:
        return "NOT_COMPUTED"

    def __bool__(self) -> bool:
        return False


NOT_COMPUTED = NotComputed.NOT_COMPUTED

Derived = Union[float, NotComputed]
DerivedFlag = Union[bool, NotComputed]


@dataclass(frozen=True, slots=True)
class CallingMetrics:
    """Call counts for the whole run or for one sample.

    Attributes:
        num_assays: Total assays (SNPs and indels) seen
        num_non_filtered_assays: Assays passing all filters
        num_filtered_assays: Assays failing a filter
        num_zeroed_out_assays: Assays zeroed out by Illumina in chip design
        num_snps: Bi-allelic SNP calls
        num_indels: Indel calls
        num_calls: Passing calls
        num_autocall_calls: Passing autocall calls
        num_no_calls: No-calls on passing assays
        num_in_db_snp: High-confidence SNP calls found in dbSNP
        num_singletons: Variants carried by exactly one sample
        num_hets: Heterozygous calls
        num_hom_var: Homozygous non-reference calls
        novel_snps: SNP calls not found in dbSNP
        pct_dbsnp: Fraction of SNP calls in dbSNP
        call_rate: Calls over non-filtered assays
        autocall_call_rate: Autocall calls over non-filtered assays
    """

    num_assays: int = 0
    num_non_filtered_assays: int = 0
    num_filtered_assays: int = 0
    num_zeroed_out_assays: int = 0
    num_snps: int = 0
    num_indels: int = 0
    num_calls: int = 0
    num_autocall_calls: int = 0
    num_no_calls: int = 0
    num_in_db_snp: int = 0
    num_singletons: int = 0
    num_hets: int = 0
    num_hom_var: int = 0

    novel_snps: int | NotComputed = NOT_COMPUTED
    pct_dbsnp: Derived = NOT_COMPUTED
    call_rate: Derived = NOT_COMPUTED
    autocall_call_rate: Derived = NOT_COMPUTED

    @property
    def is_resolved(self) -> bool:
        return self.call_rate is not NOT_COMPUTED


@dataclass(frozen=True, slots=True)
class SampleMetrics:
    """Per-sample metrics: identity, call counts and sample metadata."""

    identity: SampleIdentity
    calling: CallingMetrics = field(default_factory=CallingMetrics)

    autocall_date: str | None = None
    imaging_date: str | None = None
    gtc_call_rate: float | None = None
    autocall_gender: str | None = None
    fp_gender: str | None = None
    reported_gender: str | None = None
    cluster_file_name: str | None = None
    p95_green: int | None = None
    p95_red: int | None = None
    autocall_version: str | None = None
    zcall_version: str | None = None
    extended_manifest_version: str | None = None
    scanner_name: str | None = None
    pipeline_version: str | None = None
    zcall_thresholds_file: str | None = None

    het_pct: Derived = NOT_COMPUTED
    het_homvar_ratio: Derived = NOT_COMPUTED
    autocall_pf: DerivedFlag = NOT_COMPUTED
    is_zcalled: DerivedFlag = NOT_COMPUTED
    gender_concordance_pf: DerivedFlag = NOT_COMPUTED

    @property
    def is_resolved(self) -> bool:
        return self.autocall_pf is not NOT_COMPUTED and self.calling.is_resolved


def safe_ratio(numerator: int, denominator: int) -> float:
    """Divide, returning NaN instead of raising on a zero denominator."""
    if denominator == 0:
        return math.nan
    return numerator / denominator
