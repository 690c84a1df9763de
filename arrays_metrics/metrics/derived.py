"""Derived field resolution.

Runs once, after every shard has been merged. Derivations are applied in
the fixed order below; each one may read additive and invariant fields and
any derived field resolved earlier in its list. Per-sample derivations run
after that sample's calling record is resolved.
"""

import dataclasses
import logging
from collections import Counter
from collections.abc import Callable

from arrays_metrics.exceptions import ConfigurationError
from arrays_metrics.metrics.partial import MetricsResult, PartialResult
from arrays_metrics.metrics.policy import (
    CALLING_POLICIES,
    SAMPLE_POLICIES,
    MergePolicy,
)
from arrays_metrics.metrics.records import (
    NOT_COMPUTED,
    CallingMetrics,
    SampleMetrics,
    safe_ratio,
)
from arrays_metrics.models import Sex

logger = logging.getLogger(__name__)


def sex_concordance(
    reported_sex: str | None,
    fingerprint_sex: str | None,
    autocall_sex: str | None,
) -> bool:
    """Check whether three independent sex calls agree.

    Passing requires at least two Female votes and no Male vote, or at
    least two Male votes and no Female vote. If all three are Unknown or
    NotReported the check fails.

    Args:
        reported_sex: Sex reported by the collaborator
        fingerprint_sex: Sex from the fingerprinted sample
        autocall_sex: Sex determined by Autocall

    Returns:
        True if the calls are concordant

    Example:
        >>> sex_concordance("Female", "Female", "Unknown")
        True
        >>> sex_concordance("Female", "Male", "Male")
        False
    """
    votes = Counter(
        Sex.from_string(value) for value in (reported_sex, fingerprint_sex, autocall_sex)
    )
    if votes[Sex.UNKNOWN] + votes[Sex.NOT_REPORTED] == 3:
        return False
    return (votes[Sex.FEMALE] > 1 and votes[Sex.MALE] == 0) or (
        votes[Sex.MALE] > 1 and votes[Sex.FEMALE] == 0
    )


CallingDerivation = Callable[[CallingMetrics], object]
SampleDerivation = Callable[[SampleMetrics, float], object]

CALLING_DERIVATIONS: tuple[tuple[str, CallingDerivation], ...] = (
    ("novel_snps", lambda m: m.num_snps - m.num_in_db_snp),
    ("pct_dbsnp", lambda m: safe_ratio(m.num_in_db_snp, m.num_snps)),
    ("call_rate", lambda m: safe_ratio(m.num_calls, m.num_non_filtered_assays)),
    (
        "autocall_call_rate",
        lambda m: safe_ratio(m.num_autocall_calls, m.num_non_filtered_assays),
    ),
)

# NaN call rates compare False, so an empty sample never passes.
SAMPLE_DERIVATIONS: tuple[tuple[str, SampleDerivation], ...] = (
    ("het_pct", lambda s, _: safe_ratio(s.calling.num_hets, s.calling.num_calls)),
    (
        "het_homvar_ratio",
        lambda s, _: safe_ratio(s.calling.num_hets, s.calling.num_hom_var),
    ),
    ("autocall_pf", lambda s, threshold: s.calling.call_rate > threshold),
    ("is_zcalled", lambda s, _: bool(s.zcall_thresholds_file)),
    (
        "gender_concordance_pf",
        lambda s, _: sex_concordance(s.reported_gender, s.fp_gender, s.autocall_gender),
    ),
)


def check_derivations() -> None:
    """Verify that every DERIVED field has exactly one derivation.

    Raises:
        ConfigurationError: If a derived field has no derivation or a
            derivation targets a field not registered as DERIVED
    """
    for registry, derivations in (
        (CALLING_POLICIES, CALLING_DERIVATIONS),
        (SAMPLE_POLICIES, SAMPLE_DERIVATIONS),
    ):
        expected = set(registry.fields_with(MergePolicy.DERIVED))
        names = [name for name, _ in derivations]
        if len(names) != len(set(names)) or set(names) != expected:
            raise ConfigurationError(
                f"{registry.name}: derivations {sorted(names)} do not match "
                f"derived fields {sorted(expected)}"
            )


def resolve_calling(metrics: CallingMetrics) -> CallingMetrics:
    """Compute derived fields of a calling record."""
    for name, derive in CALLING_DERIVATIONS:
        metrics = dataclasses.replace(metrics, **{name: derive(metrics)})
    return metrics


def resolve_sample(sample: SampleMetrics, call_rate_threshold: float) -> SampleMetrics:
    """Compute derived fields of a per-sample record.

    Args:
        sample: Merged per-sample record
        call_rate_threshold: Call rate a sample must exceed to pass

    Returns:
        New record with every derived field set
    """
    sample = dataclasses.replace(sample, calling=resolve_calling(sample.calling))
    for name, derive in SAMPLE_DERIVATIONS:
        sample = dataclasses.replace(sample, **{name: derive(sample, call_rate_threshold)})
    return sample


def resolve(partial: PartialResult, call_rate_threshold: float) -> MetricsResult:
    """Resolve derived fields on the final merged result.

    Args:
        partial: Result of merging every shard
        call_rate_threshold: Run-wide pass threshold for sample call rate

    Returns:
        MetricsResult with all derived fields computed

    Raises:
        ConfigurationError: If the partial was already resolved
    """
    if partial.summary.call_rate is not NOT_COMPUTED:
        raise ConfigurationError("Derived fields have already been resolved")

    summary = resolve_calling(partial.summary)
    samples = tuple(
        resolve_sample(sample, call_rate_threshold) for sample in partial.samples.values()
    )
    logger.info(f"Resolved derived metrics for {len(samples)} samples")
    return MetricsResult(summary=summary, samples=samples)
