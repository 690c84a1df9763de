"""Field policy registry for metric records.

Every field of every metric record is declared here with exactly one merge
policy. The merge engine and the derived-field resolver interpret these
registries; nothing is inferred from the record classes themselves.
"""

import dataclasses
from collections.abc import Mapping
from enum import Enum, auto
from types import MappingProxyType

from arrays_metrics.exceptions import ConfigurationError


class MergePolicy(Enum):
    """How two values of the same field are combined."""

    SUM = auto()
    ASSERT_EQUAL = auto()
    DERIVED = auto()  # Recomputed after the final merge, never merged


class FieldPolicyRegistry:
    """Immutable mapping from field name to merge policy.

    Fields holding a nested record are declared as embedded and carry the
    registry used to merge that record.

    Args:
        name: Registry name used in error messages
        policies: Field name -> MergePolicy for scalar fields
        embedded: Field name -> registry for nested record fields
    """

    def __init__(
        self,
        name: str,
        policies: Mapping[str, MergePolicy],
        embedded: Mapping[str, "FieldPolicyRegistry"] | None = None,
    ) -> None:
        embedded = embedded or {}
        overlap = set(policies) & set(embedded)
        if overlap:
            raise ConfigurationError(
                f"{name}: fields registered twice: {sorted(overlap)}"
            )
        self.name = name
        self._policies = MappingProxyType(dict(policies))
        self._embedded = MappingProxyType(dict(embedded))

    def policy_for(self, field_name: str) -> MergePolicy:
        """Return the merge policy for a scalar field.

        Raises:
            ConfigurationError: If the field is not registered
        """
        try:
            return self._policies[field_name]
        except KeyError:
            raise ConfigurationError(
                f"{self.name}: no merge policy registered for field '{field_name}'"
            ) from None

    def embedded_registry(self, field_name: str) -> "FieldPolicyRegistry | None":
        """Return the registry for an embedded record field, if any."""
        return self._embedded.get(field_name)

    def fields_with(self, policy: MergePolicy) -> tuple[str, ...]:
        """Names of scalar fields registered with the given policy."""
        return tuple(name for name, p in self._policies.items() if p is policy)

    @property
    def field_names(self) -> frozenset[str]:
        return frozenset(self._policies) | frozenset(self._embedded)

    def validate(self, record_type: type) -> None:
        """Check that this registry covers a record type exactly.

        Args:
            record_type: Dataclass whose fields this registry governs

        Raises:
            ConfigurationError: If any field is unregistered or any
                registered name is not a field of the record type
        """
        declared = {f.name for f in dataclasses.fields(record_type)}
        missing = declared - self.field_names
        extra = self.field_names - declared
        if missing:
            raise ConfigurationError(
                f"{self.name}: fields of {record_type.__name__} without a merge "
                f"policy: {sorted(missing)}"
            )
        if extra:
            raise ConfigurationError(
                f"{self.name}: policies registered for unknown fields of "
                f"{record_type.__name__}: {sorted(extra)}"
            )

    def __repr__(self) -> str:
        return f"FieldPolicyRegistry({self.name!r}, {len(self.field_names)} fields)"


SUM = MergePolicy.SUM
ASSERT_EQUAL = MergePolicy.ASSERT_EQUAL
DERIVED = MergePolicy.DERIVED

CALLING_POLICIES = FieldPolicyRegistry(
    "calling",
    {
        "num_assays": SUM,
        "num_non_filtered_assays": SUM,
        "num_filtered_assays": SUM,
        "num_zeroed_out_assays": SUM,
        "num_snps": SUM,
        "num_indels": SUM,
        "num_calls": SUM,
        "num_autocall_calls": SUM,
        "num_no_calls": SUM,
        "num_in_db_snp": SUM,
        "num_singletons": SUM,
        "num_hets": SUM,
        "num_hom_var": SUM,
        "novel_snps": DERIVED,
        "pct_dbsnp": DERIVED,
        "call_rate": DERIVED,
        "autocall_call_rate": DERIVED,
    },
)

IDENTITY_POLICIES = FieldPolicyRegistry(
    "identity",
    {
        "chip_well_barcode": ASSERT_EQUAL,
        "sample_alias": ASSERT_EQUAL,
        "analysis_version": ASSERT_EQUAL,
        "chip_type": ASSERT_EQUAL,
    },
)

SAMPLE_POLICIES = FieldPolicyRegistry(
    "sample",
    {
        "autocall_date": ASSERT_EQUAL,
        "imaging_date": ASSERT_EQUAL,
        "gtc_call_rate": ASSERT_EQUAL,
        "autocall_gender": ASSERT_EQUAL,
        "fp_gender": ASSERT_EQUAL,
        "reported_gender": ASSERT_EQUAL,
        "cluster_file_name": ASSERT_EQUAL,
        "p95_green": ASSERT_EQUAL,
        "p95_red": ASSERT_EQUAL,
        "autocall_version": ASSERT_EQUAL,
        "zcall_version": ASSERT_EQUAL,
        "extended_manifest_version": ASSERT_EQUAL,
        "scanner_name": ASSERT_EQUAL,
        "pipeline_version": ASSERT_EQUAL,
        "zcall_thresholds_file": ASSERT_EQUAL,
        "het_pct": DERIVED,
        "het_homvar_ratio": DERIVED,
        "autocall_pf": DERIVED,
        "is_zcalled": DERIVED,
        "gender_concordance_pf": DERIVED,
    },
    embedded={
        "identity": IDENTITY_POLICIES,
        "calling": CALLING_POLICIES,
    },
)


def validate_registries() -> None:
    """Check every registry against its record type before processing starts.

    Raises:
        ConfigurationError: If any record field lacks a policy
    """
    from arrays_metrics.metrics.records import CallingMetrics, SampleMetrics
    from arrays_metrics.models import SampleIdentity

    CALLING_POLICIES.validate(CallingMetrics)
    IDENTITY_POLICIES.validate(SampleIdentity)
    SAMPLE_POLICIES.validate(SampleMetrics)
