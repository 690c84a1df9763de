"""Partial and final results of metric accumulation."""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

from arrays_metrics.exceptions import DataIntegrityError
from arrays_metrics.metrics.records import CallingMetrics, SampleMetrics
from arrays_metrics.models import SampleIdentity


@dataclass(frozen=True)
class PartialResult:
    """Snapshot of one shard's counters, before merging.

    The sample mapping is built once and never mutated afterwards; it
    stays a plain dict so partials can cross process boundaries.

    Attributes:
        summary: Run-level counters for the shard
        samples: Per-sample records keyed by identity, in first-seen order
        shard_index: Index of the shard that produced this partial
            (None once partials from several shards are merged)
    """

    summary: CallingMetrics = field(default_factory=CallingMetrics)
    samples: Mapping[SampleIdentity, SampleMetrics] = field(default_factory=dict)
    shard_index: int | None = None

    def __post_init__(self) -> None:
        for identity, sample in self.samples.items():
            if sample.identity != identity:
                raise DataIntegrityError(
                    f"Sample record for {sample.identity.chip_well_barcode} "
                    f"stored under key {identity.chip_well_barcode}",
                    field="identity",
                    left=identity,
                    right=sample.identity,
                )

    @classmethod
    def from_samples(
        cls,
        summary: CallingMetrics,
        samples: Iterable[SampleMetrics],
        shard_index: int | None = None,
    ) -> "PartialResult":
        """Build a partial from sample records, rejecting duplicate identities."""
        by_identity: dict[SampleIdentity, SampleMetrics] = {}
        for sample in samples:
            if sample.identity in by_identity:
                raise DataIntegrityError(
                    f"Sample {sample.identity.chip_well_barcode} appears twice "
                    f"in one partial result",
                    field="identity",
                    left=by_identity[sample.identity],
                    right=sample,
                )
            by_identity[sample.identity] = sample
        return cls(summary=summary, samples=by_identity, shard_index=shard_index)

    def __len__(self) -> int:
        return len(self.samples)


@dataclass(frozen=True)
class MetricsResult:
    """Final, resolved metrics ready for the report writers."""

    summary: CallingMetrics
    samples: tuple[SampleMetrics, ...]

    def sample(self, chip_well_barcode: str) -> SampleMetrics:
        """Look up a resolved sample by chip well barcode.

        Raises:
            KeyError: If no sample has this barcode
        """
        for sample in self.samples:
            if sample.identity.chip_well_barcode == chip_well_barcode:
                return sample
        raise KeyError(chip_well_barcode)
