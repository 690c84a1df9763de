"""Per-shard metric accumulation.

One accumulator consumes one shard of the arrays VCF. It owns all of its
counters; the only thing it shares with other workers is the read-only
dbSNP index.

Classification per record:
1. Every record counts as an assay for every sample
2. Filtered and zeroed-out assays are counted, their genotypes ignored
3. On passing assays each sample's call is counted as call / no-call,
   het / hom-var, SNP / indel, and SNPs are looked up in dbSNP
4. A record carried (non-ref) by exactly one sample is a singleton
"""

import dataclasses
import logging
from collections import Counter
from collections.abc import Iterable

from arrays_metrics.exceptions import ArraysMetricsError, DataIntegrityError
from arrays_metrics.metrics.partial import PartialResult
from arrays_metrics.metrics.records import CallingMetrics, SampleMetrics
from arrays_metrics.models import FilterStatus, GenotypeCall, VariantKind, VariantRecord
from arrays_metrics.parsers.header import build_sample_templates
from arrays_metrics.parsers.vcf import VcfHeader
from arrays_metrics.reference.dbsnp import MembershipIndex
from arrays_metrics.utils import is_indel, is_snp

logger = logging.getLogger(__name__)


class ArraysCallingAccumulator:
    """Accumulates calling metrics for one shard.

    Usage:
        accumulator = ArraysCallingAccumulator(dbsnp)
        accumulator.initialize(header)
        for record in source.iterate_shard(shard):
            accumulator.accept(record)
        partial = accumulator.finish()
    """

    def __init__(self, dbsnp: MembershipIndex, shard_index: int | None = None) -> None:
        self.dbsnp = dbsnp
        self.shard_index = shard_index
        self._summary: Counter[str] = Counter()
        self._templates: list[SampleMetrics] = []
        self._sample_counts: list[Counter[str]] = []
        self._initialized = False
        self._finished = False
        self.records_seen = 0

    def initialize(self, header: VcfHeader) -> None:
        """Set up zeroed counters for every sample declared in the header."""
        if self._initialized:
            raise ArraysMetricsError("Accumulator has already been initialized")
        self._templates = build_sample_templates(header)
        self._sample_counts = [Counter() for _ in self._templates]
        self._initialized = True

    def accept(self, record: VariantRecord) -> None:
        """Update counters with one variant record.

        Raises:
            DataIntegrityError: If the record has genotypes for more samples
                than the header declares
        """
        self._check_usable()

        n_samples = len(self._templates)
        if len(record.calls) > n_samples:
            raise DataIntegrityError(
                f"Record {record.chrom}:{record.pos} has {len(record.calls)} genotypes "
                f"but the header declares {n_samples} samples",
                field="samples",
                left=n_samples,
                right=len(record.calls),
            )

        self.records_seen += 1
        self._summary["num_assays"] += n_samples
        for counts in self._sample_counts:
            counts["num_assays"] += 1

        if record.filter_status is not FilterStatus.PASSING:
            self._count_filtered(record.filter_status, n_samples)
            return

        self._summary["num_non_filtered_assays"] += n_samples

        snp = is_snp(record.ref, record.alts)
        indel = not snp and is_indel(record.ref, record.alts)
        in_dbsnp = snp and self.dbsnp.contains(record.chrom, record.pos, VariantKind.SNP)

        carriers: list[int] = []
        for i, counts in enumerate(self._sample_counts):
            counts["num_non_filtered_assays"] += 1
            call = record.calls[i] if i < len(record.calls) else GenotypeCall.NO_CALL

            if record.autocall_calls is not None and i < len(record.autocall_calls):
                autocall = record.autocall_calls[i]
            else:
                autocall = call
            if autocall.is_called:
                self._bump(counts, "num_autocall_calls")

            if not call.is_called:
                self._bump(counts, "num_no_calls")
                continue

            self._bump(counts, "num_calls")
            if call is GenotypeCall.HET:
                self._bump(counts, "num_hets")
            elif call is GenotypeCall.HOM_VAR:
                self._bump(counts, "num_hom_var")

            if snp:
                self._bump(counts, "num_snps")
                if in_dbsnp:
                    self._bump(counts, "num_in_db_snp")
            elif indel:
                self._bump(counts, "num_indels")

            if call.is_non_ref:
                carriers.append(i)

        if len(carriers) == 1:
            self._bump(self._sample_counts[carriers[0]], "num_singletons")

    def accept_all(self, records: Iterable[VariantRecord]) -> None:
        for record in records:
            self.accept(record)

    def finish(self) -> PartialResult:
        """Freeze the counters into an immutable partial result.

        The accumulator cannot be used again afterwards.
        """
        self._check_usable()
        self._finished = True

        samples = [
            dataclasses.replace(template, calling=CallingMetrics(**counts))
            for template, counts in zip(self._templates, self._sample_counts)
        ]
        partial = PartialResult.from_samples(
            summary=CallingMetrics(**self._summary),
            samples=samples,
            shard_index=self.shard_index,
        )
        logger.debug(
            f"Shard {self.shard_index}: {self.records_seen} records, "
            f"{len(samples)} samples"
        )
        return partial

    def _count_filtered(self, status: FilterStatus, n_samples: int) -> None:
        self._summary["num_filtered_assays"] += n_samples
        if status is FilterStatus.ZEROED_OUT:
            self._summary["num_zeroed_out_assays"] += n_samples
        for counts in self._sample_counts:
            counts["num_filtered_assays"] += 1
            if status is FilterStatus.ZEROED_OUT:
                counts["num_zeroed_out_assays"] += 1

    def _bump(self, counts: Counter[str], name: str) -> None:
        """Increment a sample counter and the matching summary counter."""
        counts[name] += 1
        self._summary[name] += 1

    def _check_usable(self) -> None:
        if not self._initialized:
            raise ArraysMetricsError("Accumulator used before initialize()")
        if self._finished:
            raise ArraysMetricsError("Accumulator already finished")
