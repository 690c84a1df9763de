"""Arrays VCF reader.

Reads only what the metrics need: the meta-information header, the sample
names, and per-record position, alleles, filter and the GT / GTA genotype
fields. Supports reading a contiguous range of data records so the file
can be split into shards for parallel workers.

VCF data line format (tab-separated):
#CHROM  POS  ID  REF  ALT  QUAL  FILTER  INFO  FORMAT  sample1 ...
1       100  rs1 A    G    .     PASS    .     GT:GTA  0/1:0/1
"""

import logging
import re
from collections.abc import Iterator
from dataclasses import dataclass, field
from itertools import islice
from pathlib import Path

from arrays_metrics.exceptions import VcfFormatError
from arrays_metrics.io_utils import count_data_lines, iter_data_lines, smart_open
from arrays_metrics.models import FilterStatus, GenotypeCall, VariantRecord
from arrays_metrics.utils import normalize_chromosome

logger = logging.getLogger(__name__)

ZEROED_OUT_ASSAY = "ZEROED_OUT_ASSAY"
FIXED_COLUMNS = 9  # CHROM..FORMAT

_META_LINE = re.compile(r"^##([^=]+)=(.*)$")
_CONTIG_ID = re.compile(r"ID=([^,>]+)")
_CONTIG_LENGTH = re.compile(r"length=(\d+)")


@dataclass(frozen=True)
class VcfHeader:
    """Header information of an arrays VCF.

    Attributes:
        meta: Unstructured ##key=value lines (first value wins)
        samples: Sample column names in file order
        contigs: Contig name -> length (None if the header omits it)
    """

    meta: dict[str, str] = field(default_factory=dict)
    samples: tuple[str, ...] = ()
    contigs: dict[str, int | None] = field(default_factory=dict)

    def get(self, key: str) -> str | None:
        return self.meta.get(key)


@dataclass(frozen=True, slots=True)
class ShardSpec:
    """Contiguous range of data-record ordinals [start, stop)."""

    index: int
    start: int
    stop: int

    def __len__(self) -> int:
        return self.stop - self.start


def read_header(filepath: Path) -> VcfHeader:
    """Parse the header of a VCF file.

    Args:
        filepath: Path to VCF (may be gzipped)

    Returns:
        VcfHeader

    Raises:
        FileNotFoundError: If the file doesn't exist
        VcfFormatError: If no #CHROM column header line is found
    """
    if not filepath.exists():
        raise FileNotFoundError(f"VCF file not found: {filepath}")

    meta: dict[str, str] = {}
    contigs: dict[str, int | None] = {}

    with smart_open(filepath) as f:
        for line in f:
            line = line.rstrip("\n")
            if line.startswith("#CHROM"):
                columns = line.split("\t")
                return VcfHeader(
                    meta=meta,
                    samples=tuple(columns[FIXED_COLUMNS:]),
                    contigs=contigs,
                )
            if not line.startswith("##"):
                break

            match = _META_LINE.match(line)
            if match is None:
                continue
            key, value = match.group(1), match.group(2)

            if key == "contig":
                contig_id = _CONTIG_ID.search(value)
                if contig_id:
                    length = _CONTIG_LENGTH.search(value)
                    contigs[contig_id.group(1)] = int(length.group(1)) if length else None
            elif not value.startswith("<"):
                meta.setdefault(key, value)

    raise VcfFormatError(f"No #CHROM header line found in {filepath}")


def parse_genotype(value: str | None) -> GenotypeCall:
    """Classify a GT-style genotype string.

    Anything unreadable is a no-call rather than an error.

    Args:
        value: Genotype such as "0/1", "1|1", "./." or None

    Returns:
        GenotypeCall

    Example:
        >>> parse_genotype("0/1")
        GenotypeCall.HET
        >>> parse_genotype("A/B")
        GenotypeCall.NO_CALL
    """
    if not value:
        return GenotypeCall.NO_CALL

    alleles = value.replace("|", "/").split("/")
    if any(allele in ("", ".") for allele in alleles):
        return GenotypeCall.NO_CALL
    try:
        indices = [int(allele) for allele in alleles]
    except ValueError:
        return GenotypeCall.NO_CALL
    if any(index < 0 for index in indices):
        return GenotypeCall.NO_CALL

    if len(set(indices)) > 1:
        return GenotypeCall.HET
    if indices[0] == 0:
        return GenotypeCall.HOM_REF
    return GenotypeCall.HOM_VAR


def parse_filter(value: str) -> FilterStatus:
    """Classify the FILTER column."""
    if value in ("PASS", ".", ""):
        return FilterStatus.PASSING
    if ZEROED_OUT_ASSAY in value.split(";"):
        return FilterStatus.ZEROED_OUT
    return FilterStatus.FILTERED


def parse_record(line: str, ordinal: int = 0) -> VariantRecord:
    """Parse one VCF data line.

    Args:
        line: Tab-separated data line without trailing newline
        ordinal: Record number, used in error messages

    Returns:
        VariantRecord

    Raises:
        VcfFormatError: If fixed columns are missing or POS is not an integer
    """
    parts = line.split("\t")
    if len(parts) < 8:
        raise VcfFormatError(
            f"Invalid VCF record {ordinal}: expected at least 8 columns, got {len(parts)}"
        )

    try:
        pos = int(parts[1])
    except ValueError:
        raise VcfFormatError(f"Invalid POS '{parts[1]}' in VCF record {ordinal}") from None

    alts = tuple(alt for alt in parts[4].split(",") if alt != ".")

    calls: tuple[GenotypeCall, ...] = ()
    autocall_calls: tuple[GenotypeCall, ...] | None = None
    if len(parts) > FIXED_COLUMNS:
        format_keys = parts[8].split(":")
        gt_index = format_keys.index("GT") if "GT" in format_keys else None
        gta_index = format_keys.index("GTA") if "GTA" in format_keys else None

        sample_fields = [sample.split(":") for sample in parts[FIXED_COLUMNS:]]
        calls = tuple(parse_genotype(_field_at(values, gt_index)) for values in sample_fields)
        if gta_index is not None:
            autocall_calls = tuple(
                parse_genotype(_field_at(values, gta_index)) for values in sample_fields
            )

    return VariantRecord(
        chrom=normalize_chromosome(parts[0]),
        pos=pos,
        id=parts[2],
        ref=parts[3].upper(),
        alts=tuple(alt.upper() for alt in alts),
        filter_status=parse_filter(parts[6]),
        calls=calls,
        autocall_calls=autocall_calls,
    )


def _field_at(values: list[str], index: int | None) -> str | None:
    if index is None or index >= len(values):
        return None
    return values[index]


class VcfSource:
    """Variant record source over one arrays VCF.

    Usage:
        source = VcfSource(Path("arrays.vcf.gz"))
        header = source.open()
        for shard in source.plan_shards(4):
            for record in source.iterate_shard(shard):
                ...
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self._header: VcfHeader | None = None

    def open(self) -> VcfHeader:
        """Read and cache the header."""
        if self._header is None:
            self._header = read_header(self.path)
            logger.info(
                f"Read header of {self.path.name}: {len(self._header.samples)} samples, "
                f"{len(self._header.contigs)} contigs"
            )
        return self._header

    @property
    def header(self) -> VcfHeader:
        return self.open()

    def count_records(self) -> int:
        return count_data_lines(self.path)

    def plan_shards(self, shard_count: int) -> list[ShardSpec]:
        """Split the data records into contiguous, non-overlapping shards.

        Never plans more shards than records, and always at least one.

        Args:
            shard_count: Desired number of shards (>= 1)

        Returns:
            Shards whose ranges cover every record exactly once
        """
        if shard_count < 1:
            raise ValueError(f"shard_count must be >= 1, got {shard_count}")

        total = self.count_records()
        shard_count = max(1, min(shard_count, total))
        base, remainder = divmod(total, shard_count)

        shards: list[ShardSpec] = []
        start = 0
        for index in range(shard_count):
            size = base + (1 if index < remainder else 0)
            shards.append(ShardSpec(index=index, start=start, stop=start + size))
            start += size

        logger.debug(f"Planned {len(shards)} shards over {total} records")
        return shards

    def iterate_shard(self, shard: ShardSpec) -> Iterator[VariantRecord]:
        """Yield the records of one shard in file order."""
        lines = islice(iter_data_lines(self.path), shard.start, shard.stop)
        for ordinal, line in enumerate(lines, shard.start + 1):
            yield parse_record(line, ordinal)

    def __iter__(self) -> Iterator[VariantRecord]:
        for ordinal, line in enumerate(iter_data_lines(self.path), 1):
            yield parse_record(line, ordinal)
