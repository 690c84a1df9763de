"""Configuration dataclass for arrays metrics collection."""

import os
from dataclasses import dataclass
from pathlib import Path

DETAIL_METRICS_EXTENSION = "arrays_variant_calling_detail_metrics"
SUMMARY_METRICS_EXTENSION = "arrays_variant_calling_summary_metrics"
CONTROL_CODE_SUMMARY_EXTENSION = "arrays_control_code_summary_metrics"

DEFAULT_CALL_RATE_THRESHOLD = 0.98


def resolve_worker_count(num_processors: int, available: int | None = None) -> int:
    """Turn the num_processors setting into a worker count.

    0 means every available core, a negative value means that many cores
    fewer than available, and a positive value is used as is. The result is
    never below 1.

    Args:
        num_processors: Requested processors
        available: Cores on this machine (default: os.cpu_count())

    Returns:
        Worker count >= 1

    Example:
        >>> resolve_worker_count(0, available=8)
        8
        >>> resolve_worker_count(-2, available=8)
        6
        >>> resolve_worker_count(-20, available=8)
        1
    """
    if available is None:
        available = os.cpu_count() or 1

    if num_processors == 0:
        workers = available
    elif num_processors < 0:
        workers = available + num_processors
    else:
        workers = num_processors
    return max(1, workers)


@dataclass
class Config:
    """Configuration for one metrics collection run.

    Attributes:
        input_vcf: Arrays VCF to collect metrics from
        dbsnp_file: dbSNP VCF used to flag known SNP sites
        output_prefix: Prefix for the three metrics files
        call_rate_threshold: Call rate a sample must exceed to pass, in (0, 1]
        sequence_dictionary: .dict or VCF whose contigs restrict dbSNP
            loading (default: the input VCF's contig lines)
        num_processors: Worker processes; 0 = all cores, negative = all
            cores minus that many
        verbose: Enable verbose logging and progress display
        log_dir: Directory for the rotating log file (no file log if None)
    """

    input_vcf: Path
    dbsnp_file: Path
    output_prefix: Path

    call_rate_threshold: float = DEFAULT_CALL_RATE_THRESHOLD
    sequence_dictionary: Path | None = None

    num_processors: int = 0

    verbose: bool = False
    log_dir: Path | None = None

    def __post_init__(self) -> None:
        """Coerce path fields to Path objects."""
        if isinstance(self.input_vcf, str):
            self.input_vcf = Path(self.input_vcf)
        if isinstance(self.dbsnp_file, str):
            self.dbsnp_file = Path(self.dbsnp_file)
        if isinstance(self.output_prefix, str):
            self.output_prefix = Path(self.output_prefix)
        if isinstance(self.sequence_dictionary, str):
            self.sequence_dictionary = Path(self.sequence_dictionary)
        if isinstance(self.log_dir, str):
            self.log_dir = Path(self.log_dir)

    @property
    def worker_count(self) -> int:
        return resolve_worker_count(self.num_processors)

    def _output_path(self, extension: str) -> Path:
        return self.output_prefix.with_name(f"{self.output_prefix.name}.{extension}")

    @property
    def detail_metrics_path(self) -> Path:
        return self._output_path(DETAIL_METRICS_EXTENSION)

    @property
    def summary_metrics_path(self) -> Path:
        return self._output_path(SUMMARY_METRICS_EXTENSION)

    @property
    def control_code_summary_path(self) -> Path:
        return self._output_path(CONTROL_CODE_SUMMARY_EXTENSION)

    @property
    def output_paths(self) -> list[Path]:
        return [
            self.detail_metrics_path,
            self.summary_metrics_path,
            self.control_code_summary_path,
        ]

    def validate(self) -> list[str]:
        """Validate configuration and return list of errors.

        Returns:
            List of error messages (empty if valid)
        """
        errors: list[str] = []

        if not self.input_vcf.exists():
            errors.append(f"Input VCF not found: {self.input_vcf}")

        if not self.dbsnp_file.exists():
            errors.append(f"dbSNP file not found: {self.dbsnp_file}")

        if self.sequence_dictionary is not None and not self.sequence_dictionary.exists():
            errors.append(f"Sequence dictionary not found: {self.sequence_dictionary}")

        output_dir = self.output_prefix.parent
        if not output_dir.exists():
            errors.append(f"Output directory does not exist: {output_dir}")

        if not 0 < self.call_rate_threshold <= 1:
            errors.append(
                f"call_rate_threshold must be greater than 0 and at most 1: "
                f"{self.call_rate_threshold}"
            )

        return errors
