"""Main orchestration for arrays metrics collection.

Coordinates loading the input header and dbSNP, running the parallel
driver and writing the three metrics files.
"""

import logging

from rich.console import Console

from arrays_metrics import driver
from arrays_metrics.config import Config
from arrays_metrics.exceptions import ConfigurationError
from arrays_metrics.metrics.derived import check_derivations
from arrays_metrics.metrics.partial import MetricsResult
from arrays_metrics.metrics.policy import validate_registries
from arrays_metrics.parsers.header import parse_control_infos
from arrays_metrics.parsers.sequence_dict import load_sequence_dictionary
from arrays_metrics.parsers.vcf import VcfSource
from arrays_metrics.reference.dbsnp import MembershipIndex
from arrays_metrics.writers.log import print_summary
from arrays_metrics.writers.metrics_file import write_all

logger = logging.getLogger(__name__)

console = Console()


def run_collection(config: Config) -> MetricsResult:
    """Collect arrays variant calling metrics and write the report files.

    Steps:
    1. Check field policies and derivations are consistent
    2. Read the input VCF header and its control-code lines
    3. Load dbSNP, restricted to the sequence dictionary
    4. Accumulate shards in parallel, merge, resolve
    5. Write detail, summary and control-code metrics

    Args:
        config: Run configuration

    Returns:
        Resolved metrics

    Raises:
        ConfigurationError: If the configuration is invalid
        VcfFormatError: If the input VCF is missing required header lines
        DataIntegrityError: If shard results cannot be merged
    """
    errors = config.validate()
    if errors:
        raise ConfigurationError("; ".join(errors))

    validate_registries()
    check_derivations()

    source = VcfSource(config.input_vcf)
    header = source.open()
    console.print(f"Reading {config.input_vcf.name}: {len(header.samples)} samples")

    controls = parse_control_infos(header)

    sequence_dictionary: dict[str, int | None] | None
    if config.sequence_dictionary is not None:
        sequence_dictionary = load_sequence_dictionary(config.sequence_dictionary)
        logger.info(
            f"Using {len(sequence_dictionary)} contigs from {config.sequence_dictionary}"
        )
    elif header.contigs:
        sequence_dictionary = load_sequence_dictionary(config.input_vcf)
        logger.info(f"Using {len(sequence_dictionary)} contigs from the input VCF header")
    else:
        sequence_dictionary = None
        logger.warning(
            "No sequence dictionary given and the input VCF has no contig lines; "
            "loading every dbSNP site"
        )

    console.print(f"Reading {config.dbsnp_file.name}")
    index = MembershipIndex.build(
        config.dbsnp_file,
        sequence_dictionary=sequence_dictionary,
        verbose=config.verbose,
    )
    console.print(f"Loaded {len(index):,} dbSNP positions\n")

    worker_count = config.worker_count
    console.print(f"Collecting metrics with {worker_count} workers")
    result = driver.run(
        source,
        index,
        worker_count=worker_count,
        call_rate_threshold=config.call_rate_threshold,
        show_progress=config.verbose,
    )

    written = write_all(
        result,
        controls,
        detail_path=config.detail_metrics_path,
        summary_path=config.summary_metrics_path,
        control_path=config.control_code_summary_path,
    )

    print_summary(result, console)

    console.print("\n[bold]Output files generated:[/bold]")
    for path in written:
        console.print(f"  {path}")
    console.print("\n[green]Metrics collection complete.[/green]\n")

    return result
