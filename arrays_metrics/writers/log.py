"""Console summary of a metrics run."""

from rich.console import Console
from rich.table import Table

from arrays_metrics.metrics.partial import MetricsResult
from arrays_metrics.writers.metrics_file import format_value


def print_summary(result: MetricsResult, console: Console | None = None) -> None:
    """Print run-level and per-sample metrics tables.

    Args:
        result: Resolved metrics
        console: Console to print to (default: a new stdout console)
    """
    console = console or Console()
    summary = result.summary

    console.print("\n[bold]Variant calling summary[/bold]")
    console.print(f" Assays                {summary.num_assays:,}")
    console.print(f" Non-filtered assays   {summary.num_non_filtered_assays:,}")
    console.print(f" Filtered assays       {summary.num_filtered_assays:,}")
    console.print(f" Zeroed-out assays     {summary.num_zeroed_out_assays:,}")
    console.print(f" SNP calls             {summary.num_snps:,}")
    console.print(f" Indel calls           {summary.num_indels:,}")
    console.print(f" In dbSNP              {summary.num_in_db_snp:,}")
    console.print(f" Novel SNPs            {summary.novel_snps:,}")
    console.print(f" Singletons            {summary.num_singletons:,}")
    console.print(f" Call rate             {format_value(summary.call_rate)}")
    console.print(f" Autocall call rate    {format_value(summary.autocall_call_rate)}")

    table = Table(title="Per-sample metrics")
    table.add_column("Chip well barcode")
    table.add_column("Sample alias")
    table.add_column("Call rate", justify="right")
    table.add_column("Het %", justify="right")
    table.add_column("Autocall PF", justify="center")
    table.add_column("Gender concordance", justify="center")

    for sample in result.samples:
        table.add_row(
            sample.identity.chip_well_barcode,
            sample.identity.sample_alias,
            format_value(sample.calling.call_rate),
            format_value(sample.het_pct),
            format_value(sample.autocall_pf),
            format_value(sample.gender_concordance_pf),
        )

    console.print(table)
