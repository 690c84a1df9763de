"""Typer CLI for arrays variant calling metrics.

Usage:
    # All cores
    arrays-metrics collect -i arrays.vcf.gz -d dbsnp.vcf.gz -o out/sample

    # Leave two cores free, stricter call rate
    arrays-metrics collect -i arrays.vcf.gz -d dbsnp.vcf.gz -o out/sample \\
        -j -2 --call-rate-threshold 0.99
"""

import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from arrays_metrics import __version__
from arrays_metrics.config import DEFAULT_CALL_RATE_THRESHOLD

app = typer.Typer(
    name="arrays-metrics",
    help="Collect variant calling metrics from a genotyping-arrays VCF",
    add_completion=False,
)

console = Console()


@app.callback()
def callback() -> None:
    """Genotyping arrays QC metrics."""


@app.command()
def collect(
    input_vcf: Annotated[
        Path,
        typer.Option(
            "--input", "-i",
            help="Arrays VCF (may be gzipped)",
            exists=True,
            file_okay=True,
            dir_okay=False,
            readable=True,
        ),
    ],
    dbsnp: Annotated[
        Path,
        typer.Option(
            "--dbsnp", "-d",
            help="dbSNP VCF used to flag known SNP sites",
            exists=True,
            file_okay=True,
            dir_okay=False,
            readable=True,
        ),
    ],
    output: Annotated[
        Path,
        typer.Option(
            "--output", "-o",
            help="Output prefix for the metrics files",
        ),
    ],
    call_rate_threshold: Annotated[
        float,
        typer.Option(
            "--call-rate-threshold",
            help="Call rate a sample must exceed to pass (greater than 0, at most 1)",
        ),
    ] = DEFAULT_CALL_RATE_THRESHOLD,
    sequence_dictionary: Annotated[
        Path | None,
        typer.Option(
            "--sequence-dictionary", "-s",
            help="Sequence dictionary (.dict or VCF) restricting dbSNP loading "
            "(default: contigs of the input VCF)",
            exists=True,
            file_okay=True,
            dir_okay=False,
            readable=True,
        ),
    ] = None,
    num_processors: Annotated[
        int,
        typer.Option(
            "--num-processors", "-j",
            help="Worker processes; 0 = all cores, negative = all cores minus that many",
        ),
    ] = 0,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose", "-v",
            help="Enable verbose logging",
        ),
    ] = False,
    log_dir: Annotated[
        Path | None,
        typer.Option(
            "--log-dir",
            help="Directory for a rotating debug log file",
            file_okay=False,
            dir_okay=True,
        ),
    ] = None,
) -> None:
    """Collect summary, per-sample and control-code metrics.

    Writes three tab-delimited files next to the output prefix:

        {prefix}.arrays_variant_calling_detail_metrics
        {prefix}.arrays_variant_calling_summary_metrics
        {prefix}.arrays_control_code_summary_metrics
    """
    from arrays_metrics.config import Config
    from arrays_metrics.logging_config import setup_logging
    from arrays_metrics.main import run_collection

    setup_logging(
        log_dir=log_dir,
        console_level=logging.INFO if verbose else logging.WARNING,
    )

    console.print("\n")
    console.print("[bold]Arrays Variant Calling Metrics[/bold]", style="blue")
    console.print(f"Python implementation v{__version__}\n")

    config = Config(
        input_vcf=input_vcf,
        dbsnp_file=dbsnp,
        output_prefix=output,
        call_rate_threshold=call_rate_threshold,
        sequence_dictionary=sequence_dictionary,
        num_processors=num_processors,
        verbose=verbose,
        log_dir=log_dir,
    )

    console.print("Options Set:")
    console.print(f"Input VCF:                   {config.input_vcf}")
    console.print(f"dbSNP filename:              {config.dbsnp_file}")
    console.print(f"Output prefix:               {config.output_prefix}")
    console.print(f"Call rate threshold:         {config.call_rate_threshold}")
    if config.sequence_dictionary:
        console.print(f"Sequence dictionary:         {config.sequence_dictionary}")
    console.print(f"Workers:                     {config.worker_count}")
    if config.verbose:
        console.print("Verbose logging flag set")
    console.print("\n")

    errors = config.validate()
    if errors:
        for error in errors:
            console.print(f"[red]ERROR:[/red] {error}")
        raise typer.Exit(code=1)

    try:
        run_collection(config)
    except Exception as e:
        console.print(f"[red]ERROR:[/red] {e}")
        if verbose:
            import traceback
            console.print(traceback.format_exc())
        raise typer.Exit(code=1)


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
