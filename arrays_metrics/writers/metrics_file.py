"""Tab-delimited metrics file writers.

Each file has a short commented header naming the metrics class, then one
header row of upper-case column names and one row per record:

## METRICS CLASS	ArraysVariantCallingSummaryMetrics
NUM_ASSAYS	NUM_NON_FILTERED_ASSAYS	...
1000	990	...

Values are rendered as: booleans Y/N, missing values empty, NaN ratios '?'.
Files are written to a temporary file first and renamed into place.
"""

import logging
import math
import tempfile
from collections.abc import Callable, Iterable, Sequence
from datetime import datetime
from pathlib import Path
from typing import Any

import pandas as pd

from arrays_metrics.metrics.partial import MetricsResult
from arrays_metrics.metrics.records import NOT_COMPUTED, CallingMetrics, SampleMetrics
from arrays_metrics.models import ControlInfo

logger = logging.getLogger(__name__)

NAN_REPR = "?"

Column = tuple[str, Callable[[Any], Any]]

SUMMARY_COLUMNS: tuple[Column, ...] = (
    ("NUM_ASSAYS", lambda m: m.num_assays),
    ("NUM_NON_FILTERED_ASSAYS", lambda m: m.num_non_filtered_assays),
    ("NUM_FILTERED_ASSAYS", lambda m: m.num_filtered_assays),
    ("NUM_ZEROED_OUT_ASSAYS", lambda m: m.num_zeroed_out_assays),
    ("NUM_SNPS", lambda m: m.num_snps),
    ("NUM_INDELS", lambda m: m.num_indels),
    ("NUM_CALLS", lambda m: m.num_calls),
    ("NUM_AUTOCALL_CALLS", lambda m: m.num_autocall_calls),
    ("NUM_NO_CALLS", lambda m: m.num_no_calls),
    ("NUM_IN_DB_SNP", lambda m: m.num_in_db_snp),
    ("NOVEL_SNPS", lambda m: m.novel_snps),
    ("PCT_DBSNP", lambda m: m.pct_dbsnp),
    ("CALL_RATE", lambda m: m.call_rate),
    ("AUTOCALL_CALL_RATE", lambda m: m.autocall_call_rate),
    ("NUM_SINGLETONS", lambda m: m.num_singletons),
)

DETAIL_COLUMNS: tuple[Column, ...] = (
    ("CHIP_WELL_BARCODE", lambda s: s.identity.chip_well_barcode),
    ("SAMPLE_ALIAS", lambda s: s.identity.sample_alias),
    ("ANALYSIS_VERSION", lambda s: s.identity.analysis_version),
    ("CHIP_TYPE", lambda s: s.identity.chip_type),
    ("AUTOCALL_PF", lambda s: s.autocall_pf),
    ("AUTOCALL_DATE", lambda s: s.autocall_date),
    ("IMAGING_DATE", lambda s: s.imaging_date),
    ("IS_ZCALLED", lambda s: s.is_zcalled),
    ("GTC_CALL_RATE", lambda s: s.gtc_call_rate),
    ("AUTOCALL_GENDER", lambda s: s.autocall_gender),
    ("FP_GENDER", lambda s: s.fp_gender),
    ("REPORTED_GENDER", lambda s: s.reported_gender),
    ("GENDER_CONCORDANCE_PF", lambda s: s.gender_concordance_pf),
    ("HET_PCT", lambda s: s.het_pct),
    ("CLUSTER_FILE_NAME", lambda s: s.cluster_file_name),
    ("P95_GREEN", lambda s: s.p95_green),
    ("P95_RED", lambda s: s.p95_red),
    ("AUTOCALL_VERSION", lambda s: s.autocall_version),
    ("ZCALL_VERSION", lambda s: s.zcall_version),
    ("EXTENDED_MANIFEST_VERSION", lambda s: s.extended_manifest_version),
    ("HET_HOMVAR_RATIO", lambda s: s.het_homvar_ratio),
    ("SCANNER_NAME", lambda s: s.scanner_name),
    ("PIPELINE_VERSION", lambda s: s.pipeline_version),
) + tuple((name, lambda s, get=get: get(s.calling)) for name, get in SUMMARY_COLUMNS)

CONTROL_COLUMNS: tuple[Column, ...] = (
    ("CONTROL", lambda c: c.control),
    ("CATEGORY", lambda c: c.category),
    ("RED", lambda c: c.red),
    ("GREEN", lambda c: c.green),
)


def format_value(value: Any) -> str:
    """Render one metric value as text.

    Example:
        >>> format_value(float("nan"))
        '?'
        >>> format_value(True)
        'Y'
        >>> format_value(0.25)
        '0.25'
    """
    if value is None:
        return ""
    if value is NOT_COMPUTED:
        raise ValueError("Cannot write a metric whose derived fields are not computed")
    if isinstance(value, bool):
        return "Y" if value else "N"
    if isinstance(value, float):
        if math.isnan(value):
            return NAN_REPR
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        return f"{value:.6f}".rstrip("0").rstrip(".")
    return str(value)


def metrics_frame(rows: Iterable[Any], columns: Sequence[Column]) -> pd.DataFrame:
    """Build a string-valued DataFrame with one row per record."""
    data = [[format_value(get(row)) for _, get in columns] for row in rows]
    return pd.DataFrame(data, columns=[name for name, _ in columns], dtype=str)


def _write_temp(output_path: Path, metrics_class: str, frame: pd.DataFrame) -> Path:
    """Write a metrics table to a temporary file beside its destination."""
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with tempfile.NamedTemporaryFile(
        mode="w",
        dir=output_path.parent,
        suffix=".metrics.tmp",
        delete=False,
    ) as tmp:
        tmp_path = Path(tmp.name)
        try:
            tmp.write(f"# Written by arrays-metrics on {datetime.now().isoformat()}\n")
            tmp.write(f"## METRICS CLASS\t{metrics_class}\n")
            frame.to_csv(tmp, sep="\t", index=False, lineterminator="\n")
            tmp.write("\n")
        except Exception:
            tmp.close()
            tmp_path.unlink(missing_ok=True)
            raise
    return tmp_path


def write_metrics_file(
    output_path: Path,
    metrics_class: str,
    frame: pd.DataFrame,
) -> Path:
    """Write a metrics table atomically.

    Args:
        output_path: Destination file
        metrics_class: Name recorded in the file header
        frame: Table to write

    Returns:
        Path to the written file
    """
    _write_temp(output_path, metrics_class, frame).replace(output_path)
    logger.info(f"Wrote {len(frame)} rows to {output_path}")
    return output_path


def write_summary_metrics(output_path: Path, summary: CallingMetrics) -> Path:
    return write_metrics_file(
        output_path,
        "ArraysVariantCallingSummaryMetrics",
        metrics_frame([summary], SUMMARY_COLUMNS),
    )


def write_detail_metrics(output_path: Path, samples: Iterable[SampleMetrics]) -> Path:
    return write_metrics_file(
        output_path,
        "ArraysVariantCallingDetailMetrics",
        metrics_frame(samples, DETAIL_COLUMNS),
    )


def write_control_code_metrics(output_path: Path, controls: Iterable[ControlInfo]) -> Path:
    return write_metrics_file(
        output_path,
        "ArraysControlCodesSummaryMetrics",
        metrics_frame(controls, CONTROL_COLUMNS),
    )


def write_all(
    result: MetricsResult,
    controls: Sequence[ControlInfo],
    detail_path: Path,
    summary_path: Path,
    control_path: Path,
) -> list[Path]:
    """Write the detail, summary and control-code metrics files.

    All three tables are rendered and written to temporary files before
    any of them is renamed into place. If any step fails, no output
    file from this call is left behind.

    Returns:
        Paths of the written files
    """
    tables = [
        (detail_path, "ArraysVariantCallingDetailMetrics",
         metrics_frame(result.samples, DETAIL_COLUMNS)),
        (summary_path, "ArraysVariantCallingSummaryMetrics",
         metrics_frame([result.summary], SUMMARY_COLUMNS)),
        (control_path, "ArraysControlCodesSummaryMetrics",
         metrics_frame(controls, CONTROL_COLUMNS)),
    ]

    staged: list[tuple[Path, Path]] = []
    committed: list[Path] = []
    try:
        for output_path, metrics_class, frame in tables:
            staged.append((_write_temp(output_path, metrics_class, frame), output_path))
        for tmp_path, output_path in staged:
            tmp_path.replace(output_path)
            committed.append(output_path)
    except Exception:
        logger.error("Writing metrics files failed; removing partial output")
        for tmp_path, _ in staged:
            tmp_path.unlink(missing_ok=True)
        for output_path in committed:
            output_path.unlink(missing_ok=True)
        raise

    for output_path, _, frame in tables:
        logger.info(f"Wrote {len(frame)} rows to {output_path}")
    return committed
