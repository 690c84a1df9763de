"""Pytest fixtures for arrays_metrics tests."""

import gzip
from collections.abc import Callable, Sequence
from pathlib import Path

import pytest

from arrays_metrics.logging_config import reset_logging
from arrays_metrics.parsers.header import CONTROL_INFO

SAMPLE_META = {
    "analysisVersionNumber": "1",
    "arrayType": "GSA-24v3-0_A1",
    "autocallDate": "2024-01-15T10:00:00",
    "imagingDate": "2024-01-14T09:00:00",
    "gtcCallRate": "0.991",
    "autocallGender": "Female",
    "fingerprintGender": "Female",
    "reportedGender": "Female",
    "clusterFile": "GSA-24v3-0_A1_ClusterFile.egt",
    "p95Green": "5200",
    "p95Red": "4800",
    "autocallVersion": "3.0.0",
    "zcallVersion": "1.0.0.0",
    "extendedIlluminaManifestVersion": "1.3",
    "scannerName": "N370",
    "pipelineVersion": "1.0",
    "zcallThresholds": "thresholds.txt",
}

CONTIGS = {"1": 1_000_000, "2": 1_000_000}

# (chrom, pos, id, ref, alt, filter, GT:GTA per sample)
TWO_SAMPLE_RECORDS = [
    ("1", 100, "rs1", "A", "G", "PASS", ["0/1:0/1", "0/0:0/0"]),
    ("1", 200, "rs2", "C", "T", "PASS", ["1/1:1/1", "0/1:./."]),
    ("1", 300, "rs3", "G", "A", "PASS", ["./.:./.", "0/0:0/0"]),
    ("1", 400, "indel1", "AT", "A", "PASS", ["0/1:0/1", "0/0:0/0"]),
    ("1", 500, "rs5", "C", "G", "FAIL", ["0/1:0/1", "0/1:0/1"]),
    ("2", 600, "rs6", "T", "C", "ZEROED_OUT_ASSAY", ["./.:./.", "./.:./."]),
]

DBSNP_RECORDS = [
    ("1", 100, "rs1", "A", "G"),
    ("1", 300, "rs3", "G", "A"),
    ("1", 400, "rs4", "AT", "A"),
    ("3", 100, "rs9", "A", "C"),
]


def control_lines() -> list[str]:
    """One header line per Infinium control, with distinct intensities."""
    return [
        f"##{control}={control}|{category}|{1000 + i}|{2000 + i}"
        for i, (control, category) in enumerate(CONTROL_INFO)
    ]


@pytest.fixture(autouse=True)
def clean_logging():
    """Reset root logger handlers around every test."""
    reset_logging()
    yield
    reset_logging()


@pytest.fixture
def sample_meta() -> dict[str, str]:
    """Copy of the default per-sample header values, safe to modify."""
    return dict(SAMPLE_META)


@pytest.fixture
def make_arrays_vcf(tmp_path: Path) -> Callable[..., Path]:
    """Factory writing a small arrays VCF.

    Args (of the returned callable):
        samples: Sample column names
        records: (chrom, pos, id, ref, alt, filter, per-sample values)
        meta: Header key/values (default SAMPLE_META)
        controls: Include the control-code header lines
        contigs: Contig name -> length for ##contig lines
        format_keys: FORMAT column value
        name: File name; a .gz suffix writes gzip
    """

    def _make(
        samples: Sequence[str] = ("S1", "S2"),
        records: Sequence[tuple] = tuple(TWO_SAMPLE_RECORDS),
        meta: dict[str, str] | None = None,
        controls: bool = True,
        contigs: dict[str, int] | None = None,
        format_keys: str = "GT:GTA",
        name: str = "arrays.vcf",
    ) -> Path:
        lines = ["##fileformat=VCFv4.2"]
        for key, value in (SAMPLE_META if meta is None else meta).items():
            lines.append(f"##{key}={value}")
        if controls:
            lines.extend(control_lines())
        lines.append('##FORMAT=<ID=GT,Number=1,Type=String,Description="Genotype">')
        for contig, length in (CONTIGS if contigs is None else contigs).items():
            lines.append(f"##contig=<ID={contig},length={length}>")
        lines.append(
            "\t".join(
                ["#CHROM", "POS", "ID", "REF", "ALT", "QUAL", "FILTER", "INFO", "FORMAT"]
                + list(samples)
            )
        )
        for chrom, pos, vid, ref, alt, filt, values in records:
            lines.append(
                "\t".join(
                    [chrom, str(pos), vid, ref, alt, ".", filt, ".", format_keys] + list(values)
                )
            )

        path = tmp_path / name
        text = "\n".join(lines) + "\n"
        if name.endswith(".gz"):
            with gzip.open(path, "wt") as f:
                f.write(text)
        else:
            path.write_text(text)
        return path

    return _make


@pytest.fixture
def make_dbsnp(tmp_path: Path) -> Callable[..., Path]:
    """Factory writing a small dbSNP VCF."""

    def _make(
        records: Sequence[tuple] = tuple(DBSNP_RECORDS),
        name: str = "dbsnp.vcf",
    ) -> Path:
        lines = [
            "##fileformat=VCFv4.2",
            "#CHROM\tPOS\tID\tREF\tALT\tQUAL\tFILTER\tINFO",
        ]
        for chrom, pos, vid, ref, alt in records:
            lines.append(f"{chrom}\t{pos}\t{vid}\t{ref}\t{alt}\t.\t.\t.")

        path = tmp_path / name
        text = "\n".join(lines) + "\n"
        if name.endswith(".gz"):
            with gzip.open(path, "wt") as f:
                f.write(text)
        else:
            path.write_text(text)
        return path

    return _make


@pytest.fixture
def arrays_vcf(make_arrays_vcf: Callable[..., Path]) -> Path:
    """Two-sample arrays VCF with passing, filtered and zeroed-out assays."""
    return make_arrays_vcf()


@pytest.fixture
def dbsnp_vcf(make_dbsnp: Callable[..., Path]) -> Path:
    """dbSNP VCF containing rs1 and rs3 of the arrays fixture."""
    return make_dbsnp()
