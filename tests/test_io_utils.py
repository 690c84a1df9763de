"""Tests for gzip-aware file helpers and allele utilities."""

import gzip
from pathlib import Path

import pytest

from arrays_metrics.io_utils import count_data_lines, is_gzipped, iter_data_lines, smart_open
from arrays_metrics.utils import is_indel, is_snp, normalize_chromosome


class TestIsGzipped:
    """Tests for gzip detection."""

    def test_gzip_by_magic_bytes(self, tmp_path: Path) -> None:
        path = tmp_path / "no_extension"
        with gzip.open(path, "wt") as f:
            f.write("data\n")
        assert is_gzipped(path)

    def test_plain_file_with_gz_extension(self, tmp_path: Path) -> None:
        path = tmp_path / "plain.gz"
        path.write_text("data\n")
        assert not is_gzipped(path)

    def test_plain_file(self, tmp_path: Path) -> None:
        path = tmp_path / "plain.vcf"
        path.write_text("data\n")
        assert not is_gzipped(path)

    def test_missing_file_falls_back_to_extension(self, tmp_path: Path) -> None:
        assert is_gzipped(tmp_path / "missing.vcf.gz")
        assert not is_gzipped(tmp_path / "missing.vcf")


class TestSmartOpen:
    """Tests for smart_open and data line helpers."""

    def test_reads_both(self, tmp_path: Path) -> None:
        plain = tmp_path / "a.txt"
        plain.write_text("x\n")
        compressed = tmp_path / "a.txt.gz"
        with gzip.open(compressed, "wt") as f:
            f.write("x\n")

        for path in (plain, compressed):
            with smart_open(path) as f:
                assert f.read() == "x\n"

    def test_iter_data_lines(self, tmp_path: Path) -> None:
        path = tmp_path / "a.vcf"
        path.write_text("##meta\n#CHROM\n1\t100\n\n2\t200\n")

        assert list(iter_data_lines(path)) == ["1\t100", "2\t200"]
        assert count_data_lines(path) == 2


class TestAlleleUtils:
    """Tests for chromosome and allele helpers."""

    @pytest.mark.parametrize(
        "value,expected",
        [("chr1", "1"), ("CHR2", "2"), ("01", "1"), ("X", "X"), ("chrMT", "MT")],
    )
    def test_normalize_chromosome(self, value: str, expected: str) -> None:
        assert normalize_chromosome(value) == expected

    @pytest.mark.parametrize(
        "ref,alts,expected",
        [
            ("A", ("G",), True),
            ("A", ("G", "T"), False),
            ("AT", ("A",), False),
            ("A", ("*",), False),
            ("A", (), False),
        ],
    )
    def test_is_snp(self, ref: str, alts: tuple[str, ...], expected: bool) -> None:
        assert is_snp(ref, alts) is expected

    @pytest.mark.parametrize(
        "ref,alts,expected",
        [
            ("AT", ("A",), True),
            ("A", ("AT",), True),
            ("A", ("G",), False),
            ("A", ("<DEL>",), False),
            ("A", ("G", "GT"), True),
        ],
    )
    def test_is_indel(self, ref: str, alts: tuple[str, ...], expected: bool) -> None:
        assert is_indel(ref, alts) is expected
