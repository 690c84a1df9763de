"""I/O utilities for transparent gzip handling.

Provides smart file opening that auto-detects gzip compression by checking
magic bytes, so arrays VCFs and dbSNP files can be read whether or not they
are compressed.

Example:
    with smart_open(Path("dbsnp.vcf.gz")) as f:
        for line in f:
            process(line)
"""

import gzip
from contextlib import contextmanager
from pathlib import Path
from typing import IO, Iterator

# Gzip magic bytes (first two bytes of gzip file)
GZIP_MAGIC = b"\x1f\x8b"


def is_gzipped(filepath: Path) -> bool:
    """Detect if a file is gzip-compressed.

    Checks magic bytes first, falls back to the extension if the file is
    too small or unreadable.

    Args:
        filepath: Path to file to check

    Returns:
        True if file is gzip-compressed
    """
    try:
        with open(filepath, "rb") as f:
            magic = f.read(2)
            if len(magic) >= 2:
                return magic == GZIP_MAGIC
    except OSError:
        pass

    return filepath.suffix == ".gz"


@contextmanager
def smart_open(filepath: Path) -> Iterator[IO[str]]:
    """Open a text file with automatic gzip detection.

    BGZF-compressed VCFs are valid gzip streams and are read the same way.

    Args:
        filepath: Path to file (may be .gz or uncompressed)

    Yields:
        Text file handle
    """
    if is_gzipped(filepath):
        f = gzip.open(filepath, "rt", encoding="utf-8")
    else:
        f = open(filepath, "rt", encoding="utf-8")

    try:
        yield f
    finally:
        f.close()


def iter_data_lines(filepath: Path) -> Iterator[str]:
    """Iterate over non-header lines of a VCF-like file.

    Lines starting with '#' and blank lines are skipped; trailing newlines
    are stripped.

    Args:
        filepath: Path to file (may be gzipped)

    Yields:
        Data lines in file order
    """
    with smart_open(filepath) as f:
        for line in f:
            if line.startswith("#"):
                continue
            line = line.rstrip("\n")
            if line:
                yield line


def count_data_lines(filepath: Path) -> int:
    """Count data (non-header) lines in a VCF-like file.

    Args:
        filepath: Path to file (may be gzipped)

    Returns:
        Number of data lines
    """
    count = 0
    for _ in iter_data_lines(filepath):
        count += 1
    return count
