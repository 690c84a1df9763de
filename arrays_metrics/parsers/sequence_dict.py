"""Sequence dictionary reader.

Accepts a SAM-style .dict file or any VCF with ##contig header lines.

.dict format:
@HD	VN:1.6
@SQ	SN:chr1	LN:248956422
"""

from pathlib import Path

from arrays_metrics.exceptions import VcfFormatError
from arrays_metrics.io_utils import smart_open
from arrays_metrics.parsers.vcf import read_header
from arrays_metrics.utils import normalize_chromosome


def parse_dict_file(filepath: Path) -> dict[str, int]:
    """Read @SQ lines of a SAM sequence dictionary.

    Returns:
        Normalized contig name -> length, in file order
    """
    contigs: dict[str, int] = {}
    with smart_open(filepath) as f:
        for line in f:
            if not line.startswith("@SQ"):
                continue
            tags = dict(
                token.split(":", 1) for token in line.rstrip("\n").split("\t")[1:] if ":" in token
            )
            if "SN" not in tags or "LN" not in tags:
                raise VcfFormatError(f"@SQ line without SN/LN in {filepath}: {line.strip()}")
            contigs[normalize_chromosome(tags["SN"])] = int(tags["LN"])
    return contigs


def load_sequence_dictionary(filepath: Path) -> dict[str, int | None]:
    """Load contig names and lengths from a .dict file or a VCF header.

    Args:
        filepath: Path to .dict file or VCF (may be gzipped)

    Returns:
        Normalized contig name -> length (None when a VCF contig line has
        no length)

    Raises:
        FileNotFoundError: If the file doesn't exist
        VcfFormatError: If no contigs are found
    """
    if not filepath.exists():
        raise FileNotFoundError(f"Sequence dictionary not found: {filepath}")

    name = filepath.name.lower()
    if name.endswith(".dict") or name.endswith(".dict.gz"):
        contigs: dict[str, int | None] = dict(parse_dict_file(filepath))
    else:
        header = read_header(filepath)
        contigs = {
            normalize_chromosome(contig): length for contig, length in header.contigs.items()
        }

    if not contigs:
        raise VcfFormatError(f"No contigs found in sequence dictionary {filepath}")
    return contigs
