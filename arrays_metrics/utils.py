"""Utility functions for allele and chromosome handling."""


def normalize_chromosome(chr_val: str) -> str:
    """Normalize chromosome value to consistent format.

    Handles variations like "chr1" -> "1", "01" -> "1".

    Args:
        chr_val: Chromosome value (may include "chr" prefix)

    Returns:
        Normalized chromosome value

    Example:
        >>> normalize_chromosome("chr1")
        "1"
        >>> normalize_chromosome("X")
        "X"
    """
    if chr_val.lower().startswith("chr"):
        chr_val = chr_val[3:]

    if chr_val.isdigit():
        chr_val = str(int(chr_val))

    return chr_val


def is_snp(ref: str, alts: tuple[str, ...]) -> bool:
    """Check if a site is a bi-allelic SNP.

    Args:
        ref: Reference allele
        alts: Alternate alleles ('.' entries already removed)

    Returns:
        True for exactly one single-base alternate against a single-base ref
    """
    return len(ref) == 1 and len(alts) == 1 and len(alts[0]) == 1 and alts[0] != "*"


def is_indel(ref: str, alts: tuple[str, ...]) -> bool:
    """Check if a site is an insertion or deletion.

    Any alternate allele whose length differs from the reference allele
    makes the site an indel. Symbolic alleles (<DEL>, *) are ignored.

    Args:
        ref: Reference allele
        alts: Alternate alleles ('.' entries already removed)

    Returns:
        True if at least one alternate allele changes the length
    """
    for alt in alts:
        if alt.startswith("<") or alt == "*":
            continue
        if len(alt) != len(ref):
            return True
    return False
