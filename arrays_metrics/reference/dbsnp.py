"""dbSNP membership index.

Loads a dbSNP VCF into per-contig sorted numpy arrays of SNP and indel
positions, answering membership queries with a binary search. The index is
built once before any worker starts and never mutated afterwards, so
concurrent readers need no locking.

dbSNP VCF format (tab-separated, only the first five columns are read):
#CHROM  POS     ID          REF  ALT
1       10177   rs367896724 A    AC
"""

import logging
from pathlib import Path

import numpy as np
from rich.progress import Progress, SpinnerColumn, TextColumn

from arrays_metrics.io_utils import iter_data_lines
from arrays_metrics.models import VariantKind
from arrays_metrics.utils import is_indel, normalize_chromosome

logger = logging.getLogger(__name__)


class MembershipIndex:
    """Read-only set of known SNP and indel sites.

    Two position sets are kept per contig:
    - SNP sites: the position of each single-base substitution
    - Indel sites: every reference base spanned by an insertion or deletion
    """

    def __init__(
        self,
        snps: dict[str, np.ndarray] | None = None,
        indels: dict[str, np.ndarray] | None = None,
    ) -> None:
        self._sites: dict[VariantKind, dict[str, np.ndarray]] = {
            VariantKind.SNP: {k: _freeze(v) for k, v in (snps or {}).items()},
            VariantKind.INDEL: {k: _freeze(v) for k, v in (indels or {}).items()},
        }

    @classmethod
    def build(
        cls,
        reference_path: Path,
        sequence_dictionary: dict[str, int | None] | None = None,
        verbose: bool = False,
    ) -> "MembershipIndex":
        """Load dbSNP sites from a VCF.

        Args:
            reference_path: Path to dbSNP VCF (may be gzipped)
            sequence_dictionary: Contig -> length; when given, sites on
                other contigs or beyond a contig's length are skipped
            verbose: Show a progress spinner while loading

        Raises:
            FileNotFoundError: If the file doesn't exist
            ValueError: If a line has fewer than five columns or a bad POS
        """
        if not reference_path.exists():
            raise FileNotFoundError(f"dbSNP file not found: {reference_path}")

        snp_positions: dict[str, list[int]] = {}
        indel_positions: dict[str, list[int]] = {}
        skipped = 0
        line_count = 0

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            transient=True,
            disable=not verbose,
        ) as progress:
            task = progress.add_task(f"Loading dbSNP from {reference_path.name}...")

            for line_num, line in enumerate(iter_data_lines(reference_path), 1):
                parts = line.split("\t", 5)
                if len(parts) < 5:
                    raise ValueError(
                        f"Invalid dbSNP format at record {line_num}: expected at least "
                        f"5 columns, got {len(parts)}"
                    )

                chrom = normalize_chromosome(parts[0])
                try:
                    pos = int(parts[1])
                except ValueError:
                    raise ValueError(
                        f"Invalid POS '{parts[1]}' at dbSNP record {line_num}"
                    ) from None

                if sequence_dictionary is not None:
                    if chrom not in sequence_dictionary:
                        skipped += 1
                        continue
                    length = sequence_dictionary[chrom]
                    if length is not None and pos > length:
                        skipped += 1
                        continue

                ref = parts[3].upper()
                alts = tuple(a.upper() for a in parts[4].split(",") if a != ".")

                line_count += 1
                if verbose and line_count % 100000 == 0:
                    progress.update(task, description=f"Loading dbSNP... {line_count:,} sites")

                # A multi-allelic dbSNP site can be both a SNP and an indel site
                if len(ref) == 1 and any(len(alt) == 1 and alt != "*" for alt in alts):
                    snp_positions.setdefault(chrom, []).append(pos)
                if is_indel(ref, alts):
                    span = range(pos, pos + max(len(ref), 1))
                    indel_positions.setdefault(chrom, []).extend(span)

        if skipped:
            logger.info(f"Skipped {skipped:,} dbSNP sites outside the sequence dictionary")

        index = cls(
            snps={c: np.asarray(p, dtype=np.int64) for c, p in snp_positions.items()},
            indels={c: np.asarray(p, dtype=np.int64) for c, p in indel_positions.items()},
        )
        logger.info(
            f"Loaded dbSNP index: {index.count(VariantKind.SNP):,} SNP sites, "
            f"{index.count(VariantKind.INDEL):,} indel positions"
        )
        return index

    def contains(self, chrom: str, pos: int, kind: VariantKind = VariantKind.SNP) -> bool:
        """Check whether a site is a known site of the given kind.

        Args:
            chrom: Chromosome (normalized or with 'chr' prefix)
            pos: 1-based position
            kind: SNP or INDEL

        Returns:
            True if the position is a known site
        """
        positions = self._sites[kind].get(normalize_chromosome(chrom))
        if positions is None or positions.size == 0:
            return False
        i = int(np.searchsorted(positions, pos))
        return i < positions.size and int(positions[i]) == pos

    def count(self, kind: VariantKind) -> int:
        """Number of distinct positions of the given kind."""
        return sum(int(p.size) for p in self._sites[kind].values())

    @property
    def contigs(self) -> set[str]:
        return set(self._sites[VariantKind.SNP]) | set(self._sites[VariantKind.INDEL])

    def __len__(self) -> int:
        return self.count(VariantKind.SNP) + self.count(VariantKind.INDEL)


def _freeze(positions: np.ndarray) -> np.ndarray:
    """Sort, de-duplicate and lock a position array against writes."""
    unique = np.unique(np.asarray(positions, dtype=np.int64))
    unique.setflags(write=False)
    return unique
