"""Data models for arrays metrics collection.

Variant records as read from the arrays VCF, sample identities used as the
per-sample merge key, and the static control-code summary rows.
"""

from dataclasses import dataclass
from enum import Enum, auto


class FilterStatus(Enum):
    """Filter outcome of an assay."""

    PASSING = auto()
    FILTERED = auto()
    ZEROED_OUT = auto()  # Suppressed by Illumina at chip design time


class GenotypeCall(Enum):
    """Classification of one sample's genotype at one assay."""

    NO_CALL = auto()
    HOM_REF = auto()
    HET = auto()
    HOM_VAR = auto()

    @property
    def is_called(self) -> bool:
        return self is not GenotypeCall.NO_CALL

    @property
    def is_non_ref(self) -> bool:
        return self in (GenotypeCall.HET, GenotypeCall.HOM_VAR)


class VariantKind(Enum):
    """Site kind used for reference membership lookups."""

    SNP = auto()
    INDEL = auto()


class Sex(Enum):
    """Normalized sex classification used for concordance checks."""

    MALE = "Male"
    FEMALE = "Female"
    UNKNOWN = "Unknown"
    NOT_REPORTED = "NotReported"

    @classmethod
    def from_string(cls, value: str | None) -> "Sex":
        """Normalize a free-text sex value.

        Missing or empty values count as not reported; anything that is not
        recognizably male, female or not-reported is unknown.
        """
        if value is None:
            return cls.NOT_REPORTED
        normalized = value.strip().lower().replace("_", "").replace(" ", "")
        if normalized in ("", "notreported", "nr"):
            return cls.NOT_REPORTED
        if normalized in ("m", "male"):
            return cls.MALE
        if normalized in ("f", "female"):
            return cls.FEMALE
        return cls.UNKNOWN


@dataclass(frozen=True, slots=True)
class SampleIdentity:
    """Composite key identifying one sample's metrics across shards.

    Attributes:
        chip_well_barcode: Chip well barcode of the array being assayed
        sample_alias: Name of the sample
        analysis_version: Version number of the analysis run
        chip_type: Chip type name
    """

    chip_well_barcode: str
    sample_alias: str
    analysis_version: int | None
    chip_type: str | None


@dataclass(frozen=True, slots=True)
class VariantRecord:
    """One assay from the arrays VCF.

    Attributes:
        chrom: Normalized chromosome
        pos: 1-based position
        id: Variant identifier
        ref: Reference allele
        alts: Alternate alleles ('.' removed)
        filter_status: Passing, filtered or zeroed-out
        calls: Genotype call per sample, in header sample order
        autocall_calls: Autocall (GTA) call per sample, or None when the
            record carries no GTA field
    """

    chrom: str
    pos: int
    id: str
    ref: str
    alts: tuple[str, ...]
    filter_status: FilterStatus
    calls: tuple[GenotypeCall, ...]
    autocall_calls: tuple[GenotypeCall, ...] | None = None


@dataclass(frozen=True, slots=True)
class ControlInfo:
    """Intensities for one Infinium control probe (never merged)."""

    control: str
    category: str
    red: int
    green: int
