"""Arrays VCF header metadata.

Arrays VCFs written by the GTC-to-VCF conversion carry sample metadata and
Infinium control intensities as ##key=value header lines:

##chipWellBarcode=204126290052_R01C01
##arrayType=GSA-24v3-0_A1
##DNP(High)=DNP(High)|Staining|18923|1022
"""

from arrays_metrics.exceptions import VcfFormatError
from arrays_metrics.metrics.records import SampleMetrics
from arrays_metrics.models import ControlInfo, SampleIdentity
from arrays_metrics.parsers.vcf import VcfHeader

# Infinium control probes (name, category) in report order
CONTROL_INFO: tuple[tuple[str, str], ...] = (
    ("DNP(High)", "Staining"),
    ("DNP(Bgnd)", "Staining"),
    ("Biotin(High)", "Staining"),
    ("Biotin(Bgnd)", "Staining"),
    ("Extension(A)", "Extension"),
    ("Extension(T)", "Extension"),
    ("Extension(C)", "Extension"),
    ("Extension(G)", "Extension"),
    ("Target Removal", "Target Removal"),
    ("Hyb(High)", "Hybridization"),
    ("Hyb(Medium)", "Hybridization"),
    ("Hyb(Low)", "Hybridization"),
    ("String(PM)", "Stringency"),
    ("String(MM)", "Stringency"),
    ("NSB(Bgnd)Red", "Non-Specific Binding"),
    ("NSB(Bgnd)Purple", "Non-Specific Binding"),
    ("NSB(Bgnd)Blue", "Non-Specific Binding"),
    ("NSB(Bgnd)Green", "Non-Specific Binding"),
    ("NP(A)", "Non-Polymorphic"),
    ("NP(T)", "Non-Polymorphic"),
    ("NP(C)", "Non-Polymorphic"),
    ("NP(G)", "Non-Polymorphic"),
    ("Restore", "Restoration"),
)

# Header keys for per-sample metadata
SAMPLE_ALIAS = "sampleAlias"
ANALYSIS_VERSION_NUMBER = "analysisVersionNumber"
ARRAY_TYPE = "arrayType"
AUTOCALL_DATE = "autocallDate"
IMAGING_DATE = "imagingDate"
GTC_CALL_RATE = "gtcCallRate"
AUTOCALL_GENDER = "autocallGender"
FINGERPRINT_GENDER = "fingerprintGender"
REPORTED_GENDER = "reportedGender"
CLUSTER_FILE = "clusterFile"
P95_GREEN = "p95Green"
P95_RED = "p95Red"
AUTOCALL_VERSION = "autocallVersion"
ZCALL_VERSION = "zcallVersion"
EXTENDED_MANIFEST_VERSION = "extendedIlluminaManifestVersion"
SCANNER_NAME = "scannerName"
PIPELINE_VERSION = "pipelineVersion"
ZCALL_THRESHOLDS = "zcallThresholds"


def parse_control_string(value: str) -> ControlInfo:
    """Parse a control header value of the form name|category|red|green.

    Raises:
        VcfFormatError: If the value does not have four fields or the
            intensities are not integers
    """
    tokens = value.split("|")
    if len(tokens) != 4:
        raise VcfFormatError(f"Invalid control header value: '{value}'")
    try:
        return ControlInfo(
            control=tokens[0],
            category=tokens[1],
            red=int(tokens[2]),
            green=int(tokens[3]),
        )
    except ValueError:
        raise VcfFormatError(f"Invalid control intensities in '{value}'") from None


def parse_control_infos(header: VcfHeader) -> list[ControlInfo]:
    """Read all Infinium control intensities from the header.

    Raises:
        VcfFormatError: If any control header line is missing
    """
    controls: list[ControlInfo] = []
    for control, _ in CONTROL_INFO:
        value = header.get(control)
        if value is None:
            raise VcfFormatError(
                f"Input VCF file is missing header line of type '{control}'"
            )
        controls.append(parse_control_string(value))
    return controls


def _optional_int(header: VcfHeader, key: str) -> int | None:
    value = header.get(key)
    if value is None or value == "":
        return None
    try:
        return int(value)
    except ValueError:
        raise VcfFormatError(f"Header line '{key}' is not an integer: '{value}'") from None


def _optional_float(header: VcfHeader, key: str) -> float | None:
    value = header.get(key)
    if value is None or value == "":
        return None
    try:
        return float(value)
    except ValueError:
        raise VcfFormatError(f"Header line '{key}' is not a number: '{value}'") from None


def build_sample_templates(header: VcfHeader) -> list[SampleMetrics]:
    """Create zeroed per-sample records from header metadata.

    The chip well barcode is the sample column name. The sampleAlias header
    line only names the sample of a single-sample VCF; in multi-sample
    files each sample's alias is its column name.

    Args:
        header: Parsed VCF header

    Returns:
        One SampleMetrics per sample, in header order
    """
    single_sample = len(header.samples) == 1
    analysis_version = _optional_int(header, ANALYSIS_VERSION_NUMBER)
    chip_type = header.get(ARRAY_TYPE)

    templates: list[SampleMetrics] = []
    for sample_name in header.samples:
        alias = header.get(SAMPLE_ALIAS) if single_sample else None
        identity = SampleIdentity(
            chip_well_barcode=sample_name,
            sample_alias=alias or sample_name,
            analysis_version=analysis_version,
            chip_type=chip_type,
        )
        templates.append(
            SampleMetrics(
                identity=identity,
                autocall_date=header.get(AUTOCALL_DATE),
                imaging_date=header.get(IMAGING_DATE),
                gtc_call_rate=_optional_float(header, GTC_CALL_RATE),
                autocall_gender=header.get(AUTOCALL_GENDER),
                fp_gender=header.get(FINGERPRINT_GENDER),
                reported_gender=header.get(REPORTED_GENDER),
                cluster_file_name=header.get(CLUSTER_FILE),
                p95_green=_optional_int(header, P95_GREEN),
                p95_red=_optional_int(header, P95_RED),
                autocall_version=header.get(AUTOCALL_VERSION),
                zcall_version=header.get(ZCALL_VERSION),
                extended_manifest_version=header.get(EXTENDED_MANIFEST_VERSION),
                scanner_name=header.get(SCANNER_NAME),
                pipeline_version=header.get(PIPELINE_VERSION),
                zcall_thresholds_file=header.get(ZCALL_THRESHOLDS),
            )
        )
    return templates
