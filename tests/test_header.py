"""Tests for arrays VCF header metadata parsing."""

from pathlib import Path

import pytest

from arrays_metrics.exceptions import VcfFormatError
from arrays_metrics.models import ControlInfo, SampleIdentity
from arrays_metrics.parsers.header import (
    CONTROL_INFO,
    build_sample_templates,
    parse_control_infos,
    parse_control_string,
)
from arrays_metrics.parsers.vcf import VcfHeader, read_header


class TestControlInfos:
    """Tests for control-code header lines."""

    def test_parse_control_string(self) -> None:
        info = parse_control_string("NP(A)|Non-Polymorphic|812|77")
        assert info == ControlInfo("NP(A)", "Non-Polymorphic", 812, 77)

    @pytest.mark.parametrize(
        "value",
        ["NP(A)|Non-Polymorphic|812", "a|b|c|d|e", "NP(A)|Non-Polymorphic|red|77"],
    )
    def test_invalid_control_string(self, value: str) -> None:
        with pytest.raises(VcfFormatError):
            parse_control_string(value)

    def test_all_controls_in_order(self, arrays_vcf: Path) -> None:
        controls = parse_control_infos(read_header(arrays_vcf))

        assert len(controls) == 23
        assert [(c.control, c.category) for c in controls] == list(CONTROL_INFO)
        assert controls[0] == ControlInfo("DNP(High)", "Staining", 1000, 2000)
        assert controls[-1] == ControlInfo("Restore", "Restoration", 1022, 2022)

    def test_missing_control_line(self, make_arrays_vcf) -> None:
        header = read_header(make_arrays_vcf(controls=False))

        with pytest.raises(VcfFormatError, match=r"missing header line of type 'DNP\(High\)'"):
            parse_control_infos(header)


class TestSampleTemplates:
    """Tests for build_sample_templates."""

    def test_metadata_fields(self, arrays_vcf: Path) -> None:
        templates = build_sample_templates(read_header(arrays_vcf))
        sample = templates[0]

        assert sample.identity == SampleIdentity("S1", "S1", 1, "GSA-24v3-0_A1")
        assert sample.gtc_call_rate == pytest.approx(0.991)
        assert sample.p95_green == 5200
        assert sample.p95_red == 4800
        assert sample.autocall_gender == "Female"
        assert sample.fp_gender == "Female"
        assert sample.reported_gender == "Female"
        assert sample.cluster_file_name == "GSA-24v3-0_A1_ClusterFile.egt"
        assert sample.scanner_name == "N370"
        assert sample.zcall_thresholds_file == "thresholds.txt"
        assert sample.calling.num_assays == 0

    def test_one_template_per_sample(self, arrays_vcf: Path) -> None:
        templates = build_sample_templates(read_header(arrays_vcf))
        assert [t.identity.chip_well_barcode for t in templates] == ["S1", "S2"]

    def test_single_sample_uses_alias(self) -> None:
        header = VcfHeader(meta={"sampleAlias": "NA12878"}, samples=("204126290052_R01C01",))
        (sample,) = build_sample_templates(header)

        assert sample.identity.chip_well_barcode == "204126290052_R01C01"
        assert sample.identity.sample_alias == "NA12878"

    def test_multi_sample_ignores_alias(self) -> None:
        header = VcfHeader(meta={"sampleAlias": "NA12878"}, samples=("A", "B"))
        aliases = [t.identity.sample_alias for t in build_sample_templates(header)]
        assert aliases == ["A", "B"]

    def test_missing_optional_metadata(self) -> None:
        (sample,) = build_sample_templates(VcfHeader(samples=("A",)))

        assert sample.identity == SampleIdentity("A", "A", None, None)
        assert sample.gtc_call_rate is None
        assert sample.p95_green is None

    def test_non_numeric_metadata(self) -> None:
        header = VcfHeader(meta={"p95Green": "bright"}, samples=("A",))
        with pytest.raises(VcfFormatError, match="p95Green"):
            build_sample_templates(header)
