"""Tests for derived field resolution and sex concordance."""

import dataclasses
import itertools
import math

import pytest

from arrays_metrics.exceptions import ConfigurationError
from arrays_metrics.metrics import derived
from arrays_metrics.metrics.derived import (
    check_derivations,
    resolve,
    resolve_calling,
    resolve_sample,
    sex_concordance,
)
from arrays_metrics.metrics.partial import PartialResult
from arrays_metrics.metrics.records import NOT_COMPUTED, CallingMetrics, SampleMetrics
from arrays_metrics.models import SampleIdentity, Sex

IDENTITY = SampleIdentity("BC1", "alias", 1, "GSA")

SEX_VALUES = ["Male", "Female", "Unknown", "NotReported"]


def expected_concordance(*values: str) -> bool:
    male = values.count("Male")
    female = values.count("Female")
    if male + female == 0:
        return False
    return (female >= 2 and male == 0) or (male >= 2 and female == 0)


class TestSexConcordance:
    """Tests for sex_concordance."""

    @pytest.mark.parametrize(
        "reported,fingerprint,autocall,expected",
        [
            ("Female", "Female", "Female", True),
            ("Female", "Female", "Unknown", True),
            ("Male", "Female", "Unknown", False),
            ("Unknown", "NotReported", "Unknown", False),
            ("Female", "Male", "Male", False),
            ("Male", "Male", "NotReported", True),
            ("Male", "Unknown", "NotReported", False),
        ],
    )
    def test_literal_cases(
        self, reported: str, fingerprint: str, autocall: str, expected: bool
    ) -> None:
        assert sex_concordance(reported, fingerprint, autocall) is expected

    @pytest.mark.parametrize(
        "values", list(itertools.product(SEX_VALUES, repeat=3))
    )
    def test_full_table(self, values: tuple[str, str, str]) -> None:
        """All 64 combinations of the four sex classes."""
        assert sex_concordance(*values) is expected_concordance(*values)

    def test_missing_values_are_not_reported(self) -> None:
        assert sex_concordance(None, "", None) is False
        assert sex_concordance("Female", None, "F") is True


class TestSexParsing:
    """Tests for Sex.from_string."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("Male", Sex.MALE),
            ("m", Sex.MALE),
            ("FEMALE", Sex.FEMALE),
            ("f", Sex.FEMALE),
            ("NotReported", Sex.NOT_REPORTED),
            ("not_reported", Sex.NOT_REPORTED),
            ("", Sex.NOT_REPORTED),
            (None, Sex.NOT_REPORTED),
            ("Unknown", Sex.UNKNOWN),
            ("garbage", Sex.UNKNOWN),
        ],
    )
    def test_from_string(self, value: str | None, expected: Sex) -> None:
        assert Sex.from_string(value) is expected


class TestResolveCalling:
    """Tests for summary-level derivations."""

    def test_values(self) -> None:
        metrics = resolve_calling(
            CallingMetrics(
                num_non_filtered_assays=8,
                num_calls=7,
                num_autocall_calls=6,
                num_snps=5,
                num_in_db_snp=3,
            )
        )
        assert metrics.novel_snps == 2
        assert metrics.pct_dbsnp == pytest.approx(0.6)
        assert metrics.call_rate == pytest.approx(0.875)
        assert metrics.autocall_call_rate == pytest.approx(0.75)
        assert metrics.is_resolved

    def test_zero_denominators_are_nan(self) -> None:
        """An empty input resolves without raising."""
        metrics = resolve_calling(CallingMetrics())

        assert math.isnan(metrics.call_rate)
        assert math.isnan(metrics.autocall_call_rate)
        assert math.isnan(metrics.pct_dbsnp)
        assert metrics.novel_snps == 0


class TestResolveSample:
    """Tests for per-sample derivations."""

    def make_sample(self, **overrides) -> SampleMetrics:
        calling = CallingMetrics(
            num_non_filtered_assays=100,
            num_calls=99,
            num_hets=33,
            num_hom_var=11,
        )
        return dataclasses.replace(
            SampleMetrics(
                identity=IDENTITY,
                calling=calling,
                reported_gender="Male",
                fp_gender="Male",
                autocall_gender="Male",
            ),
            **overrides,
        )

    def test_values(self) -> None:
        sample = resolve_sample(self.make_sample(zcall_thresholds_file="z.txt"), 0.98)

        assert sample.calling.call_rate == pytest.approx(0.99)
        assert sample.het_pct == pytest.approx(1 / 3)
        assert sample.het_homvar_ratio == pytest.approx(3.0)
        assert sample.autocall_pf is True
        assert sample.is_zcalled is True
        assert sample.gender_concordance_pf is True
        assert sample.is_resolved

    def test_threshold_is_strict(self) -> None:
        sample = resolve_sample(self.make_sample(), 0.99)
        assert sample.autocall_pf is False

    def test_threshold_is_a_parameter(self) -> None:
        """The same sample passes or fails depending only on the argument."""
        sample = self.make_sample()
        assert resolve_sample(sample, 0.5).autocall_pf is True
        assert resolve_sample(sample, 0.995).autocall_pf is False

    def test_not_zcalled_without_thresholds_file(self) -> None:
        assert resolve_sample(self.make_sample(), 0.98).is_zcalled is False
        assert (
            resolve_sample(self.make_sample(zcall_thresholds_file=""), 0.98).is_zcalled
            is False
        )

    def test_zero_hom_var_ratio_is_nan(self) -> None:
        sample = self.make_sample(
            calling=CallingMetrics(num_non_filtered_assays=10, num_calls=10, num_hets=2)
        )
        assert math.isnan(resolve_sample(sample, 0.98).het_homvar_ratio)

    def test_empty_sample_fails_call_rate(self) -> None:
        """NaN call rate never passes the threshold."""
        sample = resolve_sample(SampleMetrics(identity=IDENTITY), 0.98)

        assert math.isnan(sample.calling.call_rate)
        assert sample.autocall_pf is False


class TestResolve:
    """Tests for resolving a merged partial result."""

    def test_not_computed_until_resolved(self) -> None:
        sample = SampleMetrics(
            identity=IDENTITY,
            calling=CallingMetrics(num_non_filtered_assays=4, num_calls=4),
        )
        partial = PartialResult.from_samples(sample.calling, [sample])

        assert partial.summary.call_rate is NOT_COMPUTED
        assert partial.samples[IDENTITY].het_pct is NOT_COMPUTED

        result = resolve(partial, 0.98)

        assert result.summary.call_rate == 1.0
        assert result.sample("BC1").het_pct == 0.0
        assert result.sample("BC1").is_resolved

    def test_resolving_twice_rejected(self) -> None:
        partial = PartialResult()
        resolved = resolve(partial, 0.98)
        again = PartialResult(summary=resolved.summary)

        with pytest.raises(ConfigurationError, match="already been resolved"):
            resolve(again, 0.98)

    def test_sample_lookup_missing(self) -> None:
        result = resolve(PartialResult(), 0.98)
        with pytest.raises(KeyError):
            result.sample("nope")


class TestCheckDerivations:
    """Tests for check_derivations."""

    def test_builtin_derivations_match_registries(self) -> None:
        check_derivations()

    def test_missing_derivation_detected(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(
            derived, "CALLING_DERIVATIONS", derived.CALLING_DERIVATIONS[:-1]
        )
        with pytest.raises(ConfigurationError, match="autocall_call_rate"):
            check_derivations()
