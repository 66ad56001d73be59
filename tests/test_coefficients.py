"""
Tests for Dewey method coefficient derivation.

Reference individuals (Mosteller/Boer): male 178 cm, 76.0416 kg, BSA 1.93903 m²;
female 164 cm, 64.5504 kg.
"""

import numpy as np
import pytest
from hypothesis import given, strategies as st

from cardiac_scaling.coefficients import (
    ScalingCoefficients,
    back_calculate_absolute_values,
    calculate_coefficients,
    calculate_similarity,
    indexed_reference_values,
)
from cardiac_scaling.configurations import ScalingConfiguration, get_standard_configurations
from cardiac_scaling.exceptions import MissingReferenceStatistic


def _config(measurement_type, config_id):
    return {c.id: c for c in get_standard_configurations(measurement_type)}[config_id]


class TestWorkedExample:
    def test_tc001_indexed_value_at_z(self, linear_measurement):
        indexed = indexed_reference_values(
            linear_measurement, _config("linear", "ratiometric_bsa"), 1.96
        )
        assert indexed["male"] == pytest.approx(1.446)
        assert indexed["female"] == pytest.approx(1.496)

    def test_tc002_back_calculated_absolute(self, linear_measurement, reference_populations):
        config = _config("linear", "ratiometric_bsa")
        indexed = indexed_reference_values(linear_measurement, config, 1.96)
        absolute = back_calculate_absolute_values(indexed, config, reference_populations)
        assert absolute["male"] == pytest.approx(1.446 * 1.93903, rel=1e-5)
        assert absolute["male"] == pytest.approx(1.446 * reference_populations.male.bsa)

    def test_tc003_ratiometric_coefficient_equals_indexed(
        self, linear_measurement, reference_populations
    ):
        """Ratiometric coefficient is exactly mean + z·sd"""
        coefficients = calculate_coefficients(
            linear_measurement, _config("linear", "ratiometric_bsa"), reference_populations, 1.96
        )
        assert coefficients.male == pytest.approx(1.25 + 1.96 * 0.10, abs=1e-12)
        assert coefficients.female == pytest.approx(1.30 + 1.96 * 0.10, abs=1e-12)
        assert coefficients.universal is None

    def test_tc004_lbm_coefficient_and_universal(self, linear_measurement, reference_populations):
        config = _config("linear", "allometric_lbm")
        coefficients = calculate_coefficients(
            linear_measurement, config, reference_populations, 1.96
        )
        male = reference_populations.male
        expected_male = 1.446 * male.bsa / male.lbm ** 0.33
        assert coefficients.male == pytest.approx(expected_male)
        assert coefficients.universal == pytest.approx(
            (coefficients.male + coefficients.female) / 2
        )

    def test_tc005_zero_z_uses_mean(self, linear_measurement, reference_populations):
        coefficients = calculate_coefficients(
            linear_measurement, _config("linear", "ratiometric_bsa"), reference_populations, 0.0
        )
        assert coefficients.male == 1.25

    def test_tc006_bsa_and_height_have_no_universal(
        self, mass_measurement, reference_populations
    ):
        for config_id in ("allometric_bsa", "allometric_height", "height_27"):
            coefficients = calculate_coefficients(
                mass_measurement, _config("mass", config_id), reference_populations
            )
            assert coefficients.universal is None


class TestHeightBases:
    def test_tc007_height27_divides_by_height27(self, mass_measurement, reference_populations):
        """Height^2.7 law reads the height^2.7 index and divides by height^2.7"""
        coefficients = calculate_coefficients(
            mass_measurement, _config("mass", "height_27"), reference_populations, 1.96
        )
        assert coefficients.male == pytest.approx(40.0 + 1.96 * 10.0)
        assert coefficients.female == pytest.approx(35.0 + 1.96 * 9.0)

    def test_tc008_height16_uses_its_own_basis(self, mass_measurement, reference_populations):
        coefficients = calculate_coefficients(
            mass_measurement, _config("mass", "height_16"), reference_populations, 1.96
        )
        assert coefficients.male == pytest.approx(70.0 + 1.96 * 15.0)

    def test_tc009_empirical_21_from_height_basis(self, mass_measurement, reference_populations):
        coefficients = calculate_coefficients(
            mass_measurement, _config("mass", "height_21"), reference_populations, 1.96
        )
        indexed = 95.0 + 1.96 * 20.0
        assert coefficients.male == pytest.approx(indexed * 1.78 / 1.78 ** 2.1)

    def test_tc010_geometric_height_from_height_basis(
        self, mass_measurement, reference_populations
    ):
        coefficients = calculate_coefficients(
            mass_measurement, _config("mass", "allometric_height"), reference_populations, 0.0
        )
        assert coefficients.female == pytest.approx(77.0 * 1.64 / 1.64 ** 3)

    def test_tc011_missing_basis_names_measurement_and_configuration(
        self, linear_measurement, reference_populations
    ):
        config = ScalingConfiguration(
            id="height_27",
            name="Height^2.7",
            approach="allometric",
            variable="height",
            exponent=2.7,
            source_data="height27",
        )
        with pytest.raises(MissingReferenceStatistic) as excinfo:
            calculate_coefficients(linear_measurement, config, reference_populations)
        assert excinfo.value.measurement_id == "test_linear"
        assert excinfo.value.configuration_id == "height_27"


class TestSimilarity:
    def test_tc012_identical_is_exactly_100(self):
        assert calculate_similarity(1.446, 1.446).percentage == 100.0
        assert calculate_similarity(0.0, 0.0).percentage == 100.0

    def test_tc013_relative_difference(self):
        similarity = calculate_similarity(1.0, 0.8)
        assert similarity.absolute == pytest.approx(0.2)
        assert similarity.percentage == pytest.approx(80.0)

    def test_tc014_non_positive_largest(self):
        assert calculate_similarity(-1.0, -2.0).percentage == 0.0

    @given(
        male=st.floats(min_value=1e-3, max_value=1e4),
        female=st.floats(min_value=1e-3, max_value=1e4),
    )
    def test_tc015_bounded_and_symmetric(self, male, female):
        forward = calculate_similarity(male, female)
        reverse = calculate_similarity(female, male)
        assert 0.0 <= forward.percentage <= 100.0
        assert forward.percentage == reverse.percentage


class TestScalingCoefficients:
    def test_tc016_forward_prefers_universal(self):
        coefficients = ScalingCoefficients(
            male=2.0,
            female=1.0,
            universal=1.5,
            similarity=calculate_similarity(2.0, 1.0),
        )
        assert coefficients.forward("male") == 1.5
        assert coefficients.forward("male", use_universal=False) == 2.0
        assert coefficients["female"] == 1.0
        assert coefficients.mean == 1.5
        with pytest.raises(KeyError):
            coefficients["other"]

    def test_tc017_all_bundled_measurements_derive(self, store, reference_populations):
        """Every standard configuration derives finite coefficients for MESA data"""
        for measurement in store.measurements:
            for config in get_standard_configurations(measurement.type):
                coefficients = calculate_coefficients(measurement, config, reference_populations)
                assert np.isfinite(coefficients.male) and coefficients.male > 0
                assert np.isfinite(coefficients.female) and coefficients.female > 0
