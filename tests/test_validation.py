"""
Tests for fit-quality metrics and the cross-configuration correlation matrix.
"""

import numpy as np
import pytest
from hypothesis import given, settings, strategies as st

from cardiac_scaling.coefficients import ScalingCoefficients, calculate_coefficients, calculate_similarity
from cardiac_scaling.configurations import get_standard_configurations
from cardiac_scaling.simulation import PopulationData, PopulationGrid, generate_population_data
from cardiac_scaling.validation import (
    CorrelationMatrix,
    calculate_correlation_matrix,
    calculate_validation_metrics,
    classify_correlation,
    pearson_correlation,
    quality_flags,
)


@pytest.fixture
def mass_analysis(small_range, formula_selection, mass_measurement, reference_populations):
    configs = get_standard_configurations("mass")
    coefficients = {
        c.id: calculate_coefficients(mass_measurement, c, reference_populations) for c in configs
    }
    grid = PopulationGrid(small_range, formula_selection)
    population_data = {
        c.id: generate_population_data(c, coefficients[c.id], grid) for c in configs
    }
    return configs, coefficients, population_data


class TestPearson:
    def test_tc001_perfect_correlation(self):
        x = np.arange(10, dtype=float)
        assert pearson_correlation(x, 2 * x + 1) == pytest.approx(1.0)
        assert pearson_correlation(x, -x) == pytest.approx(-1.0)

    def test_tc002_degenerate_inputs_return_zero(self):
        """Zero variance, empty or mismatched inputs give 0, never NaN"""
        assert pearson_correlation([1.0, 1.0, 1.0], [1.0, 2.0, 3.0]) == 0.0
        assert pearson_correlation([], []) == 0.0
        assert pearson_correlation([1.0, 2.0], [1.0, 2.0, 3.0]) == 0.0

    def test_tc003_matches_numpy(self):
        rng = np.random.default_rng(0)
        x = rng.normal(size=200)
        y = 0.5 * x + rng.normal(size=200)
        assert pearson_correlation(x, y) == pytest.approx(np.corrcoef(x, y)[0, 1])

    @settings(deadline=None)
    @given(
        st.lists(
            st.tuples(
                st.floats(min_value=-1e3, max_value=1e3),
                st.floats(min_value=-1e3, max_value=1e3),
            ),
            min_size=2,
            max_size=50,
        )
    )
    def test_tc004_bounded_and_symmetric(self, pairs):
        x = [p[0] for p in pairs]
        y = [p[1] for p in pairs]
        r = pearson_correlation(x, y)
        assert -1.0 <= r <= 1.0
        assert r == pytest.approx(pearson_correlation(y, x))


class TestClassification:
    @pytest.mark.parametrize(
        "r, label",
        [
            (0.95, "very_strong"),
            (-0.9, "very_strong"),
            (0.75, "strong"),
            (0.5, "moderate"),
            (-0.31, "weak"),
            (0.0, "weak"),
        ],
    )
    def test_tc005_strength_tiers(self, r, label):
        assert classify_correlation(r) == label

    def test_tc006_quality_flags(self):
        divergent = ScalingCoefficients(
            male=2.0, female=1.0, similarity=calculate_similarity(2.0, 1.0)
        )
        flags = quality_flags("linear", divergent, 0.5)
        assert len(flags) == 2
        assert "r_squared" in flags[0]
        assert "sex coefficient variation" in flags[1]

        close = ScalingCoefficients(
            male=1.0, female=0.95, similarity=calculate_similarity(1.0, 0.95)
        )
        assert quality_flags("volume", close, 0.9) == []


class TestValidationMetrics:
    def test_tc007_universal_lbm_is_self_consistent(self, mass_analysis):
        """Forward predictor reproduces the simulated series when one coefficient is used"""
        configs, coefficients, population_data = mass_analysis
        config = configs[1]
        metrics = calculate_validation_metrics(
            config, coefficients[config.id], population_data[config.id], "mass"
        )
        assert metrics.mean_absolute_error == pytest.approx(0.0, abs=1e-9)
        assert metrics.r_squared == pytest.approx(1.0)
        assert metrics.coefficient_of_variation > 0

    def test_tc008_sex_specific_laws_show_divergence(self, mass_analysis):
        configs, coefficients, population_data = mass_analysis
        config = configs[0]
        metrics = calculate_validation_metrics(
            config, coefficients[config.id], population_data[config.id]
        )
        assert metrics.mean_absolute_error > 0
        assert 0.0 <= metrics.r_squared <= 1.0
        assert metrics.r_squared == pytest.approx(metrics.correlation ** 2)
        assert metrics.quality_flags == []

    def test_tc009_empty_population(self, mass_analysis):
        configs, coefficients, _ = mass_analysis
        metrics = calculate_validation_metrics(
            configs[0], coefficients[configs[0].id], PopulationData(male=[], female=[])
        )
        assert metrics.r_squared == 0.0
        assert metrics.mean_absolute_error == 0.0
        assert metrics.coefficient_of_variation == 0.0


class TestCorrelationMatrix:
    def test_tc010_symmetric_with_unit_diagonal(self, mass_analysis):
        configs, _, population_data = mass_analysis
        matrix = calculate_correlation_matrix(configs, population_data)
        values = np.array(matrix.matrix)
        assert values.shape == (len(configs), len(configs))
        assert np.allclose(values, values.T)
        assert np.allclose(np.diag(values), 1.0)
        assert np.all(np.abs(values) <= 1.0)
        assert matrix.get("height_16", "height_27") == matrix.get("height_27", "height_16")

    def test_tc011_significant_pairs(self, mass_analysis):
        configs, _, population_data = mass_analysis
        matrix = calculate_correlation_matrix(configs, population_data)
        n = len(configs)
        assert len(matrix.significant_correlations) <= n * (n - 1) // 2
        for pair in matrix.significant_correlations:
            assert abs(pair.correlation) >= 0.3
            assert pair.config1 != pair.config2
            assert pair.strength == classify_correlation(pair.correlation)

    def test_tc012_missing_series_correlates_zero(self, mass_analysis):
        configs, _, population_data = mass_analysis
        partial = {k: v for k, v in population_data.items() if k != "height_21"}
        matrix = calculate_correlation_matrix(configs, partial)
        assert matrix.get("height_21", "ratiometric_bsa") == 0.0
        assert matrix.get("height_21", "height_21") == 1.0

    def test_tc013_empty_matrix(self):
        matrix = CorrelationMatrix.empty()
        assert matrix.configuration_ids == []
        assert matrix.significant_correlations == []
