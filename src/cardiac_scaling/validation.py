"""
Fit-quality validation and cross-configuration correlation.

Per configuration, the simulated measurement is regressed against the
configuration's own scaling variable and compared with its closed-form
predictor. The predictor uses one coefficient for both sexes (the universal
coefficient where defined, otherwise the mean of the sexes), so the mean
absolute error measures how much sex divergence a single curve hides.
"""

from typing import Dict, List, Literal, Optional
import logging
import math

import numpy as np
from numba import jit
from pydantic import BaseModel, ConfigDict

from .approaches import get_approach
from .coefficients import ScalingCoefficients
from .config import CORRELATION_STRENGTHS, SIGNIFICANT_CORRELATION
from .configurations import ScalingConfiguration
from .scaling_laws import get_validation_rules
from .simulation import PopulationData

logger = logging.getLogger(__name__)

CorrelationStrength = Literal["weak", "moderate", "strong", "very_strong"]


@jit(nopython=True, cache=True)
def _pearson_kernel(x: np.ndarray, y: np.ndarray) -> float:
    """
    Pearson correlation of two equal-length float64 arrays.

    Uses centred sums for numerical stability. A zero-variance input has no
    defined correlation and yields 0.0.
    """
    n = x.size
    if n == 0:
        return 0.0
    mean_x = 0.0
    mean_y = 0.0
    for i in range(n):
        mean_x += x[i]
        mean_y += y[i]
    mean_x /= n
    mean_y /= n

    sxy = 0.0
    sxx = 0.0
    syy = 0.0
    for i in range(n):
        dx = x[i] - mean_x
        dy = y[i] - mean_y
        sxy += dx * dy
        sxx += dx * dx
        syy += dy * dy

    denominator = math.sqrt(sxx * syy)
    if denominator == 0.0 or not math.isfinite(denominator):
        return 0.0
    r = sxy / denominator
    # Clamp rounding overshoot
    if r > 1.0:
        return 1.0
    if r < -1.0:
        return -1.0
    return r


def pearson_correlation(x, y) -> float:
    """
    Pearson correlation coefficient.

    Returns 0.0 for empty or mismatched inputs and for zero-variance series,
    never NaN.
    """
    x = np.ascontiguousarray(x, dtype=np.float64)
    y = np.ascontiguousarray(y, dtype=np.float64)
    if x.shape != y.shape or x.size == 0:
        return 0.0
    return float(_pearson_kernel(x.ravel(), y.ravel()))


class ValidationMetrics(BaseModel):
    """Fit quality of one configuration over the simulated population."""

    model_config = ConfigDict(frozen=True)

    r_squared: float
    correlation: float
    mean_absolute_error: float
    coefficient_of_variation: float
    quality_flags: List[str] = []


class SignificantCorrelation(BaseModel):
    model_config = ConfigDict(frozen=True)

    config1: str
    config2: str
    correlation: float
    strength: CorrelationStrength


class CorrelationMatrix(BaseModel):
    """Symmetric correlation matrix between configurations' predicted series."""

    model_config = ConfigDict(frozen=True)

    configuration_ids: List[str]
    matrix: List[List[float]]
    significant_correlations: List[SignificantCorrelation]

    def get(self, config1: str, config2: str) -> float:
        i = self.configuration_ids.index(config1)
        j = self.configuration_ids.index(config2)
        return self.matrix[i][j]

    @classmethod
    def empty(cls) -> "CorrelationMatrix":
        return cls(configuration_ids=[], matrix=[], significant_correlations=[])


def classify_correlation(correlation: float) -> CorrelationStrength:
    """Strength label for |r|: >=0.9 very_strong, >=0.7 strong, >=0.5 moderate."""
    magnitude = abs(correlation)
    for threshold, label in CORRELATION_STRENGTHS:
        if magnitude >= threshold:
            return label
    return "weak"


def quality_flags(
    measurement_type: str,
    coefficients: ScalingCoefficients,
    r_squared: float,
) -> List[str]:
    """Deviations from the dimensionality class's validation rules."""
    rules = get_validation_rules(measurement_type)
    flags = []
    if r_squared < rules.required_r_squared:
        flags.append(
            f"r_squared {r_squared:.3f} below required {rules.required_r_squared:.2f}"
        )
    variation = 1.0 - coefficients.similarity.percentage / 100.0
    if variation > rules.max_coefficient_variation:
        flags.append(
            f"sex coefficient variation {variation:.1%} exceeds "
            f"{rules.max_coefficient_variation:.0%}"
        )
    return flags


def calculate_validation_metrics(
    configuration: ScalingConfiguration,
    coefficients: ScalingCoefficients,
    population_data: PopulationData,
    measurement_type: Optional[str] = None,
) -> ValidationMetrics:
    """
    Fit-quality metrics for one configuration.

    Args:
        configuration: Scaling law being validated.
        coefficients: Its derived coefficients.
        population_data: Its simulated population.
        measurement_type: When given, validation-rule flags are attached.

    Returns:
        ValidationMetrics; all zeros for an empty population.
    """
    x = population_data.scaling_values()
    y = population_data.measurement_values()
    if y.size == 0:
        return ValidationMetrics(
            r_squared=0.0, correlation=0.0, mean_absolute_error=0.0, coefficient_of_variation=0.0
        )

    correlation = pearson_correlation(x, y)
    r_squared = correlation * correlation

    approach = get_approach(configuration.approach)
    if approach.uses_universal_coefficient and coefficients.universal is not None:
        shared = coefficients.universal
    else:
        shared = coefficients.mean
    predictions = approach.predict(shared, x, configuration.exponent)
    mean_absolute_error = float(np.mean(np.abs(y - predictions)))

    mean = float(np.mean(y))
    coefficient_of_variation = float(np.std(y) / mean * 100.0) if mean > 0 else 0.0

    flags = []
    if measurement_type is not None:
        flags = quality_flags(measurement_type, coefficients, r_squared)

    return ValidationMetrics(
        r_squared=r_squared,
        correlation=correlation,
        mean_absolute_error=mean_absolute_error,
        coefficient_of_variation=coefficient_of_variation,
        quality_flags=flags,
    )


def calculate_correlation_matrix(
    configurations: List[ScalingConfiguration],
    population_data: Dict[str, PopulationData],
) -> CorrelationMatrix:
    """
    Correlate every pair of configurations' predicted series.

    Series are male then female measurement values over the shared grid, so
    index i refers to the same individual in every series. Configurations
    without population data correlate 0 with everything but themselves.
    """
    ids = [config.id for config in configurations]
    series = {
        config_id: population_data[config_id].measurement_values()
        for config_id in ids
        if config_id in population_data
    }

    n = len(ids)
    matrix = np.eye(n, dtype=np.float64)
    for i in range(n):
        for j in range(i + 1, n):
            if ids[i] in series and ids[j] in series:
                r = pearson_correlation(series[ids[i]], series[ids[j]])
                if r == 0.0:
                    logger.debug(f"Degenerate correlation between {ids[i]} and {ids[j]}")
            else:
                r = 0.0
            matrix[i, j] = matrix[j, i] = r

    significant = [
        SignificantCorrelation(
            config1=ids[i],
            config2=ids[j],
            correlation=float(matrix[i, j]),
            strength=classify_correlation(matrix[i, j]),
        )
        for i in range(n)
        for j in range(i + 1, n)
        if abs(matrix[i, j]) >= SIGNIFICANT_CORRELATION
    ]

    return CorrelationMatrix(
        configuration_ids=ids, matrix=matrix.tolist(), significant_correlations=significant
    )
