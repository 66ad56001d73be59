"""
Dewey Method Factory - scaling analysis entry points.

Runs the full pipeline for one measurement and formula selection:

    catalog + reference populations -> coefficients -> simulated populations
        -> chart series, validation metrics, correlation matrix -> insights

and returns one immutable ScalingAnalysisResult. Every configuration shares
the same population grid and Z-score, so results are directly comparable.
"""

from typing import Dict, List, Optional, Union
import logging
import warnings

import pandas as pd
from pydantic import BaseModel, ConfigDict, field_validator, model_validator
from scipy import stats

from .chart import generate_chart_data
from .coefficients import ScalingCoefficients, calculate_coefficients
from .config import DEFAULT_Z_SCORE, MAX_PLAUSIBLE_Z_SCORE
from .configurations import (
    ScalingConfiguration,
    get_quick_comparison_configurations,
    get_standard_configurations,
)
from .exceptions import InvalidZScoreWarning
from .insights import ScalingInsights, configuration_score, default_insights, generate_insights
from .populations import FormulaSelection, ReferencePopulations, generate_reference_populations
from .reference_data import Measurement, ReferenceStatisticStore
from .simulation import PopulationData, PopulationGrid, PopulationRange, generate_population_data
from .validation import (
    CorrelationMatrix,
    ValidationMetrics,
    calculate_correlation_matrix,
    calculate_validation_metrics,
)

module_logger = logging.getLogger(__name__)


class AnalysisOptions(BaseModel):
    """
    Options for a scaling analysis run.

    Attributes:
        population_range (PopulationRange): Height × BMI grid to simulate.
        z_score (Optional[float]): Standard deviations above the published mean.
            Defaults to 1.96 (upper limit of normal) when neither z_score nor
            percentile is given.
        percentile (Optional[float]): Alternative to z_score, in (0, 100).
        include_correlations (bool): Compute the cross-configuration matrix.
        generate_insights (bool): Rank configurations and emit insights.
    """

    model_config = ConfigDict(frozen=True)

    population_range: PopulationRange = PopulationRange()
    z_score: Optional[float] = None
    percentile: Optional[float] = None
    include_correlations: bool = True
    generate_insights: bool = True

    @field_validator("percentile")
    @classmethod
    def percentile_in_range(cls, v: Optional[float]) -> Optional[float]:
        if v is not None and not 0.0 < v < 100.0:
            raise ValueError("percentile must be strictly between 0 and 100")
        return v

    @model_validator(mode="after")
    def single_reference_level(self) -> "AnalysisOptions":
        if self.z_score is not None and self.percentile is not None:
            raise ValueError("Specify either z_score or percentile, not both")
        return self

    @property
    def resolved_z_score(self) -> float:
        if self.percentile is not None:
            return float(stats.norm.ppf(self.percentile / 100.0))
        if self.z_score is not None:
            return self.z_score
        return DEFAULT_Z_SCORE


class ScalingAnalysisResult(BaseModel):
    """Immutable bundle produced by one analysis run."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    measurement: Measurement
    formula_selection: FormulaSelection
    z_score: float
    reference_populations: ReferencePopulations
    configurations: List[ScalingConfiguration]
    coefficients: Dict[str, ScalingCoefficients]
    population_data: Dict[str, PopulationData]
    chart_data: pd.DataFrame
    validation_metrics: Dict[str, ValidationMetrics]
    correlation_matrix: CorrelationMatrix
    insights: ScalingInsights

    @property
    def percentile(self) -> float:
        """Reference percentile implied by the Z-score."""
        return float(stats.norm.cdf(self.z_score) * 100.0)

    def summary_frame(self) -> pd.DataFrame:
        """One row per configuration: coefficients, similarity and fit quality."""
        rows = []
        for config in self.configurations:
            coeff = self.coefficients[config.id]
            metrics = self.validation_metrics[config.id]
            rows.append(
                {
                    "configuration": config.id,
                    "name": config.name,
                    "approach": config.approach,
                    "variable": config.variable,
                    "exponent": config.exponent,
                    "male": coeff.male,
                    "female": coeff.female,
                    "universal": coeff.universal,
                    "similarity_pct": coeff.similarity.percentage,
                    "r_squared": metrics.r_squared,
                    "mean_absolute_error": metrics.mean_absolute_error,
                    "coefficient_of_variation": metrics.coefficient_of_variation,
                    "score": configuration_score(metrics, coeff),
                }
            )
        return pd.DataFrame(rows).set_index("configuration")


def _resolve_measurement(measurement: Union[Measurement, str]) -> Measurement:
    if isinstance(measurement, Measurement):
        return measurement
    return ReferenceStatisticStore.default().get(measurement)


def _check_z_score(z_score: float, log: logging.Logger) -> None:
    if abs(z_score) > MAX_PLAUSIBLE_Z_SCORE:
        message = (
            f"Z-score {z_score:.2f} is outside ±{MAX_PLAUSIBLE_Z_SCORE:g}; "
            "derived reference values may be physiologically implausible"
        )
        log.warning(message)
        warnings.warn(message, InvalidZScoreWarning, stacklevel=3)


def generate_scaling_analysis(
    measurement: Union[Measurement, str],
    formula_selection: Optional[FormulaSelection] = None,
    configurations: Optional[List[ScalingConfiguration]] = None,
    options: Optional[AnalysisOptions] = None,
    logger: Optional[logging.Logger] = None,
) -> ScalingAnalysisResult:
    """
    Run the full scaling analysis for a measurement.

    Args:
        measurement: Measurement, or id of a bundled MESA measurement.
        formula_selection: BSA/LBM formulas (Mosteller/Boer by default).
        configurations: Scaling laws to compare; the standard catalog for the
            measurement's dimensionality class when omitted.
        options: Grid, Z-score/percentile and optional stages.
        logger: Logger receiving progress and warnings; the module logger
            when omitted.

    Returns:
        ScalingAnalysisResult covering every configuration.

    Raises:
        MissingReferenceStatistic: A configuration's basis is not published.
        MissingFormulaParameter: The LBM formula lacks age/ethnicity.
        ScalingAnalysisError: The population grid yields non-positive scaling values.
        ValueError: Duplicate or empty configuration lists.
    """
    log = logger or module_logger
    measurement = _resolve_measurement(measurement)
    formula_selection = formula_selection or FormulaSelection()
    options = options or AnalysisOptions()

    scaling_configurations = (
        list(configurations)
        if configurations is not None
        else get_standard_configurations(measurement.type)
    )
    if not scaling_configurations:
        raise ValueError("At least one scaling configuration is required")
    ids = [config.id for config in scaling_configurations]
    if len(ids) != len(set(ids)):
        raise ValueError(f"Configuration ids must be unique, got {ids}")

    z_score = options.resolved_z_score
    _check_z_score(z_score, log)

    log.info(
        f"Starting scaling analysis for {measurement.name} ({measurement.type}) "
        f"with {len(scaling_configurations)} configurations at z={z_score:.2f}"
    )

    reference_populations = generate_reference_populations(formula_selection)

    coefficients = {
        config.id: calculate_coefficients(
            measurement, config, reference_populations, z_score=z_score
        )
        for config in scaling_configurations
    }

    grid = PopulationGrid(options.population_range, formula_selection)
    population_data = {
        config.id: generate_population_data(
            config, coefficients[config.id], grid, measurement_id=measurement.id
        )
        for config in scaling_configurations
    }
    log.debug(f"Simulated {len(grid)} grid cells per sex")

    chart_data = generate_chart_data(scaling_configurations, population_data, coefficients)

    validation_metrics = {
        config.id: calculate_validation_metrics(
            config, coefficients[config.id], population_data[config.id], measurement.type
        )
        for config in scaling_configurations
    }

    if options.include_correlations:
        correlation_matrix = calculate_correlation_matrix(scaling_configurations, population_data)
    else:
        correlation_matrix = CorrelationMatrix.empty()

    if options.generate_insights:
        insights = generate_insights(
            measurement.type, scaling_configurations, coefficients, validation_metrics
        )
    else:
        insights = default_insights(measurement.type, scaling_configurations)

    log.info(
        f"Analysis complete for {measurement.id}: best={insights.best_configuration}, "
        f"worst={insights.worst_configuration}, relevance={insights.clinical_relevance}"
    )

    return ScalingAnalysisResult(
        measurement=measurement,
        formula_selection=formula_selection,
        z_score=z_score,
        reference_populations=reference_populations,
        configurations=scaling_configurations,
        coefficients=coefficients,
        population_data=population_data,
        chart_data=chart_data,
        validation_metrics=validation_metrics,
        correlation_matrix=correlation_matrix,
        insights=insights,
    )


def generate_quick_comparison(
    measurement: Union[Measurement, str],
    formula_selection: Optional[FormulaSelection] = None,
    options: Optional[AnalysisOptions] = None,
    logger: Optional[logging.Logger] = None,
) -> ScalingAnalysisResult:
    """Ratiometric BSA against LBM scaling at the geometric exponent."""
    measurement = _resolve_measurement(measurement)
    return generate_scaling_analysis(
        measurement,
        formula_selection,
        get_quick_comparison_configurations(measurement.type),
        options,
        logger,
    )
