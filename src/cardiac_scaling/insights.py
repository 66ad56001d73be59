"""Ranking of scaling configurations and clinical interpretation."""

from typing import Dict, List

import numpy as np
from pydantic import BaseModel, ConfigDict

from .coefficients import ScalingCoefficients
from .config import CLINICAL_RELEVANCE_HIGH_GAP, CLINICAL_RELEVANCE_LOW_GAP
from .configurations import ScalingConfiguration
from .validation import ValidationMetrics

# Recommended configuration per dimensionality class. Areas are already
# geometrically matched by BSA; every other class is recommended LBM scaling.
RECOMMENDED_APPROACH = {
    "linear": "allometric_lbm",
    "area": "ratiometric_bsa",
    "mass": "allometric_lbm",
    "volume": "allometric_lbm",
}

LBM_CONFIGURATION_ID = "allometric_lbm"
BASELINE_CONFIGURATION_ID = "ratiometric_bsa"


class ScalingInsights(BaseModel):
    model_config = ConfigDict(frozen=True)

    best_configuration: str
    worst_configuration: str
    recommended_approach: str
    clinical_relevance: str


def configuration_score(metrics: ValidationMetrics, coefficients: ScalingCoefficients) -> float:
    """Composite score: r² × sex similarity fraction."""
    return metrics.r_squared * (coefficients.similarity.percentage / 100.0)


def clinical_relevance(coefficients: Dict[str, ScalingCoefficients]) -> str:
    """
    How much LBM scaling changes sex convergence relative to ratiometric BSA.

    A similarity gap above 20 points is 'high', below 5 'low', else 'moderate'.
    A missing configuration counts as 0% similarity.
    """
    def similarity(config_id: str) -> float:
        coeff = coefficients.get(config_id)
        return coeff.similarity.percentage if coeff is not None else 0.0

    gap = abs(similarity(LBM_CONFIGURATION_ID) - similarity(BASELINE_CONFIGURATION_ID))
    if gap > CLINICAL_RELEVANCE_HIGH_GAP:
        return "high"
    if gap < CLINICAL_RELEVANCE_LOW_GAP:
        return "low"
    return "moderate"


def generate_insights(
    measurement_type: str,
    configurations: List[ScalingConfiguration],
    coefficients: Dict[str, ScalingCoefficients],
    validation_metrics: Dict[str, ValidationMetrics],
) -> ScalingInsights:
    """
    Rank configurations and summarise the analysis.

    Best/worst are the argmax/argmin of r² × similarity; ties resolve to the
    earliest configuration.

    Raises:
        ValueError: If no configurations are given or measurement_type is unknown.
    """
    if not configurations:
        raise ValueError("At least one configuration is required")
    if measurement_type not in RECOMMENDED_APPROACH:
        raise ValueError(f"Unknown measurement type '{measurement_type}'")

    scored = [
        config.id
        for config in configurations
        if config.id in validation_metrics and config.id in coefficients
    ]
    if scored:
        scores = np.array(
            [configuration_score(validation_metrics[c], coefficients[c]) for c in scored]
        )
        best = scored[int(np.argmax(scores))]
        worst = scored[int(np.argmin(scores))]
    else:
        best = worst = configurations[0].id

    return ScalingInsights(
        best_configuration=best,
        worst_configuration=worst,
        recommended_approach=RECOMMENDED_APPROACH[measurement_type],
        clinical_relevance=clinical_relevance(coefficients),
    )


def default_insights(
    measurement_type: str, configurations: List[ScalingConfiguration]
) -> ScalingInsights:
    """Placeholder insights when insight generation is disabled."""
    first = configurations[0].id if configurations else ""
    return ScalingInsights(
        best_configuration=first,
        worst_configuration=first,
        recommended_approach=RECOMMENDED_APPROACH.get(measurement_type, LBM_CONFIGURATION_ID),
        clinical_relevance="moderate",
    )
