"""
Coefficient derivation (Dewey method).

Published reference limits are indexed values, e.g. LV mass per m² of BSA.
For each sex the indexed value at the requested Z-score is multiplied back by
the canonical reference individual's index divisor to recover an absolute
measurement, which each scaling law then converts into its own coefficient.

Back-calculation always uses the configuration's published basis (BSA,
height, height^1.6 or height^2.7), never its forward scaling variable: an LBM
law derived from BSA-indexed data multiplies by the reference BSA, and a
height^2.7 law divides by height^2.7 rather than height^1.
"""

from typing import Dict, Optional
import logging

from pydantic import BaseModel, ConfigDict

from .approaches import get_approach
from .config import DEFAULT_Z_SCORE, SEXES
from .configurations import ScalingConfiguration
from .populations import ReferencePopulations
from .reference_data import Measurement
from .variables import back_calculation_value, scaling_value, universal_coefficient

logger = logging.getLogger(__name__)


class CoefficientSimilarity(BaseModel):
    model_config = ConfigDict(frozen=True)

    absolute: float
    percentage: float


class ScalingCoefficients(BaseModel):
    """Per-sex (and optionally universal) coefficients for one configuration."""

    model_config = ConfigDict(frozen=True)

    male: float
    female: float
    universal: Optional[float] = None
    similarity: CoefficientSimilarity

    def __getitem__(self, sex: str) -> float:
        if sex not in SEXES:
            raise KeyError(sex)
        return getattr(self, sex)

    def forward(self, sex: str, use_universal: bool = True) -> float:
        """Coefficient applied when predicting for a sex."""
        if use_universal and self.universal is not None:
            return self.universal
        return self[sex]

    @property
    def mean(self) -> float:
        return (self.male + self.female) / 2.0


def calculate_similarity(male: float, female: float) -> CoefficientSimilarity:
    """
    Sex similarity of two coefficients.

    percentage = max(0, 100 - |male - female| / max(male, female) × 100), so it
    is 100 exactly when both coefficients are equal.
    """
    difference = abs(male - female)
    largest = max(male, female)
    if difference == 0:
        percentage = 100.0
    elif largest <= 0:
        percentage = 0.0
    else:
        percentage = max(0.0, 100.0 - difference / largest * 100.0)
    return CoefficientSimilarity(absolute=difference, percentage=percentage)


def indexed_reference_values(
    measurement: Measurement,
    configuration: ScalingConfiguration,
    z_score: float = DEFAULT_Z_SCORE,
) -> Dict[str, float]:
    """
    Published indexed value at the Z-score for each sex.

    Raises:
        MissingReferenceStatistic: If the configuration's basis is not published.
    """
    return {
        sex: measurement.statistic(
            sex, configuration.source_data, configuration_id=configuration.id
        ).at_z(z_score)
        for sex in SEXES
    }


def back_calculate_absolute_values(
    indexed: Dict[str, float],
    configuration: ScalingConfiguration,
    reference_populations: ReferencePopulations,
) -> Dict[str, float]:
    """Absolute reference measurement per sex: indexed × basis divisor."""
    absolute = {}
    for sex in SEXES:
        profile = reference_populations[sex]
        divisor = back_calculation_value(
            configuration.source_data, profile.height, profile.bsa, profile.lbm
        )
        absolute[sex] = float(indexed[sex] * divisor)
    return absolute


def calculate_coefficients(
    measurement: Measurement,
    configuration: ScalingConfiguration,
    reference_populations: ReferencePopulations,
    z_score: float = DEFAULT_Z_SCORE,
) -> ScalingCoefficients:
    """
    Derive scaling coefficients for one configuration.

    Args:
        measurement: Measurement with published indexed statistics.
        configuration: Scaling law to derive.
        reference_populations: Canonical male/female profiles.
        z_score: Standard deviations above the published mean (1.96 = upper
            limit of normal, 0 = mean).

    Returns:
        ScalingCoefficients with per-sex values, a universal value where the
        scaling variable's policy defines one, and sex similarity.

    Raises:
        MissingReferenceStatistic: If the configuration's basis is not
            published for the measurement.
    """
    approach = get_approach(configuration.approach)

    indexed = indexed_reference_values(measurement, configuration, z_score)
    absolute = back_calculate_absolute_values(indexed, configuration, reference_populations)

    coefficients = {}
    for sex in SEXES:
        profile = reference_populations[sex]
        forward_value = scaling_value(
            configuration.variable, profile.height, profile.bsa, profile.lbm
        )
        coefficients[sex] = float(
            approach.derive_coefficient(
                indexed[sex], absolute[sex], forward_value, configuration.exponent
            )
        )
        logger.debug(
            f"{measurement.id}/{configuration.id} {sex}: indexed={indexed[sex]:.3f} "
            f"absolute={absolute[sex]:.3f} {configuration.variable}={forward_value:.3f}"
            f"^{configuration.exponent} coefficient={coefficients[sex]:.4f}"
        )

    universal = None
    if approach.uses_universal_coefficient:
        universal = universal_coefficient(
            configuration.variable, coefficients["male"], coefficients["female"]
        )

    return ScalingCoefficients(
        male=coefficients["male"],
        female=coefficients["female"],
        universal=universal,
        similarity=calculate_similarity(coefficients["male"], coefficients["female"]),
    )
