"""
Scaling configuration catalog.

A configuration pairs an approach (ratiometric or allometric) with a forward
scaling variable, an exponent and the published index basis its coefficient is
back-calculated from. The catalog builds the standard set of competing laws
for a measurement's dimensionality class.
"""

from typing import List

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from .approaches import get_approach, registry
from .scaling_laws import (
    EMPIRICAL_HEIGHT_EXPONENTS,
    EMPIRICAL_MASS_HEIGHT_EXPONENT,
    get_scaling_exponents,
)
from .variables import BACK_CALCULATION_BASES, SCALING_VARIABLES


class ScalingConfiguration(BaseModel):
    """
    One candidate scaling law.

    Attributes:
        id (str): Unique identifier, also the chart column prefix.
        name (str): Display name.
        approach (str): Registered approach name ('ratiometric' or 'allometric').
        variable (str): Forward scaling variable ('bsa', 'lbm' or 'height').
        exponent (float): Power applied to the scaling variable.
        source_data (str): Published index basis read for back-calculation.
        description (str): Free-text description.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    approach: str
    variable: str
    exponent: float
    source_data: str = "bsa"
    description: str = ""

    @field_validator("id")
    @classmethod
    def validate_id(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Configuration id must be a non-empty string")
        return v

    @field_validator("approach")
    @classmethod
    def known_approach(cls, v: str) -> str:
        if v not in registry:
            raise ValueError(f"Unsupported approach '{v}'. Available: {sorted(registry)}")
        return v

    @field_validator("variable")
    @classmethod
    def known_variable(cls, v: str) -> str:
        if v not in SCALING_VARIABLES:
            raise ValueError(f"Unknown scaling variable '{v}'")
        return v

    @field_validator("source_data")
    @classmethod
    def known_source(cls, v: str) -> str:
        if v not in BACK_CALCULATION_BASES:
            raise ValueError(f"Unknown index basis '{v}'")
        return v

    @model_validator(mode="after")
    def approach_constraints(self) -> "ScalingConfiguration":
        get_approach(self.approach).validate_config(self)
        return self


def _format_exponent(exponent: float) -> str:
    return f"{exponent:g}"


def _ratiometric_bsa() -> ScalingConfiguration:
    return ScalingConfiguration(
        id="ratiometric_bsa",
        name="Ratiometric BSA",
        approach="ratiometric",
        variable="bsa",
        exponent=1.0,
        source_data="bsa",
        description="Current clinical standard - linear BSA indexing",
    )


def _lbm_configuration(exponent: float) -> ScalingConfiguration:
    if exponent == 1.0:
        # Exponent 1.0 is ratiometric in effect; it is the geometric choice for 3D
        # measurements, not evidence of universal biological scaling.
        name = "LBM^1.0 (Geometrically Appropriate)"
        description = "Geometrically appropriate direct scaling with lean body mass"
    else:
        name = f"Allometric LBM^{_format_exponent(exponent)}"
        description = "Universal biological scaling based on lean body mass"
    return ScalingConfiguration(
        id="allometric_lbm",
        name=name,
        approach="allometric",
        variable="lbm",
        exponent=exponent,
        source_data="bsa",
        description=description,
    )


def get_standard_configurations(measurement_type: str) -> List[ScalingConfiguration]:
    """
    Standard competing scaling laws for a dimensionality class.

    Args:
        measurement_type: 'linear', 'area', 'mass' or 'volume'.

    Returns:
        Ordered configurations: ratiometric BSA, LBM at the geometric exponent,
        allometric BSA (non-area), a height law, and for 2D/3D classes the
        empirical height^1.6 and height^2.7 laws.

    Raises:
        ValueError: If measurement_type is unknown.
    """
    exponents = get_scaling_exponents(measurement_type)

    configs = [_ratiometric_bsa(), _lbm_configuration(exponents.lbm)]

    # BSA^1 for area would duplicate ratiometric BSA
    if measurement_type != "area":
        configs.append(
            ScalingConfiguration(
                id="allometric_bsa",
                name=f"Allometric BSA^{_format_exponent(exponents.bsa)}",
                approach="allometric",
                variable="bsa",
                exponent=exponents.bsa,
                source_data="bsa",
                description="Geometric scaling using body surface area",
            )
        )

    if measurement_type == "linear":
        configs.append(
            ScalingConfiguration(
                id="ratiometric_height",
                name="Ratiometric Height",
                approach="ratiometric",
                variable="height",
                exponent=1.0,
                source_data="height",
                description="Linear height indexing",
            )
        )
        return configs

    configs.append(
        ScalingConfiguration(
            id="allometric_height",
            name=f"Allometric Height^{_format_exponent(exponents.height)}",
            approach="allometric",
            variable="height",
            exponent=exponents.height,
            source_data="height",
            description="Theoretical geometric height scaling",
        )
    )

    for basis, exponent in EMPIRICAL_HEIGHT_EXPONENTS.items():
        configs.append(
            ScalingConfiguration(
                id=f"height_{basis[len('height'):]}",
                name=f"Height^{_format_exponent(exponent)} (Empirical)",
                approach="allometric",
                variable="height",
                exponent=exponent,
                source_data=basis,
                description="Empirical height scaling from literature",
            )
        )

    if measurement_type in ("mass", "volume"):
        configs.append(
            ScalingConfiguration(
                id="height_21",
                name=f"Height^{_format_exponent(EMPIRICAL_MASS_HEIGHT_EXPONENT)} (Empirical)",
                approach="allometric",
                variable="height",
                exponent=EMPIRICAL_MASS_HEIGHT_EXPONENT,
                source_data="height",
                description="Empirical height scaling for 3D measurements",
            )
        )

    return configs


def get_quick_comparison_configurations(measurement_type: str) -> List[ScalingConfiguration]:
    """Ratiometric BSA against LBM at the geometric exponent."""
    exponents = get_scaling_exponents(measurement_type)
    return [_ratiometric_bsa(), _lbm_configuration(exponents.lbm)]
