"""
Synthetic population simulation.

Sweeps a height × BMI grid for both sexes and evaluates every scaling law on
the same individuals, so curves from different laws are directly comparable.
Body composition is computed once per grid with vectorized numpy and shared by
all configurations.
"""

from typing import Dict, List, Optional

import numpy as np
import pandas as pd
from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from .approaches import get_approach
from .coefficients import ScalingCoefficients
from .config import DEFAULT_POPULATION_RANGE, SEXES
from .configurations import ScalingConfiguration
from .exceptions import ScalingAnalysisError
from .formulas import calculate_weight_from_bmi
from .populations import FormulaSelection, get_bmi_category, inclusive_range
from .variables import scaling_value


class RangeSpec(BaseModel):
    """Inclusive [min, max] range sampled in fixed steps."""

    model_config = ConfigDict(frozen=True)

    min: float
    max: float
    step: float = 1.0

    @field_validator("step")
    @classmethod
    def positive_step(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("step must be positive")
        return v

    @model_validator(mode="after")
    def min_le_max(self) -> "RangeSpec":
        if self.min > self.max:
            raise ValueError("min must be <= max")
        if self.min <= 0:
            raise ValueError("min must be positive")
        return self

    def values(self) -> np.ndarray:
        return inclusive_range(self.min, self.max, self.step)


class PopulationRange(BaseModel):
    """Height (cm) × BMI (kg/m²) grid definition."""

    model_config = ConfigDict(frozen=True)

    height: RangeSpec = RangeSpec(**DEFAULT_POPULATION_RANGE["height"])
    bmi: RangeSpec = RangeSpec(**DEFAULT_POPULATION_RANGE["bmi"])


class PopulationPoint(BaseModel):
    """One synthetic individual evaluated under one configuration."""

    model_config = ConfigDict(frozen=True)

    height: float
    weight: float
    bmi: float
    bsa: float
    lbm: float
    scaling_value: float
    measurement_value: float
    bmi_category: str


class PopulationData(BaseModel):
    """Simulated points per sex, height-major within each sex."""

    model_config = ConfigDict(frozen=True)

    male: List[PopulationPoint]
    female: List[PopulationPoint]

    def __getitem__(self, sex: str) -> List[PopulationPoint]:
        if sex not in SEXES:
            raise KeyError(sex)
        return getattr(self, sex)

    def all_points(self) -> List[PopulationPoint]:
        """Male points followed by female points."""
        return [*self.male, *self.female]

    def scaling_values(self) -> np.ndarray:
        return np.array([p.scaling_value for p in self.all_points()], dtype=np.float64)

    def measurement_values(self) -> np.ndarray:
        return np.array([p.measurement_value for p in self.all_points()], dtype=np.float64)

    def to_frame(self) -> pd.DataFrame:
        """Long-format DataFrame with a 'sex' column."""
        frames = [
            pd.DataFrame([p.model_dump() for p in self[sex]]).assign(sex=sex)
            for sex in SEXES
            if self[sex]
        ]
        if not frames:
            return pd.DataFrame(columns=[*PopulationPoint.model_fields, "sex"])
        return pd.concat(frames, ignore_index=True)


class PopulationGrid:
    """
    Body composition of every grid individual, per sex.

    Arrays are aligned: index i of each sex's arrays is the same (height, bmi)
    cell, ordered height-major.
    """

    def __init__(
        self,
        population_range: Optional[PopulationRange] = None,
        formula_selection: Optional[FormulaSelection] = None,
    ) -> None:
        self.population_range = population_range or PopulationRange()
        self.formula_selection = formula_selection or FormulaSelection()

        heights = self.population_range.height.values()
        bmis = self.population_range.bmi.values()
        self.height = np.repeat(heights, len(bmis))
        self.bmi = np.tile(bmis, len(heights))
        self.weight = calculate_weight_from_bmi(self.height, self.bmi)
        self.bsa = np.asarray(
            self.formula_selection.bsa(self.weight, self.height), dtype=np.float64
        )
        self.lbm: Dict[str, np.ndarray] = {
            sex: np.asarray(
                self.formula_selection.lbm(self.weight, self.height, sex), dtype=np.float64
            )
            for sex in SEXES
        }
        self.bmi_category = [get_bmi_category(b) for b in self.bmi]

    def __len__(self) -> int:
        return len(self.height)

    def scaling_values(self, variable: str, sex: str) -> np.ndarray:
        return np.asarray(
            scaling_value(variable, self.height, self.bsa, self.lbm[sex]), dtype=np.float64
        )


def generate_population_data(
    configuration: ScalingConfiguration,
    coefficients: ScalingCoefficients,
    grid: PopulationGrid,
    measurement_id: Optional[str] = None,
) -> PopulationData:
    """
    Evaluate one scaling law over the population grid.

    Ratiometric laws apply the sex-specific coefficient linearly; allometric
    laws apply the universal coefficient where one is defined, otherwise the
    sex-specific coefficient, to scaling_value^exponent.

    Args:
        configuration: Scaling law to evaluate.
        coefficients: Coefficients derived for the configuration.
        grid: Precomputed population grid.
        measurement_id: Measurement named in errors.

    Returns:
        PopulationData with one point per grid cell and sex.

    Raises:
        ScalingAnalysisError: If a grid cell has a non-positive scaling value
            (e.g. negative LBM for very short individuals) or a non-finite
            prediction.
    """
    approach = get_approach(configuration.approach)
    populations = {}
    for sex in SEXES:
        x = grid.scaling_values(configuration.variable, sex)
        invalid = ~(np.isfinite(x) & (x > 0))
        if invalid.any():
            i = int(np.argmax(invalid))
            raise ScalingAnalysisError(
                f"Non-positive {configuration.variable} {x[i]:.3f} for {sex} at height "
                f"{grid.height[i]:g} cm, BMI {grid.bmi[i]:g}; narrow the population range",
                measurement_id=measurement_id,
                configuration_id=configuration.id,
            )
        coefficient = coefficients.forward(sex, use_universal=approach.uses_universal_coefficient)
        y = np.asarray(approach.predict(coefficient, x, configuration.exponent), dtype=np.float64)
        if not np.all(np.isfinite(y)):
            raise ScalingAnalysisError(
                f"Non-finite {sex} predictions",
                measurement_id=measurement_id,
                configuration_id=configuration.id,
            )
        populations[sex] = [
            PopulationPoint(
                height=grid.height[i],
                weight=grid.weight[i],
                bmi=grid.bmi[i],
                bsa=grid.bsa[i],
                lbm=grid.lbm[sex][i],
                scaling_value=x[i],
                measurement_value=y[i],
                bmi_category=grid.bmi_category[i],
            )
            for i in range(len(grid))
        ]
    return PopulationData(**populations)
