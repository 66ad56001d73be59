"""
Reference populations and anthropometric profiles.

The canonical reference male and female (178 cm / 164 cm, BMI 24) are the
individuals every coefficient is back-calculated from. Profiles are derived
deterministically from height and BMI: weight = BMI × height(m)², BSA and LBM
from the selected formulas.
"""

from typing import Dict, List, Literal, Optional
import logging

import numpy as np
from pydantic import BaseModel, ConfigDict, field_validator

from .config import (
    BMI_CATEGORIES,
    BMI_TOP_CATEGORY,
    CANONICAL_REFERENCE_BASE,
    DEFAULT_BSA_FORMULA,
    DEFAULT_LBM_FORMULA,
    POPULATION_LIMITS,
    RANGE_FIXED_BMI,
    SEXES,
)
from .formulas import (
    BSA_CALCULATORS,
    LBM_CALCULATORS,
    calculate_bsa,
    calculate_lbm,
    calculate_weight_from_bmi,
)

logger = logging.getLogger(__name__)

Sex = Literal["male", "female"]


class FormulaSelection(BaseModel):
    """
    Body composition formula choice shared by a whole analysis run.

    Attributes:
        bsa_formula (str): BSA formula id ('mosteller' by default).
        lbm_formula (str): LBM formula id ('boer' by default).
        age (Optional[float]): Age in years; required by the 'yu' and 'lee' LBM formulas.
        ethnicity (Optional[str]): Ethnicity; required by the 'lee' LBM formula.
    """

    model_config = ConfigDict(frozen=True)

    bsa_formula: str = DEFAULT_BSA_FORMULA
    lbm_formula: str = DEFAULT_LBM_FORMULA
    age: Optional[float] = None
    ethnicity: Optional[str] = None

    @field_validator("bsa_formula")
    @classmethod
    def known_bsa_formula(cls, v: str) -> str:
        if v not in BSA_CALCULATORS:
            raise ValueError(f"Unknown BSA formula '{v}'. Available: {sorted(BSA_CALCULATORS)}")
        return v

    @field_validator("lbm_formula")
    @classmethod
    def known_lbm_formula(cls, v: str) -> str:
        if v not in LBM_CALCULATORS:
            raise ValueError(f"Unknown LBM formula '{v}'. Available: {sorted(LBM_CALCULATORS)}")
        return v

    @field_validator("age")
    @classmethod
    def positive_age(cls, v: Optional[float]) -> Optional[float]:
        if v is not None and v <= 0:
            raise ValueError("age must be positive")
        return v

    def bsa(self, weight, height):
        return calculate_bsa(self.bsa_formula, weight, height)

    def lbm(self, weight, height, sex: str):
        return calculate_lbm(
            self.lbm_formula, weight, height, sex, age=self.age, ethnicity=self.ethnicity
        )


class AnthropometricProfile(BaseModel):
    """One individual's body size variables. Immutable once computed."""

    model_config = ConfigDict(frozen=True)

    sex: Sex
    height: float  # cm
    weight: float  # kg
    bmi: float  # kg/m²
    bsa: float  # m²
    lbm: float  # kg

    @property
    def height_m(self) -> float:
        return self.height / 100.0


class ReferencePopulations(BaseModel):
    """Canonical male and female reference profiles."""

    model_config = ConfigDict(frozen=True)

    male: AnthropometricProfile
    female: AnthropometricProfile

    def __getitem__(self, sex: str) -> AnthropometricProfile:
        if sex not in SEXES:
            raise KeyError(sex)
        return getattr(self, sex)


def get_bmi_category(bmi: float) -> str:
    """WHO BMI category for a single BMI value."""
    for upper, label in BMI_CATEGORIES:
        if bmi < upper:
            return label
    return BMI_TOP_CATEGORY


def generate_profile(
    height: float, bmi: float, sex: str, formula_selection: FormulaSelection
) -> AnthropometricProfile:
    """
    Build an anthropometric profile from height (cm) and BMI.

    Raises:
        MissingFormulaParameter: If the LBM formula needs age/ethnicity that
            the selection does not carry.
    """
    weight = calculate_weight_from_bmi(height, bmi)
    return AnthropometricProfile(
        sex=sex,
        height=height,
        weight=float(weight),
        bmi=bmi,
        bsa=float(formula_selection.bsa(weight, height)),
        lbm=float(formula_selection.lbm(weight, height, sex)),
    )


def generate_reference_populations(
    formula_selection: FormulaSelection,
    baselines: Optional[Dict[str, Dict[str, float]]] = None,
) -> ReferencePopulations:
    """
    Canonical reference male and female under a formula selection.

    Args:
        formula_selection: BSA/LBM formulas plus optional age/ethnicity.
        baselines: Optional {sex: {"height": cm, "bmi": kg/m²}} override of the
            canonical 178/164 cm, BMI 24 individuals.

    Returns:
        ReferencePopulations with one profile per sex.
    """
    baselines = baselines or CANONICAL_REFERENCE_BASE
    profiles = {
        sex: generate_profile(
            baselines[sex]["height"], baselines[sex]["bmi"], sex, formula_selection
        )
        for sex in SEXES
    }
    male, female = profiles["male"], profiles["female"]
    logger.debug(
        f"Reference populations: male BSA={male.bsa:.3f} LBM={male.lbm:.2f}, "
        f"female BSA={female.bsa:.3f} LBM={female.lbm:.2f}"
    )
    return ReferencePopulations(**profiles)


def inclusive_range(start: float, stop: float, step: float) -> np.ndarray:
    """Values from start to stop inclusive in fixed steps."""
    if step <= 0:
        raise ValueError("step must be positive")
    if stop < start:
        raise ValueError("stop must be >= start")
    count = int(np.floor((stop - start) / step + 1e-9)) + 1
    return start + step * np.arange(count, dtype=np.float64)


def generate_population_range(
    sex: str,
    formula_selection: FormulaSelection,
    heights: np.ndarray,
    bmis: np.ndarray,
) -> List[AnthropometricProfile]:
    """Profiles for every (height, bmi) pair, height-major."""
    return [
        generate_profile(float(h), float(b), sex, formula_selection)
        for h in heights
        for b in bmis
    ]


def generate_height_range(
    sex: str,
    formula_selection: FormulaSelection,
    heights: np.ndarray,
    fixed_bmi: float = RANGE_FIXED_BMI,
) -> List[AnthropometricProfile]:
    """Profiles across heights at a controlled BMI (canonical 24 by default)."""
    return generate_population_range(sex, formula_selection, heights, np.array([fixed_bmi]))


def generate_bmi_range(
    sex: str,
    formula_selection: FormulaSelection,
    bmis: np.ndarray,
    fixed_height: Optional[float] = None,
) -> List[AnthropometricProfile]:
    """Profiles across BMI values at a controlled height (canonical by default)."""
    if fixed_height is None:
        fixed_height = CANONICAL_REFERENCE_BASE[sex]["height"]
    return generate_population_range(sex, formula_selection, np.array([fixed_height]), bmis)


# Normal-distribution parameters for realistic sampling
REALISTIC_POPULATION_PARAMETERS = {
    "male": {"height_mean": 178.0, "height_sd": 7.0, "bmi_mean": 26.0, "bmi_sd": 4.0},
    "female": {"height_mean": 164.0, "height_sd": 6.0, "bmi_mean": 25.0, "bmi_sd": 4.0},
}


def generate_realistic_population(
    sex: str,
    formula_selection: FormulaSelection,
    sample_size: int = 1000,
    seed: Optional[int] = None,
) -> List[AnthropometricProfile]:
    """
    Sample a population with normally distributed height and BMI.

    Heights are clipped to 120-220 cm and BMI to 16-45 kg/m². Pass a seed for
    reproducible samples.
    """
    if sample_size < 0:
        raise ValueError("sample_size must be non-negative")
    params = REALISTIC_POPULATION_PARAMETERS[sex]
    rng = np.random.default_rng(seed)
    heights = np.clip(
        rng.normal(params["height_mean"], params["height_sd"], sample_size),
        *POPULATION_LIMITS["height"],
    )
    bmis = np.clip(
        rng.normal(params["bmi_mean"], params["bmi_sd"], sample_size),
        *POPULATION_LIMITS["bmi"],
    )
    return [
        generate_profile(float(h), float(b), sex, formula_selection)
        for h, b in zip(heights, bmis)
    ]
