"""
Body Composition Formula Registry

Vectorized BSA (m²) and LBM (kg) estimators keyed by formula id. Every
calculator accepts scalars or numpy arrays for weight (kg) and height (cm), so
the same code path serves the canonical reference individuals and the
simulated population grid.

Formulas that need age or ethnicity never fall back to a default: calling them
without the parameter raises MissingFormulaParameter.
"""

from typing import Callable, Dict, List, Optional, Union

import numpy as np
from pydantic import BaseModel, ConfigDict

from .exceptions import MissingFormulaParameter, UnknownFormulaError

ArrayLike = Union[float, np.ndarray]


# =============================================================================
# BSA
# =============================================================================


def _bsa_dubois(weight: ArrayLike, height: ArrayLike) -> ArrayLike:
    # BSA = 0.007184 × height^0.725 × weight^0.425
    return 0.007184 * np.power(height, 0.725) * np.power(weight, 0.425)


def _bsa_mosteller(weight: ArrayLike, height: ArrayLike) -> ArrayLike:
    # BSA = sqrt(height × weight / 3600)
    return np.sqrt(height * weight / 3600.0)


def _bsa_haycock(weight: ArrayLike, height: ArrayLike) -> ArrayLike:
    return 0.024265 * np.power(height, 0.3964) * np.power(weight, 0.5378)


def _bsa_gehan(weight: ArrayLike, height: ArrayLike) -> ArrayLike:
    return 0.0235 * np.power(height, 0.42246) * np.power(weight, 0.51456)


def _bsa_boyd(weight: ArrayLike, height: ArrayLike) -> ArrayLike:
    # Weight in grams; exponent varies with log10(weight)
    grams = np.asarray(weight, dtype=np.float64) * 1000.0
    exponent = 0.7285 - 0.0188 * np.log10(grams)
    return 0.0003207 * np.power(height, 0.3) * np.power(grams, exponent)


def _bsa_dreyer(weight: ArrayLike, height: ArrayLike) -> ArrayLike:
    # Weight-only
    return 0.1 * np.power(weight, 2.0 / 3.0)


def _bsa_livingston(weight: ArrayLike, height: ArrayLike) -> ArrayLike:
    # Weight-only
    return 0.1173 * np.power(weight, 0.6466)


BSA_CALCULATORS: Dict[str, Callable[[ArrayLike, ArrayLike], ArrayLike]] = {
    "dubois": _bsa_dubois,
    "mosteller": _bsa_mosteller,
    "haycock": _bsa_haycock,
    "gehan": _bsa_gehan,
    "boyd": _bsa_boyd,
    "dreyer": _bsa_dreyer,
    "livingston": _bsa_livingston,
}


# =============================================================================
# LBM
# =============================================================================

# Lee et al. (2017) race coefficients; white is the reference group
LEE_RACE_COEFFICIENTS = {
    "male": {
        "white": 0.0,
        "black": 1.821,
        "hispanic": 0.32,
        "mexican": -0.441,
        "asian": -0.784,
        "other": -0.784,
    },
    "female": {
        "white": 0.0,
        "black": 1.128,
        "hispanic": -0.047,
        "mexican": -0.448,
        "asian": -0.384,
        "other": -0.384,
    },
}

ETHNICITY_ALIASES = {
    "white": "white",
    "caucasian": "white",
    "black": "black",
    "african": "black",
    "african american": "black",
    "hispanic": "hispanic",
    "latino": "hispanic",
    "latina": "hispanic",
    "mexican": "mexican",
    "asian": "asian",
    "east asian": "asian",
    "south asian": "asian",
}


def normalize_ethnicity(ethnicity: str) -> str:
    """Map free-text ethnicity onto the Lee (2017) coefficient groups."""
    return ETHNICITY_ALIASES.get(ethnicity.strip().lower(), "other")


def _bmi(weight: ArrayLike, height: ArrayLike) -> ArrayLike:
    return weight / np.power(height / 100.0, 2)


def _lbm_boer(weight, height, sex, age=None, ethnicity=None):
    if sex == "male":
        return 0.407 * weight + 0.267 * height - 19.2
    return 0.252 * weight + 0.473 * height - 48.3


def _lbm_hume(weight, height, sex, age=None, ethnicity=None):
    if sex == "male":
        return 0.3281 * weight + 0.33929 * height - 29.5336
    return 0.29569 * weight + 0.41813 * height - 43.2933


def _lbm_yu(weight, height, sex, age=None, ethnicity=None):
    sex_term = 9.940015 if sex == "male" else 0.0
    return (
        22.932326
        + 0.684668 * weight
        - 1.137156 * _bmi(weight, height)
        - 0.009213 * age
        + sex_term
    )


def _lbm_lee(weight, height, sex, age=None, ethnicity=None):
    race = LEE_RACE_COEFFICIENTS[sex][normalize_ethnicity(ethnicity)]
    if sex == "male":
        return -14.729 - 0.071 * age + 0.210 * height + 0.468 * weight + race
    return -14.292 - 0.046 * age + 0.201 * height + 0.347 * weight + race


def _lbm_kuch(weight, height, sex, age=None, ethnicity=None):
    # Fat-free mass rather than LBM
    height_m = height / 100.0
    if sex == "male":
        return 5.1 * np.power(height_m, 1.14) * np.power(weight, 0.41)
    return 5.34 * np.power(height_m, 1.47) * np.power(weight, 0.33)


def _lbm_janmahasatian(weight, height, sex, age=None, ethnicity=None):
    # Fat-free mass, BMI-adjusted
    bmi = _bmi(weight, height)
    if sex == "male":
        return 9270.0 * weight / (6680.0 + 216.0 * bmi)
    return 9270.0 * weight / (8780.0 + 244.0 * bmi)


LBM_CALCULATORS: Dict[str, Callable[..., ArrayLike]] = {
    "boer": _lbm_boer,
    "hume": _lbm_hume,
    "yu": _lbm_yu,
    "lee": _lbm_lee,
    "kuch": _lbm_kuch,
    "janmahasatian": _lbm_janmahasatian,
}


# =============================================================================
# FORMULA METADATA
# =============================================================================


class FormulaInfo(BaseModel):
    """Descriptive metadata for a registered formula."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    year: int
    parameters: List[str]
    notes: Optional[str] = None


BSA_FORMULA_INFO: Dict[str, FormulaInfo] = {
    info.id: info
    for info in [
        FormulaInfo(id="boyd", name="Boyd", year=1935, parameters=["weight", "height"], notes="Complex logarithmic formula"),
        FormulaInfo(id="dreyer", name="Dreyer", year=1915, parameters=["weight"], notes="Weight-only formula"),
        FormulaInfo(id="dubois", name="Du Bois & Du Bois", year=1916, parameters=["weight", "height"], notes="Most cited formula"),
        FormulaInfo(id="gehan", name="Gehan & George", year=1970, parameters=["weight", "height"], notes="Cancer research focus"),
        FormulaInfo(id="haycock", name="Haycock et al.", year=1978, parameters=["weight", "height"], notes="Good for pediatrics"),
        FormulaInfo(id="livingston", name="Livingston & Lee", year=2001, parameters=["weight"], notes="Modern weight-based"),
        FormulaInfo(id="mosteller", name="Mosteller", year=1987, parameters=["weight", "height"], notes="Default MESA formula"),
    ]
}

LBM_FORMULA_INFO: Dict[str, FormulaInfo] = {
    info.id: info
    for info in [
        FormulaInfo(id="boer", name="Boer", year=1984, parameters=["weight", "height", "sex"], notes="Most commonly used"),
        FormulaInfo(id="hume", name="Hume & Weyers", year=1971, parameters=["weight", "height", "sex"], notes="Classic formula"),
        FormulaInfo(id="janmahasatian", name="Janmahasatian et al.", year=2005, parameters=["weight", "height", "sex"], notes="BMI-adjusted FFM"),
        FormulaInfo(id="kuch", name="Kuch", year=2001, parameters=["weight", "height", "sex"], notes="Calculates FFM, not LBM"),
        FormulaInfo(id="lee", name="Lee et al.", year=2017, parameters=["weight", "height", "sex", "age", "ethnicity"], notes="Most comprehensive"),
        FormulaInfo(id="yu", name="Yu et al.", year=2013, parameters=["weight", "height", "sex", "age"], notes="Includes age and BMI"),
    ]
}

# Parameters beyond weight/height/sex that a formula cannot run without
LBM_REQUIRED_PARAMETERS = {
    formula_id: [p for p in info.parameters if p in ("age", "ethnicity")]
    for formula_id, info in LBM_FORMULA_INFO.items()
}


# =============================================================================
# UNIFIED API
# =============================================================================


def calculate_bsa(formula_id: str, weight: ArrayLike, height: ArrayLike) -> ArrayLike:
    """
    Calculate body surface area with the selected formula.

    Args:
        formula_id: Registered BSA formula id (e.g. 'mosteller').
        weight: Weight in kg.
        height: Height in cm.

    Returns:
        BSA in m², with the shape of the inputs.

    Raises:
        UnknownFormulaError: If formula_id is not registered.
    """
    try:
        calculator = BSA_CALCULATORS[formula_id]
    except KeyError:
        raise UnknownFormulaError("BSA", formula_id, list(BSA_CALCULATORS)) from None
    return calculator(weight, height)


def calculate_lbm(
    formula_id: str,
    weight: ArrayLike,
    height: ArrayLike,
    sex: str,
    age: Optional[float] = None,
    ethnicity: Optional[str] = None,
) -> ArrayLike:
    """
    Calculate lean body mass with the selected formula.

    Args:
        formula_id: Registered LBM formula id (e.g. 'boer').
        weight: Weight in kg.
        height: Height in cm.
        sex: 'male' or 'female'.
        age: Age in years, required by 'yu' and 'lee'.
        ethnicity: Free-text ethnicity, required by 'lee'.

    Returns:
        LBM in kg, with the shape of the inputs.

    Raises:
        UnknownFormulaError: If formula_id is not registered.
        MissingFormulaParameter: If a required age/ethnicity was not supplied.
        ValueError: If sex is not 'male' or 'female'.
    """
    try:
        calculator = LBM_CALCULATORS[formula_id]
    except KeyError:
        raise UnknownFormulaError("LBM", formula_id, list(LBM_CALCULATORS)) from None
    if sex not in ("male", "female"):
        raise ValueError(f"Sex must be 'male' or 'female', got '{sex}'")

    supplied = {"age": age, "ethnicity": ethnicity}
    for parameter in LBM_REQUIRED_PARAMETERS.get(formula_id, []):
        if supplied[parameter] is None:
            raise MissingFormulaParameter(formula_id, parameter)

    return calculator(weight, height, sex, age=age, ethnicity=ethnicity)


def calculate_weight_from_bmi(height: ArrayLike, bmi: ArrayLike) -> ArrayLike:
    """Weight (kg) = BMI × height(m)²."""
    height_m = height / 100.0
    return bmi * height_m * height_m
