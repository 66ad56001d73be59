"""
Scaling variables, index bases and their policies.

Every table here is keyed by name so a new body size variable or published
index basis can be added without touching the derivation or simulation code.
"""

from typing import Callable, Dict, Optional

import numpy as np


def _height_m(height, bsa, lbm):
    return height / 100.0


# Forward scaling variable -> value from (height cm, bsa m², lbm kg)
SCALING_VARIABLES: Dict[str, Callable] = {
    "bsa": lambda height, bsa, lbm: bsa,
    "lbm": lambda height, bsa, lbm: lbm,
    "height": _height_m,
}


def average_of_sexes(male: float, female: float) -> float:
    return (male + female) / 2.0


# Universal (sex-independent) coefficient policy per scaling variable.
# Only lean body mass is hypothesised to scale identically in both sexes.
UNIVERSAL_COEFFICIENT_POLICY: Dict[str, Optional[Callable[[float, float], float]]] = {
    "bsa": None,
    "lbm": average_of_sexes,
    "height": None,
}


def _powered_height(power: float) -> Callable:
    return lambda height, bsa, lbm: np.power(height / 100.0, power)


# Published index basis -> divisor used to back-calculate the absolute value
BACK_CALCULATION_BASES: Dict[str, Callable] = {
    "bsa": lambda height, bsa, lbm: bsa,
    "height": _powered_height(1.0),
    "height16": _powered_height(1.6),
    "height27": _powered_height(2.7),
}


def scaling_value(variable: str, height, bsa, lbm):
    """Value of a forward scaling variable for one or many individuals."""
    try:
        return SCALING_VARIABLES[variable](height, bsa, lbm)
    except KeyError:
        raise ValueError(
            f"Unknown scaling variable '{variable}'. Available: {sorted(SCALING_VARIABLES)}"
        ) from None


def back_calculation_value(basis: str, height, bsa, lbm):
    """Divisor of the published index basis for one or many individuals."""
    try:
        return BACK_CALCULATION_BASES[basis](height, bsa, lbm)
    except KeyError:
        raise ValueError(
            f"Unknown index basis '{basis}'. Available: {sorted(BACK_CALCULATION_BASES)}"
        ) from None


def universal_coefficient(variable: str, male: float, female: float) -> Optional[float]:
    """Sex-universal coefficient under the variable's policy, or None."""
    policy = UNIVERSAL_COEFFICIENT_POLICY.get(variable)
    return None if policy is None else policy(male, female)
