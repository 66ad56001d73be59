"""
Chart series assembly.

Merges every configuration's simulated series onto a single BSA axis so laws
that scale by LBM or height can be drawn against the clinical convention.
Ratiometric series pass through the origin, and ratiometric BSA lines are
extended past the simulated population; allometric series stay within the
simulated population and have no value at BSA 0.
"""

from typing import Dict, List

import numpy as np
import pandas as pd

from .approaches import get_approach
from .coefficients import ScalingCoefficients
from .config import (
    CHART_BSA_DECIMALS,
    CHART_EXTRAPOLATION_STEP,
    CHART_MIN_EXTENT,
    SEXES,
)
from .configurations import ScalingConfiguration
from .simulation import PopulationData

X_COLUMN = "bsa"


def series_column(configuration_id: str, sex: str) -> str:
    return f"{configuration_id}_{sex}"


def _round_bsa(value: float) -> float:
    return round(float(value), CHART_BSA_DECIMALS)


def extrapolation_points(max_bsa: float) -> np.ndarray:
    """BSA values in 0.1 steps from ceil(max_bsa·10)/10 to max(3.5, max_bsa)."""
    start = np.ceil(max_bsa * 10.0) / 10.0
    stop = max(CHART_MIN_EXTENT, max_bsa)
    if start > stop + 1e-9:
        return np.array([], dtype=np.float64)
    count = int(np.floor((stop - start) / CHART_EXTRAPOLATION_STEP + 1e-9)) + 1
    return np.round(start + CHART_EXTRAPOLATION_STEP * np.arange(count), CHART_BSA_DECIMALS)


def generate_chart_data(
    configurations: List[ScalingConfiguration],
    population_data: Dict[str, PopulationData],
    coefficients: Dict[str, ScalingCoefficients],
) -> pd.DataFrame:
    """
    Merge all configuration series onto a BSA-keyed table.

    Args:
        configurations: Configurations in display order.
        population_data: Simulated populations keyed by configuration id.
        coefficients: Coefficients keyed by configuration id.

    Only ratiometric BSA lines are extrapolated past the simulated population.
    A ratiometric line in another variable (height) still gets the origin row
    but has no value at an unsimulated BSA, so it stops at the population.

    Returns:
        DataFrame sorted by 'bsa' with one '<configuration id>_<sex>' column
        per series; NaN where a series has no value at that BSA.
    """
    rows: Dict[float, Dict[str, float]] = {0.0: {}}
    axis_lines = []

    for config in configurations:
        approach = get_approach(config.approach)
        data = population_data.get(config.id)
        config_coefficients = coefficients.get(config.id)
        if data is None or config_coefficients is None:
            continue
        if approach.extends_to_origin:
            for sex in SEXES:
                rows[0.0][series_column(config.id, sex)] = 0.0
        # Only a line in BSA itself can be evaluated off-population on this axis
        on_axis = approach.extends_to_origin and config.variable == X_COLUMN
        if on_axis:
            axis_lines.append(config)

        for sex in SEXES:
            column = series_column(config.id, sex)
            for point in data[sex]:
                bsa = _round_bsa(point.bsa)
                row = rows.setdefault(bsa, {})
                if on_axis:
                    # Evaluate the line on the rounded axis value so it stays exact
                    row[column] = float(
                        approach.predict(config_coefficients[sex], bsa, config.exponent)
                    )
                else:
                    row[column] = point.measurement_value

    max_bsa = max(rows)
    for bsa in extrapolation_points(max_bsa):
        bsa = _round_bsa(bsa)
        row = rows.setdefault(bsa, {})
        for config in axis_lines:
            approach = get_approach(config.approach)
            for sex in SEXES:
                row[series_column(config.id, sex)] = float(
                    approach.predict(coefficients[config.id][sex], bsa, config.exponent)
                )

    columns = [
        series_column(config.id, sex)
        for config in configurations
        if config.id in population_data and config.id in coefficients
        for sex in SEXES
    ]
    records = [{X_COLUMN: bsa, **row} for bsa, row in sorted(rows.items())]
    return pd.DataFrame.from_records(records, columns=[X_COLUMN, *columns]).astype(np.float64)
