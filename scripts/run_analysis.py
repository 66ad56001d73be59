#!/usr/bin/env python3
"""
Run a Dewey Method scaling analysis from the command line.

Derives sex-specific coefficients for every standard scaling law of a bundled
MESA measurement, simulates the reference population grid and prints a
per-configuration summary with the resulting insights. Optionally writes the
merged chart series to CSV.

Examples:
    python scripts/run_analysis.py lvm
    python scripts/run_analysis.py lvedv --percentile 97.5 --lbm-formula hume
    python scripts/run_analysis.py lvdd --quick --output lvdd_chart.csv
"""

import argparse
import logging
import sys
from pathlib import Path

from cardiac_scaling.exceptions import ScalingAnalysisError
from cardiac_scaling.factory import (
    AnalysisOptions,
    generate_quick_comparison,
    generate_scaling_analysis,
)
from cardiac_scaling.formulas import BSA_CALCULATORS, LBM_CALCULATORS
from cardiac_scaling.populations import FormulaSelection
from cardiac_scaling.reference_data import ReferenceStatisticStore
from cardiac_scaling.scaling_laws import get_scaling_explanation
from cardiac_scaling.simulation import PopulationRange, RangeSpec

# Configure logging
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def list_measurements() -> None:
    """Log every bundled measurement with its dimensionality class."""
    store = ReferenceStatisticStore.default()
    for measurement in store.measurements:
        logger.info(
            f"  {measurement.id:8s} {measurement.type:7s} {measurement.name} "
            f"({measurement.absolute_unit})"
        )


def main(
    measurement_id,
    bsa_formula="mosteller",
    lbm_formula="boer",
    age=None,
    ethnicity=None,
    z_score=None,
    percentile=None,
    bmi=None,
    quick=False,
    output=None,
):
    """Run the analysis and report the summary."""
    formula_selection = FormulaSelection(
        bsa_formula=bsa_formula, lbm_formula=lbm_formula, age=age, ethnicity=ethnicity
    )
    population_range = PopulationRange()
    if bmi is not None:
        population_range = PopulationRange(bmi=RangeSpec(min=bmi[0], max=bmi[1], step=bmi[2]))
    options = AnalysisOptions(
        population_range=population_range, z_score=z_score, percentile=percentile
    )

    if quick:
        result = generate_quick_comparison(measurement_id, formula_selection, options, logger)
    else:
        result = generate_scaling_analysis(
            measurement_id, formula_selection, options=options, logger=logger
        )

    explanation = get_scaling_explanation(result.measurement.type)
    logger.info(f"{explanation['title']}: {explanation['physics']}")

    summary = result.summary_frame()
    logger.info(
        f"{result.measurement.name} at z={result.z_score:.2f} "
        f"(percentile {result.percentile:.1f})\n{summary.to_string(float_format='%.4f')}"
    )
    insights = result.insights
    logger.info(f"Best configuration: {insights.best_configuration}")
    logger.info(f"Worst configuration: {insights.worst_configuration}")
    logger.info(f"Recommended approach: {insights.recommended_approach}")
    logger.info(f"Clinical relevance: {insights.clinical_relevance}")

    for pair in result.correlation_matrix.significant_correlations:
        logger.info(
            f"  {pair.config1} ~ {pair.config2}: r={pair.correlation:.3f} ({pair.strength})"
        )

    if output:
        output_path = Path(output)
        result.chart_data.to_csv(output_path, index=False)
        logger.info(f"Chart data written to {output_path}")

    return result


if __name__ == "__main__":
    parser = argparse.ArgumentParser(
        description="Compare ratiometric and allometric scaling of a cardiac measurement."
    )
    parser.add_argument("measurement", nargs="?", help="Measurement id, e.g. 'lvm'")
    parser.add_argument(
        "--list", action="store_true", help="List bundled measurements and exit"
    )
    parser.add_argument(
        "--bsa-formula", default="mosteller", choices=sorted(BSA_CALCULATORS)
    )
    parser.add_argument("--lbm-formula", default="boer", choices=sorted(LBM_CALCULATORS))
    parser.add_argument("--age", type=float, help="Age in years (yu, lee)")
    parser.add_argument("--ethnicity", help="Ethnicity (lee)")
    level = parser.add_mutually_exclusive_group()
    level.add_argument("--z", type=float, dest="z_score", help="Reference Z-score")
    level.add_argument("--percentile", type=float, help="Reference percentile (0-100)")
    parser.add_argument(
        "--bmi",
        type=float,
        nargs=3,
        metavar=("MIN", "MAX", "STEP"),
        help="Simulate a BMI range instead of the fixed BMI 24",
    )
    parser.add_argument(
        "--quick",
        action="store_true",
        help="Only compare ratiometric BSA against LBM scaling",
    )
    parser.add_argument("--output", help="Write chart series to this CSV file")
    args = parser.parse_args()

    if args.list:
        list_measurements()
        sys.exit(0)
    if not args.measurement:
        parser.error("measurement is required unless --list is given")

    try:
        main(
            args.measurement,
            bsa_formula=args.bsa_formula,
            lbm_formula=args.lbm_formula,
            age=args.age,
            ethnicity=args.ethnicity,
            z_score=args.z_score,
            percentile=args.percentile,
            bmi=args.bmi,
            quick=args.quick,
            output=args.output,
        )
    except (ScalingAnalysisError, KeyError) as e:
        logger.error(f"Analysis failed: {e}")
        sys.exit(1)
