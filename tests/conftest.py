import pytest

from cardiac_scaling.populations import FormulaSelection, generate_reference_populations
from cardiac_scaling.reference_data import Measurement, ReferenceStatisticStore
from cardiac_scaling.simulation import PopulationRange, RangeSpec


@pytest.fixture
def formula_selection() -> FormulaSelection:
    """Default Mosteller BSA / Boer LBM selection."""
    return FormulaSelection()


@pytest.fixture
def reference_populations(formula_selection):
    """Canonical 178/164 cm, BMI 24 reference male and female."""
    return generate_reference_populations(formula_selection)


@pytest.fixture
def store() -> ReferenceStatisticStore:
    """Bundled MESA reference statistics."""
    return ReferenceStatisticStore.default()


@pytest.fixture
def linear_measurement() -> Measurement:
    """Linear measurement with BSA and height indices only."""
    return Measurement.model_validate(
        {
            "id": "test_linear",
            "name": "Test Dimension",
            "absolute_unit": "cm",
            "male": {
                "bsa": {"mean": 1.25, "sd": 0.10},
                "height": {"mean": 1.40, "sd": 0.12},
            },
            "female": {
                "bsa": {"mean": 1.30, "sd": 0.10},
                "height": {"mean": 1.35, "sd": 0.11},
            },
        }
    )


@pytest.fixture
def mass_measurement() -> Measurement:
    """Mass measurement where height, height^1.6 and height^2.7 indices differ."""
    return Measurement.model_validate(
        {
            "id": "test_mass",
            "name": "Test Mass",
            "absolute_unit": "g",
            "male": {
                "bsa": {"mean": 85.0, "sd": 17.0},
                "height": {"mean": 95.0, "sd": 20.0},
                "height16": {"mean": 70.0, "sd": 15.0},
                "height27": {"mean": 40.0, "sd": 10.0},
            },
            "female": {
                "bsa": {"mean": 72.0, "sd": 15.0},
                "height": {"mean": 77.0, "sd": 18.0},
                "height16": {"mean": 59.0, "sd": 13.0},
                "height27": {"mean": 35.0, "sd": 9.0},
            },
        }
    )


@pytest.fixture
def small_range() -> PopulationRange:
    """Coarse height × BMI grid for quick simulations."""
    return PopulationRange(
        height=RangeSpec(min=150, max=190, step=10),
        bmi=RangeSpec(min=20, max=30, step=5),
    )
