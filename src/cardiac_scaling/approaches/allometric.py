"""Allometric (power-law) scaling: measurement = k · x^b."""

import numpy as np

from .base import BaseScalingApproach


class AllometricApproach(BaseScalingApproach):
    """
    Power-law scaling against any body size variable.

    The coefficient is the back-calculated absolute value divided by the
    reference individual's scaling variable raised to the exponent. The forward
    variable may differ from the basis used for back-calculation (e.g. LBM
    scaling derived from BSA-indexed data).
    """

    extends_to_origin = False
    uses_universal_coefficient = True

    def validate_config(self, configuration) -> None:
        if configuration.exponent <= 0:
            raise ValueError(
                f"Allometric configuration '{configuration.id}' must use a positive "
                f"exponent, got {configuration.exponent}"
            )

    def derive_coefficient(self, indexed, absolute, scaling_value, exponent):
        return absolute / np.power(scaling_value, exponent)

    def predict(self, coefficient, scaling_value, exponent):
        return coefficient * np.power(scaling_value, exponent)
