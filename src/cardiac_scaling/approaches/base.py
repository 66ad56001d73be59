"""
Base class for scaling approaches.
"""

from abc import ABC, abstractmethod
from typing import Union

import numpy as np

ArrayLike = Union[float, np.ndarray]


class BaseScalingApproach(ABC):
    """
    Abstract base class for the ways a measurement can scale with body size.

    An approach decides how a sex-specific coefficient is derived from the
    canonical reference individual and how the coefficient is applied forward
    to a scaling variable. Each approach is registered under its class name
    without the "Approach" suffix (RatiometricApproach -> 'ratiometric').

    Example subclass implementation:
        class LogLinearApproach(BaseScalingApproach):
            extends_to_origin = False

            def validate_config(self, configuration) -> None:
                pass

            def derive_coefficient(self, indexed, absolute, scaling_value, exponent):
                return absolute / np.log(scaling_value)

            def predict(self, coefficient, scaling_value, exponent):
                return coefficient * np.log(scaling_value)
    """

    # Whether the curve is a line through (0, 0) that may be extrapolated
    extends_to_origin: bool = False

    # Whether a sex-universal coefficient (if the variable defines one) is used forward
    uses_universal_coefficient: bool = False

    @abstractmethod
    def validate_config(self, configuration) -> None:
        """
        Validate approach-specific constraints of a scaling configuration.

        Raises:
            ValueError: If the configuration violates the approach's invariants.
        """
        pass

    @abstractmethod
    def derive_coefficient(
        self, indexed: float, absolute: float, scaling_value: float, exponent: float
    ) -> float:
        """
        Derive a sex-specific coefficient from the reference individual.

        Args:
            indexed: Published indexed value at the requested Z-score.
            absolute: Back-calculated absolute measurement.
            scaling_value: Reference individual's forward scaling variable.
            exponent: Configuration exponent.
        """
        pass

    @abstractmethod
    def predict(
        self, coefficient: float, scaling_value: ArrayLike, exponent: float
    ) -> ArrayLike:
        """Apply a coefficient to scaling variable values."""
        pass
