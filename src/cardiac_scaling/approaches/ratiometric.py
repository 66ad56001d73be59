"""Ratiometric (simple indexing) scaling: measurement = k · x."""

from .base import BaseScalingApproach


class RatiometricApproach(BaseScalingApproach):
    """
    Linear indexing through the origin, the current clinical convention.

    The coefficient is the published indexed value itself, so the value read
    backward is exactly the value applied forward. This requires exponent 1.0
    and a forward variable equal to the published index basis.
    """

    extends_to_origin = True
    uses_universal_coefficient = False

    def validate_config(self, configuration) -> None:
        if configuration.exponent != 1.0:
            raise ValueError(
                f"Ratiometric configuration '{configuration.id}' must use exponent 1.0, "
                f"got {configuration.exponent}"
            )
        if configuration.variable != configuration.source_data:
            raise ValueError(
                f"Ratiometric configuration '{configuration.id}' must scale by its "
                f"source basis '{configuration.source_data}', got '{configuration.variable}'"
            )

    def derive_coefficient(self, indexed, absolute, scaling_value, exponent):
        return indexed

    def predict(self, coefficient, scaling_value, exponent):
        return coefficient * scaling_value
