"""
Exception and warning types raised by the scaling analysis engine.

All errors subclass ``ValueError`` so callers that already guard numeric
validation keep working, and carry the measurement/configuration they concern.
"""

from typing import Optional


class ScalingAnalysisError(ValueError):
    """Base class for fatal scaling analysis errors."""

    def __init__(
        self,
        message: str,
        measurement_id: Optional[str] = None,
        configuration_id: Optional[str] = None,
    ) -> None:
        self.measurement_id = measurement_id
        self.configuration_id = configuration_id
        context = []
        if measurement_id is not None:
            context.append(f"measurement '{measurement_id}'")
        if configuration_id is not None:
            context.append(f"configuration '{configuration_id}'")
        if context:
            message = f"{message} ({', '.join(context)})"
        super().__init__(message)


class MissingReferenceStatistic(ScalingAnalysisError):
    """A measurement has no published statistic for the requested basis/sex."""

    def __init__(
        self,
        measurement_id: str,
        basis: str,
        sex: Optional[str] = None,
        configuration_id: Optional[str] = None,
    ) -> None:
        self.basis = basis
        self.sex = sex
        who = f" for {sex}" if sex else ""
        super().__init__(
            f"No '{basis}'-indexed reference statistic{who}",
            measurement_id=measurement_id,
            configuration_id=configuration_id,
        )


class MissingFormulaParameter(ScalingAnalysisError):
    """An LBM formula requiring age/ethnicity was called without it."""

    def __init__(self, formula_id: str, parameter: str) -> None:
        self.formula_id = formula_id
        self.parameter = parameter
        super().__init__(
            f"LBM formula '{formula_id}' requires missing parameter '{parameter}'"
        )


class UnknownFormulaError(ScalingAnalysisError):
    """The requested BSA/LBM formula id is not registered."""

    def __init__(self, kind: str, formula_id: str, available: list) -> None:
        self.kind = kind
        self.formula_id = formula_id
        super().__init__(
            f"Unknown {kind} formula '{formula_id}'. Available: {sorted(available)}"
        )


class InvalidZScoreWarning(UserWarning):
    """Z-score outside +/-3; derived reference values may be implausible."""
