"""
Published indexed reference statistics for cardiac measurements.

Bundles the MESA normal reference limits (Strom et al., J Am Heart Assoc 2024)
as package data and exposes them through ReferenceStatisticStore. Each
measurement's dimensionality class is derived from its absolute unit.

Index bases:
    bsa      -> value / m²
    height   -> value / m
    height16 -> value / m^1.6 (published independently, not derived from height)
    height27 -> value / m^2.7 (published independently, not derived from height)
"""

from typing import Dict, List, Optional
import functools
import json
import logging
from importlib import resources

from pydantic import BaseModel, ConfigDict, field_validator

from .exceptions import MissingReferenceStatistic

logger = logging.getLogger(__name__)


# Absolute unit -> dimensionality class
UNIT_TYPE_MAP: Dict[str, str] = {
    "cm": "linear",
    "mm": "linear",
    "m": "linear",
    "cm²": "area",
    "cm2": "area",
    "mm²": "area",
    "g": "mass",
    "kg": "mass",
    "mL": "volume",
    "ml": "volume",
    "L": "volume",
    "L/min": "volume",
}

INDEX_UNITS = {
    "bsa": "m²",
    "height": "m",
    "bmi": "kg/m²",
    "height16": "m^1.6",
    "height27": "m^2.7",
}


def derive_measurement_type(absolute_unit: str) -> str:
    """
    Derive the dimensionality class from an absolute unit.

    Raises:
        ValueError: If the unit is not recognised.
    """
    try:
        return UNIT_TYPE_MAP[absolute_unit]
    except KeyError:
        raise ValueError(
            f"Unknown absolute unit: {absolute_unit}. "
            f"Supported units: {', '.join(UNIT_TYPE_MAP)}"
        ) from None


class IndexedValue(BaseModel):
    """Published mean and SD of an indexed measurement."""

    model_config = ConfigDict(frozen=True)

    mean: float
    sd: float

    @field_validator("sd")
    @classmethod
    def sd_non_negative(cls, v: float) -> float:
        if v < 0:
            raise ValueError("sd must be non-negative")
        return v

    def at_z(self, z_score: float) -> float:
        """Indexed value at the given Z-score: mean + z·sd."""
        return self.mean + z_score * self.sd


class SexReferenceData(BaseModel):
    """Indexed statistics for one sex, keyed by index basis."""

    model_config = ConfigDict(frozen=True)

    bsa: Optional[IndexedValue] = None
    bmi: Optional[IndexedValue] = None
    height: Optional[IndexedValue] = None
    height16: Optional[IndexedValue] = None
    height27: Optional[IndexedValue] = None


class Measurement(BaseModel):
    """A measurement with sex-specific published reference statistics."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    absolute_unit: str
    male: SexReferenceData
    female: SexReferenceData

    @field_validator("absolute_unit")
    @classmethod
    def known_unit(cls, v: str) -> str:
        derive_measurement_type(v)
        return v

    @property
    def type(self) -> str:
        return derive_measurement_type(self.absolute_unit)

    def indexed_unit(self, basis: str) -> str:
        return f"{self.absolute_unit}/{INDEX_UNITS[basis]}"

    def has_basis(self, basis: str) -> bool:
        return (
            getattr(self.male, basis, None) is not None
            and getattr(self.female, basis, None) is not None
        )

    def statistic(
        self, sex: str, basis: str, configuration_id: Optional[str] = None
    ) -> IndexedValue:
        """
        Look up the published statistic for a sex and index basis.

        Raises:
            MissingReferenceStatistic: If the basis was not published. No other
                basis is substituted.
        """
        sex_data = getattr(self, sex)
        value = getattr(sex_data, basis, None) if basis in INDEX_UNITS else None
        if value is None:
            raise MissingReferenceStatistic(
                self.id, basis, sex=sex, configuration_id=configuration_id
            )
        return value


def _get_reference_data_path() -> str:
    """Package holding bundled reference tables."""
    return "cardiac_scaling.data"


@functools.lru_cache(maxsize=None)
def _load_reference_data(filename: str = "strom_mesa.json") -> dict:
    """
    Load a bundled reference table from package resources.

    Raises:
        FileNotFoundError: If the table is not shipped with the package.
        ValueError: If the table cannot be parsed.
    """
    try:
        with (
            resources.files(_get_reference_data_path())
            .joinpath(filename)
            .open("r", encoding="utf-8") as f
        ):
            return json.load(f)
    except FileNotFoundError:
        raise FileNotFoundError(
            f"Reference data file '{filename}' not found. "
            "Ensure cardiac_scaling is properly installed."
        ) from None
    except json.JSONDecodeError as e:
        raise ValueError(f"Failed to parse reference data '{filename}': {e}") from e


class ReferenceStatisticStore:
    """
    Read-only lookup of published statistics by measurement id, sex and basis.

    Usage:
        store = ReferenceStatisticStore.default()
        lvm = store.get("lvm")
        upper = store.statistic("lvm", "male", "height27").at_z(1.96)
    """

    def __init__(self, measurements: List[Measurement], source: str = "") -> None:
        self.source = source
        self._measurements: Dict[str, Measurement] = {}
        for measurement in measurements:
            if measurement.id in self._measurements:
                raise ValueError(f"Duplicate measurement id '{measurement.id}'")
            self._measurements[measurement.id] = measurement

    @classmethod
    def default(cls) -> "ReferenceStatisticStore":
        """Store backed by the bundled MESA table."""
        raw = _load_reference_data()
        measurements = [Measurement.model_validate(m) for m in raw["measurements"]]
        logger.debug(f"Loaded {len(measurements)} reference measurements")
        return cls(measurements, source=raw.get("source", ""))

    def __contains__(self, measurement_id: str) -> bool:
        return measurement_id in self._measurements

    def __len__(self) -> int:
        return len(self._measurements)

    @property
    def measurements(self) -> List[Measurement]:
        return list(self._measurements.values())

    def get(self, measurement_id: str) -> Measurement:
        try:
            return self._measurements[measurement_id]
        except KeyError:
            raise KeyError(
                f"Unknown measurement '{measurement_id}'. "
                f"Available: {sorted(self._measurements)}"
            ) from None

    def statistic(self, measurement_id: str, sex: str, basis: str) -> IndexedValue:
        return self.get(measurement_id).statistic(sex, basis)

    def by_type(self, measurement_type: str) -> List[Measurement]:
        return [m for m in self._measurements.values() if m.type == measurement_type]

    def with_basis(self, basis: str) -> List[Measurement]:
        return [m for m in self._measurements.values() if m.has_basis(basis)]

    def summary(self) -> dict:
        """Counts by dimensionality class and by available index basis."""
        return {
            "total": len(self),
            "by_type": {
                t: len(self.by_type(t)) for t in ("linear", "area", "mass", "volume")
            },
            "with_indices": {basis: len(self.with_basis(basis)) for basis in INDEX_UNITS},
            "source": self.source,
        }


def get_measurement(measurement_id: str) -> Measurement:
    """Measurement from the bundled MESA table."""
    return ReferenceStatisticStore.default().get(measurement_id)
