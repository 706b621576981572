"""Static catalog of conversion categories, checked against pint at load."""

from __future__ import annotations

import math
from dataclasses import dataclass
from functools import lru_cache
from typing import Dict, List, Optional

from common.logging import get_logger

from .registry import DimensionalityError, UndefinedUnitError, dimensionality, ratio

logger = get_logger(__name__)

TEMPERATURE = "Temperature"
FACTOR_REL_TOL = 1e-4


class CatalogError(ValueError):
    """Raised when the static catalog disagrees with pint or with itself."""


@dataclass(frozen=True)
class Unit:
    """One selectable unit. ``factor`` is the ratio to the category base unit."""

    name: str
    factor: float
    symbol: str
    quantity: str  # pint expression

    def to_dict(self) -> Dict[str, object]:
        return {"name": self.name, "symbol": self.symbol, "factor": self.factor}


@dataclass(frozen=True)
class ConversionCategory:
    name: str
    base_unit: str
    units: tuple[Unit, ...]
    homogeneous: bool = True

    @property
    def is_temperature(self) -> bool:
        return self.name == TEMPERATURE

    def find_unit(self, key: str) -> Optional[Unit]:
        """Look a unit up by name or symbol, names taking precedence."""

        text = key.strip()
        for unit in self.units:
            if unit.name == text:
                return unit
        for unit in self.units:
            if unit.symbol == text:
                return unit
        lowered = text.lower()
        for unit in self.units:
            if unit.name.lower() == lowered:
                return unit
        return None

    def default_pair(self) -> tuple[Unit, Unit]:
        first = self.units[0]
        return first, self.units[1] if len(self.units) > 1 else first

    def to_dict(self) -> Dict[str, object]:
        return {
            "name": self.name,
            "base_unit": self.base_unit,
            "homogeneous": self.homogeneous,
            "units": [unit.to_dict() for unit in self.units],
        }


_RAW_CATALOG: tuple[tuple[str, str, tuple[Unit, ...]], ...] = (
    (
        "Length",
        "meter",
        (
            Unit("Meter", 1, "m", "meter"),
            Unit("Kilometer", 1000, "km", "kilometer"),
            Unit("Centimeter", 0.01, "cm", "centimeter"),
            Unit("Millimeter", 0.001, "mm", "millimeter"),
            Unit("Inch", 0.0254, "in", "inch"),
            Unit("Foot", 0.3048, "ft", "foot"),
            Unit("Yard", 0.9144, "yd", "yard"),
            Unit("Mile", 1609.344, "mi", "mile"),
        ),
    ),
    (
        "Mass",
        "kilogram",
        (
            Unit("Kilogram", 1, "kg", "kilogram"),
            Unit("Gram", 0.001, "g", "gram"),
            Unit("Pound", 0.453592, "lb", "pound"),
            Unit("Ounce", 0.0283495, "oz", "ounce"),
            Unit("Ton", 1000, "t", "metric_ton"),
        ),
    ),
    (
        TEMPERATURE,
        "celsius",
        (
            Unit("Celsius", 1, "°C", "degree_Celsius"),
            Unit("Fahrenheit", 1, "°F", "degree_Fahrenheit"),
            Unit("Kelvin", 1, "K", "kelvin"),
        ),
    ),
    (
        "Area",
        "square meter",
        (
            Unit("Square Meter", 1, "m²", "meter ** 2"),
            Unit("Square Kilometer", 1000000, "km²", "kilometer ** 2"),
            Unit("Square Centimeter", 0.0001, "cm²", "centimeter ** 2"),
            Unit("Square Inch", 0.00064516, "in²", "inch ** 2"),
            Unit("Square Foot", 0.092903, "ft²", "foot ** 2"),
        ),
    ),
    (
        "Volume",
        "liter",
        (
            Unit("Liter", 1, "L", "liter"),
            Unit("Milliliter", 0.001, "mL", "milliliter"),
            Unit("Gallon (US)", 3.78541, "gal", "gallon"),
            Unit("Cubic Meter", 1000, "m³", "meter ** 3"),
            Unit("Cubic Inch", 0.0163871, "in³", "inch ** 3"),
        ),
    ),
    (
        "Energy",
        "joule",
        (
            Unit("Joule", 1, "J", "joule"),
            Unit("Kilojoule", 1000, "kJ", "kilojoule"),
            Unit("Calorie", 4.184, "cal", "calorie"),
            Unit("BTU", 1055.06, "BTU", "british_thermal_unit"),
            Unit("Kilowatt-hour", 3600000, "kWh", "kilowatt * hour"),
        ),
    ),
    (
        "Pressure",
        "pascal",
        (
            Unit("Pascal", 1, "Pa", "pascal"),
            Unit("Kilopascal", 1000, "kPa", "kilopascal"),
            Unit("Bar", 100000, "bar", "bar"),
            Unit("PSI", 6894.76, "psi", "psi"),
            Unit("Atmosphere", 101325, "atm", "atmosphere"),
        ),
    ),
    (
        "Electrical",
        "base",
        (
            Unit("Voltage (V)", 1, "V", "volt"),
            Unit("Current (A)", 1, "A", "ampere"),
            Unit("Resistance (Ω)", 1, "Ω", "ohm"),
            Unit("Power (W)", 1, "W", "watt"),
            Unit("Capacitance (F)", 1, "F", "farad"),
        ),
    ),
)


def _check_category(name: str, base_unit: str, units: tuple[Unit, ...]) -> ConversionCategory:
    if not units:
        raise CatalogError(f"Category '{name}' has no units")
    names = [unit.name for unit in units]
    if len(set(names)) != len(names):
        raise CatalogError(f"Category '{name}' has duplicate unit names")
    if units[0].factor != 1:
        raise CatalogError(f"Base unit of '{name}' must have factor 1, got {units[0].factor}")

    try:
        dimensions = {unit.name: dimensionality(unit.quantity) for unit in units}
    except UndefinedUnitError as exc:
        raise CatalogError(f"Category '{name}' references an unknown unit: {exc}") from exc
    homogeneous = len(set(dimensions.values())) == 1
    if name == TEMPERATURE:
        if dimensions[units[0].name] != "[temperature]" or not homogeneous:
            raise CatalogError("Temperature units must all measure temperature")
        return ConversionCategory(name, base_unit, units)
    if not homogeneous:
        logger.debug("category %s mixes dimensions; only identity conversions apply", name)
        return ConversionCategory(name, base_unit, units, homogeneous=False)

    base = units[0]
    for unit in units[1:]:
        try:
            expected = ratio(unit.quantity, base.quantity)
        except DimensionalityError as exc:  # pragma: no cover - guarded by homogeneity
            raise CatalogError(str(exc)) from exc
        if not math.isclose(unit.factor, expected, rel_tol=FACTOR_REL_TOL):
            raise CatalogError(
                f"{name}/{unit.name}: factor {unit.factor} disagrees with pint ({expected:.8g})"
            )
    return ConversionCategory(name, base_unit, units)


def build_catalog(raw: tuple[tuple[str, str, tuple[Unit, ...]], ...] = _RAW_CATALOG) -> tuple[ConversionCategory, ...]:
    """Validate ``raw`` and return it as categories, raising :class:`CatalogError`."""

    seen: set[str] = set()
    categories: List[ConversionCategory] = []
    for name, base_unit, units in raw:
        if name in seen:
            raise CatalogError(f"Duplicate category '{name}'")
        seen.add(name)
        categories.append(_check_category(name, base_unit, units))
    return tuple(categories)


@lru_cache(maxsize=1)
def load_catalog() -> tuple[ConversionCategory, ...]:
    categories = build_catalog()
    logger.info("loaded %d conversion categories", len(categories))
    return categories


def list_categories() -> List[str]:
    return [category.name for category in load_catalog()]


def get_category(name: str) -> Optional[ConversionCategory]:
    lowered = name.strip().lower()
    for category in load_catalog():
        if category.name.lower() == lowered:
            return category
    return None


__all__ = [
    "CatalogError",
    "ConversionCategory",
    "TEMPERATURE",
    "Unit",
    "build_catalog",
    "get_category",
    "list_categories",
    "load_catalog",
]
