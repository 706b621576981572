"""Conversion math and the reactive conversion session."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, Optional

from common.logging import get_logger

from .catalog import ConversionCategory, Unit, get_category, load_catalog

logger = get_logger(__name__)

INVALID_INPUT = "Invalid input"
INCOMPATIBLE_UNITS = "Incompatible units"
TEMPERATURE_DECIMALS = 4
LINEAR_DECIMALS = 6
DEFAULT_INPUT = "1"


class ConversionError(Exception):
    """Base exception for conversion failures."""


class InputFormatError(ConversionError):
    """Raised when the input text is not a finite number."""


class IncompatibleUnitsError(ConversionError):
    """Raised when two units of a mixed category measure different things."""


class UnknownCategoryError(ConversionError, LookupError):
    pass


class UnknownUnitError(ConversionError, LookupError):
    pass


def parse_input(text: str | float | int) -> float:
    if isinstance(text, bool):
        raise InputFormatError("Value must be a number")
    if isinstance(text, (int, float)):
        try:
            value = float(text)
        except OverflowError as exc:
            raise InputFormatError("Value is too large") from exc
    else:
        try:
            value = float(str(text).strip())
        except ValueError as exc:
            raise InputFormatError(f"'{text}' is not a number") from exc
    if not math.isfinite(value):
        raise InputFormatError("Value must be a finite number")
    return value


def to_celsius(value: float, unit_name: str) -> float:
    if unit_name == "Fahrenheit":
        return (value - 32) * 5 / 9
    if unit_name == "Kelvin":
        return value - 273.15
    return value


def from_celsius(value: float, unit_name: str) -> float:
    if unit_name == "Fahrenheit":
        return value * 9 / 5 + 32
    if unit_name == "Kelvin":
        return value + 273.15
    return value


def convert_temperature(value: float, from_name: str, to_name: str) -> float:
    """Piecewise affine transform routed through Celsius."""

    if from_name == to_name:
        return value
    return from_celsius(to_celsius(value, from_name), to_name)


def convert_value(value: float, category: ConversionCategory, from_unit: Unit, to_unit: Unit) -> float:
    """Convert a parsed value inside ``category``.

    Mixed-dimension categories (Electrical) only convert a unit to itself.
    Any other pair raises :class:`IncompatibleUnitsError` instead of applying
    the placeholder factor 1, so 1 V never reads as 1 A.
    """

    if category.is_temperature:
        return convert_temperature(value, from_unit.name, to_unit.name)
    if not category.homogeneous and from_unit != to_unit:
        raise IncompatibleUnitsError(f"Cannot convert {from_unit.name} to {to_unit.name}")
    return value * from_unit.factor / to_unit.factor


def _fixed(value: float, decimals: int) -> str:
    return f"{value + 0.0:.{decimals}f}"


def convert(category: ConversionCategory, from_unit: Unit, to_unit: Unit, input_value: str | float | int) -> str:
    """Format the conversion of ``input_value``; failures become sentinel strings."""

    try:
        value = parse_input(input_value)
        converted = convert_value(value, category, from_unit, to_unit)
    except InputFormatError:
        return INVALID_INPUT
    except IncompatibleUnitsError:
        return INCOMPATIBLE_UNITS
    decimals = TEMPERATURE_DECIMALS if category.is_temperature else LINEAR_DECIMALS
    return _fixed(converted, decimals)


def resolve(category_name: str, from_key: str, to_key: str) -> tuple[ConversionCategory, Unit, Unit]:
    category = require_category(category_name)
    return category, require_unit(category, from_key), require_unit(category, to_key)


def require_category(name: str) -> ConversionCategory:
    category = get_category(name)
    if category is None:
        raise UnknownCategoryError(f"Unknown category '{name}'")
    return category


def require_unit(category: ConversionCategory, key: str) -> Unit:
    unit = category.find_unit(key)
    if unit is None:
        raise UnknownUnitError(f"Unknown unit '{key}' in {category.name}")
    return unit


@dataclass
class ConversionSession:
    """Current conversion request; every setter recomputes ``result``."""

    category: ConversionCategory
    from_unit: Unit
    to_unit: Unit
    input_value: str = DEFAULT_INPUT
    result: str = ""

    @classmethod
    def initial(cls) -> "ConversionSession":
        category = load_catalog()[0]
        from_unit, to_unit = category.default_pair()
        session = cls(category, from_unit, to_unit)
        session.recompute()
        return session

    def recompute(self) -> str:
        self.result = convert(self.category, self.from_unit, self.to_unit, self.input_value)
        return self.result

    def select_category(self, name: str) -> None:
        category = require_category(name)
        self.category = category
        self.from_unit, self.to_unit = category.default_pair()
        self.result = ""
        self.recompute()

    def set_from_unit(self, key: str) -> None:
        self.from_unit = require_unit(self.category, key)
        self.recompute()

    def set_to_unit(self, key: str) -> None:
        self.to_unit = require_unit(self.category, key)
        self.recompute()

    def set_units(self, from_key: Optional[str] = None, to_key: Optional[str] = None) -> None:
        """Change one or both units atomically."""

        from_unit = require_unit(self.category, from_key) if from_key is not None else self.from_unit
        to_unit = require_unit(self.category, to_key) if to_key is not None else self.to_unit
        self.from_unit, self.to_unit = from_unit, to_unit
        self.recompute()

    def set_input(self, text: str) -> None:
        self.input_value = text
        if self.recompute() == INVALID_INPUT:
            logger.debug("rejected conversion input %r", text)

    def snapshot(self) -> Dict[str, object]:
        return {
            "category": self.category.name,
            "from_unit": self.from_unit.to_dict(),
            "to_unit": self.to_unit.to_dict(),
            "input": self.input_value,
            "result": self.result,
            "units": [unit.to_dict() for unit in self.category.units],
        }


__all__ = [
    "ConversionError",
    "ConversionSession",
    "INCOMPATIBLE_UNITS",
    "INVALID_INPUT",
    "IncompatibleUnitsError",
    "InputFormatError",
    "UnknownCategoryError",
    "UnknownUnitError",
    "convert",
    "convert_temperature",
    "convert_value",
    "parse_input",
    "require_category",
    "require_unit",
    "resolve",
]
