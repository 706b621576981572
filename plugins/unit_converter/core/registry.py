"""Shared Pint registry used to check the conversion catalog."""

from __future__ import annotations

from functools import lru_cache

from pint import UnitRegistry
from pint.errors import DimensionalityError, UndefinedUnitError


@lru_cache(maxsize=1)
def get_registry() -> UnitRegistry:
    """Return a singleton :class:`~pint.UnitRegistry` instance."""

    return UnitRegistry()


def dimensionality(unit: str) -> str:
    """Return pint's dimensionality of ``unit`` as a comparable string."""

    return str(get_registry().Unit(unit).dimensionality)


def ratio(source: str, target: str) -> float:
    """How many ``target`` units make one ``source`` unit."""

    registry = get_registry()
    return float(registry.Quantity(1.0, source).to(target).magnitude)


def convert_quantity(value: float, source: str, target: str) -> float:
    """Convert a point value, honouring offset units such as degC."""

    registry = get_registry()
    return float(registry.Quantity(value, source).to(target).magnitude)


__all__ = [
    "DimensionalityError",
    "UndefinedUnitError",
    "convert_quantity",
    "dimensionality",
    "get_registry",
    "ratio",
]
