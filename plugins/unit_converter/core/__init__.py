"""Facade for the unit converter core utilities."""

from __future__ import annotations

from .catalog import (
    CatalogError,
    ConversionCategory,
    Unit,
    build_catalog,
    get_category,
    list_categories,
    load_catalog,
)
from .converter import (
    INCOMPATIBLE_UNITS,
    INVALID_INPUT,
    ConversionError,
    ConversionSession,
    IncompatibleUnitsError,
    InputFormatError,
    UnknownCategoryError,
    UnknownUnitError,
    convert,
    convert_temperature,
    parse_input,
    require_category,
    resolve,
)

__all__ = [
    "CatalogError",
    "ConversionCategory",
    "ConversionError",
    "ConversionSession",
    "INCOMPATIBLE_UNITS",
    "INVALID_INPUT",
    "IncompatibleUnitsError",
    "InputFormatError",
    "Unit",
    "UnknownCategoryError",
    "UnknownUnitError",
    "build_catalog",
    "convert",
    "convert_temperature",
    "get_category",
    "list_categories",
    "load_catalog",
    "parse_input",
    "require_category",
    "resolve",
]
