"""Unit converter plugin."""

manifest = {
    "title": "Unit Converter",
    "summary": "Convert between units of length, mass, temperature, area, volume, energy, pressure and electrical quantities.",
    "category": "Calculators",
    "blueprint": "unit_converter",
    "api": "/api/unit_converter",
}


__all__ = ["manifest"]
