"""Scientific Calculator plugin manifest."""

manifest = {
    "title": "Scientific Calculator",
    "summary": "Keypad-driven expression builder with a 20-entry history, plus stateless evaluation and function sampling.",
    "category": "Calculators",
    "blueprint": "scientific_calculator",
    "api": "/api/scientific_calculator",
}

__all__ = ["manifest"]
