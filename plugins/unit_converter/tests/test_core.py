import pytest

from plugins.unit_converter.core import (
    INCOMPATIBLE_UNITS,
    INVALID_INPUT,
    CatalogError,
    ConversionSession,
    InputFormatError,
    Unit,
    UnknownCategoryError,
    UnknownUnitError,
    build_catalog,
    convert,
    convert_temperature,
    list_categories,
    parse_input,
    resolve,
)
from plugins.unit_converter.core.registry import convert_quantity


def _convert(category, source, target, value):
    return convert(*resolve(category, source, target), value)


def test_catalog_categories_in_order():
    assert list_categories() == [
        "Length",
        "Mass",
        "Temperature",
        "Area",
        "Volume",
        "Energy",
        "Pressure",
        "Electrical",
    ]


@pytest.mark.parametrize(
    "category, source, target, value, expected",
    [
        ("Length", "Meter", "Kilometer", "1000", "1.000000"),
        ("Mass", "Kilogram", "Gram", "1", "1000.000000"),
        ("Length", "mi", "km", "1", "1.609344"),
        ("Pressure", "atm", "kPa", "1", "101.325000"),
    ],
)
def test_linear_conversions(category, source, target, value, expected):
    assert _convert(category, source, target, value) == expected


@pytest.mark.parametrize(
    "source, target, value, expected",
    [
        ("Celsius", "Fahrenheit", "0", "32.0000"),
        ("Celsius", "Fahrenheit", "100", "212.0000"),
        ("Kelvin", "Celsius", "0", "-273.1500"),
        ("Fahrenheit", "Kelvin", "32", "273.1500"),
        ("Celsius", "Celsius", "12.5", "12.5000"),
    ],
)
def test_temperature_conversions(source, target, value, expected):
    assert _convert("Temperature", source, target, value) == expected


@pytest.mark.parametrize("source, target", [("Fahrenheit", "Kelvin"), ("Kelvin", "Fahrenheit"), ("Celsius", "Kelvin")])
def test_temperature_transform_agrees_with_pint(source, target):
    pint_names = {"Celsius": "degree_Celsius", "Fahrenheit": "degree_Fahrenheit", "Kelvin": "kelvin"}
    for value in (-40.0, 0.0, 37.0, 451.0):
        expected = convert_quantity(value, pint_names[source], pint_names[target])
        assert convert_temperature(value, source, target) == pytest.approx(expected)


@pytest.mark.parametrize("raw", ["abc", "", "nan", "inf"])
def test_invalid_input(raw):
    assert _convert("Length", "Meter", "Foot", raw) == INVALID_INPUT


def test_parse_input_rejects_text():
    with pytest.raises(InputFormatError):
        parse_input("12abc")
    assert parse_input(" 2.5 ") == 2.5


def test_integer_too_large_for_float_is_invalid_input():
    with pytest.raises(InputFormatError):
        parse_input(10**400)
    assert _convert("Length", "Meter", "Kilometer", 10**400) == INVALID_INPUT
    assert _convert("Length", "Meter", "Kilometer", "1e400") == INVALID_INPUT


def test_electrical_units_do_not_mix():
    assert _convert("Electrical", "V", "A", "5") == INCOMPATIBLE_UNITS
    assert _convert("Electrical", "V", "V", "5") == "5.000000"


def test_unknown_lookups_raise():
    with pytest.raises(UnknownCategoryError):
        resolve("Speed", "m/s", "km/h")
    with pytest.raises(UnknownUnitError):
        resolve("Length", "Meter", "Parsec")


def test_catalog_rejects_wrong_factor():
    raw = (("Length", "meter", (Unit("Meter", 1, "m", "meter"), Unit("Foot", 0.5, "ft", "foot"))),)
    with pytest.raises(CatalogError):
        build_catalog(raw)


def test_catalog_rejects_non_unit_base():
    raw = (("Mass", "gram", (Unit("Kilogram", 1000, "kg", "kilogram"), Unit("Gram", 1, "g", "gram"))),)
    with pytest.raises(CatalogError):
        build_catalog(raw)


def test_catalog_rejects_duplicate_units():
    raw = (("Length", "meter", (Unit("Meter", 1, "m", "meter"), Unit("Meter", 1, "m", "meter"))),)
    with pytest.raises(CatalogError):
        build_catalog(raw)


def test_session_initial_state():
    session = ConversionSession.initial()
    assert session.category.name == "Length"
    assert (session.from_unit.name, session.to_unit.name) == ("Meter", "Kilometer")
    assert session.input_value == "1"
    assert session.result == "0.001000"


def test_session_recomputes_on_every_change():
    session = ConversionSession.initial()
    session.select_category("Temperature")
    assert (session.from_unit.name, session.to_unit.name) == ("Celsius", "Fahrenheit")
    assert session.result == "33.8000"
    session.set_input("100")
    assert session.result == "212.0000"
    session.set_to_unit("K")
    assert session.result == "373.1500"
    session.set_input("abc")
    assert session.result == INVALID_INPUT
    assert session.to_unit.name == "Kelvin"


def test_session_unknown_unit_leaves_state():
    session = ConversionSession.initial()
    with pytest.raises(UnknownUnitError):
        session.set_units("Meter", "Furlong")
    assert session.to_unit.name == "Kilometer"
