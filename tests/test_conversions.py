import pytest

from features.common.utils.conversions import UnitConversions


def test_meters_to_feet():
    assert UnitConversions.meters_to_feet(1.0) == 3.3
    assert UnitConversions.meters_to_feet(0) == 0


def test_kmh_to_mph():
    assert UnitConversions.kmh_to_mph(10) == 6.2


def test_ms_to_mph():
    assert UnitConversions.ms_to_mph(5) == 11.2


def test_celsius_to_fahrenheit_is_whole_degrees():
    assert UnitConversions.celsius_to_fahrenheit(0) == 32
    assert UnitConversions.celsius_to_fahrenheit(18.3) == 65
    assert isinstance(UnitConversions.celsius_to_fahrenheit(18.3), int)


def test_mm_to_inches():
    assert UnitConversions.mm_to_inches(25.4) == 1.0


@pytest.mark.parametrize("convert", [
    UnitConversions.meters_to_feet,
    UnitConversions.kmh_to_mph,
    UnitConversions.ms_to_mph,
    UnitConversions.celsius_to_fahrenheit,
    UnitConversions.mm_to_inches,
])
def test_none_propagates(convert):
    assert convert(None) is None


@pytest.mark.parametrize("convert", [
    UnitConversions.meters_to_feet,
    UnitConversions.kmh_to_mph,
    UnitConversions.celsius_to_fahrenheit,
])
def test_monotonic(convert):
    inputs = [x / 10 for x in range(-50, 400, 3)]
    outputs = [convert(x) for x in inputs]
    assert outputs == sorted(outputs)
