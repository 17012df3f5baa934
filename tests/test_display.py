import pytest

from tracklog.display import (
    IMPERIAL,
    METRIC,
    format_distance,
    format_duration,
    unit_system,
)


@pytest.mark.parametrize("country,expected", [
    ("US", IMPERIAL),
    ("lr", IMPERIAL),
    ("MM", IMPERIAL),
    ("DE", METRIC),
    (None, METRIC),
    ("", METRIC),
])
def test_unit_system(country, expected):
    assert unit_system(country) == expected


def test_format_distance_metric():
    assert format_distance(0) == "0m"
    assert format_distance(111.19) == "111m"
    assert format_distance(2500) == "2.50km"


def test_format_distance_imperial():
    assert format_distance(100, IMPERIAL) == "328ft"
    assert format_distance(1609.344, IMPERIAL) == "1.00mi"


def test_format_duration():
    assert format_duration(0) == "0:00:00"
    assert format_duration(59.6) == "0:01:00"
    assert format_duration(3725) == "1:02:05"
    assert format_duration(-4) == "0:00:00"
