import pytest

from geo_engine.travel import estimate_travel_minutes, format_travel_minutes


def test_estimate_travel_minutes() -> None:
    minutes = estimate_travel_minutes(distance_meters=10_000, average_speed_kmh=30)
    assert round(minutes, 2) == 20.0


def test_estimate_travel_minutes_invalid_speed() -> None:
    with pytest.raises(ValueError):
        estimate_travel_minutes(distance_meters=1000, average_speed_kmh=0)


def test_estimate_travel_minutes_negative_distance() -> None:
    with pytest.raises(ValueError):
        estimate_travel_minutes(distance_meters=-1, average_speed_kmh=30)


def test_format_travel_minutes_has_one_minute_floor() -> None:
    assert format_travel_minutes(0.2) == "1 mins"
    assert format_travel_minutes(11.6) == "12 mins"
