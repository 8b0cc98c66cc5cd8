"""Coordinate validation and distance/travel-time helpers for facility search."""

from geo_engine.distance import format_distance_km, haversine_distance_meters, is_point_inside_radius
from geo_engine.models import Coordinate, InvalidCoordinate
from geo_engine.travel import estimate_travel_minutes, format_travel_minutes

__all__ = [
    "Coordinate",
    "InvalidCoordinate",
    "haversine_distance_meters",
    "is_point_inside_radius",
    "format_distance_km",
    "estimate_travel_minutes",
    "format_travel_minutes",
]
