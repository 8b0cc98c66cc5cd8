import math

from geo_engine.models import Coordinate

EARTH_RADIUS_METERS = 6_371_000


def haversine_distance_meters(start: Coordinate, end: Coordinate) -> float:
    """Great-circle distance; accurate enough for city-scale search radii."""
    phi_start, phi_end = math.radians(start.lat), math.radians(end.lat)
    half_chord = (
        math.sin((phi_end - phi_start) / 2) ** 2
        + math.cos(phi_start) * math.cos(phi_end) * math.sin(math.radians(end.lng - start.lng) / 2) ** 2
    )
    return 2 * EARTH_RADIUS_METERS * math.asin(min(1.0, math.sqrt(half_chord)))


def is_point_inside_radius(center: Coordinate, point: Coordinate, radius_meters: float) -> bool:
    if radius_meters < 0:
        raise ValueError("radius_meters must be >= 0")
    return haversine_distance_meters(center, point) <= radius_meters


def format_distance_km(distance_meters: float) -> str:
    if distance_meters < 0:
        raise ValueError("distance_meters must be >= 0")
    return f"{distance_meters / 1000:.1f} km"
