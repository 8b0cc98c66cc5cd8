URBAN_AVERAGE_SPEED_KMH = 25.0


def estimate_travel_minutes(distance_meters: float, average_speed_kmh: float = URBAN_AVERAGE_SPEED_KMH) -> float:
    if distance_meters < 0:
        raise ValueError("distance_meters must be >= 0")
    if average_speed_kmh <= 0:
        raise ValueError("average_speed_kmh must be > 0")
    meters_per_minute = (average_speed_kmh * 1000) / 60
    return distance_meters / meters_per_minute


def format_travel_minutes(minutes: float) -> str:
    """Display form used in facility lists; never shows less than one minute."""
    return f"{max(1, round(minutes))} mins"
