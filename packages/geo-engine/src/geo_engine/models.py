from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any


class InvalidCoordinate(ValueError):
    """Raised when a latitude/longitude pair is missing or out of range."""


@dataclass(frozen=True)
class Coordinate:
    lat: float
    lng: float

    def __post_init__(self) -> None:
        _validate_axis("lat", self.lat, 90.0)
        _validate_axis("lng", self.lng, 180.0)

    @classmethod
    def parse(cls, lat: Any, lng: Any) -> Coordinate:
        """Build a coordinate from loosely typed input, e.g. a JSON payload."""
        if lat is None or lng is None:
            raise InvalidCoordinate("lat and lng are required")
        if isinstance(lat, bool) or isinstance(lng, bool):
            raise InvalidCoordinate("lat and lng must be numbers")
        try:
            return cls(lat=float(lat), lng=float(lng))
        except (TypeError, ValueError) as exc:
            if isinstance(exc, InvalidCoordinate):
                raise
            raise InvalidCoordinate(f"non-numeric coordinate: lat={lat!r}, lng={lng!r}") from exc


def _validate_axis(field: str, value: float, bound: float) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidCoordinate(f"{field} must be a number")
    if not math.isfinite(value) or value < -bound or value > bound:
        raise InvalidCoordinate(f"{field} must be between {-bound:g} and {bound:g}")
