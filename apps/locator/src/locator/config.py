from __future__ import annotations

from pydantic import Field

from devkit.config import ServiceSettings, load_settings

DEFAULT_SERVICE_NAME = "nearby-care-locator"


class LocatorSettings(ServiceSettings):
    SERVICE_NAME: str = DEFAULT_SERVICE_NAME

    OVERPASS_URL: str = "https://overpass-api.de/api/interpreter"
    OVERPASS_TIMEOUT_SECONDS: float = Field(default=10.0, gt=0)
    SEARCH_RADIUS_METERS: int = Field(default=5000, gt=0)
    MAX_FACILITIES: int = Field(default=10, gt=0)

    LOCATION_TIMEOUT_MS: int = Field(default=5000, gt=0)
    LOCATION_HIGH_ACCURACY: bool = False
    IP_GEOLOCATION_URL: str | None = "https://ipapi.co/json/"
    FALLBACK_LAT: float = Field(default=28.6139, ge=-90, le=90)
    FALLBACK_LNG: float = Field(default=77.2090, ge=-180, le=180)

    DEFAULT_ZOOM: int = Field(default=13, ge=0, le=20)
    LOCATED_ZOOM: int = Field(default=14, ge=0, le=20)
    SELECTED_ZOOM: int = Field(default=15, ge=0, le=20)
    TILE_URL: str = "https://tile.openstreetmap.org/{z}/{x}/{y}.png"
    TILE_ATTRIBUTION: str = (
        '&copy; <a href="https://www.openstreetmap.org/copyright">OpenStreetMap</a> contributors'
    )
    MAP_OUTPUT_FILE: str = "runtime/nearby_map.html"

    EMERGENCY_NUMBER: str = "108"


def load_locator_settings(**overrides: object) -> LocatorSettings:
    return load_settings(DEFAULT_SERVICE_NAME, settings_cls=LocatorSettings, **overrides)
