"""Nearby care facility locator."""

from locator.controller import FacilityLocatorController
from locator.location import LocationProvider
from locator.map_surface import FoliumMapSurface, MapSurface
from locator.models import Facility, FacilityCategory, LocatorSnapshot, LocatorState, UserLocation

__all__ = [
    "Facility",
    "FacilityCategory",
    "FacilityLocatorController",
    "FoliumMapSurface",
    "LocationProvider",
    "LocatorSnapshot",
    "LocatorState",
    "MapSurface",
    "UserLocation",
]
