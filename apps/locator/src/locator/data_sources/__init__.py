"""Facility data sources."""

from locator.data_sources.base import FacilityDataSource
from locator.data_sources.fallback import FallbackFacilityDataSource
from locator.data_sources.overpass import OverpassFacilityDataSource, build_overpass_query
from locator.data_sources.static import STATIC_FACILITIES, StaticFacilityDataSource

__all__ = [
    "FacilityDataSource",
    "FallbackFacilityDataSource",
    "OverpassFacilityDataSource",
    "STATIC_FACILITIES",
    "StaticFacilityDataSource",
    "build_overpass_query",
]
