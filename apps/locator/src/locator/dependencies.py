from __future__ import annotations

from pathlib import Path

from geo_engine.models import Coordinate

from locator.clients.ip_geolocation_client import IpGeolocationClient
from locator.clients.overpass_client import OverpassClient
from locator.config import LocatorSettings
from locator.controller import FacilityLocatorController
from locator.data_sources.fallback import FallbackFacilityDataSource
from locator.data_sources.overpass import OverpassFacilityDataSource
from locator.data_sources.static import StaticFacilityDataSource
from locator.location import GeolocationCapability, LocationProvider
from locator.map_surface import FoliumMapSurface, MapSurface
from locator.navigation import BrowserNavigator, Navigator


def build_location_provider(
    settings: LocatorSettings,
    capability: GeolocationCapability | None = None,
) -> LocationProvider:
    if capability is None and settings.IP_GEOLOCATION_URL:
        capability = IpGeolocationClient(url=settings.IP_GEOLOCATION_URL)
    return LocationProvider(
        capability=capability,
        fallback=Coordinate(lat=settings.FALLBACK_LAT, lng=settings.FALLBACK_LNG),
        timeout_ms=settings.LOCATION_TIMEOUT_MS,
        high_accuracy=settings.LOCATION_HIGH_ACCURACY,
    )


def build_facility_data_source(
    settings: LocatorSettings,
    static_source: StaticFacilityDataSource | None = None,
) -> FallbackFacilityDataSource:
    remote = OverpassFacilityDataSource(
        OverpassClient(base_url=settings.OVERPASS_URL, timeout_seconds=settings.OVERPASS_TIMEOUT_SECONDS),
        max_results=settings.MAX_FACILITIES,
    )
    return FallbackFacilityDataSource(primary=remote, fallback=static_source or StaticFacilityDataSource())


def build_map_container(settings: LocatorSettings) -> Path:
    container = Path(settings.MAP_OUTPUT_FILE)
    container.parent.mkdir(parents=True, exist_ok=True)
    return container


def build_locator_controller(
    settings: LocatorSettings,
    capability: GeolocationCapability | None = None,
    map_surface: MapSurface | None = None,
    map_container: Path | None = None,
    navigator: Navigator | None = None,
    emergency_mode: bool = False,
    with_map: bool = True,
) -> FacilityLocatorController:
    static_source = StaticFacilityDataSource()
    if map_surface is None and with_map:
        map_surface = FoliumMapSurface(tile_url=settings.TILE_URL, tile_attribution=settings.TILE_ATTRIBUTION)
    return FacilityLocatorController(
        location_provider=build_location_provider(settings, capability=capability),
        data_source=build_facility_data_source(settings, static_source=static_source),
        static_source=static_source,
        navigator=navigator or BrowserNavigator(),
        map_surface=map_surface,
        map_container=map_container,
        radius_meters=settings.SEARCH_RADIUS_METERS,
        default_zoom=settings.DEFAULT_ZOOM,
        located_zoom=settings.LOCATED_ZOOM,
        selected_zoom=settings.SELECTED_ZOOM,
        emergency_number=settings.EMERGENCY_NUMBER,
        emergency_mode=emergency_mode,
    )
