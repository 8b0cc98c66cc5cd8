from __future__ import annotations

import html
import logging
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from devkit.observability import get_tracer
from geo_engine.models import Coordinate

from locator.data_sources.base import DEFAULT_RADIUS_METERS, FacilityDataSource
from locator.data_sources.static import StaticFacilityDataSource
from locator.errors import DataSourceErrorKind, InvalidCoordinate, MapInitError
from locator.location import LocationProvider
from locator.map_surface import MapSurface
from locator.models import (
    Facility,
    FacilityQueryResult,
    FacilitySource,
    LocatorSnapshot,
    LocatorState,
    MarkerEntry,
    MarkerKind,
    UserLocation,
)
from locator.navigation import Navigator, directions_url

logger = logging.getLogger(__name__)
tracer = get_tracer(__name__)

USER_MARKER_ID = "user"
USER_POPUP = "You are here"
DEFAULT_ZOOM = 13
LOCATED_ZOOM = 14
SELECTED_ZOOM = 15
DEFAULT_EMERGENCY_NUMBER = "108"

SnapshotListener = Callable[[LocatorSnapshot], None]


@dataclass
class _LocatorSession:
    state: LocatorState = LocatorState.INITIALIZING
    mounted: bool = False
    map_available: bool = False
    user_location: UserLocation | None = None
    facilities: tuple[Facility, ...] = ()
    selected_facility_id: str | None = None
    data_source: FacilitySource | None = None
    data_source_error: DataSourceErrorKind | None = None


def facility_popup_html(facility: Facility) -> str:
    name = html.escape(facility.name)
    address = html.escape(facility.address)
    url = html.escape(directions_url(facility.location), quote=True)
    return (
        '<div style="min-width: 150px;">'
        f"<b>{name}</b><br/>"
        f"<span>{address}</span><br/>"
        f'<a href="{url}" target="_blank" rel="noopener noreferrer">Get Directions &#8594;</a>'
        "</div>"
    )


class FacilityLocatorController:
    """Coordinates location, facility data and the map for one screen session.

    Lifecycle: ``INITIALIZING -> LOCATING_USER -> LOADING_FACILITIES`` and then
    ``READY``, or ``DEGRADED`` when either the location or the facility list
    came from fallback data. A fallback location never reaches the remote
    source; the static list is used directly. ``unmount`` moves to ``DISPOSED``; results of
    lookups still in flight at that point are dropped on arrival.

    The controller is the single owner of the facility list and the
    selection. Views read :meth:`snapshot` and call :meth:`select_facility`
    and :meth:`navigate_to`.
    """

    def __init__(
        self,
        location_provider: LocationProvider,
        data_source: FacilityDataSource,
        navigator: Navigator,
        map_surface: MapSurface | None = None,
        static_source: StaticFacilityDataSource | None = None,
        map_container: Path | None = None,
        default_center: Coordinate | None = None,
        radius_meters: int = DEFAULT_RADIUS_METERS,
        default_zoom: int = DEFAULT_ZOOM,
        located_zoom: int = LOCATED_ZOOM,
        selected_zoom: int = SELECTED_ZOOM,
        emergency_number: str = DEFAULT_EMERGENCY_NUMBER,
        emergency_mode: bool = False,
    ) -> None:
        if radius_meters <= 0:
            raise ValueError("radius_meters must be > 0")
        self._location_provider = location_provider
        self._data_source = data_source
        self._navigator = navigator
        self._map_surface = map_surface
        self._static_source = static_source or StaticFacilityDataSource()
        self._map_container = map_container
        self._default_center = default_center or location_provider.fallback_coordinate
        self._radius_meters = radius_meters
        self._default_zoom = default_zoom
        self._located_zoom = located_zoom
        self._selected_zoom = selected_zoom
        self._emergency_number = emergency_number
        self._emergency_mode = emergency_mode
        self._session = _LocatorSession()
        self._listeners: list[SnapshotListener] = []
        self._generation = 0

    @property
    def state(self) -> LocatorState:
        return self._session.state

    @property
    def is_mounted(self) -> bool:
        return self._session.mounted

    def snapshot(self) -> LocatorSnapshot:
        session = self._session
        return LocatorSnapshot(
            state=session.state,
            facilities=session.facilities,
            user_location=session.user_location,
            selected_facility_id=session.selected_facility_id,
            data_source=session.data_source,
            data_source_error=session.data_source_error,
            map_available=session.map_available,
            emergency_mode=self._emergency_mode,
        )

    def subscribe(self, listener: SnapshotListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def mount(self) -> LocatorSnapshot:
        if self._session.state is LocatorState.DISPOSED:
            raise RuntimeError("controller was unmounted")
        if self._session.mounted:
            return self.snapshot()
        self._session.mounted = True
        self._transition(LocatorState.INITIALIZING)
        self._initialize_map()
        await self._locate_and_load()
        return self.snapshot()

    async def refresh(self) -> LocatorSnapshot:
        if not self._is_live():
            raise RuntimeError("controller is not mounted")
        await self._locate_and_load()
        return self.snapshot()

    def unmount(self) -> None:
        if self._session.state is LocatorState.DISPOSED:
            return
        previous = self._session.state
        self._session.mounted = False
        self._session.state = LocatorState.DISPOSED
        if self._map_surface is not None:
            self._map_surface.dispose()
        self._session.map_available = False
        self._listeners.clear()
        logger.info(
            "locator_state_changed",
            extra={"component": "locator", "from_state": previous.value, "to_state": LocatorState.DISPOSED.value},
        )

    def select_facility(self, facility_id: str) -> Facility | None:
        """Select a facility from either the list or a marker click."""
        if not self._is_live():
            return None
        facility = self._find(facility_id)
        if facility is None:
            logger.warning("facility_selection_ignored", extra={"component": "locator", "facility_id": facility_id})
            return None
        self._session.selected_facility_id = facility.id
        self._set_viewport(facility.location, self._selected_zoom, animated=True)
        self._notify()
        return facility

    def clear_selection(self) -> None:
        if self._session.selected_facility_id is None:
            return
        self._session.selected_facility_id = None
        self._notify()

    def navigate_to(self, facility: Any) -> Coordinate:
        location = getattr(facility, "location", None)
        if location is None:
            raise InvalidCoordinate("facility has no location")
        destination = Coordinate.parse(getattr(location, "lat", None), getattr(location, "lng", None))
        self._navigator.open_directions(destination)
        return destination

    def call_emergency(self) -> None:
        self._navigator.dial(self._emergency_number)

    def render_map(self) -> str | None:
        if not self._is_live() or not self._session.map_available or self._map_surface is None:
            return None
        return self._map_surface.render()

    async def _locate_and_load(self) -> None:
        self._generation += 1
        generation = self._generation
        self._transition(LocatorState.LOCATING_USER)
        with tracer.start_as_current_span("locator.acquire_location"):
            user_location = await self._location_provider.acquire()
        if not self._is_current(generation):
            logger.info("stale_result_dropped", extra={"component": "locator", "stage": "location"})
            return
        self._session.user_location = user_location
        self._set_viewport(user_location.coordinate, self._located_zoom, animated=True)

        self._transition(LocatorState.LOADING_FACILITIES)
        with tracer.start_as_current_span("locator.query_facilities") as span:
            if user_location.is_fallback:
                result = await self._static_source.query(user_location.coordinate, self._radius_meters)
            else:
                result = await self._data_source.query(user_location.coordinate, self._radius_meters)
            span.set_attribute("locator.facility_count", len(result.facilities))
            span.set_attribute("locator.facility_source", result.source.value)
        if not self._is_current(generation):
            logger.info("stale_result_dropped", extra={"component": "locator", "stage": "facilities"})
            return
        self._apply_facilities(result)
        degraded = user_location.is_fallback or result.is_fallback
        self._transition(LocatorState.DEGRADED if degraded else LocatorState.READY)

    def _apply_facilities(self, result: FacilityQueryResult) -> None:
        session = self._session
        session.facilities = result.facilities
        session.data_source = result.source
        session.data_source_error = result.error
        if session.selected_facility_id is not None and self._find(session.selected_facility_id) is None:
            logger.info(
                "facility_selection_reset",
                extra={"component": "locator", "facility_id": session.selected_facility_id},
            )
            session.selected_facility_id = None
        self._render_markers()
        logger.info(
            "facilities_loaded",
            extra={
                "component": "locator",
                "facility_count": len(result.facilities),
                "facility_source": result.source.value,
            },
        )

    def _render_markers(self) -> None:
        if not self._session.map_available or self._map_surface is None:
            return
        entries: list[MarkerEntry] = []
        user_location = self._session.user_location
        if user_location is not None:
            entries.append(
                MarkerEntry(
                    id=USER_MARKER_ID,
                    coordinate=user_location.coordinate,
                    kind=MarkerKind.USER,
                    popup_content=USER_POPUP,
                )
            )
        for facility in self._session.facilities:
            entries.append(
                MarkerEntry(
                    id=facility.id,
                    coordinate=facility.location,
                    kind=MarkerKind.FACILITY,
                    popup_content=facility_popup_html(facility),
                    on_click=self.select_facility,
                    tooltip=facility.name,
                )
            )
        self._map_surface.replace_markers(entries)

    def _initialize_map(self) -> None:
        if self._map_surface is None:
            self._session.map_available = False
            return
        try:
            self._map_surface.initialize(self._map_container, self._default_center, self._default_zoom)
        except MapInitError as exc:
            logger.warning(
                "map_unavailable",
                extra={"component": "locator", "reason": exc.kind.value, "detail": exc.message},
            )
            self._session.map_available = False
            return
        self._session.map_available = True

    def _set_viewport(self, center: Coordinate, zoom: int, animated: bool) -> None:
        if self._session.map_available and self._map_surface is not None:
            self._map_surface.set_viewport(center, zoom, animated=animated)

    def _find(self, facility_id: str) -> Facility | None:
        return next((f for f in self._session.facilities if f.id == facility_id), None)

    def _is_live(self) -> bool:
        return self._session.mounted and self._session.state is not LocatorState.DISPOSED

    def _is_current(self, generation: int) -> bool:
        return self._is_live() and generation == self._generation

    def _transition(self, state: LocatorState) -> None:
        previous = self._session.state
        self._session.state = state
        logger.info(
            "locator_state_changed",
            extra={"component": "locator", "from_state": previous.value, "to_state": state.value},
        )
        self._notify()

    def _notify(self) -> None:
        if not self._listeners:
            return
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            listener(snapshot)
