from __future__ import annotations

import logging
import random
from typing import Any

from geo_engine.distance import format_distance_km, haversine_distance_meters, is_point_inside_radius
from geo_engine.models import Coordinate, InvalidCoordinate
from geo_engine.travel import URBAN_AVERAGE_SPEED_KMH, estimate_travel_minutes, format_travel_minutes

from locator.clients.overpass_client import OverpassClient
from locator.data_sources.base import DEFAULT_RADIUS_METERS, FacilityDataSource
from locator.errors import DataSourceError, DataSourceErrorKind
from locator.models import Facility, FacilityCategory, FacilityQueryResult, FacilitySource

logger = logging.getLogger(__name__)

DEFAULT_AMENITIES: tuple[str, ...] = ("hospital", "clinic")
DEFAULT_MAX_RESULTS = 10
PLACEHOLDER_NAMES = frozenset({"unnamed health center", "unnamed", "unknown", "n/a"})
ADDRESS_NOT_AVAILABLE = "Address not available"

_CATEGORY_BY_AMENITY: dict[str, FacilityCategory] = {
    "hospital": FacilityCategory.HOSPITAL,
    "clinic": FacilityCategory.CLINIC,
    "doctors": FacilityCategory.CLINIC,
    "pharmacy": FacilityCategory.PHARMACY,
}


def build_overpass_query(
    center: Coordinate,
    radius_meters: int,
    amenities: tuple[str, ...] = DEFAULT_AMENITIES,
    timeout_seconds: int = 25,
) -> str:
    if radius_meters <= 0:
        raise ValueError("radius_meters must be > 0")
    if not amenities:
        raise ValueError("amenities must not be empty")
    around = f"(around:{radius_meters},{center.lat},{center.lng})"
    clauses = "\n".join(f'  node["amenity"="{amenity}"]{around};' for amenity in amenities)
    return f"[out:json][timeout:{timeout_seconds}];\n(\n{clauses}\n);\nout body;"


def _to_str(value: Any, default: str = "") -> str:
    if value is None:
        return default
    return str(value).strip()


def _parse_rating(value: Any) -> float | None:
    try:
        rating = float(value)
    except (TypeError, ValueError):
        return None
    return rating if 0 <= rating <= 5 else None


class OverpassFacilityDataSource(FacilityDataSource):
    """Nearby hospitals and clinics from the OpenStreetMap Overpass API.

    OSM carries no ratings and the query carries no routing, so rating,
    distance and ETA are approximations: a random rating in [4.0, 5.0], the
    straight-line distance from the query centre and a travel time at an
    assumed urban speed. Each fabricated field is listed in
    ``Facility.synthetic_fields``.
    """

    source = FacilitySource.REMOTE

    def __init__(
        self,
        client: OverpassClient,
        max_results: int = DEFAULT_MAX_RESULTS,
        amenities: tuple[str, ...] = DEFAULT_AMENITIES,
        average_speed_kmh: float = URBAN_AVERAGE_SPEED_KMH,
        rng: random.Random | None = None,
    ) -> None:
        if max_results <= 0:
            raise ValueError("max_results must be > 0")
        self._client = client
        self._max_results = max_results
        self._amenities = amenities
        self._average_speed_kmh = average_speed_kmh
        self._rng = rng or random.Random()

    async def query(self, center: Coordinate, radius_meters: int = DEFAULT_RADIUS_METERS) -> FacilityQueryResult:
        query = build_overpass_query(
            center,
            radius_meters,
            amenities=self._amenities,
            timeout_seconds=max(1, int(self._client.timeout_seconds)),
        )
        elements = await self._client.fetch_elements(query)
        facilities = self.normalize(elements, center=center, radius_meters=radius_meters)
        if not facilities:
            raise DataSourceError(DataSourceErrorKind.EMPTY, "no named facilities in range")
        logger.info(
            "overpass_facilities_loaded",
            extra={"component": "locator", "element_count": len(elements), "facility_count": len(facilities)},
        )
        return FacilityQueryResult(facilities=facilities, source=self.source)

    def normalize(
        self,
        elements: list[dict[str, Any]],
        center: Coordinate,
        radius_meters: int,
    ) -> tuple[Facility, ...]:
        ranked: list[tuple[float, Facility]] = []
        seen_ids: set[str] = set()
        rejected = 0
        for element in elements:
            if not isinstance(element, dict):
                raise DataSourceError(DataSourceErrorKind.MALFORMED_RESPONSE, "overpass element is not an object")
            candidate = self._to_facility(element, center=center, radius_meters=radius_meters)
            if candidate is None or candidate[1].id in seen_ids:
                rejected += 1
                continue
            seen_ids.add(candidate[1].id)
            ranked.append(candidate)
        if rejected:
            logger.debug("overpass_elements_rejected", extra={"component": "locator", "rejected_count": rejected})
        ranked.sort(key=lambda item: item[0])
        return tuple(facility for _, facility in ranked[: self._max_results])

    def _to_facility(
        self,
        element: dict[str, Any],
        center: Coordinate,
        radius_meters: int,
    ) -> tuple[float, Facility] | None:
        tags = element.get("tags")
        if not isinstance(tags, dict):
            return None
        name = _to_str(tags.get("name"))
        if not name or name.lower() in PLACEHOLDER_NAMES:
            return None
        category = _CATEGORY_BY_AMENITY.get(_to_str(tags.get("amenity")).lower())
        if category is None:
            return None
        element_id = _to_str(element.get("id"))
        if not element_id:
            return None
        try:
            location = Coordinate.parse(element.get("lat"), element.get("lon"))
        except InvalidCoordinate:
            return None
        distance_meters = haversine_distance_meters(center, location)
        if not is_point_inside_radius(center, location, radius_meters=radius_meters):
            return None

        synthetic: set[str] = {"distance", "eta_display"}
        rating = _parse_rating(tags.get("rating"))
        if rating is None:
            rating = round(self._rng.uniform(4.0, 5.0), 1)
            synthetic.add("rating")
        minutes = estimate_travel_minutes(distance_meters, self._average_speed_kmh)
        facility = Facility(
            id=element_id,
            name=name,
            location=location,
            address=self._address(tags),
            category=category,
            rating=rating,
            distance=format_distance_km(distance_meters),
            eta_display=format_travel_minutes(minutes),
            synthetic_fields=frozenset(synthetic),
        )
        return distance_meters, facility

    def _address(self, tags: dict[str, Any]) -> str:
        full = _to_str(tags.get("addr:full"))
        if full:
            return full
        street = _to_str(tags.get("addr:street"))
        if street:
            housenumber = _to_str(tags.get("addr:housenumber"))
            return f"{housenumber} {street}".strip()
        return _to_str(tags.get("addr:city")) or ADDRESS_NOT_AVAILABLE
