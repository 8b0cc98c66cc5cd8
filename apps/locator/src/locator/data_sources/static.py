from __future__ import annotations

from geo_engine.models import Coordinate

from locator.data_sources.base import DEFAULT_RADIUS_METERS, FacilityDataSource
from locator.errors import DataSourceErrorKind
from locator.models import Facility, FacilityCategory, FacilityQueryResult, FacilitySource

STATIC_FACILITIES: tuple[Facility, ...] = (
    Facility(
        id="1",
        name="Apollo Hospital",
        location=Coordinate(lat=28.6139, lng=77.2090),
        address="Sarita Vihar, Delhi Mathura Road",
        category=FacilityCategory.HOSPITAL,
        rating=4.5,
        distance="2.5 km",
        eta_display="12 mins",
    ),
    Facility(
        id="2",
        name="Max Super Speciality Hospital",
        location=Coordinate(lat=28.6200, lng=77.2100),
        address="Saket, New Delhi",
        category=FacilityCategory.HOSPITAL,
        rating=4.7,
        distance="3.8 km",
        eta_display="18 mins",
    ),
)


class StaticFacilityDataSource(FacilityDataSource):
    """Bundled facility list used whenever live data is unavailable.

    The list is returned as-is regardless of ``center``; it describes known
    facilities around the default fallback coordinate.
    """

    source = FacilitySource.STATIC

    def __init__(self, facilities: tuple[Facility, ...] = STATIC_FACILITIES) -> None:
        self._facilities = tuple(facilities)

    async def query(self, center: Coordinate, radius_meters: int = DEFAULT_RADIUS_METERS) -> FacilityQueryResult:
        return self.result()

    def result(self, error: DataSourceErrorKind | None = None) -> FacilityQueryResult:
        return FacilityQueryResult(facilities=self._facilities, source=self.source, error=error)
