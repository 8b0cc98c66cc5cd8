from __future__ import annotations

from abc import ABC, abstractmethod

from geo_engine.models import Coordinate

from locator.models import FacilityQueryResult, FacilitySource

DEFAULT_RADIUS_METERS = 5000


class FacilityDataSource(ABC):
    source: FacilitySource

    @abstractmethod
    async def query(self, center: Coordinate, radius_meters: int = DEFAULT_RADIUS_METERS) -> FacilityQueryResult:
        raise NotImplementedError
