from __future__ import annotations

import logging

from geo_engine.models import Coordinate

from locator.data_sources.base import DEFAULT_RADIUS_METERS, FacilityDataSource
from locator.data_sources.static import StaticFacilityDataSource
from locator.errors import DataSourceError, DataSourceErrorKind
from locator.models import FacilityQueryResult

logger = logging.getLogger(__name__)


class FallbackFacilityDataSource(FacilityDataSource):
    """Runs ``primary`` once and substitutes the static list on any failure.

    No exception from the primary source crosses this boundary; failures are
    logged and recorded on the result as ``error``.
    """

    def __init__(self, primary: FacilityDataSource, fallback: StaticFacilityDataSource) -> None:
        self._primary = primary
        self._fallback = fallback
        self.source = primary.source

    async def query(self, center: Coordinate, radius_meters: int = DEFAULT_RADIUS_METERS) -> FacilityQueryResult:
        try:
            return await self._primary.query(center, radius_meters)
        except DataSourceError as exc:
            return self._fall_back(exc.kind, str(exc))
        except Exception as exc:
            logger.exception("facility_query_unexpected_error", extra={"component": "locator"})
            return self._fall_back(DataSourceErrorKind.NETWORK_FAILURE, type(exc).__name__)

    def _fall_back(self, kind: DataSourceErrorKind, detail: str) -> FacilityQueryResult:
        logger.warning(
            "facility_query_fallback",
            extra={"component": "locator", "reason": kind.value, "detail": detail},
        )
        return self._fallback.result(error=kind)
