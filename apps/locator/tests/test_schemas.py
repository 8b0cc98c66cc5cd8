from __future__ import annotations

from datetime import datetime, timezone

from geo_engine.models import Coordinate
from locator.data_sources.static import STATIC_FACILITIES
from locator.errors import DataSourceErrorKind, LocationErrorKind
from locator.models import FacilitySource, LocationSource, LocatorSnapshot, LocatorState, UserLocation
from locator.schemas import LocatorSnapshotView


def test_snapshot_view_flattens_enums_and_marks_selection() -> None:
    snapshot = LocatorSnapshot(
        state=LocatorState.DEGRADED,
        facilities=STATIC_FACILITIES,
        user_location=UserLocation(
            coordinate=Coordinate(lat=28.6139, lng=77.2090),
            acquired_at=datetime(2026, 1, 1, tzinfo=timezone.utc),
            source=LocationSource.FALLBACK,
            error=LocationErrorKind.DENIED,
        ),
        selected_facility_id="2",
        data_source=FacilitySource.STATIC,
        data_source_error=DataSourceErrorKind.NETWORK_FAILURE,
        map_available=False,
        emergency_mode=True,
    )

    view = LocatorSnapshotView.from_snapshot(snapshot)
    payload = view.model_dump()

    assert payload["state"] == "DEGRADED"
    assert payload["facility_count"] == 2
    assert [f["selected"] for f in payload["facilities"]] == [False, True]
    assert payload["facilities"][0]["location"] == {"lat": 28.6139, "lng": 77.209}
    assert payload["user_location"]["source"] == "fallback"
    assert payload["user_location"]["error"] == LocationErrorKind.DENIED.value
    assert payload["data_source"] == "static"
    assert payload["data_source_error"] == DataSourceErrorKind.NETWORK_FAILURE.value
    assert payload["emergency_mode"] is True


def test_snapshot_view_before_location_is_known() -> None:
    snapshot = LocatorSnapshot(
        state=LocatorState.INITIALIZING,
        facilities=(),
        user_location=None,
        selected_facility_id=None,
        data_source=None,
        data_source_error=None,
        map_available=True,
        emergency_mode=False,
    )

    view = LocatorSnapshotView.from_snapshot(snapshot)

    assert view.user_location is None
    assert view.data_source is None
    assert view.facilities == []
