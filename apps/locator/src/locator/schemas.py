from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel

from locator.models import Facility, LocatorSnapshot


class CoordinateView(BaseModel):
    lat: float
    lng: float


class FacilityView(BaseModel):
    id: str
    name: str
    location: CoordinateView
    address: str
    category: str
    rating: float | None
    distance: str | None
    eta_display: str | None
    synthetic_fields: list[str]
    selected: bool

    @classmethod
    def from_facility(cls, facility: Facility, selected_id: str | None) -> FacilityView:
        return cls(
            id=facility.id,
            name=facility.name,
            location=CoordinateView(lat=facility.location.lat, lng=facility.location.lng),
            address=facility.address,
            category=facility.category.value,
            rating=facility.rating,
            distance=facility.distance,
            eta_display=facility.eta_display,
            synthetic_fields=sorted(facility.synthetic_fields),
            selected=facility.id == selected_id,
        )


class UserLocationView(BaseModel):
    location: CoordinateView
    acquired_at: datetime
    source: str
    error: str | None


class LocatorSnapshotView(BaseModel):
    state: str
    facilities: list[FacilityView]
    facility_count: int
    user_location: UserLocationView | None
    selected_facility_id: str | None
    data_source: str | None
    data_source_error: str | None
    map_available: bool
    emergency_mode: bool

    @classmethod
    def from_snapshot(cls, snapshot: LocatorSnapshot) -> LocatorSnapshotView:
        user_location = None
        if snapshot.user_location is not None:
            coordinate = snapshot.user_location.coordinate
            user_location = UserLocationView(
                location=CoordinateView(lat=coordinate.lat, lng=coordinate.lng),
                acquired_at=snapshot.user_location.acquired_at,
                source=snapshot.user_location.source.value,
                error=snapshot.user_location.error.value if snapshot.user_location.error else None,
            )
        return cls(
            state=snapshot.state.value,
            facilities=[FacilityView.from_facility(f, snapshot.selected_facility_id) for f in snapshot.facilities],
            facility_count=len(snapshot.facilities),
            user_location=user_location,
            selected_facility_id=snapshot.selected_facility_id,
            data_source=snapshot.data_source.value if snapshot.data_source else None,
            data_source_error=snapshot.data_source_error.value if snapshot.data_source_error else None,
            map_available=snapshot.map_available,
            emergency_mode=snapshot.emergency_mode,
        )
