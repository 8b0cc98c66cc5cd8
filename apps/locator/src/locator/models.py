from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from geo_engine.models import Coordinate

from locator.errors import DataSourceErrorKind, LocationErrorKind

DEFAULT_FALLBACK_COORDINATE = Coordinate(lat=28.6139, lng=77.2090)


class FacilityCategory(str, Enum):
    HOSPITAL = "hospital"
    CLINIC = "clinic"
    PHARMACY = "pharmacy"


class LocationSource(str, Enum):
    DEVICE = "device"
    FALLBACK = "fallback"


class FacilitySource(str, Enum):
    REMOTE = "remote"
    STATIC = "static"


class MarkerKind(str, Enum):
    USER = "user"
    FACILITY = "facility"


class LocatorState(str, Enum):
    INITIALIZING = "INITIALIZING"
    LOCATING_USER = "LOCATING_USER"
    LOADING_FACILITIES = "LOADING_FACILITIES"
    READY = "READY"
    DEGRADED = "DEGRADED"
    DISPOSED = "DISPOSED"


@dataclass(frozen=True)
class Facility:
    id: str
    name: str
    location: Coordinate
    address: str
    category: FacilityCategory
    rating: float | None = None
    distance: str | None = None
    eta_display: str | None = None
    # Display fields that were fabricated because the source omitted them.
    synthetic_fields: frozenset[str] = frozenset()

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("facility id must not be empty")
        if not self.name.strip():
            raise ValueError("facility name must not be empty")
        if self.rating is not None and not (0 <= self.rating <= 5):
            raise ValueError("rating must be between 0 and 5")


@dataclass(frozen=True)
class UserLocation:
    coordinate: Coordinate
    acquired_at: datetime
    source: LocationSource
    error: LocationErrorKind | None = None

    @property
    def is_fallback(self) -> bool:
        return self.source is LocationSource.FALLBACK


@dataclass(frozen=True)
class FacilityQueryResult:
    facilities: tuple[Facility, ...]
    source: FacilitySource
    error: DataSourceErrorKind | None = None

    @property
    def is_fallback(self) -> bool:
        return self.source is FacilitySource.STATIC


@dataclass(frozen=True)
class MarkerEntry:
    id: str
    coordinate: Coordinate
    kind: MarkerKind
    popup_content: str
    on_click: Callable[[str], object] | None = field(default=None, compare=False)
    tooltip: str | None = None


@dataclass(frozen=True)
class LocatorSnapshot:
    """Read-only view of one locator session handed to the list UI."""

    state: LocatorState
    facilities: tuple[Facility, ...]
    user_location: UserLocation | None
    selected_facility_id: str | None
    data_source: FacilitySource | None
    data_source_error: DataSourceErrorKind | None
    map_available: bool
    emergency_mode: bool

    @property
    def selected_facility(self) -> Facility | None:
        if self.selected_facility_id is None:
            return None
        return next((f for f in self.facilities if f.id == self.selected_facility_id), None)
