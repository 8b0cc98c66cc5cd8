from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from geo_engine.models import InvalidCoordinate


class LocatorError(Exception):
    """Base class for facility locator failures."""


class LocationErrorKind(str, Enum):
    DENIED = "DENIED"
    UNSUPPORTED = "UNSUPPORTED"
    TIMEOUT = "TIMEOUT"
    UNAVAILABLE = "UNAVAILABLE"


class DataSourceErrorKind(str, Enum):
    NETWORK_FAILURE = "NETWORK_FAILURE"
    MALFORMED_RESPONSE = "MALFORMED_RESPONSE"
    EMPTY = "EMPTY"


class MapInitErrorKind(str, Enum):
    CONTAINER_MISSING = "CONTAINER_MISSING"
    WIDGET_LOAD_FAILURE = "WIDGET_LOAD_FAILURE"


@dataclass
class LocationError(LocatorError):
    kind: LocationErrorKind
    message: str

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.message}"


@dataclass
class DataSourceError(LocatorError):
    kind: DataSourceErrorKind
    message: str

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.message}"


@dataclass
class MapInitError(LocatorError):
    kind: MapInitErrorKind
    message: str

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.message}"


__all__ = [
    "DataSourceError",
    "DataSourceErrorKind",
    "InvalidCoordinate",
    "LocationError",
    "LocationErrorKind",
    "LocatorError",
    "MapInitError",
    "MapInitErrorKind",
]
