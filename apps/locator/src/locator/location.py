from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from datetime import datetime, timezone
from enum import IntEnum
from typing import Protocol

from geo_engine.models import Coordinate, InvalidCoordinate

from locator.errors import LocationErrorKind
from locator.models import DEFAULT_FALLBACK_COORDINATE, LocationSource, UserLocation

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_MS = 5000


class PositionErrorCode(IntEnum):
    PERMISSION_DENIED = 1
    POSITION_UNAVAILABLE = 2
    TIMEOUT = 3


class PositionError(Exception):
    """Raised by a geolocation capability that could not produce a fix."""

    def __init__(self, code: PositionErrorCode, message: str = "") -> None:
        super().__init__(message or code.name.lower())
        self.code = code


class GeolocationCapability(Protocol):
    async def get_current_position(self, high_accuracy: bool, timeout_seconds: float) -> Coordinate:
        ...


class FixedGeolocation:
    """Capability that always reports the same position, or always fails with ``error``."""

    def __init__(self, coordinate: Coordinate | None = None, error: PositionErrorCode | None = None) -> None:
        if coordinate is None and error is None:
            raise ValueError("either coordinate or error is required")
        self._coordinate = coordinate
        self._error = error

    async def get_current_position(self, high_accuracy: bool, timeout_seconds: float) -> Coordinate:
        if self._error is not None:
            raise PositionError(self._error)
        if self._coordinate is None:
            raise PositionError(PositionErrorCode.POSITION_UNAVAILABLE)
        return self._coordinate


_ERROR_KINDS: dict[PositionErrorCode, LocationErrorKind] = {
    PositionErrorCode.PERMISSION_DENIED: LocationErrorKind.DENIED,
    PositionErrorCode.POSITION_UNAVAILABLE: LocationErrorKind.UNAVAILABLE,
    PositionErrorCode.TIMEOUT: LocationErrorKind.TIMEOUT,
}


class LocationProvider:
    def __init__(
        self,
        capability: GeolocationCapability | None,
        fallback: Coordinate = DEFAULT_FALLBACK_COORDINATE,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
        high_accuracy: bool = False,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        if timeout_ms <= 0:
            raise ValueError("timeout_ms must be > 0")
        self._capability = capability
        self._fallback = fallback
        self._timeout_ms = timeout_ms
        self._high_accuracy = high_accuracy
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    @property
    def fallback_coordinate(self) -> Coordinate:
        return self._fallback

    async def acquire(self, timeout_ms: int | None = None) -> UserLocation:
        """Read the current position once.

        Never raises for location problems: permission denial, a missing
        capability, an unusable fix or an elapsed timeout all resolve to the
        fallback coordinate with ``source=fallback``.
        """
        effective_timeout_ms = timeout_ms if timeout_ms is not None else self._timeout_ms
        if effective_timeout_ms <= 0:
            raise ValueError("timeout_ms must be > 0")
        if self._capability is None:
            return self._fall_back(LocationErrorKind.UNSUPPORTED, effective_timeout_ms)

        timeout_seconds = effective_timeout_ms / 1000
        try:
            coordinate = await asyncio.wait_for(
                self._capability.get_current_position(self._high_accuracy, timeout_seconds),
                timeout=timeout_seconds,
            )
        except TimeoutError:
            return self._fall_back(LocationErrorKind.TIMEOUT, effective_timeout_ms)
        except PositionError as exc:
            return self._fall_back(_ERROR_KINDS.get(exc.code, LocationErrorKind.UNAVAILABLE), effective_timeout_ms)
        except InvalidCoordinate:
            return self._fall_back(LocationErrorKind.UNAVAILABLE, effective_timeout_ms)
        except Exception:
            logger.exception("location_capability_failed", extra={"component": "locator"})
            return self._fall_back(LocationErrorKind.UNAVAILABLE, effective_timeout_ms)

        if not isinstance(coordinate, Coordinate):
            return self._fall_back(LocationErrorKind.UNAVAILABLE, effective_timeout_ms)
        logger.info("location_acquired", extra={"component": "locator", "source": LocationSource.DEVICE.value})
        return UserLocation(coordinate=coordinate, acquired_at=self._clock(), source=LocationSource.DEVICE)

    def _fall_back(self, kind: LocationErrorKind, timeout_ms: int) -> UserLocation:
        logger.warning(
            "location_fallback",
            extra={"component": "locator", "reason": kind.value, "timeout_ms": timeout_ms},
        )
        return UserLocation(
            coordinate=self._fallback,
            acquired_at=self._clock(),
            source=LocationSource.FALLBACK,
            error=kind,
        )
