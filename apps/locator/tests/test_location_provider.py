from __future__ import annotations

import asyncio
import time
from datetime import datetime, timezone

import pytest

from geo_engine.models import Coordinate
from locator.errors import LocationErrorKind
from locator.location import FixedGeolocation, LocationProvider, PositionError, PositionErrorCode
from locator.models import DEFAULT_FALLBACK_COORDINATE, LocationSource

FIXED_NOW = datetime(2026, 1, 1, 9, 0, tzinfo=timezone.utc)


class RecordingGeolocation:
    def __init__(self, coordinate: Coordinate) -> None:
        self.calls: list[tuple[bool, float]] = []
        self._coordinate = coordinate

    async def get_current_position(self, high_accuracy: bool, timeout_seconds: float) -> Coordinate:
        self.calls.append((high_accuracy, timeout_seconds))
        return self._coordinate


class HangingGeolocation:
    async def get_current_position(self, high_accuracy: bool, timeout_seconds: float) -> Coordinate:
        await asyncio.sleep(60)
        raise AssertionError("should have timed out")


class BrokenGeolocation:
    async def get_current_position(self, high_accuracy: bool, timeout_seconds: float) -> Coordinate:
        raise RuntimeError("sensor crashed")


class OutOfRangeGeolocation:
    async def get_current_position(self, high_accuracy: bool, timeout_seconds: float) -> Coordinate:
        return Coordinate.parse(91.0, 0.0)


@pytest.mark.asyncio
async def test_acquire_returns_device_location() -> None:
    capability = RecordingGeolocation(Coordinate(lat=37.5665, lng=126.9780))
    provider = LocationProvider(capability, clock=lambda: FIXED_NOW)

    location = await provider.acquire()

    assert location.source is LocationSource.DEVICE
    assert location.coordinate == Coordinate(lat=37.5665, lng=126.9780)
    assert location.acquired_at == FIXED_NOW
    assert location.error is None
    assert capability.calls == [(False, 5.0)]


@pytest.mark.asyncio
async def test_acquire_passes_high_accuracy_hint_and_timeout_override() -> None:
    capability = RecordingGeolocation(Coordinate(lat=1.0, lng=2.0))
    provider = LocationProvider(capability, high_accuracy=True)

    await provider.acquire(timeout_ms=1500)

    assert capability.calls == [(True, 1.5)]


@pytest.mark.asyncio
async def test_denied_permission_falls_back_quickly() -> None:
    provider = LocationProvider(FixedGeolocation(error=PositionErrorCode.PERMISSION_DENIED), timeout_ms=5000)

    started = time.perf_counter()
    location = await provider.acquire()
    elapsed = time.perf_counter() - started

    assert location.source is LocationSource.FALLBACK
    assert location.coordinate == Coordinate(lat=28.6139, lng=77.2090)
    assert location.error is LocationErrorKind.DENIED
    assert elapsed < 5.0


@pytest.mark.asyncio
async def test_missing_capability_is_unsupported() -> None:
    provider = LocationProvider(None)

    location = await provider.acquire()

    assert location.is_fallback
    assert location.error is LocationErrorKind.UNSUPPORTED
    assert location.coordinate == DEFAULT_FALLBACK_COORDINATE


@pytest.mark.asyncio
async def test_timeout_falls_back_within_window() -> None:
    provider = LocationProvider(HangingGeolocation(), timeout_ms=50)

    started = time.perf_counter()
    location = await provider.acquire()
    elapsed = time.perf_counter() - started

    assert location.error is LocationErrorKind.TIMEOUT
    assert location.source is LocationSource.FALLBACK
    assert elapsed < 1.0


@pytest.mark.asyncio
async def test_capability_timeout_code_maps_to_timeout() -> None:
    provider = LocationProvider(FixedGeolocation(error=PositionErrorCode.TIMEOUT))
    location = await provider.acquire()
    assert location.error is LocationErrorKind.TIMEOUT


@pytest.mark.asyncio
async def test_unexpected_capability_error_still_falls_back() -> None:
    provider = LocationProvider(BrokenGeolocation())
    location = await provider.acquire()
    assert location.error is LocationErrorKind.UNAVAILABLE


@pytest.mark.asyncio
async def test_out_of_range_fix_is_unavailable() -> None:
    provider = LocationProvider(OutOfRangeGeolocation())
    location = await provider.acquire()
    assert location.error is LocationErrorKind.UNAVAILABLE


@pytest.mark.asyncio
async def test_custom_fallback_coordinate() -> None:
    fallback = Coordinate(lat=19.0760, lng=72.8777)
    provider = LocationProvider(FixedGeolocation(error=PositionErrorCode.POSITION_UNAVAILABLE), fallback=fallback)
    location = await provider.acquire()
    assert location.coordinate == fallback


def test_position_error_carries_code() -> None:
    error = PositionError(PositionErrorCode.PERMISSION_DENIED)
    assert error.code is PositionErrorCode.PERMISSION_DENIED
    assert str(error) == "permission_denied"


def test_invalid_timeout_raises() -> None:
    with pytest.raises(ValueError):
        LocationProvider(None, timeout_ms=0)


@pytest.mark.asyncio
async def test_fallback_log_reports_per_call_timeout(caplog) -> None:
    provider = LocationProvider(HangingGeolocation(), timeout_ms=5000)

    with caplog.at_level("WARNING", logger="locator.location"):
        location = await provider.acquire(timeout_ms=50)

    assert location.error is LocationErrorKind.TIMEOUT
    records = [record for record in caplog.records if record.getMessage() == "location_fallback"]
    assert len(records) == 1
    assert records[0].timeout_ms == 50


@pytest.mark.asyncio
async def test_fixed_geolocation_reports_position_or_error() -> None:
    fix = Coordinate(lat=12.97, lng=77.59)

    assert await FixedGeolocation(coordinate=fix).get_current_position(False, 1.0) == fix
    with pytest.raises(PositionError) as exc_info:
        await FixedGeolocation(error=PositionErrorCode.TIMEOUT).get_current_position(False, 1.0)
    assert exc_info.value.code is PositionErrorCode.TIMEOUT
    with pytest.raises(ValueError):
        FixedGeolocation()
