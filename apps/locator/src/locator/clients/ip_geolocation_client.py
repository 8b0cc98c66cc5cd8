from __future__ import annotations

from collections.abc import Callable
from typing import Any

import httpx

from geo_engine.models import Coordinate, InvalidCoordinate

from locator.location import PositionError, PositionErrorCode


def _pick(item: dict[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in item and item[key] is not None:
            return item[key]
    return None


class IpGeolocationClient:
    """Geolocation capability backed by an IP lookup service.

    Accuracy is city-level at best, which matches the low-accuracy hint the
    locator asks for by default; ``high_accuracy`` is accepted but ignored.
    """

    def __init__(
        self,
        url: str,
        client_factory: Callable[[float], httpx.AsyncClient] | None = None,
    ) -> None:
        self._url = url
        self._client_factory = client_factory

    async def get_current_position(self, high_accuracy: bool, timeout_seconds: float) -> Coordinate:
        try:
            factory = self._client_factory or (lambda timeout: httpx.AsyncClient(timeout=timeout))
            async with factory(timeout_seconds) as client:
                response = await client.get(self._url)
                response.raise_for_status()
                payload = response.json()
        except httpx.TimeoutException as exc:
            raise PositionError(PositionErrorCode.TIMEOUT, "ip geolocation timeout") from exc
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            code = PositionErrorCode.PERMISSION_DENIED if status in {401, 403} else PositionErrorCode.POSITION_UNAVAILABLE
            raise PositionError(code, f"ip geolocation returned status={status}") from exc
        except (httpx.HTTPError, ValueError) as exc:
            raise PositionError(PositionErrorCode.POSITION_UNAVAILABLE, "ip geolocation request failed") from exc

        if not isinstance(payload, dict) or payload.get("error") or payload.get("status") == "fail":
            raise PositionError(PositionErrorCode.POSITION_UNAVAILABLE, "ip geolocation lookup failed")
        try:
            return Coordinate.parse(
                _pick(payload, "latitude", "lat"),
                _pick(payload, "longitude", "lon", "lng"),
            )
        except InvalidCoordinate as exc:
            raise PositionError(PositionErrorCode.POSITION_UNAVAILABLE, str(exc)) from exc
