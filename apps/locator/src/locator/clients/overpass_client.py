from __future__ import annotations

from collections.abc import Callable
from typing import Any

import httpx

from locator.errors import DataSourceError, DataSourceErrorKind


class OverpassClient:
    def __init__(
        self,
        base_url: str,
        timeout_seconds: float = 10.0,
        client_factory: Callable[[], httpx.AsyncClient] | None = None,
    ) -> None:
        if timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be > 0")
        self._base_url = base_url
        self._timeout_seconds = timeout_seconds
        self._client_factory = client_factory

    @property
    def timeout_seconds(self) -> float:
        return self._timeout_seconds

    async def fetch_elements(self, query: str) -> list[dict[str, Any]]:
        try:
            factory = self._client_factory or (lambda: httpx.AsyncClient(timeout=self._timeout_seconds))
            async with factory() as client:
                response = await client.get(self._base_url, params={"data": query})
                response.raise_for_status()
        except httpx.TimeoutException as exc:
            raise DataSourceError(DataSourceErrorKind.NETWORK_FAILURE, "overpass timeout") from exc
        except httpx.HTTPStatusError as exc:
            raise DataSourceError(
                DataSourceErrorKind.NETWORK_FAILURE,
                f"overpass returned status={exc.response.status_code}",
            ) from exc
        except httpx.HTTPError as exc:
            raise DataSourceError(DataSourceErrorKind.NETWORK_FAILURE, "overpass request failed") from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise DataSourceError(DataSourceErrorKind.MALFORMED_RESPONSE, "overpass payload is not json") from exc
        if not isinstance(payload, dict):
            raise DataSourceError(DataSourceErrorKind.MALFORMED_RESPONSE, "overpass payload is not a json object")
        elements = payload.get("elements")
        if not isinstance(elements, list):
            raise DataSourceError(DataSourceErrorKind.MALFORMED_RESPONSE, "overpass payload missing list field 'elements'")
        return elements
