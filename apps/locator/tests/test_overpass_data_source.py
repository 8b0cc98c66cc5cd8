from __future__ import annotations

import random
from typing import Any

import httpx
import pytest

from geo_engine.models import Coordinate
from locator.clients.overpass_client import OverpassClient
from locator.data_sources.overpass import OverpassFacilityDataSource, build_overpass_query
from locator.errors import DataSourceError, DataSourceErrorKind
from locator.models import FacilityCategory, FacilitySource

CENTER = Coordinate(lat=28.6139, lng=77.2090)


def _element(element_id: int, lat: float, lon: float, **tags: Any) -> dict[str, Any]:
    return {"type": "node", "id": element_id, "lat": lat, "lon": lon, "tags": tags}


def build_source(elements: list[dict[str, Any]], max_results: int = 10) -> OverpassFacilityDataSource:
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code=200, json={"version": 0.6, "elements": elements})

    transport = httpx.MockTransport(handler)
    client = OverpassClient(
        base_url="https://overpass.example.com/api/interpreter",
        client_factory=lambda: httpx.AsyncClient(transport=transport, timeout=5.0),
    )
    return OverpassFacilityDataSource(client, max_results=max_results, rng=random.Random(7))


def test_build_overpass_query_covers_each_amenity() -> None:
    query = build_overpass_query(CENTER, 5000)

    assert query.startswith("[out:json]")
    assert 'node["amenity"="hospital"](around:5000,28.6139,77.209);' in query
    assert 'node["amenity"="clinic"](around:5000,28.6139,77.209);' in query
    assert query.endswith("out body;")


def test_build_overpass_query_rejects_invalid_radius() -> None:
    with pytest.raises(ValueError):
        build_overpass_query(CENTER, 0)


@pytest.mark.asyncio
async def test_query_normalizes_elements() -> None:
    source = build_source(
        [
            _element(101, 28.6200, 77.2100, name="Lady Hardinge Hospital", amenity="hospital", **{"addr:street": "Shaheed Bhagat Singh Marg"}),
            _element(102, 28.6150, 77.2095, name="Gole Market Clinic", amenity="clinic", **{"addr:city": "New Delhi"}),
        ]
    )

    result = await source.query(CENTER, 5000)

    assert result.source is FacilitySource.REMOTE
    assert result.error is None
    assert [f.id for f in result.facilities] == ["102", "101"]
    clinic, hospital = result.facilities
    assert clinic.category is FacilityCategory.CLINIC
    assert clinic.address == "New Delhi"
    assert hospital.address == "Shaheed Bhagat Singh Marg"
    assert hospital.location == Coordinate(lat=28.62, lng=77.21)


@pytest.mark.asyncio
async def test_query_excludes_elements_without_usable_name() -> None:
    source = build_source(
        [
            _element(1, 28.614, 77.209, amenity="hospital"),
            _element(2, 28.614, 77.209, name="   ", amenity="hospital"),
            _element(3, 28.614, 77.209, name="Unnamed Health Center", amenity="clinic"),
            _element(4, 28.614, 77.209, name="Named Clinic", amenity="clinic"),
            {"type": "node", "id": 5, "lat": 28.614, "lon": 77.209},
        ]
    )

    result = await source.query(CENTER, 5000)

    assert [f.name for f in result.facilities] == ["Named Clinic"]


@pytest.mark.asyncio
async def test_query_fills_missing_display_fields_and_marks_them_synthetic() -> None:
    source = build_source([_element(7, 28.6239, 77.2090, name="AIIMS Satellite", amenity="hospital")])

    result = await source.query(CENTER, 5000)

    facility = result.facilities[0]
    assert facility.synthetic_fields == frozenset({"rating", "distance", "eta_display"})
    assert facility.rating is not None and 4.0 <= facility.rating <= 5.0
    assert facility.distance == "1.1 km"
    assert facility.eta_display == "3 mins"
    assert facility.address == "Address not available"


@pytest.mark.asyncio
async def test_query_keeps_source_rating() -> None:
    source = build_source([_element(8, 28.614, 77.209, name="Rated Clinic", amenity="clinic", rating="3.9")])

    result = await source.query(CENTER, 5000)

    assert result.facilities[0].rating == 3.9
    assert "rating" not in result.facilities[0].synthetic_fields


@pytest.mark.asyncio
async def test_query_truncates_to_nearest_results() -> None:
    elements = [
        _element(i, 28.6139 + i * 0.001, 77.2090, name=f"Clinic {i}", amenity="clinic")
        for i in range(15, 0, -1)
    ]
    source = build_source(elements, max_results=10)

    result = await source.query(CENTER, 5000)

    assert len(result.facilities) == 10
    assert [f.id for f in result.facilities] == [str(i) for i in range(1, 11)]


@pytest.mark.asyncio
async def test_query_drops_invalid_coordinates_and_out_of_radius_entries() -> None:
    source = build_source(
        [
            _element(1, 95.0, 77.209, name="Broken", amenity="hospital"),
            _element(2, 28.9, 77.209, name="Far Away", amenity="hospital"),
            _element(3, 28.614, 77.209, name="Near", amenity="hospital"),
            _element(3, 28.614, 77.209, name="Near Duplicate", amenity="hospital"),
        ]
    )

    result = await source.query(CENTER, 5000)

    assert [f.name for f in result.facilities] == ["Near"]


@pytest.mark.asyncio
async def test_query_raises_empty_when_nothing_usable() -> None:
    source = build_source([_element(1, 28.614, 77.209, amenity="hospital")])

    with pytest.raises(DataSourceError) as exc_info:
        await source.query(CENTER, 5000)

    assert exc_info.value.kind is DataSourceErrorKind.EMPTY


@pytest.mark.asyncio
async def test_query_rejects_non_object_elements() -> None:
    source = build_source(["not-an-element"])  # type: ignore[list-item]

    with pytest.raises(DataSourceError) as exc_info:
        await source.query(CENTER, 5000)

    assert exc_info.value.kind is DataSourceErrorKind.MALFORMED_RESPONSE
