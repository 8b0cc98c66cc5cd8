from __future__ import annotations

import logging
import webbrowser
from typing import Protocol

from geo_engine.models import Coordinate

logger = logging.getLogger(__name__)

DIRECTIONS_URL = "https://www.google.com/maps/dir/?api=1&destination={lat},{lng}"


class Navigator(Protocol):
    def open_directions(self, destination: Coordinate) -> None:
        ...

    def dial(self, number: str) -> None:
        ...


def directions_url(destination: Coordinate) -> str:
    return DIRECTIONS_URL.format(lat=destination.lat, lng=destination.lng)


class BrowserNavigator:
    """Hands destinations and phone numbers to the system's registered handlers."""

    def open_directions(self, destination: Coordinate) -> None:
        url = directions_url(destination)
        logger.info("navigation_opened", extra={"component": "locator", "url": url})
        webbrowser.open(url, new=2)

    def dial(self, number: str) -> None:
        if not number.strip():
            raise ValueError("number must not be empty")
        logger.info("dialer_opened", extra={"component": "locator", "number": number})
        webbrowser.open(f"tel:{number.strip()}")
