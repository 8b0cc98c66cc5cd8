from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

import folium
from branca.element import Element, Figure, MacroElement
from jinja2 import Template

from geo_engine.models import Coordinate

from locator.errors import MapInitError, MapInitErrorKind
from locator.models import MarkerEntry, MarkerKind

logger = logging.getLogger(__name__)

DEFAULT_TILE_URL = "https://tile.openstreetmap.org/{z}/{x}/{y}.png"
DEFAULT_TILE_ATTRIBUTION = (
    '&copy; <a href="https://www.openstreetmap.org/copyright">OpenStreetMap</a> contributors'
)


class MapSurface(ABC):
    """One map widget bound to one container for the lifetime of a screen."""

    @property
    @abstractmethod
    def is_initialized(self) -> bool:
        raise NotImplementedError

    @abstractmethod
    def initialize(self, container: Path | None, initial_center: Coordinate, initial_zoom: int) -> None:
        raise NotImplementedError

    @abstractmethod
    def set_viewport(self, center: Coordinate, zoom: int, animated: bool = False) -> None:
        raise NotImplementedError

    @abstractmethod
    def replace_markers(self, entries: Sequence[MarkerEntry]) -> None:
        raise NotImplementedError

    @abstractmethod
    def click(self, marker_id: str) -> bool:
        raise NotImplementedError

    @abstractmethod
    def markers(self) -> dict[str, MarkerKind]:
        raise NotImplementedError

    @abstractmethod
    def render(self) -> str:
        raise NotImplementedError

    @abstractmethod
    def dispose(self) -> None:
        raise NotImplementedError


class _ViewportControl(MacroElement):
    _template = Template(
        """
        {% macro script(this, kwargs) %}
            {% if this.animated %}
            {{ this._parent.get_name() }}.flyTo([{{ this.lat }}, {{ this.lng }}], {{ this.zoom }});
            {% else %}
            {{ this._parent.get_name() }}.setView([{{ this.lat }}, {{ this.lng }}], {{ this.zoom }});
            {% endif %}
        {% endmacro %}
        """
    )

    def __init__(self, center: Coordinate, zoom: int, animated: bool) -> None:
        super().__init__()
        self._name = "ViewportControl"
        self.lat = center.lat
        self.lng = center.lng
        self.zoom = zoom
        self.animated = animated


@dataclass
class _MarkerHandle:
    entry: MarkerEntry
    marker: folium.Marker


def _remove_child(parent: Element, child: Element) -> None:
    # branca has no public removal API; children are keyed by get_name() in the private _children dict.
    parent._children.pop(child.get_name(), None)


class FoliumMapSurface(MapSurface):
    """Leaflet map rendered through folium.

    Viewport changes are emitted as a single ``setView``/``flyTo`` script that
    is replaced on every call; markers live in one feature group that is
    discarded and rebuilt on every :meth:`replace_markers`.
    """

    def __init__(
        self,
        tile_url: str = DEFAULT_TILE_URL,
        tile_attribution: str = DEFAULT_TILE_ATTRIBUTION,
    ) -> None:
        self._tile_url = tile_url
        self._tile_attribution = tile_attribution
        self._map: folium.Map | None = None
        self._container: Path | None = None
        self._viewport: _ViewportControl | None = None
        self._layer: folium.FeatureGroup | None = None
        self._handles: dict[str, _MarkerHandle] = {}
        self._disposed = False

    @property
    def is_initialized(self) -> bool:
        return self._map is not None

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    def initialize(self, container: Path | None, initial_center: Coordinate, initial_zoom: int) -> None:
        if self._disposed:
            raise RuntimeError("map surface was disposed")
        if self._map is not None:
            return
        if container is None:
            raise MapInitError(MapInitErrorKind.CONTAINER_MISSING, "no map container given")
        container = Path(container)
        if not container.parent.is_dir():
            raise MapInitError(MapInitErrorKind.CONTAINER_MISSING, f"container directory missing: {container.parent}")
        try:
            widget = folium.Map(location=[initial_center.lat, initial_center.lng], zoom_start=initial_zoom, tiles=None)
            folium.TileLayer(tiles=self._tile_url, attr=self._tile_attribution, name="base").add_to(widget)
        except Exception as exc:
            raise MapInitError(MapInitErrorKind.WIDGET_LOAD_FAILURE, str(exc)) from exc
        self._map = widget
        self._container = container
        self._layer = folium.FeatureGroup(name="facilities").add_to(widget)
        logger.info("map_initialized", extra={"component": "locator", "zoom": initial_zoom})

    def set_viewport(self, center: Coordinate, zoom: int, animated: bool = False) -> None:
        widget = self._require_map()
        if self._viewport is not None:
            _remove_child(widget, self._viewport)
        self._viewport = _ViewportControl(center, zoom, animated)
        self._viewport.add_to(widget)

    def replace_markers(self, entries: Sequence[MarkerEntry]) -> None:
        widget = self._require_map()
        ids = [entry.id for entry in entries]
        if len(ids) != len(set(ids)):
            raise ValueError("marker ids must be unique")

        self._clear_markers()
        layer = folium.FeatureGroup(name="facilities")
        handles: dict[str, _MarkerHandle] = {}
        for entry in entries:
            marker = folium.Marker(
                location=[entry.coordinate.lat, entry.coordinate.lng],
                popup=folium.Popup(entry.popup_content, max_width=300),
                tooltip=entry.tooltip,
                icon=self._icon(entry.kind),
            )
            marker.add_to(layer)
            handles[entry.id] = _MarkerHandle(entry=entry, marker=marker)
        layer.add_to(widget)
        self._layer = layer
        self._handles = handles
        logger.debug("markers_replaced", extra={"component": "locator", "marker_count": len(handles)})

    def click(self, marker_id: str) -> bool:
        handle = self._handles.get(marker_id)
        if handle is None or handle.entry.on_click is None:
            return False
        handle.entry.on_click(handle.entry.id)
        return True

    def markers(self) -> dict[str, MarkerKind]:
        return {marker_id: handle.entry.kind for marker_id, handle in self._handles.items()}

    def render(self) -> str:
        widget = self._require_map()
        # A fresh root per render; branca accumulates scripts on the old one.
        root = Figure()
        root.add_child(widget)
        html = root.render()
        if self._container is not None:
            self._container.write_text(html, encoding="utf-8")
        return html

    def dispose(self) -> None:
        if self._disposed:
            return
        self._disposed = True
        if self._map is None:
            return
        self._clear_markers()
        self._viewport = None
        self._map = None
        self._container = None
        logger.info("map_disposed", extra={"component": "locator"})

    def _clear_markers(self) -> None:
        if self._layer is not None:
            for handle in self._handles.values():
                _remove_child(self._layer, handle.marker)
            if self._map is not None:
                _remove_child(self._map, self._layer)
        self._handles = {}
        self._layer = None

    def _require_map(self) -> folium.Map:
        if self._map is None:
            raise RuntimeError("map surface is not initialized")
        return self._map

    @staticmethod
    def _icon(kind: MarkerKind) -> folium.Icon:
        if kind is MarkerKind.USER:
            return folium.Icon(color="blue", icon="user", prefix="fa")
        return folium.Icon(color="red", icon="plus", prefix="fa")
