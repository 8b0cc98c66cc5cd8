"""Common runtime devkit for configuration and observability concerns."""

from devkit.config import ServiceSettings, load_settings
from devkit.observability import configure_logging, configure_otel, get_tracer

__all__ = [
    "ServiceSettings",
    "configure_logging",
    "configure_otel",
    "get_tracer",
    "load_settings",
]
