"""Ports to the external forecast and geocoding services."""
from __future__ import annotations

from typing import List, Optional, Protocol

from .entities import ForecastStep, Place


class WeatherProvider(Protocol):
    """A data source returning a time-ordered forecast series for a coordinate."""

    name: str

    def fetch_forecast(self, latitude: float, longitude: float) -> List[ForecastStep]:
        """Return the forecast series, raising FetchError on any failure."""
        ...


class GeocodingProvider(Protocol):
    """Place name <-> coordinate lookups."""

    name: str

    def forward_search(self, query: str, country_filter: Optional[str] = None) -> List[Place]:
        """Return ranked places matching ``query``."""
        ...

    def reverse_lookup(self, latitude: float, longitude: float) -> Place:
        """Return the place at the coordinate, raising GeocodeLookupError on failure."""
        ...


__all__ = ["WeatherProvider", "GeocodingProvider"]
