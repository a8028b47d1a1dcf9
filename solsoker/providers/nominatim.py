from __future__ import annotations

from typing import List, Optional

from pydantic import ValidationError

from .base import HttpProvider
from .schemas import NominatimPlace
from ..entities import Place
from ..errors import GeocodeLookupError
from ..settings import DEFAULT_NOMINATIM_URL

MIN_SUGGEST_LENGTH = 2


class NominatimGeocoder(HttpProvider):
    """OpenStreetMap Nominatim search and reverse geocoding."""

    name = "nominatim"
    base_url = DEFAULT_NOMINATIM_URL
    error_class = GeocodeLookupError
    quota_error_class = GeocodeLookupError

    def __init__(
        self,
        base_url: Optional[str] = None,
        country: Optional[str] = "no",
        limit: int = 5,
        **kwargs,
    ) -> None:
        super().__init__(**kwargs)
        self.base_url = (base_url or self.base_url).rstrip("/")
        self.country = country
        self.limit = limit

    # Public API ---------------------------------------------------------
    def forward_search(self, query: str, country_filter: Optional[str] = None) -> List[Place]:
        query = query.strip()
        if not query:
            return []
        params = {
            "q": query,
            "format": "json",
            "limit": self.limit,
            "addressdetails": 1,
        }
        if country_filter:
            params["countrycodes"] = country_filter
        url = f"{self.base_url}/search"
        return self._cached(url, params, lambda: self._load_search(url, params))

    def reverse_lookup(self, latitude: float, longitude: float) -> Place:
        params = {
            "lat": latitude,
            "lon": longitude,
            "format": "json",
            "addressdetails": 1,
        }
        url = f"{self.base_url}/reverse"
        return self._cached(url, params, lambda: self._load_reverse(url, params))

    def suggest(self, query: str) -> List[Place]:
        if len(query.strip()) < MIN_SUGGEST_LENGTH:
            return []
        return self.forward_search(query, self.country)

    # Helpers ------------------------------------------------------------
    def _load_search(self, url: str, params: dict) -> List[Place]:
        data = self._get_json(url, params)
        if not isinstance(data, list):
            raise GeocodeLookupError("unexpected search payload")
        places: List[Place] = []
        for item in data:
            try:
                places.append(NominatimPlace.model_validate(item).to_place())
            except ValidationError:
                self._log.warning("Skipping malformed search hit: %s", item)
        return places

    def _load_reverse(self, url: str, params: dict) -> Place:
        data = self._get_json(url, params)
        if isinstance(data, dict) and "error" in data:
            raise GeocodeLookupError(str(data["error"]))
        try:
            return NominatimPlace.model_validate(data).to_place()
        except ValidationError as exc:
            raise GeocodeLookupError("malformed reverse payload") from exc


__all__ = ["NominatimGeocoder", "MIN_SUGGEST_LENGTH"]
