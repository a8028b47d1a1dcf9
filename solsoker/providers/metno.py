from __future__ import annotations

from typing import List, Optional

from pydantic import ValidationError

from .base import HttpProvider
from .schemas import LocationForecast
from ..entities import ForecastStep
from ..errors import FetchError, QuotaExceeded
from ..settings import DEFAULT_MET_URL


class MetNorwayProvider(HttpProvider):
    """MET Norway ``locationforecast/2.0`` client."""

    name = "met.no"
    base_url = DEFAULT_MET_URL
    error_class = FetchError
    quota_error_class = QuotaExceeded

    def __init__(self, base_url: Optional[str] = None, product: str = "complete", **kwargs) -> None:
        super().__init__(**kwargs)
        self.base_url = (base_url or self.base_url).rstrip("/")
        self.product = product

    def fetch_forecast(self, latitude: float, longitude: float) -> List[ForecastStep]:
        # The API refuses coordinates with more than four decimals.
        params = {"lat": round(latitude, 4), "lon": round(longitude, 4)}
        url = f"{self.base_url}/{self.product}"
        return self._cached(url, params, lambda: self._load(url, params))

    # helpers ------------------------------------------------------------
    def _load(self, url: str, params: dict) -> List[ForecastStep]:
        data = self._get_json(url, params)
        try:
            forecast = LocationForecast.model_validate(data)
        except ValidationError as exc:
            self._log.error("Malformed forecast for %s,%s", params["lat"], params["lon"])
            raise FetchError("malformed forecast") from exc
        steps = forecast.to_steps()
        if not steps:
            raise FetchError("empty timeseries")
        return steps


__all__ = ["MetNorwayProvider"]
