"""Payload schemas for the MET Norway and Nominatim responses."""
from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from ..entities import ForecastStep, Place


class InstantDetails(BaseModel):
    air_temperature: Optional[float] = None
    cloud_area_fraction: Optional[float] = None
    wind_speed: Optional[float] = None
    wind_speed_of_gust: Optional[float] = None
    wind_from_direction: Optional[float] = None


class Instant(BaseModel):
    details: InstantDetails = Field(default_factory=InstantDetails)


class PeriodSummary(BaseModel):
    symbol_code: Optional[str] = None


class PeriodDetails(BaseModel):
    precipitation_amount: Optional[float] = None


class NextPeriod(BaseModel):
    summary: PeriodSummary = Field(default_factory=PeriodSummary)
    details: PeriodDetails = Field(default_factory=PeriodDetails)


class StepData(BaseModel):
    instant: Instant
    next_1_hours: Optional[NextPeriod] = None
    next_6_hours: Optional[NextPeriod] = None


class TimeStep(BaseModel):
    time: datetime
    data: StepData

    def to_step(self) -> ForecastStep:
        details = self.data.instant.details
        next_hour = self.data.next_1_hours
        symbol = next_hour.summary.symbol_code if next_hour else None
        if symbol is None and self.data.next_6_hours is not None:
            symbol = self.data.next_6_hours.summary.symbol_code
        return ForecastStep(
            time=self.time,
            temperature=details.air_temperature,
            cloud_fraction=details.cloud_area_fraction,
            wind_speed=details.wind_speed,
            wind_gust=details.wind_speed_of_gust,
            wind_from_direction=details.wind_from_direction,
            symbol_code=symbol,
            precipitation_amount=next_hour.details.precipitation_amount if next_hour else None,
        )


class ForecastProperties(BaseModel):
    timeseries: List[TimeStep]


class LocationForecast(BaseModel):
    """``locationforecast/2.0`` GeoJSON body; only the fields we read."""

    properties: ForecastProperties

    def to_steps(self) -> List[ForecastStep]:
        return [step.to_step() for step in self.properties.timeseries]


class NominatimPlace(BaseModel):
    lat: float
    lon: float
    display_name: str = ""
    address: Dict[str, str] = Field(default_factory=dict)

    @field_validator("address", mode="before")
    @classmethod
    def _stringify_address(cls, value):
        if not isinstance(value, dict):
            return {}
        return {str(k): str(v) for k, v in value.items() if v is not None}

    def to_place(self) -> Place:
        return Place(lat=self.lat, lon=self.lon, display_name=self.display_name, address=dict(self.address))


__all__ = ["LocationForecast", "NominatimPlace", "TimeStep"]
