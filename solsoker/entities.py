from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Mapping, Optional, Tuple

from .errors import InvalidSearchInput


@dataclass(frozen=True)
class WeightTriple:
    """Relative importance of sunshine, temperature and wind."""

    sun: float
    temp: float
    wind: float

    @property
    def total(self) -> float:
        return self.sun + self.temp + self.wind

    def normalized(self) -> "WeightTriple":
        if min(self.sun, self.temp, self.wind) < 0:
            raise InvalidSearchInput("weights must be non-negative")
        total = self.total
        if total <= 0:
            raise InvalidSearchInput("at least one weight must be greater than zero")
        return WeightTriple(sun=self.sun / total, temp=self.temp / total, wind=self.wind / total)


@dataclass(frozen=True)
class TrianglePoint:
    x: float
    y: float


@dataclass(frozen=True)
class GeoPoint:
    """Coordinate in degrees; ``ring``/``index`` record the grid slot that produced it."""

    lat: float
    lon: float
    ring: Optional[int] = None
    index: Optional[int] = None


@dataclass(frozen=True)
class ForecastStep:
    """One time step of a provider forecast series.

    Units:
    - temperature in Celsius
    - cloud fraction in percent (0-100)
    - wind speed and gust in metres per second (m/s)
    - wind direction in degrees the wind blows from
    - precipitation in millimetres over the next hour (mm)
    """

    time: datetime
    temperature: Optional[float]
    cloud_fraction: Optional[float]
    wind_speed: Optional[float]
    wind_gust: Optional[float] = None
    wind_from_direction: Optional[float] = None
    symbol_code: Optional[str] = None
    precipitation_amount: Optional[float] = None


@dataclass(frozen=True)
class WeatherObservation:
    """Weather summary for a point, usually averaged over the scoring window."""

    temp: float
    cloud_fraction: float
    wind_speed: float
    wind_gust: Optional[float] = None
    symbol_code: str = ""


@dataclass(frozen=True)
class ScoredCandidate:
    point: GeoPoint
    observation: WeatherObservation
    score: float
    series: Tuple[ForecastStep, ...] = field(default=(), compare=False, repr=False)

    @property
    def lat(self) -> float:
        return self.point.lat

    @property
    def lon(self) -> float:
        return self.point.lon


@dataclass(frozen=True)
class CandidatePool:
    """Scored candidates of one search in evaluation order, with the running best."""

    candidates: Tuple[ScoredCandidate, ...] = ()
    best: Optional[ScoredCandidate] = None
    skipped: int = 0

    def add(self, candidate: ScoredCandidate) -> "CandidatePool":
        # Strictly greater: ties keep the earlier candidate.
        best = self.best
        if best is None or candidate.score > best.score:
            best = candidate
        return CandidatePool(self.candidates + (candidate,), best, self.skipped)

    def skip(self) -> "CandidatePool":
        return CandidatePool(self.candidates, self.best, self.skipped + 1)


@dataclass(frozen=True)
class RankedCandidate:
    candidate: ScoredCandidate
    name: str
    rank: int


@dataclass(frozen=True)
class BestCandidate:
    candidate: ScoredCandidate
    name: str
    forecast: Tuple[ForecastStep, ...]


@dataclass(frozen=True)
class SearchResult:
    best: BestCandidate
    top: Tuple[RankedCandidate, ...]
    evaluated: int = 0
    skipped: int = 0


@dataclass(frozen=True)
class Place:
    """Geocoding hit as returned by a forward search or reverse lookup."""

    lat: float
    lon: float
    display_name: str
    address: Mapping[str, str] = field(default_factory=dict)


__all__ = [
    "WeightTriple",
    "TrianglePoint",
    "GeoPoint",
    "ForecastStep",
    "WeatherObservation",
    "ScoredCandidate",
    "CandidatePool",
    "RankedCandidate",
    "BestCandidate",
    "SearchResult",
    "Place",
]
