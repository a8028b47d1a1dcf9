from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional, Sequence, Tuple

from .entities import ForecastStep, WeatherObservation, WeightTriple
from .errors import FetchError

SCORING_WINDOW = 24


class WindMode(str, Enum):
    CALM = "calm"
    STORM = "storm"


@dataclass(frozen=True)
class ScoringProfile:
    """Tunable constants of the sub-score curves (°C and m/s)."""

    optimal_temp: float = 25.0
    temp_tolerance: float = 20.0
    calm_ceiling: float = 15.0
    storm_optimum: float = 17.0
    storm_tolerance: float = 17.0


DEFAULT_PROFILE = ScoringProfile()


def _clamp(value: float) -> float:
    return min(max(value, 0.0), 1.0)


def sun_score(cloud_fraction: float) -> float:
    return _clamp(1 - cloud_fraction / 100)


def temp_score(temp: float, profile: ScoringProfile = DEFAULT_PROFILE) -> float:
    return 1 - min(abs(temp - profile.optimal_temp) / profile.temp_tolerance, 1)


def wind_score(
    wind_speed: float,
    mode: WindMode = WindMode.CALM,
    profile: ScoringProfile = DEFAULT_PROFILE,
) -> float:
    if mode is WindMode.STORM:
        return 1 - min(abs(wind_speed - profile.storm_optimum) / profile.storm_tolerance, 1)
    return _clamp(1 - min(wind_speed / profile.calm_ceiling, 1))


def score(
    observation: WeatherObservation,
    weights: WeightTriple,
    mode: WindMode = WindMode.CALM,
    profile: ScoringProfile = DEFAULT_PROFILE,
) -> float:
    """Weighted blend of the three sub-scores, in [0, 1]."""
    w = weights.normalized()
    total = (
        w.sun * sun_score(observation.cloud_fraction)
        + w.temp * temp_score(observation.temp, profile)
        + w.wind * wind_score(observation.wind_speed, mode, profile)
    )
    return _clamp(total)


def aggregate(series: Sequence[ForecastStep], window: int = SCORING_WINDOW) -> WeatherObservation:
    """Average temperature, cloud cover and wind over the first ``window`` steps.

    Each field is averaged on its own, skipping missing values. Gust and
    symbol come from the first step.
    """
    steps = list(series[:window])
    if not steps:
        raise FetchError("empty forecast series")
    temp = _mean(step.temperature for step in steps)
    cloud = _mean(step.cloud_fraction for step in steps)
    wind = _mean(step.wind_speed for step in steps)
    if temp is None or cloud is None or wind is None:
        raise FetchError("forecast series lacks temperature, cloud or wind data")
    first = steps[0]
    return WeatherObservation(
        temp=temp,
        cloud_fraction=cloud,
        wind_speed=wind,
        wind_gust=first.wind_gust,
        symbol_code=first.symbol_code or "",
    )


def score_series(
    series: Sequence[ForecastStep],
    weights: WeightTriple,
    mode: WindMode = WindMode.CALM,
    profile: ScoringProfile = DEFAULT_PROFILE,
    window: int = SCORING_WINDOW,
) -> Tuple[WeatherObservation, float]:
    observation = aggregate(series, window)
    return observation, score(observation, weights, mode, profile)


def _mean(values: Iterable[Optional[float]]) -> Optional[float]:
    filtered: List[float] = [v for v in values if v is not None]
    if not filtered:
        return None
    return sum(filtered) / len(filtered)


__all__ = [
    "SCORING_WINDOW",
    "WindMode",
    "ScoringProfile",
    "DEFAULT_PROFILE",
    "sun_score",
    "temp_score",
    "wind_score",
    "score",
    "aggregate",
    "score_series",
]
