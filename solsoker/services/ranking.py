from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, List, Optional, Sequence, Tuple

from ..abstractions import GeocodingProvider, WeatherProvider
from ..entities import (
    BestCandidate,
    CandidatePool,
    ForecastStep,
    RankedCandidate,
    ScoredCandidate,
    SearchResult,
)
from ..errors import FetchError, GeocodeLookupError, NoDataError
from ..health import HealthRegistry
from ..places import coordinate_label, place_name

TOP_K = 3

Coordinate = Tuple[float, float]


def rank(candidates: Sequence[ScoredCandidate], k: int = TOP_K) -> List[ScoredCandidate]:
    """Highest scores first; equal scores keep evaluation order."""
    return sorted(candidates, key=lambda c: c.score, reverse=True)[:k]


class ResultRanker:
    """Turn a candidate pool into a named, ranked search result."""

    def __init__(
        self,
        geocoder: GeocodingProvider,
        weather_provider: WeatherProvider,
        *,
        top_k: int = TOP_K,
        health: Optional[HealthRegistry] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.geocoder = geocoder
        self.weather_provider = weather_provider
        self.top_k = top_k
        self.health = health
        self._log = logger or logging.getLogger(self.__class__.__name__)

    def assemble(self, pool: CandidatePool) -> SearchResult:
        best = pool.best
        if best is None:
            raise NoDataError("no forecast could be retrieved for any point in the search area")
        top = rank(pool.candidates, self.top_k)
        names = self._resolve_names([best, *top])

        best_name = names.get(_key(best)) or coordinate_label(best.lat, best.lon)
        ranked = tuple(
            RankedCandidate(candidate=candidate, name=names.get(_key(candidate)) or f"Spot {position}", rank=position)
            for position, candidate in enumerate(top, start=1)
        )
        return SearchResult(
            best=BestCandidate(candidate=best, name=best_name, forecast=self._full_forecast(best)),
            top=ranked,
            evaluated=len(pool.candidates),
            skipped=pool.skipped,
        )

    # Helpers ------------------------------------------------------------
    def _resolve_names(self, candidates: Sequence[ScoredCandidate]) -> Dict[Coordinate, Optional[str]]:
        coordinates = list(dict.fromkeys(_key(c) for c in candidates))
        with ThreadPoolExecutor(max_workers=max(1, len(coordinates)), thread_name_prefix="solsoker-name") as pool:
            names = list(pool.map(self._lookup_name, coordinates))
        return dict(zip(coordinates, names))

    def _lookup_name(self, coordinate: Coordinate) -> Optional[str]:
        try:
            place = self.geocoder.reverse_lookup(*coordinate)
        except GeocodeLookupError as exc:
            self._log.warning("Reverse lookup failed for %.5f,%.5f: %s", coordinate[0], coordinate[1], exc)
            self._record_error(self.geocoder)
            return None
        return place_name(place)

    def _full_forecast(self, best: ScoredCandidate) -> Tuple[ForecastStep, ...]:
        try:
            return tuple(self.weather_provider.fetch_forecast(best.lat, best.lon))
        except FetchError as exc:
            self._log.warning("Full forecast failed for best point, reusing scoring series: %s", exc)
            self._record_error(self.weather_provider)
            return best.series

    def _record_error(self, provider: object) -> None:
        if self.health is not None:
            self.health.record_provider_error(getattr(provider, "name", provider.__class__.__name__))


def _key(candidate: ScoredCandidate) -> Coordinate:
    return candidate.lat, candidate.lon


__all__ = ["ResultRanker", "rank", "TOP_K"]
