"""Grid search for the spot with the best weather around a center point.

Candidates are fetched in fixed-size batches. Every fetch in a batch runs
concurrently, and the batch is fully collected before its results are folded
into the candidate pool, so pool and running best are only ever touched by
the coordinating thread.
"""
from __future__ import annotations

import logging
import math
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence

from ..abstractions import GeocodingProvider, WeatherProvider
from ..entities import CandidatePool, GeoPoint, ScoredCandidate, SearchResult, WeightTriple
from ..errors import FetchError, InvalidSearchInput, NoDataError, SearchCancelled
from ..grid import DEFAULT_RING_SCHEDULE, generate_grid, generate_refinement_grid
from ..health import HealthRegistry
from ..scoring import DEFAULT_PROFILE, SCORING_WINDOW, ScoringProfile, WindMode, score_series
from .ranking import TOP_K, ResultRanker

logger = logging.getLogger(__name__)

BATCH_SIZE = 10
BATCH_DELAY = 0.05
FETCH_TIMEOUT = 10.0
POLL_INTERVAL = 0.1

MAX_REFINE_ITERATIONS = 4
MIN_REFINE_RADIUS_KM = 1.5


class SearchMode(str, Enum):
    SINGLE_PASS = "single-pass"
    REFINE = "refine"


class CancelToken:
    """Cancellation scope of a single search."""

    def __init__(self) -> None:
        self._event = threading.Event()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        self._event.set()

    def wait(self, seconds: float) -> bool:
        """Sleep up to ``seconds``; return True as soon as the token is cancelled."""
        if seconds <= 0:
            return self.cancelled
        return self._event.wait(seconds)

    def raise_if_cancelled(self) -> None:
        if self.cancelled:
            raise SearchCancelled("search was superseded")


@dataclass(frozen=True)
class SearchRequest:
    center: GeoPoint
    radius_km: float
    weights: WeightTriple
    wind_mode: WindMode = WindMode.CALM
    mode: SearchMode = SearchMode.SINGLE_PASS


def validate(request: SearchRequest) -> WeightTriple:
    """Reject unusable input before any network access; return normalized weights."""
    weights = request.weights.normalized()
    lat, lon = request.center.lat, request.center.lon
    if not (math.isfinite(lat) and -90 <= lat <= 90):
        raise InvalidSearchInput(f"latitude out of range: {lat}")
    if not (math.isfinite(lon) and -180 <= lon <= 180):
        raise InvalidSearchInput(f"longitude out of range: {lon}")
    if not (math.isfinite(request.radius_km) and request.radius_km > 0):
        raise InvalidSearchInput(f"radius must be positive: {request.radius_km}")
    return weights


class SearchOrchestrator:
    """Evaluate a polar grid of candidates and rank the results."""

    def __init__(
        self,
        weather_provider: WeatherProvider,
        geocoder: GeocodingProvider,
        *,
        batch_size: int = BATCH_SIZE,
        batch_delay: float = BATCH_DELAY,
        fetch_timeout: float = FETCH_TIMEOUT,
        window: int = SCORING_WINDOW,
        profile: ScoringProfile = DEFAULT_PROFILE,
        ring_schedule: Sequence[int] = DEFAULT_RING_SCHEDULE,
        top_k: int = TOP_K,
        health: Optional[HealthRegistry] = None,
        ranker: Optional[ResultRanker] = None,
    ) -> None:
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        self.weather_provider = weather_provider
        self.batch_size = batch_size
        self.batch_delay = batch_delay
        self.fetch_timeout = fetch_timeout
        self.window = window
        self.profile = profile
        self.ring_schedule = tuple(ring_schedule)
        self.health = health
        self.ranker = ranker or ResultRanker(geocoder, weather_provider, top_k=top_k, health=health)
        self._log = logging.getLogger(self.__class__.__name__)

    # Public API ---------------------------------------------------------
    def search(
        self,
        center: GeoPoint,
        radius_km: float,
        weights: WeightTriple,
        wind_mode: WindMode = WindMode.CALM,
        mode: SearchMode = SearchMode.SINGLE_PASS,
        token: Optional[CancelToken] = None,
    ) -> SearchResult:
        request = SearchRequest(center=center, radius_km=radius_km, weights=weights, wind_mode=wind_mode, mode=mode)
        token = token or CancelToken()
        pool = self.evaluate(request, token)
        if pool.best is None:
            self._log.error("All %d candidates failed", pool.skipped)
            raise NoDataError("no forecast could be retrieved for any point in the search area")
        token.raise_if_cancelled()
        result = self.ranker.assemble(pool)
        token.raise_if_cancelled()
        return result

    def evaluate(self, request: SearchRequest, token: Optional[CancelToken] = None) -> CandidatePool:
        """Fetch and score every grid point; failed points are counted as skipped."""
        weights = validate(request)
        token = token or CancelToken()
        executor = ThreadPoolExecutor(max_workers=self.batch_size, thread_name_prefix="solsoker-fetch")
        try:
            if request.mode is SearchMode.REFINE:
                pool = self._evaluate_refine(executor, request, weights, token)
            else:
                points = generate_grid(
                    request.center.lat, request.center.lon, request.radius_km, self.ring_schedule
                )
                pool = self._evaluate_points(executor, points, request, weights, token, CandidatePool())
        finally:
            # In-flight fetches of a cancelled search are abandoned, not awaited.
            executor.shutdown(wait=False, cancel_futures=True)
        self._log.info(
            "Search around %.4f,%.4f finished: %d evaluated, %d skipped",
            request.center.lat,
            request.center.lon,
            len(pool.candidates),
            pool.skipped,
        )
        return pool

    # Helpers ------------------------------------------------------------
    def _evaluate_points(
        self,
        executor: ThreadPoolExecutor,
        points: Sequence[GeoPoint],
        request: SearchRequest,
        weights: WeightTriple,
        token: CancelToken,
        pool: CandidatePool,
    ) -> CandidatePool:
        self._log.info("Evaluating %d points in batches of %d", len(points), self.batch_size)
        for start in range(0, len(points), self.batch_size):
            if start:
                token.wait(self.batch_delay)
            token.raise_if_cancelled()
            batch = points[start:start + self.batch_size]
            for outcome in self._run_batch(executor, batch, request, weights, token):
                pool = pool.skip() if outcome is None else pool.add(outcome)
        return pool

    def _run_batch(
        self,
        executor: ThreadPoolExecutor,
        batch: Sequence[GeoPoint],
        request: SearchRequest,
        weights: WeightTriple,
        token: CancelToken,
    ) -> List[Optional[ScoredCandidate]]:
        futures: List[Future] = [
            executor.submit(self._evaluate_point, point, weights, request.wind_mode, token) for point in batch
        ]
        deadline = time.monotonic() + self.fetch_timeout
        pending = set(futures)
        while pending:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                break
            _, pending = wait(pending, timeout=min(POLL_INTERVAL, remaining))
            token.raise_if_cancelled()
        outcomes: List[Optional[ScoredCandidate]] = []
        for point, future in zip(batch, futures):
            if future in pending:
                # Left running; its result is never read.
                future.cancel()
                self._log.warning(
                    "Skipping %.5f,%.5f: no forecast within %.1fs", point.lat, point.lon, self.fetch_timeout
                )
                self._record_failure()
                outcomes.append(None)
            else:
                outcomes.append(future.result())
        return outcomes

    def _evaluate_point(
        self,
        point: GeoPoint,
        weights: WeightTriple,
        wind_mode: WindMode,
        token: CancelToken,
    ) -> Optional[ScoredCandidate]:
        if token.cancelled:
            return None
        try:
            series = self.weather_provider.fetch_forecast(point.lat, point.lon)
            observation, value = score_series(series, weights, wind_mode, self.profile, self.window)
        except FetchError as exc:
            self._log.warning("Skipping %.5f,%.5f: %s", point.lat, point.lon, exc)
            self._record_failure()
            return None
        except Exception as exc:
            self._log.error("Unexpected provider failure at %.5f,%.5f", point.lat, point.lon, exc_info=exc)
            self._record_failure()
            return None
        return ScoredCandidate(point=point, observation=observation, score=value, series=tuple(series))

    def _record_failure(self) -> None:
        if self.health is not None:
            self.health.record_provider_error(getattr(self.weather_provider, "name", "weather"))

    def _evaluate_refine(
        self,
        executor: ThreadPoolExecutor,
        request: SearchRequest,
        weights: WeightTriple,
        token: CancelToken,
    ) -> CandidatePool:
        origin = (request.center.lat, request.center.lon)
        center = origin
        radius = request.radius_km
        pool = CandidatePool()
        for iteration in range(MAX_REFINE_ITERATIONS):
            if iteration:
                token.wait(self.batch_delay)
            token.raise_if_cancelled()
            points = generate_refinement_grid(
                center[0], center[1], radius, iteration, origin=origin, max_radius_km=request.radius_km
            )
            previous_best = pool.best
            pool = self._evaluate_points(executor, points, request, weights, token, pool)
            if pool.best is not None and pool.best is not previous_best:
                center = (pool.best.lat, pool.best.lon)
                radius = max(2.0, radius * 0.6)
            else:
                radius = max(1.0, radius * 0.7)
            self._log.debug("Refinement pass %d done, next radius %.2f km", iteration, radius)
            if radius < MIN_REFINE_RADIUS_KM:
                break
        return pool


class SearchSession:
    """Runs searches one at a time; starting a new search cancels the running one.

    ``last_result`` only changes when a search completes and is still the
    newest; failed or superseded searches leave it untouched.
    """

    def __init__(self, orchestrator: SearchOrchestrator) -> None:
        self.orchestrator = orchestrator
        self.last_result: Optional[SearchResult] = None
        self._token: Optional[CancelToken] = None
        self._lock = threading.Lock()

    def search(
        self,
        center: GeoPoint,
        radius_km: float,
        weights: WeightTriple,
        wind_mode: WindMode = WindMode.CALM,
        mode: SearchMode = SearchMode.SINGLE_PASS,
    ) -> SearchResult:
        token = CancelToken()
        with self._lock:
            if self._token is not None:
                self._token.cancel()
            self._token = token
        result = self.orchestrator.search(center, radius_km, weights, wind_mode, mode, token=token)
        with self._lock:
            if self._token is not token:
                raise SearchCancelled("search was superseded")
            self.last_result = result
        return result

    def cancel(self) -> None:
        with self._lock:
            if self._token is not None:
                self._token.cancel()


__all__ = [
    "SearchMode",
    "SearchRequest",
    "SearchOrchestrator",
    "SearchSession",
    "CancelToken",
    "validate",
]
