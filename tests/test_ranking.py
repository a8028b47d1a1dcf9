from __future__ import annotations

import pytest

from solsoker.entities import CandidatePool, GeoPoint, Place, ScoredCandidate, WeatherObservation
from solsoker.errors import NoDataError
from solsoker.health import HealthRegistry
from solsoker.services.ranking import ResultRanker, rank

from fakes import FakeGeocoder, FakeWeather, make_series


def _candidate(lat: float, score: float, ring: int = 1) -> ScoredCandidate:
    return ScoredCandidate(
        point=GeoPoint(lat=lat, lon=10.75, ring=ring, index=0),
        observation=WeatherObservation(temp=20.0, cloud_fraction=10.0, wind_speed=2.0),
        score=score,
        series=tuple(make_series(hours=24)),
    )


def _pool(*candidates: ScoredCandidate) -> CandidatePool:
    pool = CandidatePool()
    for candidate in candidates:
        pool = pool.add(candidate)
    return pool


def test_rank_sorts_descending_and_keeps_ties_in_order():
    a, b, c, d = _candidate(1, 0.5), _candidate(2, 0.9), _candidate(3, 0.5), _candidate(4, 0.7)

    assert rank([a, b, c, d]) == [b, d, a]
    assert rank([a, b], k=3) == [b, a]


def test_pool_fold_keeps_first_of_equal_best():
    first, second = _candidate(1, 0.8), _candidate(2, 0.8)

    pool = _pool(first, second).skip()

    assert pool.best is first
    assert pool.skipped == 1
    assert pool.candidates == (first, second)


def test_assemble_names_and_ranks():
    geocoder = FakeGeocoder()
    weather = FakeWeather(series_for=lambda lat, lon: make_series(hours=60))
    ranker = ResultRanker(geocoder, weather)
    pool = _pool(_candidate(59.1, 0.2), _candidate(59.2, 0.9), _candidate(59.3, 0.6), _candidate(59.4, 0.7))

    result = ranker.assemble(pool)

    assert result.best.name == "Bygd 59.200"
    assert [(spot.rank, spot.name) for spot in result.top] == [
        (1, "Bygd 59.200"),
        (2, "Bygd 59.400"),
        (3, "Bygd 59.300"),
    ]
    assert len(result.best.forecast) == 60
    assert result.evaluated == 4
    # The best point is also top-1; its name is only looked up once.
    assert geocoder.reverse_calls == 3


def test_assemble_uses_fallback_labels_when_lookup_fails():
    health = HealthRegistry()
    ranker = ResultRanker(FakeGeocoder(fails=True), FakeWeather(), health=health)
    pool = _pool(_candidate(59.123456, 0.9), _candidate(59.2, 0.5))

    result = ranker.assemble(pool)

    assert result.best.name == "59.12346,10.75000"
    assert [spot.name for spot in result.top] == ["Spot 1", "Spot 2"]
    assert health.provider_errors("fake-geocoder") == 2


def test_assemble_falls_back_to_display_name():
    class _DisplayOnly(FakeGeocoder):
        def reverse_lookup(self, latitude, longitude):
            return Place(lat=latitude, lon=longitude, display_name="Ute på fjorden", address={})

    result = ResultRanker(_DisplayOnly(), FakeWeather()).assemble(_pool(_candidate(59.5, 0.4)))

    assert result.best.name == "Ute på fjorden"


def test_assemble_reuses_scoring_series_when_full_forecast_fails():
    calls = []

    def fail(lat, lon):
        calls.append((lat, lon))
        return True

    best = _candidate(59.5, 0.4)
    result = ResultRanker(FakeGeocoder(), FakeWeather(fails_for=fail)).assemble(_pool(best))

    assert result.best.forecast == best.series
    assert len(calls) == 1


def test_assemble_requires_a_best_candidate():
    ranker = ResultRanker(FakeGeocoder(), FakeWeather())

    with pytest.raises(NoDataError):
        ranker.assemble(CandidatePool(skipped=81))
