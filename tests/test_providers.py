from __future__ import annotations

from datetime import datetime, timezone

import pytest
import requests
import responses

from solsoker.cache import ResponseCache
from solsoker.errors import FetchError, GeocodeLookupError, QuotaExceeded
from solsoker.providers import MetNorwayProvider, NominatimGeocoder, RequestConfig

MET_URL = "https://met.test/weatherapi/locationforecast/2.0"
NOMINATIM_URL = "https://nominatim.test"


class TimeController:
    def __init__(self) -> None:
        self.now = 0.0

    def advance(self, seconds: float) -> None:
        self.now += seconds

    def __call__(self) -> float:
        return self.now


def _timestep(time: str, temp: float, cloud: float, wind: float, **extra) -> dict:
    step = {
        "time": time,
        "data": {
            "instant": {
                "details": {
                    "air_temperature": temp,
                    "cloud_area_fraction": cloud,
                    "wind_speed": wind,
                    "wind_speed_of_gust": wind * 2,
                    "wind_from_direction": 180.0,
                }
            },
        },
    }
    step["data"].update(extra)
    return step


FORECAST = {
    "type": "Feature",
    "geometry": {"type": "Point", "coordinates": [10.75, 59.91, 20]},
    "properties": {
        "meta": {"updated_at": "2024-06-01T10:00:00Z"},
        "timeseries": [
            _timestep(
                "2024-06-01T12:00:00Z",
                21.5,
                12.0,
                3.2,
                next_1_hours={
                    "summary": {"symbol_code": "clearsky_day"},
                    "details": {"precipitation_amount": 0.0},
                },
            ),
            _timestep(
                "2024-06-01T13:00:00Z",
                22.0,
                20.0,
                3.8,
                next_6_hours={"summary": {"symbol_code": "fair_day"}, "details": {}},
            ),
        ],
    },
}

OSLO_HIT = {
    "lat": "59.9133301",
    "lon": "10.7389701",
    "display_name": "Oslo, Norge",
    "address": {"city": "Oslo", "county": "Oslo", "country": "Norge", "country_code": "no"},
}


def test_metno_forecast_normalization(requests_mock):
    provider = MetNorwayProvider(base_url=MET_URL)
    requests_mock.get(f"{MET_URL}/complete", json=FORECAST)

    steps = provider.fetch_forecast(59.912345678, 10.754321)

    assert len(steps) == 2
    first, second = steps
    assert first.time == datetime(2024, 6, 1, 12, tzinfo=timezone.utc)
    assert first.temperature == 21.5
    assert first.cloud_fraction == 12.0
    assert first.wind_gust == pytest.approx(6.4)
    assert first.symbol_code == "clearsky_day"
    assert first.precipitation_amount == 0.0
    assert second.symbol_code == "fair_day"
    assert second.precipitation_amount is None
    assert requests_mock.last_request.qs == {"lat": ["59.9123"], "lon": ["10.7543"]}


def test_metno_sends_user_agent(requests_mock):
    provider = MetNorwayProvider(base_url=MET_URL, request_config=RequestConfig(user_agent="solsoker-test/0.1"))
    requests_mock.get(f"{MET_URL}/complete", json=FORECAST)

    provider.fetch_forecast(59.91, 10.75)

    assert requests_mock.last_request.headers["User-Agent"] == "solsoker-test/0.1"


@pytest.mark.parametrize(
    "kwargs",
    [
        {"status_code": 500, "text": "server error"},
        {"status_code": 200, "text": "not json"},
        {"status_code": 200, "json": {"properties": {"timeseries": []}}},
        {"status_code": 200, "json": {"properties": {"timeseries": [{"time": "yesterday"}]}}},
        {"exc": requests.exceptions.ConnectTimeout},
        {"exc": requests.exceptions.ConnectionError},
    ],
)
def test_metno_failures_raise_fetch_error(requests_mock, kwargs):
    provider = MetNorwayProvider(base_url=MET_URL)
    requests_mock.get(f"{MET_URL}/complete", **kwargs)

    with pytest.raises(FetchError):
        provider.fetch_forecast(59.91, 10.75)


def test_metno_quota(requests_mock):
    provider = MetNorwayProvider(base_url=MET_URL)
    requests_mock.get(f"{MET_URL}/complete", status_code=429, text="slow down")

    with pytest.raises(QuotaExceeded):
        provider.fetch_forecast(59.91, 10.75)


def test_metno_cache_expiry(requests_mock):
    controller = TimeController()
    cache = ResponseCache(time_func=controller)
    provider = MetNorwayProvider(base_url=MET_URL, cache=cache, cache_ttl=300)
    requests_mock.get(f"{MET_URL}/complete", json=FORECAST)

    provider.fetch_forecast(59.91, 10.75)
    provider.fetch_forecast(59.91001, 10.75001)
    assert requests_mock.call_count == 1

    controller.advance(301)

    provider.fetch_forecast(59.91, 10.75)
    assert requests_mock.call_count == 2
    assert cache.stats()["hits"] == 1


def test_metno_does_not_cache_failures(requests_mock):
    provider = MetNorwayProvider(base_url=MET_URL, cache=ResponseCache(), cache_ttl=300)
    requests_mock.get(
        f"{MET_URL}/complete",
        [{"status_code": 503, "text": "busy"}, {"status_code": 200, "json": FORECAST}],
    )

    with pytest.raises(FetchError):
        provider.fetch_forecast(59.91, 10.75)
    assert len(provider.fetch_forecast(59.91, 10.75)) == 2


def test_nominatim_forward_search():
    geocoder = NominatimGeocoder(base_url=NOMINATIM_URL)

    with responses.RequestsMock() as rsps:
        rsps.add(
            "GET",
            f"{NOMINATIM_URL}/search",
            json=[OSLO_HIT, {"display_name": "broken"}],
            status=200,
        )
        places = geocoder.forward_search("  Oslo ", "no")
        request = rsps.calls[0].request

    assert len(places) == 1
    assert places[0].lat == pytest.approx(59.9133301)
    assert places[0].address["city"] == "Oslo"
    assert "q=Oslo" in request.url
    assert "countrycodes=no" in request.url
    assert "limit=5" in request.url
    assert "addressdetails=1" in request.url


def test_nominatim_blank_query_skips_network():
    geocoder = NominatimGeocoder(base_url=NOMINATIM_URL)

    with responses.RequestsMock() as rsps:
        assert geocoder.forward_search("   ") == []
        assert geocoder.suggest("O") == []
        assert len(rsps.calls) == 0


def test_nominatim_suggest_uses_configured_country():
    geocoder = NominatimGeocoder(base_url=NOMINATIM_URL, country="se")

    with responses.RequestsMock() as rsps:
        rsps.add("GET", f"{NOMINATIM_URL}/search", json=[OSLO_HIT], status=200)
        geocoder.suggest("Os")
        assert "countrycodes=se" in rsps.calls[0].request.url


def test_nominatim_reverse_lookup():
    geocoder = NominatimGeocoder(base_url=NOMINATIM_URL)

    with responses.RequestsMock() as rsps:
        rsps.add(
            "GET",
            f"{NOMINATIM_URL}/reverse",
            json={
                "lat": "59.95",
                "lon": "10.80",
                "display_name": "Grefsenkollen, Oslo",
                "address": {"hamlet": "Grefsenkollen", "postcode": 590},
            },
            status=200,
        )
        place = geocoder.reverse_lookup(59.95, 10.8)

    assert place.display_name == "Grefsenkollen, Oslo"
    assert place.address == {"hamlet": "Grefsenkollen", "postcode": "590"}


@pytest.mark.parametrize(
    "kwargs",
    [
        {"json": {"error": "Unable to geocode"}, "status": 200},
        {"json": {"display_name": "no coordinates"}, "status": 200},
        {"body": "bad gateway", "status": 502},
        {"body": "too many", "status": 429},
    ],
)
def test_nominatim_reverse_failures(kwargs):
    geocoder = NominatimGeocoder(base_url=NOMINATIM_URL)

    with responses.RequestsMock() as rsps:
        rsps.add("GET", f"{NOMINATIM_URL}/reverse", **kwargs)
        with pytest.raises(GeocodeLookupError):
            geocoder.reverse_lookup(59.95, 10.8)
