from __future__ import annotations

import json

import pytest

from solsoker.__main__ import main
from solsoker.app import Application, get_application
from solsoker.cache import ResponseCache
from solsoker.entities import Place
from solsoker.health import HealthRegistry
from solsoker.services.search import SearchOrchestrator, SearchSession
from solsoker.settings import Settings

from fakes import FakeGeocoder, FakeWeather, make_series

DROBAK = Place(
    lat=59.66,
    lon=10.63,
    display_name="Drøbak, Frogn, Akershus, Norge",
    address={"town": "Drøbak", "municipality": "Frogn"},
)


@pytest.fixture
def app() -> Application:
    weather = FakeWeather(series_for=lambda lat, lon: make_series(cloud=0.0 if lat > 59.66 else 80.0))
    geocoder = FakeGeocoder(places=[DROBAK])
    orchestrator = SearchOrchestrator(weather, geocoder, batch_delay=0)
    return Application(
        settings=Settings(),
        weather=weather,
        geocoder=geocoder,
        session=SearchSession(orchestrator),
        cache=ResponseCache(),
        health=HealthRegistry(),
    )


def test_search_by_place_prints_report(app, capsys):
    code = main(["--place", "Drøbak", "--radius", "5"], app=app)

    out = capsys.readouterr().out
    assert code == 0
    assert "Beste sted: Bygd" in out
    assert "Topp 3:" in out
    assert "81 punkter vurdert, 0 hoppet over" in out
    assert (59.66, 10.63) in app.weather.coordinates


def test_search_by_coordinates_as_json(app, capsys):
    code = main(["--lat", "59.7", "--lon", "10.6", "--sun", "1", "--temp", "0", "--json"], app=app)

    payload = json.loads(capsys.readouterr().out)
    assert code == 0
    assert payload["best"]["cloud"] == 0.0
    assert len(payload["top"]) == 3
    assert payload["evaluated"] == 81


def test_refine_and_storm_flags(app, capsys):
    code = main(["--lat", "59.7", "--lon", "10.6", "--storm", "--refine", "--wind", "1"], app=app)

    assert code == 0
    assert "Beste sted" in capsys.readouterr().out


@pytest.mark.parametrize(
    "argv, message",
    [
        (["--lat", "59.7", "--lon", "10.6", "--radius", "150"], "--radius"),
        (["--lat", "59.7"], "--lat and --lon"),
        (["--lat", "59.7", "--lon", "10.6", "--sun", "0", "--temp", "0"], "weight"),
    ],
)
def test_invalid_input_reports_one_message(app, capsys, argv, message):
    code = main(argv, app=app)

    captured = capsys.readouterr()
    assert code == 1
    assert message in captured.err
    assert captured.out == ""
    assert app.weather.calls == 0


def test_unknown_place(capsys):
    geocoder = FakeGeocoder()
    app = Application(
        settings=Settings(),
        weather=FakeWeather(),
        geocoder=geocoder,
        session=SearchSession(SearchOrchestrator(FakeWeather(), geocoder, batch_delay=0)),
        cache=ResponseCache(),
        health=HealthRegistry(),
    )

    code = main(["--place", "Atlantis"], app=app)

    assert code == 1
    assert "Fant ikke stedet: Atlantis" in capsys.readouterr().err


def test_bad_configuration_exits_early(monkeypatch, capsys):
    monkeypatch.setenv("SOLSOKER_BATCH_SIZE", "0")
    get_application.cache_clear()

    code = main(["--lat", "59.7", "--lon", "10.6"])

    assert code == 2
    assert "SOLSOKER_BATCH_SIZE" in capsys.readouterr().err


def test_unknown_log_level_exits_early(monkeypatch, capsys):
    monkeypatch.setenv("SOLSOKER_LOG_LEVEL", "loud")
    get_application.cache_clear()

    code = main(["--lat", "59.7", "--lon", "10.6"])

    assert code == 2
    assert "SOLSOKER_LOG_LEVEL" in capsys.readouterr().err
