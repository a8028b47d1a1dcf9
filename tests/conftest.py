from __future__ import annotations

import pytest

from requests_mock import Mocker

from fakes import FakeGeocoder, FakeWeather


@pytest.fixture
def requests_mock():
    with Mocker() as mock:
        yield mock


@pytest.fixture
def weather() -> FakeWeather:
    return FakeWeather()


@pytest.fixture
def geocoder() -> FakeGeocoder:
    return FakeGeocoder()
