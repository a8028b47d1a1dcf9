"""Wiring of providers, cache and search services."""
from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Dict, Optional

from .cache import ResponseCache
from .health import HealthRegistry
from .providers.base import RequestConfig
from .providers.metno import MetNorwayProvider
from .providers.nominatim import NominatimGeocoder
from .services.search import SearchOrchestrator, SearchSession
from .settings import Settings


@dataclass
class Application:
    settings: Settings
    weather: MetNorwayProvider
    geocoder: NominatimGeocoder
    session: SearchSession
    cache: ResponseCache
    health: HealthRegistry

    def health_snapshot(self) -> Dict[str, object]:
        self.health.set_cache_stats(self.cache.stats())
        return self.health.snapshot()


def build_application(settings: Optional[Settings] = None) -> Application:
    settings = settings or Settings.from_env()
    cache = ResponseCache()
    health = HealthRegistry()
    weather = MetNorwayProvider(
        base_url=settings.met_url,
        request_config=RequestConfig(timeout=settings.forecast_timeout, user_agent=settings.user_agent),
        cache=cache,
        cache_ttl=settings.forecast_cache_ttl,
    )
    geocoder = NominatimGeocoder(
        base_url=settings.nominatim_url,
        country=settings.country,
        request_config=RequestConfig(timeout=settings.geocode_timeout, user_agent=settings.user_agent),
        cache=cache,
        cache_ttl=settings.geocode_cache_ttl,
    )
    orchestrator = SearchOrchestrator(
        weather,
        geocoder,
        batch_size=settings.batch_size,
        batch_delay=settings.batch_delay,
        fetch_timeout=settings.forecast_timeout,
        health=health,
    )
    return Application(
        settings=settings,
        weather=weather,
        geocoder=geocoder,
        session=SearchSession(orchestrator),
        cache=cache,
        health=health,
    )


@lru_cache(maxsize=1)
def get_application() -> Application:
    return build_application()


__all__ = ["Application", "build_application", "get_application"]
