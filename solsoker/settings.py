"""Environment driven settings."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Callable, Optional, TypeVar

from .errors import ImproperlyConfigured

T = TypeVar("T")

DEFAULT_USER_AGENT = "solsoker/1.0"
DEFAULT_MET_URL = "https://api.met.no/weatherapi/locationforecast/2.0"
DEFAULT_NOMINATIM_URL = "https://nominatim.openstreetmap.org"


def env(name: str, default: Optional[str] = None) -> str:
    """Fetch environment variables while allowing explicit defaults."""

    value = os.environ.get(name, default)
    if value is None:
        raise ImproperlyConfigured(f"Environment variable {name} is required")
    return value


def _typed(name: str, default: str, cast: Callable[[str], T]) -> T:
    raw = env(name, default)
    try:
        return cast(raw)
    except ValueError as exc:
        raise ImproperlyConfigured(f"Environment variable {name} has invalid value {raw!r}") from exc


@dataclass(frozen=True)
class Settings:
    user_agent: str = DEFAULT_USER_AGENT
    met_url: str = DEFAULT_MET_URL
    nominatim_url: str = DEFAULT_NOMINATIM_URL
    forecast_timeout: float = 10.0
    geocode_timeout: float = 8.0
    batch_size: int = 10
    batch_delay: float = 0.05
    forecast_cache_ttl: float = 300.0
    geocode_cache_ttl: float = 600.0
    country: str = "no"
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls) -> "Settings":
        settings = cls(
            user_agent=env("SOLSOKER_USER_AGENT", DEFAULT_USER_AGENT),
            met_url=env("SOLSOKER_MET_URL", DEFAULT_MET_URL),
            nominatim_url=env("SOLSOKER_NOMINATIM_URL", DEFAULT_NOMINATIM_URL),
            forecast_timeout=_typed("SOLSOKER_FORECAST_TIMEOUT", "10", float),
            geocode_timeout=_typed("SOLSOKER_GEOCODE_TIMEOUT", "8", float),
            batch_size=_typed("SOLSOKER_BATCH_SIZE", "10", int),
            batch_delay=_typed("SOLSOKER_BATCH_DELAY", "0.05", float),
            forecast_cache_ttl=_typed("SOLSOKER_FORECAST_CACHE_TTL", "300", float),
            geocode_cache_ttl=_typed("SOLSOKER_GEOCODE_CACHE_TTL", "600", float),
            country=env("SOLSOKER_COUNTRY", "no"),
            log_level=env("SOLSOKER_LOG_LEVEL", "WARNING").upper(),
        )
        if settings.batch_size < 1:
            raise ImproperlyConfigured("SOLSOKER_BATCH_SIZE must be at least 1")
        if settings.forecast_timeout <= 0 or settings.geocode_timeout <= 0:
            raise ImproperlyConfigured("timeouts must be positive")
        if not isinstance(logging.getLevelName(settings.log_level), int):
            raise ImproperlyConfigured(f"SOLSOKER_LOG_LEVEL has unknown level {settings.log_level!r}")
        return settings


__all__ = ["Settings", "env"]
