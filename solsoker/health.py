"""In-memory registry of provider failures and cache statistics.

Searches tolerate single failed fetches and lookups; the registry keeps a
count of them per provider so a caller can tell a flaky upstream from a
quiet one.
"""
from __future__ import annotations

from dataclasses import dataclass
from threading import Lock
from typing import Dict, Mapping, Optional


@dataclass(frozen=True)
class CacheStats:
    hits: int = 0
    misses: int = 0
    keys: int = 0

    def as_dict(self) -> Dict[str, int]:
        return {"hits": self.hits, "misses": self.misses, "keys": self.keys}


class HealthRegistry:
    """Stores provider error counters and cache stats."""

    def __init__(self) -> None:
        self._provider_errors: Dict[str, int] = {}
        self._cache_stats: CacheStats = CacheStats()
        self._lock = Lock()

    # -- Provider errors ----------------------------------------------------
    def record_provider_error(self, provider: str, increment: int = 1) -> None:
        if not provider:
            raise ValueError("provider must be provided")
        if increment <= 0:
            raise ValueError("increment must be positive")
        with self._lock:
            self._provider_errors[provider] = (
                self._provider_errors.get(provider, 0) + increment
            )

    def provider_errors(self, provider: str) -> int:
        with self._lock:
            return self._provider_errors.get(provider, 0)

    def drain_provider_errors(self) -> Dict[str, int]:
        with self._lock:
            snapshot = dict(self._provider_errors)
            self._provider_errors.clear()
            return snapshot

    # -- Cache stats --------------------------------------------------------
    def set_cache_stats(self, stats: Optional[Mapping[str, int]]) -> None:
        if not stats:
            self._cache_stats = CacheStats()
            return
        self._cache_stats = CacheStats(
            hits=int(stats.get("hits", 0)),
            misses=int(stats.get("misses", 0)),
            keys=int(stats.get("keys", 0)),
        )

    # -- Snapshot -----------------------------------------------------------
    def snapshot(self) -> Dict[str, object]:
        with self._lock:
            providers = dict(self._provider_errors)
            cache = self._cache_stats.as_dict()
        return {"providers": providers, "cache": cache}


__all__ = ["CacheStats", "HealthRegistry"]
