from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional, Type, TypeVar
from urllib.parse import urlencode

import requests
from requests import Response

from ..cache import ResponseCache
from ..errors import ProviderError
from ..settings import DEFAULT_USER_AGENT

T = TypeVar("T")


@dataclass
class RequestConfig:
    timeout: float = 10.0
    user_agent: str = DEFAULT_USER_AGENT


class HttpProvider:
    """Base class that adds timeouts, error mapping and caching for HTTP providers."""

    name = "http"
    error_class: Type[ProviderError] = ProviderError
    quota_error_class: Type[ProviderError] = ProviderError

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        request_config: Optional[RequestConfig] = None,
        cache: Optional[ResponseCache] = None,
        cache_ttl: float = 0.0,
    ) -> None:
        self.request_config = request_config or RequestConfig()
        self.session = session or self._build_session(self.request_config)
        self.cache = cache
        self.cache_ttl = cache_ttl
        self._log = logging.getLogger(self.__class__.__name__)

    def _build_session(self, config: RequestConfig) -> requests.Session:
        session = requests.Session()
        # met.no and Nominatim both reject anonymous clients.
        session.headers["User-Agent"] = config.user_agent
        return session

    def _handle_response(self, response: Response) -> Response:
        if response.status_code == 429:
            self._log.warning("Quota exceeded: %s", response.text)
            raise self.quota_error_class("quota exceeded")
        if response.status_code >= 400:
            self._log.error("Provider returned %s: %s", response.status_code, response.text)
            raise self.error_class(f"HTTP {response.status_code}")
        return response

    def _request(self, method: str, url: str, **kwargs) -> Response:
        try:
            response = self.session.request(
                method,
                url,
                timeout=self.request_config.timeout,
                **kwargs,
            )
        except requests.Timeout as exc:
            self._log.error("Request timed out: %s", url, exc_info=exc)
            raise self.error_class("timeout") from exc
        except requests.RequestException as exc:
            self._log.error("Request failed: %s", url, exc_info=exc)
            raise self.error_class("request failed") from exc
        return self._handle_response(response)

    def _get_json(self, url: str, params: Mapping[str, Any]) -> Any:
        response = self._request("GET", url, params=dict(params))
        try:
            return response.json()
        except ValueError as exc:
            self._log.error("Failed to decode JSON", exc_info=exc)
            raise self.error_class("invalid json") from exc

    def _cached(self, url: str, params: Mapping[str, Any], loader: Callable[[], T]) -> T:
        if self.cache is None or self.cache_ttl <= 0:
            return loader()
        key = f"{self.name}:{url}?{urlencode(sorted(params.items()))}"
        cached = self.cache.get(key)
        if cached is not None:
            return cached
        value = loader()
        self.cache.set(key, value, self.cache_ttl)
        return value


__all__ = ["HttpProvider", "RequestConfig"]
