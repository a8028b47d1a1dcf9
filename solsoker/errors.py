from __future__ import annotations


class SolsokerError(Exception):
    """Base error for the package."""


class ImproperlyConfigured(SolsokerError):
    """Raised when the environment holds an unusable configuration."""


class InvalidSearchInput(SolsokerError, ValueError):
    """Raised before any I/O when the search request cannot be evaluated."""


class ProviderError(SolsokerError):
    """Base provider error."""


class FetchError(ProviderError):
    """A single forecast could not be fetched or parsed."""


class QuotaExceeded(FetchError):
    """Raised when a provider reports a quota/usage limit issue."""


class GeocodeLookupError(ProviderError):
    """A place name could not be resolved."""


class NoDataError(SolsokerError):
    """Every candidate of the search grid failed."""


class SearchCancelled(SolsokerError):
    """The search was superseded by a newer one."""


__all__ = [
    "SolsokerError",
    "ImproperlyConfigured",
    "InvalidSearchInput",
    "ProviderError",
    "FetchError",
    "QuotaExceeded",
    "GeocodeLookupError",
    "NoDataError",
    "SearchCancelled",
]
