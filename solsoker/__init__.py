"""Find the spot with the best weather within a search radius."""
from .entities import GeoPoint, SearchResult, WeightTriple
from .errors import FetchError, GeocodeLookupError, InvalidSearchInput, NoDataError, SearchCancelled
from .scoring import WindMode
from .services.search import SearchMode, SearchOrchestrator, SearchSession

__all__ = [
    "GeoPoint",
    "SearchResult",
    "WeightTriple",
    "FetchError",
    "GeocodeLookupError",
    "InvalidSearchInput",
    "NoDataError",
    "SearchCancelled",
    "WindMode",
    "SearchMode",
    "SearchOrchestrator",
    "SearchSession",
]
