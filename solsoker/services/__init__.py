from .ranking import ResultRanker, rank
from .search import CancelToken, SearchMode, SearchOrchestrator, SearchRequest, SearchSession

__all__ = [
    "ResultRanker",
    "rank",
    "CancelToken",
    "SearchMode",
    "SearchOrchestrator",
    "SearchRequest",
    "SearchSession",
]
