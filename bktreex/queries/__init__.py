from .concurrent import radius_search_concurrent
from .radius import expand_children, radius_search
from .results import AsyncSearchResult, SearchOutcome, SearchResult

__all__ = [
    "AsyncSearchResult",
    "SearchOutcome",
    "SearchResult",
    "expand_children",
    "radius_search",
    "radius_search_concurrent",
]
