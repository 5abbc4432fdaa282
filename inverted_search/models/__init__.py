"""Data models for inverted search."""

from .response import SearchResult, SearchResponse
from .request import QueryOptions

__all__ = [
    "SearchResult",
    "SearchResponse",
    "QueryOptions",
]
