"""Service layer - owns the search engine and serializes access to it."""

from .search_service import QueryTooLongError, SearchService, create_search_service


__all__ = [
    "QueryTooLongError",
    "SearchService",
    "create_search_service",
]
