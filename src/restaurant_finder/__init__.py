"""
Restaurant Finder - AI-assisted restaurant search with graceful fallbacks.

This package searches a DuckDB restaurant table for a free-text query. In
semantic mode it first lets a Google Gemini model rank the restaurants,
then compares query and restaurant embeddings, then falls back to the
store's own semantic match and finally to plain text matching. Literal mode
goes straight to text matching.

Example usage:
    >>> from restaurant_finder import DuckDBRestaurantStore, build_selector
    >>> store = DuckDBRestaurantStore("restaurants.duckdb")
    >>> outcome = build_selector(store).search("spicy food")
    >>> [result.record.name for result in outcome.results]
"""

from .config import SearchSettings, resolve_db_path
from .embeddings import CompletionItem, EmbeddingProvider
from .errors import (
    EmptyQueryError,
    MalformedResponse,
    ProviderError,
    RestaurantFinderError,
    SearchFailed,
    StoreUnavailable,
    StrategyUnavailable,
)
from .search import (
    ScoredRestaurant,
    SearchOutcome,
    SearchQuery,
    SearchStrategySelector,
    build_selector,
    rank_results,
)
from .storage import DuckDBRestaurantStore, RestaurantRecord, RestaurantStore
from .vector_math import cosine_similarity, parse_embedding

__all__ = [
    # Configuration
    "SearchSettings",
    "resolve_db_path",
    # Provider
    "CompletionItem",
    "EmbeddingProvider",
    # Errors
    "EmptyQueryError",
    "MalformedResponse",
    "ProviderError",
    "RestaurantFinderError",
    "SearchFailed",
    "StoreUnavailable",
    "StrategyUnavailable",
    # Search
    "ScoredRestaurant",
    "SearchOutcome",
    "SearchQuery",
    "SearchStrategySelector",
    "build_selector",
    "rank_results",
    # Storage
    "DuckDBRestaurantStore",
    "RestaurantRecord",
    "RestaurantStore",
    # Vector math
    "cosine_similarity",
    "parse_embedding",
]
