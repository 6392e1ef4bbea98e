"""Search strategies, ranking and the fallback selector."""

from .models import (
    ScoredRestaurant,
    SearchMode,
    SearchOutcome,
    SearchQuery,
    StrategyFailure,
    StrategyTag,
)
from .ranker import dedupe_results, rank_results
from .selector import SearchStrategy, SearchStrategySelector, build_selector

__all__ = [
    "ScoredRestaurant",
    "SearchMode",
    "SearchOutcome",
    "SearchQuery",
    "StrategyFailure",
    "StrategyTag",
    "dedupe_results",
    "rank_results",
    "SearchStrategy",
    "SearchStrategySelector",
    "build_selector",
]
