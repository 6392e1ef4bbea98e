"""
Query and result types shared by the strategies, the ranker and the surfaces.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, TypeAlias, get_args

from ..errors import EmptyQueryError
from ..storage import RestaurantRecord

SearchMode: TypeAlias = Literal["semantic", "literal"]
StrategyTag: TypeAlias = Literal[
    "direct_completion",
    "embedding_similarity",
    "server_semantic",
    "text_match",
    "attribute_scan",
]

SEARCH_MODES: tuple[str, ...] = get_args(SearchMode)


@dataclass(frozen=True)
class SearchQuery:
    """One user submission: trimmed, non-empty text plus the search intent."""

    text: str
    mode: SearchMode = "semantic"

    def __post_init__(self) -> None:
        text = (self.text or "").strip()
        if not text:
            raise EmptyQueryError("Search query must not be empty.")
        if self.mode not in SEARCH_MODES:
            raise ValueError(
                f"Unknown search mode {self.mode!r}; expected one of {SEARCH_MODES}."
            )
        object.__setattr__(self, "text", text)


@dataclass(frozen=True)
class ScoredRestaurant:
    """A restaurant with its normalized [0, 1] score."""

    record: RestaurantRecord
    score: float
    # Raw cosine for embedding results; informational only.
    similarity: float | None = None

    @property
    def id(self) -> int:
        return self.record.id

    @property
    def percentage(self) -> int:
        return round(self.score * 100)

    def to_dict(self) -> dict[str, object]:
        payload = self.record.to_dict()
        payload["score"] = self.score
        if self.similarity is not None:
            payload["similarity"] = self.similarity
        return payload


@dataclass(frozen=True)
class StrategyFailure:
    """A strategy that failed before the outcome was produced."""

    strategy: StrategyTag
    reason: str


@dataclass(frozen=True)
class SearchOutcome:
    """Ranked results plus the tag of the strategy that produced them."""

    query: SearchQuery
    results: list[ScoredRestaurant]
    strategy: StrategyTag
    failures: list[StrategyFailure] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.results


def clamp_score(value: float | None, default: float = 0.0) -> float:
    """Clamp a score to [0, 1]; None and NaN fall back to *default*."""
    if value is None or value != value:
        return default
    return min(max(float(value), 0.0), 1.0)
