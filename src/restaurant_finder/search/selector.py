"""
Strategy selection with an ordered fallback chain.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import partial
from typing import Callable

from loguru import logger

from ..config import SearchSettings
from ..embeddings import EmbeddingProvider
from ..errors import FALLBACK_ERRORS, SearchFailed
from ..storage import RestaurantStore
from . import strategies
from .models import (
    ScoredRestaurant,
    SearchMode,
    SearchOutcome,
    SearchQuery,
    StrategyFailure,
    StrategyTag,
)
from .ranker import rank_results


@dataclass(frozen=True)
class SearchStrategy:
    """One tier of the fallback chain."""

    tag: StrategyTag
    run: Callable[[SearchQuery], list[ScoredRestaurant]]
    # Only embedding similarity is threshold-filtered.
    min_score: float | None = None


class SearchStrategySelector:
    """Run strategies in priority order until one succeeds.

    Semantic mode tries direct completion, embedding similarity, the store's
    semantic match, text match and finally the attribute scan. Literal mode
    starts at text match. Strategies run one at a time and never twice.
    """

    def __init__(
        self,
        store: RestaurantStore,
        provider: EmbeddingProvider | None = None,
        settings: SearchSettings | None = None,
    ) -> None:
        self.store = store
        self.provider = provider
        self.settings = settings or SearchSettings()

    def _bind(
        self, fn: Callable[..., list[ScoredRestaurant]]
    ) -> Callable[[SearchQuery], list[ScoredRestaurant]]:
        return partial(
            fn, store=self.store, provider=self.provider, settings=self.settings
        )

    def chain(self, mode: SearchMode) -> list[SearchStrategy]:
        literal_chain = [
            SearchStrategy("text_match", self._bind(strategies.text_match)),
            SearchStrategy("attribute_scan", self._bind(strategies.attribute_scan)),
        ]
        if mode == "literal":
            return literal_chain
        return [
            SearchStrategy("direct_completion", self._bind(strategies.direct_completion)),
            SearchStrategy(
                "embedding_similarity",
                self._bind(strategies.embedding_similarity),
                min_score=self.settings.min_similarity,
            ),
            SearchStrategy("server_semantic", self._bind(strategies.server_semantic)),
            *literal_chain,
        ]

    def search(self, text: str, mode: SearchMode = "semantic") -> SearchOutcome:
        """Run the fallback chain for *text* and return a ranked outcome.

        Raises ``EmptyQueryError`` for blank text before any gateway call and
        ``SearchFailed`` when every strategy failed.
        """
        query = SearchQuery(text=text, mode=mode)
        return self.run(query)

    def run(self, query: SearchQuery) -> SearchOutcome:
        failures: list[StrategyFailure] = []
        for strategy in self.chain(query.mode):
            logger.info(f"Trying {strategy.tag} search for {query.text!r}")
            try:
                raw_results = strategy.run(query)
            except FALLBACK_ERRORS as exc:
                logger.warning(f"{strategy.tag} search failed: {exc}")
                failures.append(StrategyFailure(strategy=strategy.tag, reason=str(exc)))
                continue

            results = rank_results(
                raw_results,
                limit=self.settings.result_limit,
                min_score=strategy.min_score,
            )
            logger.info(f"Found {len(results)} results using {strategy.tag} search")
            return SearchOutcome(
                query=query,
                results=results,
                strategy=strategy.tag,
                failures=failures,
            )

        reason = failures[-1].reason if failures else "no search strategy available"
        raise SearchFailed(
            query.text,
            reason,
            failures=[(failure.strategy, failure.reason) for failure in failures],
        )


def build_selector(
    store: RestaurantStore, settings: SearchSettings | None = None
) -> SearchStrategySelector:
    """Create a selector, leaving AI strategies disabled when no API key is set."""
    resolved = settings or SearchSettings.from_env()
    provider: EmbeddingProvider | None = None
    try:
        provider = EmbeddingProvider(
            dim=resolved.embedding_dim, timeout=resolved.provider_timeout
        )
    except ValueError as exc:
        logger.warning(f"AI search disabled: {exc}")
    return SearchStrategySelector(store, provider=provider, settings=resolved)
