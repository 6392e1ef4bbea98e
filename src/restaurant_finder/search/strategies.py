"""
Retrieval strategies, one function per tier of the fallback chain.

Each strategy returns unranked ``ScoredRestaurant`` items on the [0, 1]
scale, or raises one of the fallback errors.
"""

from __future__ import annotations

from loguru import logger

from ..config import SearchSettings
from ..embeddings import MAX_CONTEXT_RECORDS, EmbeddingProvider
from ..errors import ProviderError, StrategyUnavailable
from ..storage import RestaurantStore
from ..vector_math import cosine_similarity, parse_embedding
from .models import ScoredRestaurant, SearchQuery, clamp_score

# Relevance assumed for completion items that omit a score.
DEFAULT_RELEVANCE = 0.8


def _require_provider(provider: EmbeddingProvider | None) -> EmbeddingProvider:
    if provider is None:
        raise ProviderError("No embedding provider is configured.")
    return provider


def direct_completion(
    query: SearchQuery,
    *,
    store: RestaurantStore,
    provider: EmbeddingProvider | None,
    settings: SearchSettings,
) -> list[ScoredRestaurant]:
    """Let the completion model rank a bounded restaurant context."""
    active_provider = _require_provider(provider)
    context = store.fetch_context(min(settings.context_limit, MAX_CONTEXT_RECORDS))
    items = active_provider.complete_structured(query.text, context)
    return [
        ScoredRestaurant(
            record=item.to_record(),
            score=clamp_score(item.relevance_score, default=DEFAULT_RELEVANCE),
        )
        for item in items
    ]


def embedding_similarity(
    query: SearchQuery,
    *,
    store: RestaurantStore,
    provider: EmbeddingProvider | None,
    settings: SearchSettings,
) -> list[ScoredRestaurant]:
    """Compare the query embedding against every stored restaurant embedding.

    Invalid embeddings score 0 and stay in the list. A corpus without a
    single valid embedding is treated as unprepared and raises
    ``StrategyUnavailable``.
    """
    active_provider = _require_provider(provider)
    query_embedding = active_provider.embed_query(query.text)
    candidates = store.fetch_with_embeddings()
    logger.info(f"Comparing query embedding with {len(candidates)} restaurants")

    results: list[ScoredRestaurant] = []
    valid_count = 0
    for record in candidates:
        embedding = parse_embedding(record.embedding_text, settings.embedding_dim)
        if embedding is None:
            logger.debug(f"Invalid embedding for restaurant {record.id}; scoring 0")
            results.append(ScoredRestaurant(record=record, score=0.0))
            continue
        valid_count += 1
        similarity = cosine_similarity(query_embedding, embedding)
        # Cosine [-1, 1] mapped onto [0, 1]; a 0.5 threshold means cosine >= 0.
        results.append(
            ScoredRestaurant(
                record=record,
                score=clamp_score((similarity + 1.0) / 2.0),
                similarity=similarity,
            )
        )

    if valid_count == 0:
        raise StrategyUnavailable(
            "No restaurants have valid embeddings yet. Generate embeddings first.",
            details={"candidates": len(candidates)},
        )
    return results


def server_semantic(
    query: SearchQuery,
    *,
    store: RestaurantStore,
    provider: EmbeddingProvider | None,
    settings: SearchSettings,
) -> list[ScoredRestaurant]:
    """Delegate ranking to the store's own semantic match."""
    matches = store.match_semantic(
        query.text, settings.semantic_match_threshold, settings.result_limit
    )
    return [
        ScoredRestaurant(record=match.record, score=clamp_score(match.similarity))
        for match in matches
    ]


def text_match(
    query: SearchQuery,
    *,
    store: RestaurantStore,
    provider: EmbeddingProvider | None,
    settings: SearchSettings,
) -> list[ScoredRestaurant]:
    """Substring match over name, city, address and state."""
    records = store.match_text(query.text, settings.result_limit)
    return [
        ScoredRestaurant(record=record, score=settings.nominal_score)
        for record in records
    ]


def attribute_scan(
    query: SearchQuery,
    *,
    store: RestaurantStore,
    provider: EmbeddingProvider | None,
    settings: SearchSettings,
) -> list[ScoredRestaurant]:
    """Last-resort scan of every attribute field, no scoring semantics."""
    records = store.scan_attributes(query.text, settings.result_limit)
    return [
        ScoredRestaurant(record=record, score=settings.nominal_score)
        for record in records
    ]
