"""
Ranking helpers for strategy result sets.
"""

from __future__ import annotations

from .models import ScoredRestaurant


def dedupe_results(results: list[ScoredRestaurant]) -> list[ScoredRestaurant]:
    """Keep one entry per restaurant id, the highest-scored one.

    The surviving entry keeps the position of the first occurrence so that
    ties still follow fetch order.
    """
    best: dict[int, ScoredRestaurant] = {}
    for result in results:
        current = best.get(result.id)
        if current is None or result.score > current.score:
            best[result.id] = result
    return list(best.values())


def rank_results(
    results: list[ScoredRestaurant],
    *,
    limit: int,
    min_score: float | None = None,
) -> list[ScoredRestaurant]:
    """Dedupe, threshold, sort by score and apply limit."""
    ranked = dedupe_results(results)
    if min_score is not None:
        ranked = [result for result in ranked if result.score >= min_score]
    # sorted() is stable: equal scores keep fetch order.
    ranked = sorted(ranked, key=lambda result: -result.score)
    return ranked[: max(limit, 0)]
