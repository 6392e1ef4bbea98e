"""
Configuration helpers for the restaurant store and search tuning.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path


DEFAULT_DB_PATH = "~/.restaurant_finder/restaurants.duckdb"
ENV_DB_PATH = "RESTAURANT_FINDER_DB_PATH"

_ENV_PREFIX = "RESTAURANT_FINDER_"


def resolve_db_path(override_path: str | None = None) -> str:
    """
    Resolve the DuckDB path from CLI override, env var, or default.

    Precedence:
    1) explicit override_path
    2) RESTAURANT_FINDER_DB_PATH
    3) default path
    """
    raw_path = override_path or os.getenv(ENV_DB_PATH) or DEFAULT_DB_PATH
    resolved = Path(raw_path).expanduser().resolve()
    resolved.parent.mkdir(parents=True, exist_ok=True)
    return str(resolved)


def _env_int(name: str, default: int) -> int:
    return int(os.getenv(_ENV_PREFIX + name, str(default)))


def _env_float(name: str, default: float) -> float:
    return float(os.getenv(_ENV_PREFIX + name, str(default)))


@dataclass(frozen=True)
class SearchSettings:
    """Tuning knobs for the strategy chain.

    ``result_limit`` caps every outcome. ``min_similarity`` is applied to
    embedding-similarity scores only, on the normalized [0, 1] scale where
    a score is ``(cosine + 1) / 2``, so the default 0.5 keeps every candidate
    with cosine >= 0. Raise it (0.75 keeps cosine >= 0.5) for stricter matches.
    ``semantic_match_threshold`` is passed to the store's own semantic
    match. Timeouts are in seconds.
    """

    result_limit: int = 20
    context_limit: int = 50
    min_similarity: float = 0.5
    semantic_match_threshold: float = 0.6
    embedding_dim: int = 768
    nominal_score: float = 0.8
    store_timeout: float = 10.0
    provider_timeout: float = 30.0

    @classmethod
    def from_env(cls) -> SearchSettings:
        """Build settings from ``RESTAURANT_FINDER_*`` environment variables."""
        defaults = cls()
        return cls(
            result_limit=_env_int("RESULT_LIMIT", defaults.result_limit),
            context_limit=_env_int("CONTEXT_LIMIT", defaults.context_limit),
            min_similarity=_env_float("MIN_SIMILARITY", defaults.min_similarity),
            semantic_match_threshold=_env_float(
                "SEMANTIC_MATCH_THRESHOLD", defaults.semantic_match_threshold
            ),
            embedding_dim=_env_int("EMBEDDING_DIM", defaults.embedding_dim),
            nominal_score=_env_float("NOMINAL_SCORE", defaults.nominal_score),
            store_timeout=_env_float("STORE_TIMEOUT", defaults.store_timeout),
            provider_timeout=_env_float("PROVIDER_TIMEOUT", defaults.provider_timeout),
        )
