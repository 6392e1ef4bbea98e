"""
Vector helpers for client-side embedding comparison.
"""

from __future__ import annotations

import json
import math
from typing import Any, Sequence


def cosine_similarity(
    vec_a: Sequence[float] | None, vec_b: Sequence[float] | None
) -> float:
    """Return the cosine similarity of two equal-length vectors.

    Missing vectors, a length mismatch, empty vectors and zero norms all
    yield 0.0 instead of raising.
    """
    if vec_a is None or vec_b is None or len(vec_a) != len(vec_b) or not vec_a:
        return 0.0

    dot_product = 0.0
    norm_a = 0.0
    norm_b = 0.0
    for a, b in zip(vec_a, vec_b):
        dot_product += a * b
        norm_a += a * a
        norm_b += b * b

    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0
    return dot_product / (math.sqrt(norm_a) * math.sqrt(norm_b))


def parse_embedding(raw: Any, dim: int) -> list[float] | None:
    """Validate a stored embedding and return it as floats.

    *raw* is either the JSON array string kept in the store or an already
    decoded sequence. Returns None when the value is not an array of exactly
    *dim* finite numbers.
    """
    if raw is None:
        return None
    if isinstance(raw, str):
        text = raw.strip()
        if not text.startswith("[") or not text.endswith("]") or text == "[]":
            return None
        try:
            raw = json.loads(text)
        except ValueError:
            return None
    if not isinstance(raw, (list, tuple)) or len(raw) != dim:
        return None

    values: list[float] = []
    for item in raw:
        # bool is an int subclass; a list of flags is not an embedding.
        if isinstance(item, bool) or not isinstance(item, (int, float)):
            return None
        value = float(item)
        if not math.isfinite(value):
            return None
        values.append(value)
    return values
