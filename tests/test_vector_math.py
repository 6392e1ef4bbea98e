"""Tests for cosine similarity and embedding validation."""

import pytest

from restaurant_finder.vector_math import cosine_similarity, parse_embedding


def test_cosine_similarity_of_vector_with_itself_is_one() -> None:
    vector = [0.3, -1.2, 4.5, 0.01]
    assert cosine_similarity(vector, vector) == pytest.approx(1.0)


def test_cosine_similarity_orthogonal_and_opposite() -> None:
    assert cosine_similarity([1.0, 0.0], [0.0, 1.0]) == pytest.approx(0.0)
    assert cosine_similarity([1.0, 2.0], [-1.0, -2.0]) == pytest.approx(-1.0)


def test_cosine_similarity_degenerate_inputs_return_zero() -> None:
    assert cosine_similarity([1.0, 2.0], [1.0, 2.0, 3.0]) == 0.0
    assert cosine_similarity(None, [1.0]) == 0.0
    assert cosine_similarity([1.0], None) == 0.0
    assert cosine_similarity([], []) == 0.0


def test_cosine_similarity_zero_norm_returns_zero() -> None:
    assert cosine_similarity([0.0, 0.0, 0.0], [1.0, 2.0, 3.0]) == 0.0
    assert cosine_similarity([1.0, 2.0, 3.0], [0.0, 0.0, 0.0]) == 0.0


def test_parse_embedding_accepts_json_string_and_sequences() -> None:
    assert parse_embedding("[1, 0.5, -2, 0]", 4) == [1.0, 0.5, -2.0, 0.0]
    assert parse_embedding(" [0.1, 0.2] ", 2) == [0.1, 0.2]
    assert parse_embedding([1, 2, 3], 3) == [1.0, 2.0, 3.0]


@pytest.mark.parametrize(
    "raw",
    [
        None,
        "",
        "   ",
        "[]",
        "not-an-embedding",
        "[1, 2, 3",
        '{"values": [1, 2, 3, 4]}',
        "[1, 2, 3]",
        '[1, 2, "x", 4]',
        "[true, false, true, false]",
        "[1, 2, NaN, 4]",
        42,
    ],
)
def test_parse_embedding_rejects_invalid_values(raw) -> None:
    assert parse_embedding(raw, 4) is None
