from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from restaurant_finder.embeddings import CompletionItem
from restaurant_finder.storage import DuckDBRestaurantStore, RestaurantMatch, RestaurantRecord


class FakeStore:
    """In-memory store double that records every call."""

    def __init__(
        self,
        *,
        context: list[RestaurantRecord] | None = None,
        embedded: list[RestaurantRecord] | None = None,
        semantic: list[RestaurantMatch] | None = None,
        text: list[RestaurantRecord] | None = None,
        scan: list[RestaurantRecord] | None = None,
        errors: dict[str, Exception] | None = None,
    ) -> None:
        self.context = context or []
        self.embedded = embedded or []
        self.semantic = semantic or []
        self.text = text or []
        self.scan = scan or []
        self.errors = errors or {}
        self.calls: list[tuple[str, tuple[Any, ...]]] = []

    def _call(self, name: str, *args: Any) -> None:
        self.calls.append((name, args))
        if name in self.errors:
            raise self.errors[name]

    @property
    def call_names(self) -> list[str]:
        return [name for name, _ in self.calls]

    def ping(self) -> bool:
        return "ping" not in self.errors

    def fetch_context(self, limit: int) -> list[RestaurantRecord]:
        self._call("fetch_context", limit)
        return self.context[:limit]

    def fetch_with_embeddings(self) -> list[RestaurantRecord]:
        self._call("fetch_with_embeddings")
        return list(self.embedded)

    def match_semantic(self, query: str, threshold: float, limit: int) -> list[RestaurantMatch]:
        self._call("match_semantic", query, threshold, limit)
        return self.semantic[:limit]

    def match_text(self, query: str, limit: int) -> list[RestaurantRecord]:
        self._call("match_text", query, limit)
        return self.text[:limit]

    def scan_attributes(self, query: str, limit: int) -> list[RestaurantRecord]:
        self._call("scan_attributes", query, limit)
        return self.scan[:limit]


class FakeProvider:
    """Embedding/completion double with scripted replies."""

    def __init__(
        self,
        *,
        query_embedding: list[float] | None = None,
        completion: list[CompletionItem] | None = None,
        errors: dict[str, Exception] | None = None,
    ) -> None:
        self.query_embedding = query_embedding or []
        self.completion = completion or []
        self.errors = errors or {}
        self.calls: list[str] = []

    def embed_query(self, query: str) -> list[float]:
        self.calls.append("embed_query")
        if "embed_query" in self.errors:
            raise self.errors["embed_query"]
        return list(self.query_embedding)

    def complete_structured(
        self, query: str, context: list[RestaurantRecord]
    ) -> list[CompletionItem]:
        self.calls.append("complete_structured")
        if "complete_structured" in self.errors:
            raise self.errors["complete_structured"]
        return list(self.completion)


SAMPLE_RESTAURANTS: list[dict[str, Any]] = [
    {
        "id": 1,
        "name": "Spice Garden",
        "address": "12 Food Street",
        "city": "Lahore",
        "state": "Punjab",
        "phone_number": "042-111-222",
        "latitude": 31.5204,
        "longitude": 74.3587,
        "url": "https://spicegarden.example.com",
        "embedding_text": "[1.0, 0.0, 0.0, 0.0]",
    },
    {
        "id": 2,
        "name": "Karachi Grill",
        "address": "Clifton Block 5",
        "city": "Karachi",
        "state": "Sindh",
        "phone_number": "021-333-444",
    },
    {
        "id": 3,
        "name": "Lahore Tikka House",
        "address": "MM Alam Road",
        "city": "Gulberg",
        "state": "Punjab",
        "embedding_text": "[0.0, 1.0, 0.0, 0.0]",
    },
    {
        "id": 4,
        "name": "Cafe Aylanto",
        "address": "Lahore Cantt",
        "city": "Lahore",
        "state": "Punjab",
    },
]


@pytest.fixture()
def sample_records() -> list[RestaurantRecord]:
    return [RestaurantRecord(**row) for row in SAMPLE_RESTAURANTS]


@pytest.fixture()
def restaurant_store(tmp_path: Path, sample_records):
    store = DuckDBRestaurantStore(str(tmp_path / "restaurants.duckdb"))
    store.upsert_restaurants(sample_records)
    yield store
    store.close()


@pytest.fixture()
def restaurants_file(tmp_path: Path) -> Path:
    path = tmp_path / "restaurants.json"
    path.write_text(json.dumps(SAMPLE_RESTAURANTS))
    return path


@pytest.fixture()
def db_path(tmp_path: Path, sample_records) -> str:
    """A populated database file with no connection left open."""
    path = str(tmp_path / "restaurants.duckdb")
    store = DuckDBRestaurantStore(path)
    store.upsert_restaurants(sample_records)
    store.close()
    return path
