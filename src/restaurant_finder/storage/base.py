"""
Storage interfaces and data models for the restaurant store.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class RestaurantRecord:
    """A searchable restaurant row."""

    id: int
    name: str | None = None
    address: str | None = None
    city: str | None = None
    state: str | None = None
    phone_number: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    url: str | None = None
    # Raw JSON array as stored; validated per search, never trusted.
    embedding_text: str | None = None

    @property
    def location(self) -> str | None:
        if self.city and self.state:
            return f"{self.city}, {self.state}"
        return self.city or self.state

    def embedding_source(self) -> str:
        """Text used to compute this restaurant's stored embedding."""
        parts = [self.name, self.address, self.city, self.state]
        return ", ".join(part for part in parts if part)

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "name": self.name,
            "address": self.address,
            "city": self.city,
            "state": self.state,
            "phone_number": self.phone_number,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "url": self.url,
        }


@dataclass(frozen=True)
class RestaurantMatch:
    """A restaurant pre-ranked by the store's semantic match."""

    record: RestaurantRecord
    similarity: float


class RestaurantStore(Protocol):
    """Protocol for the read and maintenance operations used by search and the CLI."""

    def initialize(self) -> None:
        """Initialize required tables."""

    def ping(self) -> bool:
        """Return True if the restaurant table can be read."""

    def count_restaurants(self) -> int:
        """Count stored restaurants."""

    def upsert_restaurants(self, records: list[RestaurantRecord]) -> int:
        """Insert or update restaurants. Return count written."""

    def fetch_context(self, limit: int) -> list[RestaurantRecord]:
        """Return lightweight restaurant rows (no embeddings) for prompt context."""

    def fetch_with_embeddings(self) -> list[RestaurantRecord]:
        """Return full rows whose embedding column is not null."""

    def match_semantic(
        self, query: str, threshold: float, limit: int
    ) -> list[RestaurantMatch]:
        """Run the store-side semantic ranking and return pre-ranked matches."""

    def match_text(self, query: str, limit: int) -> list[RestaurantRecord]:
        """Case-insensitive substring match over name/city/address/state."""

    def scan_attributes(self, query: str, limit: int) -> list[RestaurantRecord]:
        """Last-resort substring scan over every attribute field."""

    def list_missing_embeddings(self, limit: int | None = None) -> list[RestaurantRecord]:
        """Return rows that have no stored embedding yet."""

    def store_embeddings(self, embeddings: list[tuple[int, list[float]]]) -> int:
        """Bulk-store (restaurant_id, embedding) pairs. Return count written."""

    def close(self) -> None:
        """Release the underlying connection."""
