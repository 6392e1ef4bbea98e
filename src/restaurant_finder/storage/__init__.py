"""Storage backends for the restaurant finder."""

from .base import RestaurantMatch, RestaurantRecord, RestaurantStore
from .duckdb import DuckDBRestaurantStore

__all__ = [
    "RestaurantMatch",
    "RestaurantRecord",
    "RestaurantStore",
    "DuckDBRestaurantStore",
]
