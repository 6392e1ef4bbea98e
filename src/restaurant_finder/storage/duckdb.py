"""
DuckDB storage backend for the restaurant table.
"""

from __future__ import annotations

import json
import re
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator

import duckdb

from ..errors import StoreUnavailable
from .base import RestaurantMatch, RestaurantRecord


_CONTEXT_COLUMNS = ("id", "name", "address", "city", "state", "phone_number")
_ATTRIBUTE_COLUMNS = (
    "id",
    "name",
    "address",
    "city",
    "state",
    "phone_number",
    "latitude",
    "longitude",
    "url",
)
_FULL_COLUMNS = (*_ATTRIBUTE_COLUMNS, "embedding_text")
_TEXT_MATCH_FIELDS = ("name", "city", "address", "state")
_SCAN_FIELDS = ("name", "address", "city", "state", "phone_number", "url")


def _query_terms(query: str, max_terms: int = 8) -> list[str]:
    terms = re.findall(r"[a-zA-Z0-9_]{3,}", query.lower())
    unique_terms: list[str] = []
    for term in terms:
        if term not in unique_terms:
            unique_terms.append(term)
        if len(unique_terms) >= max_terms:
            break
    if unique_terms:
        return unique_terms
    fallback = query.strip().lower()
    return [fallback] if fallback else []


def _lowered(column: str) -> str:
    return f"lower(coalesce({column}, ''))"


def _row_to_record(row: tuple[Any, ...], columns: tuple[str, ...]) -> RestaurantRecord:
    values = dict(zip(columns, row))
    return RestaurantRecord(
        id=int(values["id"]),
        name=values.get("name"),
        address=values.get("address"),
        city=values.get("city"),
        state=values.get("state"),
        phone_number=values.get("phone_number"),
        latitude=float(values["latitude"]) if values.get("latitude") is not None else None,
        longitude=float(values["longitude"]) if values.get("longitude") is not None else None,
        url=values.get("url"),
        embedding_text=values.get("embedding_text"),
    )


class DuckDBRestaurantStore:
    """DuckDB-backed restaurant store.

    Every statement runs under ``timeout`` seconds; when the timer fires the
    connection is interrupted and the statement fails with
    ``StoreUnavailable`` like any other store error.
    """

    def __init__(
        self,
        db_path: str,
        *,
        read_only: bool = False,
        initialize: bool = True,
        timeout: float | None = 10.0,
    ) -> None:
        self.db_path = str(Path(db_path).expanduser().resolve())
        self.read_only = read_only
        self.timeout = timeout
        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        try:
            self._conn = duckdb.connect(self.db_path, read_only=read_only)
        except duckdb.Error as exc:
            raise StoreUnavailable(
                f"Could not open restaurant store at {self.db_path}: {exc}",
                original_error=exc,
            ) from exc
        if initialize and not read_only:
            self.initialize()

    def close(self) -> None:
        """Close the underlying DuckDB connection."""
        self._conn.close()

    @contextmanager
    def _statement(self, operation: str) -> Iterator[duckdb.DuckDBPyConnection]:
        timer: threading.Timer | None = None
        if self.timeout:
            timer = threading.Timer(self.timeout, self._conn.interrupt)
            timer.daemon = True
            timer.start()
        try:
            yield self._conn
        except duckdb.Error as exc:
            raise StoreUnavailable(
                f"Restaurant store failed during {operation}: {exc}",
                details={"operation": operation},
                original_error=exc,
            ) from exc
        finally:
            if timer is not None:
                timer.cancel()

    def initialize(self) -> None:
        with self._statement("initialize") as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS restaurants (
                    id INTEGER PRIMARY KEY,
                    name VARCHAR,
                    address VARCHAR,
                    city VARCHAR,
                    state VARCHAR,
                    phone_number VARCHAR,
                    latitude DOUBLE,
                    longitude DOUBLE,
                    url VARCHAR,
                    embedding_text VARCHAR
                );
                """
            )

    def ping(self) -> bool:
        try:
            with self._statement("ping") as conn:
                conn.execute("SELECT count(*) FROM restaurants LIMIT 1").fetchone()
        except StoreUnavailable:
            return False
        return True

    def count_restaurants(self) -> int:
        with self._statement("count_restaurants") as conn:
            row = conn.execute("SELECT COUNT(*) FROM restaurants").fetchone()
        return int(row[0]) if row else 0

    def upsert_restaurants(self, records: list[RestaurantRecord]) -> int:
        if not records:
            return 0
        with self._statement("upsert_restaurants") as conn:
            conn.executemany(
                """
                INSERT INTO restaurants (
                    id, name, address, city, state, phone_number,
                    latitude, longitude, url
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    name = excluded.name,
                    address = excluded.address,
                    city = excluded.city,
                    state = excluded.state,
                    phone_number = excluded.phone_number,
                    latitude = excluded.latitude,
                    longitude = excluded.longitude,
                    url = excluded.url
                """,
                [
                    (
                        record.id,
                        record.name,
                        record.address,
                        record.city,
                        record.state,
                        record.phone_number,
                        record.latitude,
                        record.longitude,
                        record.url,
                    )
                    for record in records
                ],
            )
            # A missing embedding in the payload keeps the stored one.
            embedded = [
                (record.embedding_text, record.id)
                for record in records
                if record.embedding_text is not None
            ]
            if embedded:
                conn.executemany(
                    "UPDATE restaurants SET embedding_text = ? WHERE id = ?",
                    embedded,
                )
        return len(records)

    def fetch_context(self, limit: int) -> list[RestaurantRecord]:
        sql = f"""
            SELECT {", ".join(_CONTEXT_COLUMNS)}
            FROM restaurants
            ORDER BY id ASC
            LIMIT ?
        """
        with self._statement("fetch_context") as conn:
            rows = conn.execute(sql, [max(limit, 0)]).fetchall()
        return [_row_to_record(row, _CONTEXT_COLUMNS) for row in rows]

    def fetch_with_embeddings(self) -> list[RestaurantRecord]:
        sql = f"""
            SELECT {", ".join(_FULL_COLUMNS)}
            FROM restaurants
            WHERE embedding_text IS NOT NULL
            ORDER BY id ASC
        """
        with self._statement("fetch_with_embeddings") as conn:
            rows = conn.execute(sql).fetchall()
        return [_row_to_record(row, _FULL_COLUMNS) for row in rows]

    def match_semantic(
        self, query: str, threshold: float, limit: int
    ) -> list[RestaurantMatch]:
        terms = _query_terms(query)
        if not terms:
            return []

        haystack = "lower(concat_ws(' ', {}))".format(
            ", ".join(f"coalesce({field}, '')" for field in _TEXT_MATCH_FIELDS)
        )
        score_expr = " + ".join(
            [f"CASE WHEN contains({haystack}, ?) THEN 1 ELSE 0 END"] * len(terms)
        )
        sql = f"""
            SELECT * FROM (
                SELECT
                    {", ".join(_ATTRIBUTE_COLUMNS)},
                    ({score_expr}) / ? AS similarity
                FROM restaurants
            ) ranked
            WHERE similarity >= ?
            ORDER BY similarity DESC, id ASC
            LIMIT ?
        """
        params: list[Any] = []
        params.extend(terms)
        params.append(float(len(terms)))
        params.append(threshold)
        params.append(limit)
        with self._statement("match_semantic") as conn:
            rows = conn.execute(sql, params).fetchall()

        width = len(_ATTRIBUTE_COLUMNS)
        return [
            RestaurantMatch(
                record=_row_to_record(row[:width], _ATTRIBUTE_COLUMNS),
                similarity=float(row[width]),
            )
            for row in rows
        ]

    def match_text(self, query: str, limit: int) -> list[RestaurantRecord]:
        needle = query.strip().lower()
        if not needle:
            return []

        where = " OR ".join(
            f"contains({_lowered(field)}, ?)" for field in _TEXT_MATCH_FIELDS
        )
        sql = f"""
            SELECT {", ".join(_ATTRIBUTE_COLUMNS)}
            FROM restaurants
            WHERE {where}
            ORDER BY
                CASE WHEN contains({_lowered("name")}, ?) THEN 0 ELSE 1 END,
                id ASC
            LIMIT ?
        """
        params: list[Any] = [needle] * len(_TEXT_MATCH_FIELDS)
        params.append(needle)
        params.append(limit)
        with self._statement("match_text") as conn:
            rows = conn.execute(sql, params).fetchall()
        return [_row_to_record(row, _ATTRIBUTE_COLUMNS) for row in rows]

    def scan_attributes(self, query: str, limit: int) -> list[RestaurantRecord]:
        needles: list[str] = []
        for needle in [query.strip().lower(), *_query_terms(query)]:
            if needle and needle not in needles:
                needles.append(needle)
        if not needles:
            return []

        clauses: list[str] = []
        params: list[Any] = []
        for field in _SCAN_FIELDS:
            for needle in needles:
                clauses.append(f"contains({_lowered(field)}, ?)")
                params.append(needle)
        sql = f"""
            SELECT {", ".join(_ATTRIBUTE_COLUMNS)}
            FROM restaurants
            WHERE {" OR ".join(clauses)}
            ORDER BY id ASC
            LIMIT ?
        """
        params.append(limit)
        with self._statement("scan_attributes") as conn:
            rows = conn.execute(sql, params).fetchall()
        return [_row_to_record(row, _ATTRIBUTE_COLUMNS) for row in rows]

    def list_missing_embeddings(self, limit: int | None = None) -> list[RestaurantRecord]:
        sql = f"""
            SELECT {", ".join(_ATTRIBUTE_COLUMNS)}
            FROM restaurants
            WHERE embedding_text IS NULL
            ORDER BY id ASC
        """
        params: list[Any] = []
        if limit is not None:
            sql += " LIMIT ?"
            params.append(limit)
        with self._statement("list_missing_embeddings") as conn:
            rows = conn.execute(sql, params).fetchall()
        return [_row_to_record(row, _ATTRIBUTE_COLUMNS) for row in rows]

    def store_embeddings(self, embeddings: list[tuple[int, list[float]]]) -> int:
        if not embeddings:
            return 0
        with self._statement("store_embeddings") as conn:
            conn.executemany(
                "UPDATE restaurants SET embedding_text = ? WHERE id = ?",
                [
                    (json.dumps([float(v) for v in vector]), restaurant_id)
                    for restaurant_id, vector in embeddings
                ],
            )
        return len(embeddings)
