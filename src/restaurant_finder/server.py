"""
FastAPI server for restaurant search.

Exposes the search fallback chain and the store connectivity probe as JSON
endpoints for the mobile client.
"""

import asyncio
from pathlib import Path

from fastapi import FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from .config import SearchSettings, resolve_db_path
from .errors import EmptyQueryError, SearchFailed, StoreUnavailable
from .search import SearchMode, SearchOutcome, build_selector
from .storage import DuckDBRestaurantStore

app = FastAPI(title="Restaurant Finder", description="AI-assisted restaurant search")


class SearchRequest(BaseModel):
    """Request model for search queries."""

    query: str
    mode: SearchMode = "semantic"
    db_path: str | None = None


def _outcome_payload(outcome: SearchOutcome) -> dict:
    return {
        "query": outcome.query.text,
        "mode": outcome.query.mode,
        "strategy": outcome.strategy,
        "results": [result.to_dict() for result in outcome.results],
        "failures": [
            {"strategy": failure.strategy, "reason": failure.reason}
            for failure in outcome.failures
        ],
    }


def _run_search(request: SearchRequest, db_path: str) -> SearchOutcome:
    settings = SearchSettings.from_env()
    store = DuckDBRestaurantStore(
        db_path, read_only=True, initialize=False, timeout=settings.store_timeout
    )
    try:
        return build_selector(store, settings).search(request.query, request.mode)
    finally:
        store.close()


@app.get("/api/status")
async def store_status(db_path: str | None = None):
    """Report whether the restaurant store is reachable."""
    resolved_db_path = resolve_db_path(db_path)
    if not Path(resolved_db_path).exists():
        return {"connected": False, "restaurants": 0}

    try:
        storage = DuckDBRestaurantStore(
            resolved_db_path, read_only=True, initialize=False
        )
    except StoreUnavailable:
        return {"connected": False, "restaurants": 0}

    try:
        if not storage.ping():
            return {"connected": False, "restaurants": 0}
        return {"connected": True, "restaurants": storage.count_restaurants()}
    except StoreUnavailable:
        return {"connected": False, "restaurants": 0}
    finally:
        storage.close()


@app.post("/api/search")
async def search_restaurants(request: SearchRequest):
    """Run the search fallback chain and return ranked restaurants."""
    if not request.query.strip():
        return JSONResponse(
            {"error": "Search query required. Please enter a search term."},
            status_code=400,
        )

    resolved_db_path = resolve_db_path(request.db_path)
    if not Path(resolved_db_path).exists():
        return JSONResponse(
            {"error": "No restaurant database found.", "query": request.query},
            status_code=404,
        )

    try:
        outcome = await asyncio.to_thread(_run_search, request, resolved_db_path)
    except EmptyQueryError as exc:
        return JSONResponse({"error": str(exc)}, status_code=400)
    except SearchFailed as exc:
        return JSONResponse(
            {"error": f"Unable to perform search: {exc.reason}", "query": exc.query},
            status_code=502,
        )
    except StoreUnavailable as exc:
        return JSONResponse(
            {"error": str(exc), "query": request.query}, status_code=502
        )

    return _outcome_payload(outcome)
