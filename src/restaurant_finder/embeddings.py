"""
Embedding and completion provider for AI-assisted search.

Wraps the Google GenAI API for query/batch embedding and for the
structured-completion search, where the model ranks restaurants from a
context list and replies with JSON.
"""

from __future__ import annotations

import json
import os
from typing import Any

import httpx
from google.genai import Client as GenAIClient
from google.genai import errors as genai_errors
from google.genai.types import HttpOptions
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from .errors import MalformedResponse, ProviderError
from .storage import RestaurantRecord


_DEFAULT_MODEL = "gemini-embedding-001"
_DEFAULT_COMPLETION_MODEL = "gemini-2.5-flash"
_DEFAULT_DIM = 768
_DEFAULT_BATCH_SIZE = 50
_DEFAULT_TIMEOUT = 30.0

MAX_CONTEXT_RECORDS = 50

SYSTEM_PROMPT = """
You are a helpful assistant that finds restaurants.
Based on the user's query, recommend restaurants from the data you are given, and only from that data.
Always respond with a JSON array of restaurant objects with id, name, address, city, state, phone_number, and relevance_score (0-1).
Example format: [{"id": 1, "name": "Restaurant Name", "address": "123 Street", "city": "Lahore", "state": "Punjab", "phone_number": "123-456-7890", "relevance_score": 0.95}]
"""

_TRANSPORT_ERRORS = (genai_errors.APIError, httpx.HTTPError)


class CompletionItem(BaseModel):
    """A restaurant recommended by the completion model."""

    model_config = ConfigDict(extra="ignore")

    id: int
    name: str | None = None
    address: str | None = None
    city: str | None = None
    state: str | None = None
    phone_number: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    url: str | None = None
    relevance_score: float | None = Field(default=None)

    def to_record(self) -> RestaurantRecord:
        return RestaurantRecord(
            id=self.id,
            name=self.name,
            address=self.address,
            city=self.city,
            state=self.state,
            phone_number=self.phone_number,
            latitude=self.latitude,
            longitude=self.longitude,
            url=self.url,
        )


_COMPLETION_ITEMS = TypeAdapter(list[CompletionItem])


def _strip_code_fence(text: str) -> str:
    stripped = text.strip()
    if not stripped.startswith("```"):
        return stripped
    lines = stripped.splitlines()[1:]
    if lines and lines[-1].strip().startswith("```"):
        lines = lines[:-1]
    return "\n".join(lines).strip()


def build_user_prompt(query: str, context: list[RestaurantRecord]) -> str:
    """Render the user turn: the query plus the restaurant context as JSON."""
    payload = [
        {
            "id": record.id,
            "name": record.name,
            "address": record.address,
            "city": record.city,
            "state": record.state,
            "phone_number": record.phone_number,
        }
        for record in context[:MAX_CONTEXT_RECORDS]
    ]
    return (
        f'Find restaurants matching: "{query}". '
        f"Here are available restaurants: {json.dumps(payload)}"
    )


def parse_completion_items(text: str | None) -> list[CompletionItem]:
    """Parse a model reply into completion items or raise MalformedResponse."""
    if text is None or not text.strip():
        raise MalformedResponse("Completion reply was empty.")
    try:
        return _COMPLETION_ITEMS.validate_json(_strip_code_fence(text))
    except ValidationError as exc:
        raise MalformedResponse(
            "Completion reply is not a list of restaurants.",
            details={"errors": exc.error_count()},
            original_error=exc,
        ) from exc


class EmbeddingProvider:
    """Generate embeddings and structured completions via Google GenAI."""

    def __init__(
        self,
        *,
        api_key: str | None = None,
        model: str | None = None,
        completion_model: str | None = None,
        dim: int | None = None,
        batch_size: int | None = None,
        timeout: float | None = None,
        client: Any | None = None,
    ) -> None:
        self.model = model or os.getenv(
            "RESTAURANT_FINDER_EMBEDDING_MODEL", _DEFAULT_MODEL
        )
        self.completion_model = completion_model or os.getenv(
            "RESTAURANT_FINDER_COMPLETION_MODEL", _DEFAULT_COMPLETION_MODEL
        )
        self.dim = dim or int(
            os.getenv("RESTAURANT_FINDER_EMBEDDING_DIM", str(_DEFAULT_DIM))
        )
        self.batch_size = batch_size or int(
            os.getenv("RESTAURANT_FINDER_EMBEDDING_BATCH_SIZE", str(_DEFAULT_BATCH_SIZE))
        )
        self.timeout = timeout or _DEFAULT_TIMEOUT

        if client is not None:
            self._client = client
        else:
            resolved_key = api_key or os.getenv("GOOGLE_API_KEY")
            if resolved_key is None:
                raise ValueError(
                    "GOOGLE_API_KEY not found. "
                    "Provide api_key or set the environment variable."
                )
            self._client = GenAIClient(
                api_key=resolved_key,
                http_options=HttpOptions(timeout=int(self.timeout * 1000)),
            )

    def _embed(self, contents: list[str], task_type: str) -> list[list[float]]:
        try:
            result = self._client.models.embed_content(
                model=self.model,
                contents=contents,
                config={
                    "task_type": task_type,
                    "output_dimensionality": self.dim,
                },
            )
        except _TRANSPORT_ERRORS as exc:
            raise ProviderError(
                f"Embedding request failed: {exc}", original_error=exc
            ) from exc

        embeddings = [list(emb.values or []) for emb in (result.embeddings or [])]
        if len(embeddings) != len(contents):
            raise MalformedResponse(
                f"Expected {len(contents)} embeddings, got {len(embeddings)}."
            )
        for vector in embeddings:
            if len(vector) != self.dim:
                raise MalformedResponse(
                    f"Embedding has {len(vector)} dimensions, expected {self.dim}."
                )
        return embeddings

    def embed_texts(
        self,
        texts: list[str],
        *,
        task_type: str = "RETRIEVAL_DOCUMENT",
    ) -> list[list[float]]:
        """Embed a list of texts in batches.

        Returns a list of embedding vectors in the same order as *texts*.
        """
        all_embeddings: list[list[float]] = []
        for start in range(0, len(texts), self.batch_size):
            batch = texts[start : start + self.batch_size]
            all_embeddings.extend(self._embed(batch, task_type))
        return all_embeddings

    def embed_query(self, query: str) -> list[float]:
        """Embed a single query text for retrieval."""
        return self._embed([query], "RETRIEVAL_QUERY")[0]

    def complete(self, system_prompt: str, user_prompt: str) -> str:
        """Run one completion turn and return the reply text."""
        try:
            response = self._client.models.generate_content(
                model=self.completion_model,
                contents=user_prompt,
                config={
                    "system_instruction": system_prompt,
                    "response_mime_type": "application/json",
                    "temperature": 0.3,
                },
            )
        except _TRANSPORT_ERRORS as exc:
            raise ProviderError(
                f"Completion request failed: {exc}", original_error=exc
            ) from exc
        if response.text is None:
            raise MalformedResponse("Completion reply had no text.")
        return response.text

    def complete_structured(
        self, query: str, context: list[RestaurantRecord]
    ) -> list[CompletionItem]:
        """Ask the model to rank *context* for *query* and parse its JSON reply."""
        reply = self.complete(SYSTEM_PROMPT, build_user_prompt(query, context))
        return parse_completion_items(reply)
