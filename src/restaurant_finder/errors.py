"""
Error hierarchy for restaurant search.

Gateway errors (store, provider, malformed replies) are raised at the
boundary where a library exception is caught and are consumed by the
strategy selector, which falls through to the next strategy. Only
``SearchFailed`` leaves the selector.
"""

from __future__ import annotations

from typing import Any


class RestaurantFinderError(Exception):
    """Base exception for all restaurant finder errors.

    Attributes:
        message: Human-readable error description
        details: Additional context about the error (optional)
        original_error: The underlying exception that caused this error (optional)
    """

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.original_error = original_error

    def __str__(self) -> str:
        base = self.message
        if self.details:
            base += f" | Details: {self.details}"
        return base


class StoreUnavailable(RestaurantFinderError):
    """The restaurant store could not be reached or rejected the statement."""


class ProviderError(RestaurantFinderError):
    """The embedding/completion service failed (network, auth, quota, timeout)."""


class MalformedResponse(RestaurantFinderError):
    """The provider replied, but the payload does not have the expected shape."""


class StrategyUnavailable(RestaurantFinderError):
    """A strategy cannot run against the current corpus or configuration."""


class EmptyQueryError(RestaurantFinderError, ValueError):
    """Raised for blank search text, before any gateway is touched."""


class SearchFailed(RestaurantFinderError):
    """Every strategy in the chain failed."""

    def __init__(
        self,
        query: str,
        reason: str,
        failures: list[tuple[str, str]] | None = None,
    ) -> None:
        super().__init__(f"Unable to search for {query!r}: {reason}")
        self.query = query
        self.reason = reason
        self.failures = list(failures or [])


# Errors that move the selector on to the next strategy.
FALLBACK_ERRORS: tuple[type[RestaurantFinderError], ...] = (
    StoreUnavailable,
    ProviderError,
    MalformedResponse,
    StrategyUnavailable,
)
