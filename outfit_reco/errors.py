"""Exception taxonomy shared by the recommendation core."""

from __future__ import annotations

from enum import Enum


class RecommendationError(RuntimeError):
    """Base class for errors raised by the recommendation core."""


class InputError(RecommendationError):
    """Raised when request parameters are missing or malformed."""


class NotFoundError(RecommendationError):
    """Raised when the requested base product is not in the catalog."""


class ProviderErrorKind(str, Enum):
    """Failure categories reported by text-generation providers."""

    AUTH = "auth"
    RATE_LIMIT = "rate_limit"
    TRUNCATED = "truncated"
    MALFORMED = "malformed"
    NETWORK = "network"


class ProviderError(RecommendationError):
    """Raised when the text-generation call fails. Always retryable.

    All fields live in ``args`` so result backends can rebuild the exception.
    """

    def __init__(
        self,
        message: str,
        kind: ProviderErrorKind | str = ProviderErrorKind.NETWORK,
        status_code: int | None = None,
    ) -> None:
        self.message = message
        self.kind = ProviderErrorKind(kind)
        self.status_code = status_code
        super().__init__(message, self.kind.value, status_code)

    def __str__(self) -> str:
        return self.message


class RationaleValidationError(RecommendationError):
    """Raised when a rationale payload does not have the expected structure."""


class CapacityError(RecommendationError):
    """Signals that the search iteration budget was consumed.

    The search engine reports this condition through its statistics instead of raising.
    """
