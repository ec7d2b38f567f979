from typing import Optional


class RedditInsightError(Exception):
    """Base exception for application-level errors."""


class ConfigurationError(RedditInsightError):
    """Raised when the research backend cannot be used with the current setup."""


class ProviderNotFoundError(RedditInsightError):
    """Raised when a provider id cannot be resolved."""


class UpstreamError(RedditInsightError):
    """Raised when a call to the model backend itself fails."""


class MalformedResponse(RedditInsightError):
    """Raised when model output cannot be coerced into the expected shape."""

    def __init__(self, message: str, raw_text: Optional[str] = None) -> None:
        super().__init__(message)
        self.raw_text = raw_text


class CacheCorruption(RedditInsightError):
    """Raised inside the analysis cache when a stored entry cannot be used."""


class StorageError(RedditInsightError):
    """Raised when the key/value store fails to read or write."""


class ValidationError(RedditInsightError):
    """Raised when request payload fails domain-level validation."""
