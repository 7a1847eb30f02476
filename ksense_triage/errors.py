"""
Failure taxonomy for calls against the assessment API.

Transient failures (network, 429, 5xx) are retried by the RetryPolicy.
Everything else surfaces to the caller on the first occurrence.
"""

from __future__ import annotations

from typing import Optional


class AssessmentError(RuntimeError):
    """Base class for every failure raised by ksense_triage."""


class ConfigurationError(AssessmentError):
    """Raised when an AssessmentConfig is built with unusable values."""


class TransientError(AssessmentError):
    """A failure that may succeed if the same call is repeated."""


class TransientNetworkError(TransientError):
    """Connection refused, DNS failure, timeout and friends."""


class RateLimitError(TransientError):
    """The server answered 429 Too Many Requests."""


class ServerError(TransientError):
    """The server answered with a 5xx status."""

    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code


class ClientRequestError(AssessmentError):
    """Any non-retryable HTTP status (400, 401, 404, ...)."""

    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code


class TransportError(AssessmentError):
    """A requests failure that repeating will not fix (bad URL, redirect loop, ...)."""


class ResponseParseError(AssessmentError):
    """The body was not JSON, or not the shape we expect."""


class RetryExhaustedError(AssessmentError):
    """Raised once a retryable failure has used up every attempt."""

    def __init__(self, description: str, attempts: int, last_error: Optional[Exception]):
        super().__init__(
            f"{description} failed after {attempts} attempts: {last_error}"
        )
        self.attempts = attempts
        self.last_error = last_error


def is_retryable(exc: BaseException) -> bool:
    return isinstance(exc, TransientError)
