"""Exception types raised by the PipeOps SDK."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

import httpx


class PipeOpsError(Exception):
    """Base class for every error raised by the SDK."""


class RequestConstructionError(PipeOpsError):
    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"failed to parse URL {path!r}: {reason}")
        self.path = path


class SerializationError(PipeOpsError):
    """The request body could not be encoded as JSON."""


class NetworkError(PipeOpsError):
    """A network failure the retry policy declined to retry."""

    def __init__(self, message: str, cause: BaseException) -> None:
        super().__init__(message)
        self.cause = cause


class APIError(PipeOpsError):
    """Non-2xx response from the API.

    ``status`` and ``message`` come from the ``{"status", "message"}`` error
    envelope when the body carries one.
    """

    def __init__(
        self,
        response: httpx.Response,
        message: str,
        status: str = "",
    ) -> None:
        self.response = response
        self.status_code = response.status_code
        self.status = status
        self.message = message
        super().__init__(str(self))

    def __str__(self) -> str:
        request = self.response.request
        return f"{request.method} {request.url}: {self.status_code} {self.message}"


class RateLimitError(APIError):
    def __init__(
        self,
        response: httpx.Response,
        retry_after: float,
        limit: int = 0,
        remaining: int = 0,
        reset: Optional[datetime] = None,
    ) -> None:
        self.retry_after = retry_after
        self.limit = limit
        self.remaining = remaining
        self.reset = reset
        self.attempts = 1
        super().__init__(response, "rate limit exceeded")

    def __str__(self) -> str:
        return (
            f"rate limit exceeded: retry after {self.retry_after:g}s "
            f"(limit: {self.limit}, remaining: {self.remaining})"
        )


class DecodeError(PipeOpsError):
    """A successful response whose body does not match the expected shape."""

    def __init__(self, response: httpx.Response, cause: BaseException) -> None:
        super().__init__(f"failed to decode response from {response.request.url}: {cause}")
        self.response = response
        self.cause = cause


class RetryExhaustedError(PipeOpsError):
    def __init__(self, attempts: int, cause: BaseException) -> None:
        super().__init__(f"request failed after {attempts} attempts: {cause}")
        self.attempts = attempts
        self.cause = cause

    @property
    def status_code(self) -> Optional[int]:
        return getattr(self.cause, "status_code", None)


__all__ = [
    "PipeOpsError",
    "RequestConstructionError",
    "SerializationError",
    "NetworkError",
    "APIError",
    "RateLimitError",
    "DecodeError",
    "RetryExhaustedError",
]
