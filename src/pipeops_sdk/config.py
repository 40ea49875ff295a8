"""Configuration objects for the PipeOps Python SDK."""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from typing import Optional

import httpx

from .retry import RetryPolicy, StatusRetryPolicy

__version__ = "1.0.0"

DEFAULT_BASE_URL = "https://api.pipeops.io"
DEFAULT_USER_AGENT = f"pipeops-python-sdk/{__version__}"


@dataclass(frozen=True)
class RetryConfig:
    max_retries: int = 3
    wait_min: float = 0.1
    wait_max: float = 5.0
    jitter: float = 0.1
    policy: RetryPolicy = field(default_factory=StatusRetryPolicy)

    def __post_init__(self) -> None:
        if self.max_retries < 0:
            raise ValueError("max retries must be non-negative")
        if self.wait_min < 0:
            raise ValueError("retry wait_min must be non-negative")
        if self.wait_min > self.wait_max:
            raise ValueError(f"retry wait_min ({self.wait_min}) exceeds wait_max ({self.wait_max})")
        if not 0 <= self.jitter < 1:
            raise ValueError("retry jitter must be within [0, 1)")


@dataclass(frozen=True)
class ClientConfig:
    base_url: str = DEFAULT_BASE_URL
    token: Optional[str] = None
    user_agent: str = DEFAULT_USER_AGENT
    timeout: float = 30.0
    connect_timeout: float = 10.0
    response_header_timeout: float = 30.0
    max_connections: int = 100
    max_keepalive_connections: int = 100
    keepalive_expiry: float = 90.0
    max_redirects: int = 10
    http2: bool = False
    retry: RetryConfig = field(default_factory=RetryConfig)

    def __post_init__(self) -> None:
        object.__setattr__(self, "base_url", normalize_base_url(self.base_url or DEFAULT_BASE_URL))
        if self.timeout <= 0:
            raise ValueError("timeout must be positive")
        if not self.user_agent:
            raise ValueError("user agent cannot be empty")

    def with_max_retries(self, max_retries: int) -> "ClientConfig":
        return replace(self, retry=replace(self.retry, max_retries=max_retries))

    def with_timeout(self, timeout: float) -> "ClientConfig":
        return replace(self, timeout=timeout)

    @classmethod
    def from_env(cls) -> "ClientConfig":
        retry = RetryConfig(
            max_retries=int(os.environ.get("PIPEOPS_MAX_RETRIES", "3")),
            wait_min=float(os.environ.get("PIPEOPS_RETRY_WAIT_MIN", "0.1")),
            wait_max=float(os.environ.get("PIPEOPS_RETRY_WAIT_MAX", "5.0")),
        )
        http2 = os.environ.get("PIPEOPS_HTTP2", "").strip().lower() in {"1", "true", "yes", "on"}
        return cls(
            base_url=os.environ.get("PIPEOPS_BASE_URL", DEFAULT_BASE_URL),
            token=os.environ.get("PIPEOPS_TOKEN") or None,
            user_agent=os.environ.get("PIPEOPS_USER_AGENT", DEFAULT_USER_AGENT),
            timeout=float(os.environ.get("PIPEOPS_TIMEOUT", "30")),
            http2=http2,
            retry=retry,
        )


def normalize_base_url(base_url: str) -> str:
    """Validate ``base_url`` and make sure its path ends with a slash."""
    try:
        url = httpx.URL(base_url)
    except (httpx.InvalidURL, TypeError) as exc:
        raise ValueError(f"invalid base URL {base_url!r}: {exc}") from exc
    if url.scheme not in ("http", "https") or not url.host:
        raise ValueError(f"invalid base URL {base_url!r}")
    path = url.path if url.path.endswith("/") else url.path + "/"
    return str(url.copy_with(path=path))


__all__ = ["ClientConfig", "RetryConfig", "DEFAULT_BASE_URL", "DEFAULT_USER_AGENT", "normalize_base_url"]
