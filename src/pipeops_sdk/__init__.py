"""PipeOps Python SDK."""

import logging

from .client import PipeOpsClient
from .config import ClientConfig, RetryConfig, __version__
from .errors import (
    APIError,
    DecodeError,
    NetworkError,
    PipeOpsError,
    RateLimitError,
    RequestConstructionError,
    RetryExhaustedError,
    SerializationError,
)
from .logger import Logger, NullLogger, StdlibLogger
from .retry import StatusRetryPolicy, network_errors_only

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "PipeOpsClient",
    "ClientConfig",
    "RetryConfig",
    "StatusRetryPolicy",
    "network_errors_only",
    "Logger",
    "NullLogger",
    "StdlibLogger",
    "PipeOpsError",
    "RequestConstructionError",
    "SerializationError",
    "NetworkError",
    "APIError",
    "RateLimitError",
    "DecodeError",
    "RetryExhaustedError",
    "__version__",
]
