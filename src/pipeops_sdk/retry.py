"""Retry policies, backoff and the attempt loop."""

from __future__ import annotations

import asyncio
import random
from dataclasses import dataclass
from typing import TYPE_CHECKING, Awaitable, Callable, FrozenSet, Optional

import httpx

from .errors import NetworkError, RetryExhaustedError
from .logger import Logger, NullLogger, safe_url

if TYPE_CHECKING:
    from .config import RetryConfig

# (response, network error) -> should retry
RetryPolicy = Callable[[Optional[httpx.Response], Optional[BaseException]], bool]


@dataclass(frozen=True)
class StatusRetryPolicy:
    """Retries network failures, the listed statuses and (optionally) 5xx."""

    statuses: FrozenSet[int] = frozenset({0, 429})
    retry_server_errors: bool = True
    retry_network_errors: bool = True

    def __call__(self, response: Optional[httpx.Response], error: Optional[BaseException]) -> bool:
        if error is not None or response is None:
            return self.retry_network_errors
        status = response.status_code
        if status in self.statuses:
            return True
        return self.retry_server_errors and status >= 500


def network_errors_only(response: Optional[httpx.Response], error: Optional[BaseException]) -> bool:
    return error is not None


def backoff_bound(attempt: int, wait_min: float, wait_max: float) -> float:
    """Exponential backoff before jitter: ``wait_min * 2**(attempt - 1)`` capped at ``wait_max``."""
    if attempt < 1:
        return 0.0
    return min(wait_min * (2 ** (attempt - 1)), wait_max)


def compute_backoff(
    attempt: int,
    wait_min: float,
    wait_max: float,
    jitter: float = 0.1,
    rng: Optional[random.Random] = None,
) -> float:
    bound = backoff_bound(attempt, wait_min, wait_max)
    uniform = (rng or random).uniform(-1.0, 1.0)
    return max(0.0, bound + bound * jitter * uniform)


@dataclass
class RetryOutcome:
    response: httpx.Response
    attempts: int
    exhausted: bool = False


AttemptFn = Callable[[int], Awaitable[httpx.Response]]


class RetryController:
    """Runs one call's attempts under a :class:`RetryConfig`.

    The decoded result is not its concern: a response the policy does not
    want retried is handed back untouched, as is the last retryable response
    once the budget is spent (``exhausted=True``). Network failures left over
    after the budget raise :class:`RetryExhaustedError`.
    """

    def __init__(
        self,
        config: "RetryConfig",
        logger: Optional[Logger] = None,
        *,
        release: Optional[Callable[[httpx.Response], Awaitable[None]]] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        rng: Optional[random.Random] = None,
    ) -> None:
        self._config = config
        self._logger = logger or NullLogger()
        self._release = release or _close_response
        self._sleep = sleep
        self._rng = rng

    @property
    def config(self) -> "RetryConfig":
        return self._config

    def backoff(self, attempt: int) -> float:
        cfg = self._config
        return compute_backoff(attempt, cfg.wait_min, cfg.wait_max, cfg.jitter, self._rng)

    async def run(self, attempt_fn: AttemptFn, *, method: str = "", url: object = "") -> RetryOutcome:
        max_retries = self._config.max_retries
        response: Optional[httpx.Response] = None
        error: Optional[httpx.RequestError] = None

        for attempt in range(max_retries + 1):
            if attempt > 0:
                wait = self.backoff(attempt)
                self._logger.warn(
                    "Retrying request",
                    attempt=attempt,
                    max_attempts=max_retries,
                    wait_duration=round(wait, 3),
                    method=method,
                    url=safe_url(url),
                )
                await self._sleep(wait)

            response, error = None, None
            try:
                response = await attempt_fn(attempt)
            except httpx.RequestError as exc:
                error = exc

            if not self._config.policy(response, error):
                if response is None:
                    raise NetworkError(f"{method} {safe_url(url)}: {error}", error) from error
                return RetryOutcome(response=response, attempts=attempt + 1)

            if attempt == max_retries:
                self._logger.error("Max retries exceeded", attempts=attempt + 1, method=method, url=safe_url(url))
                break

            if response is not None:
                await self._release(response)

        if response is None:
            raise RetryExhaustedError(max_retries + 1, error) from error
        return RetryOutcome(response=response, attempts=max_retries + 1, exhausted=True)


async def _close_response(response: httpx.Response) -> None:
    await response.aclose()


__all__ = [
    "RetryPolicy",
    "StatusRetryPolicy",
    "network_errors_only",
    "backoff_bound",
    "compute_backoff",
    "RetryController",
    "RetryOutcome",
]
