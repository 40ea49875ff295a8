from __future__ import annotations

import random
from typing import List

import httpx
import pytest

from pipeops_sdk import NetworkError, RetryConfig, RetryExhaustedError, StatusRetryPolicy, network_errors_only
from pipeops_sdk.retry import RetryController, backoff_bound, compute_backoff
from pipeops_sdk.transport import TransportExecutor

REQUEST = httpx.Request("GET", "https://api.example.com/test")


class FixedRandom(random.Random):
    def __init__(self, value: float) -> None:
        super().__init__()
        self.value = value

    def uniform(self, a: float, b: float) -> float:
        return self.value


class Recorder:
    def __init__(self) -> None:
        self.sleeps: List[float] = []
        self.released: List[httpx.Response] = []

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)

    async def release(self, response: httpx.Response) -> None:
        self.released.append(response)


def scripted(*outcomes):
    calls = {"count": 0}

    async def attempt(index: int) -> httpx.Response:
        assert index == calls["count"]
        outcome = outcomes[calls["count"]]
        calls["count"] += 1
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    return attempt, calls


def test_backoff_bound_doubles_and_caps() -> None:
    expected = [0.1, 0.2, 0.4, 0.8, 1.6, 3.2, 5.0, 5.0]
    for attempt, value in enumerate(expected, start=1):
        assert backoff_bound(attempt, 0.1, 5.0) == pytest.approx(value)


def test_backoff_jitter_stays_within_ten_percent() -> None:
    rng = random.Random(1234)
    for attempt in range(1, 10):
        bound = backoff_bound(attempt, 0.1, 5.0)
        for _ in range(50):
            value = compute_backoff(attempt, 0.1, 5.0, 0.1, rng)
            assert bound * 0.9 - 1e-9 <= value <= bound * 1.1 + 1e-9


def test_backoff_jitter_extremes() -> None:
    assert compute_backoff(3, 0.1, 5.0, 0.1, FixedRandom(1.0)) == pytest.approx(0.44)
    assert compute_backoff(3, 0.1, 5.0, 0.1, FixedRandom(-1.0)) == pytest.approx(0.36)


def test_default_policy() -> None:
    policy = StatusRetryPolicy()
    assert policy(None, httpx.ConnectError("down", request=REQUEST))
    for status in (0, 429, 500, 502, 503, 599):
        assert policy(httpx.Response(status), None), status
    for status in (200, 204, 301, 400, 401, 404, 422):
        assert not policy(httpx.Response(status), None), status


def test_status_policy_variants() -> None:
    policy = StatusRetryPolicy(statuses=frozenset({409}), retry_server_errors=False, retry_network_errors=False)
    assert policy(httpx.Response(409), None)
    assert not policy(httpx.Response(503), None)
    assert not policy(None, httpx.ReadError("reset", request=REQUEST))


def test_network_errors_only() -> None:
    assert network_errors_only(None, httpx.ReadError("reset", request=REQUEST))
    assert not network_errors_only(httpx.Response(503), None)


@pytest.mark.asyncio
async def test_controller_retries_then_succeeds() -> None:
    recorder = Recorder()
    config = RetryConfig(max_retries=3, wait_min=0.1, wait_max=5.0)
    controller = RetryController(config, release=recorder.release, sleep=recorder.sleep, rng=FixedRandom(0.0))
    attempt, calls = scripted(httpx.Response(503), httpx.Response(500), httpx.Response(200))

    outcome = await controller.run(attempt)

    assert outcome.response.status_code == 200
    assert outcome.attempts == 3
    assert not outcome.exhausted
    assert calls["count"] == 3
    assert recorder.sleeps == pytest.approx([0.1, 0.2])
    assert [r.status_code for r in recorder.released] == [503, 500]


@pytest.mark.asyncio
async def test_controller_hands_back_client_errors_immediately() -> None:
    recorder = Recorder()
    controller = RetryController(RetryConfig(max_retries=3), release=recorder.release, sleep=recorder.sleep)
    attempt, calls = scripted(httpx.Response(404))

    outcome = await controller.run(attempt)

    assert outcome.response.status_code == 404
    assert calls["count"] == 1
    assert recorder.sleeps == []


@pytest.mark.asyncio
async def test_controller_exhausts_on_responses() -> None:
    recorder = Recorder()
    controller = RetryController(RetryConfig(max_retries=2), release=recorder.release, sleep=recorder.sleep)
    last = httpx.Response(503)
    attempt, calls = scripted(httpx.Response(503), httpx.Response(503), last)

    outcome = await controller.run(attempt)

    assert outcome.exhausted
    assert outcome.attempts == 3
    assert outcome.response is last
    assert len(recorder.released) == 2
    assert last not in recorder.released


@pytest.mark.asyncio
async def test_controller_exhausts_on_network_errors() -> None:
    recorder = Recorder()
    controller = RetryController(RetryConfig(max_retries=1), release=recorder.release, sleep=recorder.sleep)
    error = httpx.ConnectTimeout("timed out", request=REQUEST)
    attempt, calls = scripted(httpx.ConnectError("refused", request=REQUEST), error)

    with pytest.raises(RetryExhaustedError) as excinfo:
        await controller.run(attempt)

    assert calls["count"] == 2
    assert excinfo.value.attempts == 2
    assert excinfo.value.cause is error
    assert recorder.released == []


@pytest.mark.asyncio
async def test_controller_recovers_from_network_error() -> None:
    recorder = Recorder()
    controller = RetryController(RetryConfig(max_retries=2), release=recorder.release, sleep=recorder.sleep)
    attempt, calls = scripted(httpx.ReadError("reset", request=REQUEST), httpx.Response(200))

    outcome = await controller.run(attempt)

    assert outcome.response.status_code == 200
    assert outcome.attempts == 2


@pytest.mark.asyncio
async def test_controller_rejected_network_error() -> None:
    recorder = Recorder()
    config = RetryConfig(max_retries=3, policy=StatusRetryPolicy(retry_network_errors=False))
    controller = RetryController(config, release=recorder.release, sleep=recorder.sleep)
    attempt, calls = scripted(httpx.ConnectError("refused", request=REQUEST))

    with pytest.raises(NetworkError):
        await controller.run(attempt, method="GET", url=REQUEST.url)

    assert calls["count"] == 1


@pytest.mark.asyncio
async def test_zero_retries_makes_a_single_attempt() -> None:
    recorder = Recorder()
    controller = RetryController(RetryConfig(max_retries=0), release=recorder.release, sleep=recorder.sleep)
    attempt, calls = scripted(httpx.Response(503))

    outcome = await controller.run(attempt)

    assert outcome.exhausted
    assert outcome.attempts == 1
    assert recorder.sleeps == []


class BrokenBody(httpx.AsyncByteStream):
    def __init__(self) -> None:
        self.closed = False

    async def __aiter__(self):
        yield b"partial"
        raise httpx.ReadError("connection reset")

    async def aclose(self) -> None:
        self.closed = True


@pytest.mark.asyncio
async def test_release_closes_response_when_drain_fails() -> None:
    body = BrokenBody()
    response = httpx.Response(503, stream=body, request=REQUEST)
    async with httpx.AsyncClient() as client:
        executor = TransportExecutor(client, timeout=1.0)
        await executor.release(response)

    assert response.is_closed
    assert body.closed


@pytest.mark.asyncio
async def test_retry_continues_after_failed_drain() -> None:
    recorder = Recorder()
    body = BrokenBody()
    async with httpx.AsyncClient() as client:
        executor = TransportExecutor(client, timeout=1.0)
        controller = RetryController(RetryConfig(max_retries=2), release=executor.release, sleep=recorder.sleep)
        attempt, calls = scripted(httpx.Response(503, stream=body, request=REQUEST), httpx.Response(200))

        outcome = await controller.run(attempt)

    assert outcome.response.status_code == 200
    assert calls["count"] == 2
    assert body.closed
