from __future__ import annotations

from typing import Callable

import httpx
import pytest

from pipeops_sdk import ClientConfig, PipeOpsClient, RetryConfig

BASE_URL = "https://api.example.com"


@pytest.fixture()
def make_client() -> Callable[..., PipeOpsClient]:
    def factory(handler, *, max_retries: int = 3, wait_min: float = 0.0, wait_max: float = 0.0, **overrides) -> PipeOpsClient:
        retry = RetryConfig(max_retries=max_retries, wait_min=wait_min, wait_max=wait_max)
        cfg = ClientConfig(base_url=overrides.pop("base_url", BASE_URL), retry=retry, **overrides)
        return PipeOpsClient(cfg, transport=httpx.MockTransport(handler))

    return factory
