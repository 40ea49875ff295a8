"""Python client for the PipeOps control-plane API."""

from __future__ import annotations

import asyncio
import random
from typing import Any, Mapping, Optional, Tuple

import httpx

from .auth import AuthService
from .classify import check_response, decode_response, is_byte_sink
from .config import ClientConfig
from .errors import APIError, NetworkError, RateLimitError, RetryExhaustedError
from .logger import Logger, StdlibLogger, safe_url
from .oauth import OAuthService
from .projects import ProjectService
from .request import OutboundRequest, RequestBuilder, add_options
from .retry import RetryController, RetryOutcome
from .service_tokens import ServiceTokenService
from .transport import TransportExecutor, build_http_client


class PipeOpsClient:
    """Shared entry point for every PipeOps endpoint.

    One instance is meant to live for the whole process and be used from many
    concurrent tasks. Each call goes through :meth:`execute` (or
    :meth:`new_request` + :meth:`do`), which retries transient failures and
    raises the typed errors from :mod:`pipeops_sdk.errors`.
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        logger: Optional[Logger] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self._config = config or ClientConfig()
        self._token: Optional[str] = self._config.token
        self._logger: Logger = logger or StdlibLogger()
        self._builder = RequestBuilder(self._config.base_url, self._config.user_agent, lambda: self._token)
        self._executor = TransportExecutor(
            http_client or build_http_client(self._config, transport=transport),
            timeout=self._config.timeout,
            logger=self._logger,
        )
        self._retry = RetryController(self._config.retry, self._logger, release=self._executor.release, rng=rng)

        self.auth = AuthService(self)
        self.oauth = OAuthService(self)
        self.projects = ProjectService(self)
        self.service_tokens = ServiceTokenService(self)

    async def __aenter__(self) -> "PipeOpsClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def base_url(self) -> httpx.URL:
        return self._builder.base_url

    @property
    def token(self) -> Optional[str]:
        return self._token

    def set_token(self, token: Optional[str]) -> None:
        """Replace the bearer token used by calls started from now on."""
        self._token = token or None

    def resolve(self, path: str) -> httpx.URL:
        return self._builder.resolve(path)

    def new_request(
        self,
        method: str,
        path: str,
        body: Any = None,
        *,
        params: Any = None,
        form: Optional[Mapping[str, Any]] = None,
    ) -> OutboundRequest:
        if params is not None:
            path = add_options(path, params)
        return self._builder.build(method, path, body, form=form)

    async def do(self, request: OutboundRequest, target: Any = None) -> Tuple[Any, httpx.Response]:
        """Send ``request`` with retries and decode the body into ``target``.

        The configured timeout covers each attempt including its body. A byte
        sink target is streamed after the retry loop, within whatever is left
        of the last attempt's deadline.
        """
        loop = asyncio.get_running_loop()
        streaming = is_byte_sink(target)
        started = loop.time()

        async def attempt(_: int) -> httpx.Response:
            nonlocal started
            started = loop.time()
            return await self._executor.send(request, read_body=not streaming)

        outcome = await self._retry.run(attempt, method=request.method, url=request.url)
        response = outcome.response
        try:
            if not streaming:
                return await self._classify(outcome, target), response
            remaining = max(self._executor.timeout - (loop.time() - started), 0.0)
            try:
                return await asyncio.wait_for(self._classify(outcome, target), timeout=remaining), response
            except asyncio.TimeoutError:
                cause = httpx.ReadTimeout("response body exceeded the request timeout", request=response.request)
                raise NetworkError(f"{request.method} {safe_url(request.url)}: {cause}", cause) from None
        finally:
            await response.aclose()

    async def _classify(self, outcome: RetryOutcome, target: Any) -> Any:
        try:
            await check_response(outcome.response)
        except RateLimitError as exc:
            exc.attempts = outcome.attempts
            raise
        except APIError as exc:
            if outcome.exhausted:
                raise RetryExhaustedError(outcome.attempts, exc) from exc
            raise
        return await decode_response(outcome.response, target)

    async def execute(
        self,
        method: str,
        path: str,
        body: Any = None,
        target: Any = None,
        *,
        params: Any = None,
    ) -> Tuple[Any, httpx.Response]:
        request = self.new_request(method, path, body, params=params)
        return await self.do(request, target)

    async def aclose(self) -> None:
        await self._executor.aclose()


__all__ = ["PipeOpsClient"]
