"""Pooled HTTP transport and single-attempt execution."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Optional

import httpx

from .logger import Logger, NullLogger, safe_url
from .request import OutboundRequest

if TYPE_CHECKING:
    from .config import ClientConfig


def build_http_client(
    config: "ClientConfig",
    *,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> httpx.AsyncClient:
    """Create the shared connection-pooled client for ``config``."""
    limits = httpx.Limits(
        max_connections=config.max_connections,
        max_keepalive_connections=config.max_keepalive_connections,
        keepalive_expiry=config.keepalive_expiry,
    )
    timeout = httpx.Timeout(
        connect=config.connect_timeout,
        read=config.response_header_timeout,
        write=config.timeout,
        pool=config.timeout,
    )
    return httpx.AsyncClient(
        limits=limits,
        timeout=timeout,
        transport=transport,
        http2=config.http2,
        follow_redirects=True,
        max_redirects=config.max_redirects,
    )


class TransportExecutor:
    """Executes exactly one attempt of an :class:`OutboundRequest`."""

    def __init__(self, client: httpx.AsyncClient, timeout: float, logger: Optional[Logger] = None) -> None:
        self._client = client
        self._timeout = timeout
        self._logger = logger or NullLogger()

    @property
    def client(self) -> httpx.AsyncClient:
        return self._client

    @property
    def timeout(self) -> float:
        return self._timeout

    async def send(self, request: OutboundRequest, *, read_body: bool = True) -> httpx.Response:
        """Run one attempt within the overall timeout.

        With ``read_body`` the whole body is read inside the same deadline;
        otherwise the response is returned still streaming and the caller
        bounds the rest of the read.
        """
        attempt = request.to_httpx(self._client)
        try:
            return await asyncio.wait_for(self._perform(attempt, read_body), timeout=self._timeout)
        except asyncio.TimeoutError:
            raise httpx.TimeoutException(
                f"attempt exceeded {self._timeout:g}s timeout", request=attempt
            ) from None

    async def _perform(self, attempt: httpx.Request, read_body: bool) -> httpx.Response:
        response = await self._client.send(attempt, stream=True)
        if read_body:
            try:
                await response.aread()
            except BaseException:
                await response.aclose()
                raise
        return response

    async def release(self, response: httpx.Response) -> None:
        """Drain and close ``response`` so its connection returns to the pool."""
        if response.is_closed:
            return
        try:
            async for _ in response.aiter_raw():
                pass
        except (httpx.HTTPError, httpx.StreamError) as exc:
            self._logger.debug("Failed to drain response body", url=safe_url(response.request.url), err=exc)
        finally:
            await response.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()


__all__ = ["TransportExecutor", "build_http_client"]
