"""Service-account token endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .models import (
    ServiceAccountTokenListResponse,
    ServiceAccountTokenRequest,
    ServiceAccountTokenResponse,
    ServiceAccountTokenUpdateRequest,
)

if TYPE_CHECKING:
    from .client import PipeOpsClient

TOKENS_PATH = "api/v1/service-account-tokens"


class ServiceTokenService:
    def __init__(self, client: "PipeOpsClient") -> None:
        self._client = client

    async def create(self, request: ServiceAccountTokenRequest) -> ServiceAccountTokenResponse:
        data, _ = await self._client.execute("POST", TOKENS_PATH, request, ServiceAccountTokenResponse)
        return data or ServiceAccountTokenResponse()

    async def list(self) -> ServiceAccountTokenListResponse:
        data, _ = await self._client.execute("GET", TOKENS_PATH, target=ServiceAccountTokenListResponse)
        return data or ServiceAccountTokenListResponse()

    async def get(self, token_uuid: str) -> ServiceAccountTokenResponse:
        data, _ = await self._client.execute("GET", f"{TOKENS_PATH}/{token_uuid}", target=ServiceAccountTokenResponse)
        return data or ServiceAccountTokenResponse()

    async def update(self, token_uuid: str, request: ServiceAccountTokenUpdateRequest) -> ServiceAccountTokenResponse:
        data, _ = await self._client.execute(
            "PATCH", f"{TOKENS_PATH}/{token_uuid}", request, ServiceAccountTokenResponse
        )
        return data or ServiceAccountTokenResponse()

    async def revoke(self, token_uuid: str) -> None:
        await self._client.execute("DELETE", f"{TOKENS_PATH}/{token_uuid}")


__all__ = ["ServiceTokenService"]
