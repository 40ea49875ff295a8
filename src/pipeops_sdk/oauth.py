"""OAuth 2.0 endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .models import AuthorizeOptions, Envelope, TokenRequest, TokenResponse, UserInfoResponse
from .request import add_options

if TYPE_CHECKING:
    from .client import PipeOpsClient


class OAuthService:
    def __init__(self, client: "PipeOpsClient") -> None:
        self._client = client

    def authorize_url(self, options: AuthorizeOptions) -> str:
        """Return the authorization URL the user should be redirected to."""
        return str(self._client.resolve(add_options("oauth/authorize", options)))

    async def exchange_code_for_token(self, request: TokenRequest) -> TokenResponse:
        form = request.model_dump(exclude_none=True)
        outbound = self._client.new_request("POST", "oauth/token", form=form)
        data, _ = await self._client.do(outbound, TokenResponse)
        return data or TokenResponse()

    async def get_user_info(self) -> UserInfoResponse:
        data, _ = await self._client.execute("GET", "oauth/userinfo", target=UserInfoResponse)
        return data or UserInfoResponse()

    async def get_consent(self) -> Envelope:
        data, _ = await self._client.execute("GET", "oauth/consent", target=Envelope)
        return data or Envelope()


__all__ = ["OAuthService"]
