"""Authentication endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .models import (
    ChangePasswordRequest,
    Envelope,
    LoginRequest,
    LoginResponse,
    ResetPasswordRequest,
    SignupRequest,
    SignupResponse,
    VerifyLoginRequest,
)

if TYPE_CHECKING:
    from .client import PipeOpsClient


def validate_email(email: str) -> None:
    email = email.strip()
    if not email:
        raise ValueError("email cannot be empty")
    if "@" not in email:
        raise ValueError("email must contain @")
    local, sep, domain = email.partition("@")
    if not local or not domain or "@" in domain:
        raise ValueError("invalid email format")


class AuthService:
    def __init__(self, client: "PipeOpsClient") -> None:
        self._client = client

    async def login(self, request: LoginRequest) -> LoginResponse:
        """Authenticate with email and password.

        The returned token is not installed on the client; call
        :meth:`PipeOpsClient.set_token` with ``response.data.token``.
        """
        validate_email(request.email)
        if not request.password:
            raise ValueError("password cannot be empty")
        data, _ = await self._client.execute("POST", "auth/login", request, LoginResponse)
        return data or LoginResponse()

    async def signup(self, request: SignupRequest) -> SignupResponse:
        validate_email(request.email)
        if len(request.password) < 6:
            raise ValueError("password must be at least 6 characters")
        data, _ = await self._client.execute("POST", "auth/signup", request, SignupResponse)
        return data or SignupResponse()

    async def request_password_reset(self, email: str) -> Envelope:
        data, _ = await self._client.execute("POST", "auth/reset_password/send", {"email": email}, Envelope)
        return data or Envelope()

    async def change_password(self, request: ChangePasswordRequest) -> Envelope:
        data, _ = await self._client.execute("POST", "auth/change_password", request, Envelope)
        return data or Envelope()

    async def verify_login(self, request: VerifyLoginRequest) -> LoginResponse:
        data, _ = await self._client.execute("POST", "auth/verify_login", request, LoginResponse)
        return data or LoginResponse()

    async def activate_email(self, token: str) -> None:
        await self._client.execute("POST", "auth/activate_email", {"token": token})

    async def reset_password(self, request: ResetPasswordRequest) -> None:
        await self._client.execute("POST", "auth/reset_password", request)

    async def verify_password_reset_token(self, token: str) -> None:
        await self._client.execute("GET", f"auth/reset_password/verify/{token}")


__all__ = ["AuthService", "validate_email"]
