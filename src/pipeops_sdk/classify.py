"""Turn raw responses into decoded values or typed errors."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Optional

import httpx
from pydantic import BaseModel, TypeAdapter, ValidationError

from .errors import APIError, DecodeError, RateLimitError

DEFAULT_RETRY_AFTER = 60.0


def parse_int_header(headers: httpx.Headers, name: str, default: int = 0) -> int:
    """Parse an integer header, falling back to ``default`` when absent or malformed."""
    raw = headers.get(name)
    if raw is None:
        return default
    try:
        return int(raw.strip())
    except ValueError:
        return default


def parse_retry_after(headers: httpx.Headers, default: float = DEFAULT_RETRY_AFTER) -> float:
    raw = headers.get("Retry-After")
    if not raw:
        return default
    try:
        seconds = float(raw.strip())
    except ValueError:
        return default
    return seconds if seconds > 0 else default


def parse_rate_limit(response: httpx.Response) -> RateLimitError:
    headers = response.headers
    reset: Optional[datetime] = None
    reset_epoch = parse_int_header(headers, "X-RateLimit-Reset")
    if reset_epoch > 0:
        reset = datetime.fromtimestamp(reset_epoch, tz=timezone.utc)
    return RateLimitError(
        response,
        retry_after=parse_retry_after(headers),
        limit=parse_int_header(headers, "X-RateLimit-Limit"),
        remaining=parse_int_header(headers, "X-RateLimit-Remaining"),
        reset=reset,
    )


def _is_model_class(target: Any) -> bool:
    try:
        return issubclass(target, BaseModel)
    except TypeError:
        return False


def _status_line(response: httpx.Response) -> str:
    return f"{response.status_code} {response.reason_phrase}".strip()


def build_api_error(response: httpx.Response) -> APIError:
    """Build an :class:`APIError` from an already-read error response."""
    body = response.content
    status = ""
    message = ""
    if body:
        try:
            envelope = json.loads(body)
        except ValueError:
            envelope = None
        if isinstance(envelope, dict):
            status = str(envelope.get("status") or "")
            message = str(envelope.get("message") or "")
        else:
            message = body.decode(response.encoding or "utf-8", errors="replace").strip()
    return APIError(response, message or _status_line(response), status=status)


async def check_response(response: httpx.Response) -> None:
    """Raise the classified error for a non-2xx ``response``."""
    if 200 <= response.status_code <= 299:
        return
    if response.status_code == 429:
        raise parse_rate_limit(response)
    await response.aread()
    raise build_api_error(response)


def is_byte_sink(target: Any) -> bool:
    """True for a writable object that receives the raw body instead of a decoded value."""
    return target is not None and hasattr(target, "write") and not isinstance(target, type)


async def decode_response(response: httpx.Response, target: Any = None) -> Any:
    """Decode a successful response into ``target``.

    ``target`` may be a pydantic model class, any type understood by
    :class:`pydantic.TypeAdapter`, or a writable byte sink which receives the
    raw body. An empty body decodes to ``None``.
    """
    if target is None:
        return None
    if is_byte_sink(target):
        async for chunk in response.aiter_bytes():
            target.write(chunk)
        return target

    body = await response.aread()
    if not body.strip():
        return None
    try:
        if _is_model_class(target):
            return target.model_validate_json(body)
        return TypeAdapter(target).validate_json(body)
    except ValidationError as exc:
        raise DecodeError(response, exc) from exc


__all__ = [
    "DEFAULT_RETRY_AFTER",
    "build_api_error",
    "check_response",
    "decode_response",
    "is_byte_sink",
    "parse_int_header",
    "parse_rate_limit",
    "parse_retry_after",
]
