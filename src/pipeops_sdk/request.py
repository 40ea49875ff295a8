"""Outbound request construction."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Mapping, Optional
from urllib.parse import urlencode

import httpx
from pydantic import BaseModel
from pydantic_core import to_jsonable_python

from .errors import RequestConstructionError, SerializationError

JSON_CONTENT_TYPE = "application/json"
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


@dataclass
class OutboundRequest:
    method: str
    url: httpx.URL
    headers: Dict[str, str] = field(default_factory=dict)
    content: Optional[bytes] = None

    def to_httpx(self, client: httpx.AsyncClient) -> httpx.Request:
        """Build a fresh request for one attempt; the byte body is never consumed."""
        return client.build_request(self.method, self.url, headers=self.headers, content=self.content)


def _json_default(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True, exclude_none=True)
    return to_jsonable_python(value)


def encode_json(body: Any) -> bytes:
    try:
        payload = json.dumps(body, ensure_ascii=False, separators=(",", ":"), default=_json_default)
    except (TypeError, ValueError) as exc:
        raise SerializationError(f"failed to encode request body: {exc}") from exc
    return payload.encode("utf-8")


def _query_items(options: Any) -> list[tuple[str, str]]:
    if isinstance(options, BaseModel):
        values = options.model_dump(mode="json", by_alias=True, exclude_none=True)
    else:
        values = dict(options)
    items: list[tuple[str, str]] = []
    for key, value in values.items():
        if value is None:
            continue
        for item in value if isinstance(value, (list, tuple)) else [value]:
            if isinstance(item, bool):
                item = "true" if item else "false"
            items.append((key, str(item)))
    return items


def add_options(path: str, options: Any) -> str:
    """Replace the query string of ``path`` with the encoded ``options``.

    Only unset (``None``) values are omitted; ``""``, ``0`` and ``False`` are
    sent as given and a list contributes one pair per element.
    """
    if options is None:
        return path
    base = path.split("?", 1)[0]
    query = urlencode(_query_items(options))
    return f"{base}?{query}" if query else base


class RequestBuilder:
    def __init__(self, base_url: str, user_agent: str, token_source: Callable[[], Optional[str]]) -> None:
        self._base_url = httpx.URL(base_url)
        self._user_agent = user_agent
        self._token_source = token_source

    @property
    def base_url(self) -> httpx.URL:
        return self._base_url

    def resolve(self, path: str) -> httpx.URL:
        try:
            return self._base_url.join(path)
        except (httpx.InvalidURL, TypeError, ValueError) as exc:
            raise RequestConstructionError(path, str(exc)) from exc

    def build(
        self,
        method: str,
        path: str,
        body: Any = None,
        *,
        form: Optional[Mapping[str, Any]] = None,
    ) -> OutboundRequest:
        url = self.resolve(path)
        headers = {"Accept": JSON_CONTENT_TYPE, "User-Agent": self._user_agent}
        content: Optional[bytes] = None
        if form is not None:
            pairs = [(key, str(value)) for key, value in form.items() if value not in (None, "")]
            content = urlencode(pairs).encode("ascii")
            headers["Content-Type"] = FORM_CONTENT_TYPE
        elif body is not None:
            content = encode_json(body)
            headers["Content-Type"] = JSON_CONTENT_TYPE

        token = self._token_source()
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return OutboundRequest(method=method.upper(), url=url, headers=headers, content=content)


__all__ = ["OutboundRequest", "RequestBuilder", "add_options", "encode_json"]
