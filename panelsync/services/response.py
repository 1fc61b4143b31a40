from __future__ import annotations

import json
from typing import Any

import httpx

from panelsync.services.adapters.base import DecodeError, RemoteError, TransportError


def parse_response(url: str, response: httpx.Response | None, error: Exception | None = None) -> Any:
    """Turn one panel exchange into a JSON tree or a typed error."""
    if error is not None or response is None:
        raise TransportError(f"request {url} failed: {error}") from error

    if response.status_code >= 400:
        body = response.text
        raise RemoteError(
            f"HTTP {response.status_code} {response.request.method} {url}: {body[:300]}",
            status=response.status_code,
            body=body,
        )
    try:
        return json.loads(response.content)
    except ValueError as e:
        raise DecodeError(f"ret {response.text[:300]} invalid") from e
