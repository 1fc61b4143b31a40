from __future__ import annotations

import logging
from typing import Any

import httpx

from panelsync.core.config import ApiConfig

logger = logging.getLogger(__name__)


def build_async_client(
    config: ApiConfig,
    transport: httpx.AsyncBaseTransport | None = None,
    timeout: float | None = None,
) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        base_url=config.api_base_url,
        params={"node_id": str(config.NODE_ID), "token": config.KEY},
        timeout=httpx.Timeout(timeout or config.request_timeout),
        headers={"User-Agent": f"{config.APP_NAME}/1.0", "Accept": "application/json"},
        transport=transport,
    )


class PanelTransport:
    """HTTP access to the panel.

    Every call carries the node_id/token query pair. Connection-level failures
    are retried RETRY_COUNT times; HTTP status errors are returned as-is.
    """

    def __init__(self, config: ApiConfig, transport: httpx.AsyncBaseTransport | None = None):
        self.config = config
        self.debug = False
        self._transport = transport

    def assemble_url(self, path: str) -> str:
        return f"{self.config.api_base_url}{path}"

    async def request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        json: Any = None,
        timeout: float | None = None,
    ) -> httpx.Response:
        attempts = max(0, int(self.config.RETRY_COUNT)) + 1
        async with build_async_client(self.config, transport=self._transport, timeout=timeout) as client:
            for attempt in range(1, attempts + 1):
                try:
                    r = await client.request(method, path, params=params, json=json)
                except httpx.TransportError as e:
                    logger.warning(
                        "panel request failed method=%s path=%s attempt=%s/%s err=%s",
                        method,
                        path,
                        attempt,
                        attempts,
                        str(e)[:220],
                    )
                    if attempt == attempts:
                        raise
                    continue
                if self.debug:
                    logger.info(
                        "panel request method=%s url=%s status=%s body=%s",
                        method,
                        r.request.url,
                        r.status_code,
                        r.text[:300],
                    )
                return r
