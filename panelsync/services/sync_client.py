from __future__ import annotations

import json
import logging
from typing import Any, Iterable

import httpx

from panelsync.core.config import ApiConfig
from panelsync.models.records import (
    ClientInfo,
    DetectResult,
    DetectRule,
    NodeInfo,
    NodeStatus,
    OnlineUser,
    UserInfo,
    UserTraffic,
)
from panelsync.schemas.panel import OnlineUserPayload, UserListResponse, UserTrafficPayload
from panelsync.services.adapters.base import (
    DecodeError,
    ExtractContext,
    PanelSyncError,
    PreconditionError,
    SchemaError,
    validate_payload,
)
from panelsync.services.adapters.factory import get_protocol
from panelsync.services.adapters.v2ray import V2rayProtocol
from panelsync.services.http_client import PanelTransport
from panelsync.services.response import parse_response
from panelsync.services.rules import read_local_rule_list
from panelsync.services.sync_state import SyncState

logger = logging.getLogger(__name__)


class SyncClient:
    """Panel sync client for one node.

    Operations are coroutines; cancel one by cancelling the task awaiting it.
    Operations that call the panel accept an optional ``timeout`` overriding
    the configured one.

    fetch_detection_rules() on a V2ray node reuses the config returned by the
    last successful fetch_node_config(), and raises PreconditionError until
    there is one.
    """

    def __init__(
        self,
        config: ApiConfig,
        *,
        state: SyncState | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.config = config
        self.protocol = get_protocol(config.NODE_TYPE)
        self.state = state or SyncState()
        self.local_rule_list: list[DetectRule] = read_local_rule_list(config.RULE_LIST_PATH)
        self._http = PanelTransport(config, transport=transport)
        self._ctx = ExtractContext(
            node_id=config.NODE_ID,
            enable_vless=config.ENABLE_VLESS,
            vless_flow=config.VLESS_FLOW,
            speed_limit=config.SPEED_LIMIT,
            device_limit=config.DEVICE_LIMIT,
        )

    def describe(self) -> ClientInfo:
        return ClientInfo(
            api_host=self.config.API_HOST,
            node_id=self.config.NODE_ID,
            key=self.config.KEY,
            node_type=self.protocol.node_type.value,
        )

    def debug(self) -> None:
        """Log every panel request and response."""
        self._http.debug = True

    def _path(self, action: str) -> str:
        return f"/api/v1/server/{self.protocol.route}/{action}"

    async def _call(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        body: Any = None,
        timeout: float | None = None,
    ) -> Any:
        response: httpx.Response | None = None
        error: Exception | None = None
        try:
            response = await self._http.request(method, path, params=params, json=body, timeout=timeout)
        except httpx.DecodingError as e:
            raise DecodeError(f"request {self._http.assemble_url(path)} failed: {e}") from e
        except httpx.RequestError as e:
            error = e
        return parse_response(self._http.assemble_url(path), response, error)

    async def fetch_node_config(self, timeout: float | None = None) -> NodeInfo:
        if not self.protocol.has_config_endpoint:
            users = await self.fetch_user_list(timeout=timeout)
            return self.protocol.parse_node(users, self._ctx)

        path = self._path("config")
        try:
            tree = await self._call("GET", path, params={"local_port": "1"}, timeout=timeout)
        except PanelSyncError:
            self.state.clear_config()
            raise
        self.state.store_config(tree)

        try:
            return self.protocol.parse_node(tree, self._ctx)
        except SchemaError as e:
            raw = json.dumps(tree, ensure_ascii=False)
            logger.warning("parse node info failed node_id=%s err=%s", self.config.NODE_ID, str(e)[:220])
            raise SchemaError(f"Parse node info failed: {raw}, \nError: {e}", body=raw) from e

    async def fetch_user_list(self, timeout: float | None = None) -> list[UserInfo]:
        tree = await self._call("GET", self._path("user"), timeout=timeout)
        resp = validate_payload(UserListResponse, tree, "user list")
        return [self.protocol.parse_user(record, self._ctx) for record in resp.data]

    async def report_online_users(self, batch: Iterable[OnlineUser], timeout: float | None = None) -> None:
        users = list(batch)
        # Local map is replaced before the report; a failed report keeps it.
        self.state.replace_online(users)
        body = [OnlineUserPayload(user_id=u.uid, ip=u.ip).model_dump() for u in users]
        await self._call("POST", self._path("online"), body=body, timeout=timeout)

    async def report_user_traffic(self, batch: Iterable[UserTraffic], timeout: float | None = None) -> None:
        body = [UserTrafficPayload(user_id=t.uid, u=t.upload, d=t.download).model_dump() for t in batch]
        await self._call("POST", self._path("submit"), body=body, timeout=timeout)

    def last_report_online(self) -> dict[int, int]:
        return self.state.last_report_online()

    async def fetch_detection_rules(self) -> list[DetectRule]:
        rules = list(self.local_rule_list)
        if not isinstance(self.protocol, V2rayProtocol):
            # Only V2ray nodes get rules from the panel.
            return rules

        has_config, tree = self.state.config_snapshot()
        if not has_config:
            raise PreconditionError("fetch_node_config must succeed before fetching detection rules")
        rules.extend(self.protocol.parse_detect_rules(tree))
        return rules

    async def report_node_status(self, status: NodeStatus) -> None:
        # The panel has no node status endpoint.
        return None

    async def report_illegal(self, results: Iterable[DetectResult]) -> None:
        # The panel has no audit report endpoint.
        return None
