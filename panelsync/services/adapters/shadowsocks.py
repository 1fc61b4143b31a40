from __future__ import annotations

from typing import Any, ClassVar

from panelsync.models.node import NodeType
from panelsync.models.records import NodeInfo, UserInfo
from panelsync.schemas.panel import ShadowsocksUser
from panelsync.services.adapters.base import EmptyUserListError, ExtractContext, validate_payload


class ShadowsocksProtocol:
    """Shadowsocks (cipher protocol) extractor.

    The panel has no config endpoint for this protocol: port and cipher are
    per user, and the node takes them from the first user in the list.
    """
    node_type: ClassVar[NodeType] = NodeType.shadowsocks
    route: ClassVar[str] = "SkyhtShadowsocks"
    has_config_endpoint: ClassVar[bool] = False

    def parse_node(self, source: list[UserInfo], ctx: ExtractContext) -> NodeInfo:
        if not source:
            raise EmptyUserListError("the number of node users is 0")
        first = source[0]
        return NodeInfo(
            node_type=self.node_type,
            node_id=ctx.node_id,
            port=first.port,
            transport_protocol="tcp",
            cipher_method=first.method,
        )

    def parse_user(self, record: Any, ctx: ExtractContext) -> UserInfo:
        user = validate_payload(ShadowsocksUser, record, "shadowsocks user")
        return UserInfo(
            uid=user.id,
            email=user.secret,
            passwd=user.secret,
            method=user.cipher,
            port=user.port,
            speed_limit=ctx.effective_speed_limit(user.speed_limit),
            device_limit=ctx.device_limit,
        )
