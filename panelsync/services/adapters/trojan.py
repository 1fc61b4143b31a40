from __future__ import annotations

from typing import Any, ClassVar

from panelsync.models.node import NodeType
from panelsync.models.records import NodeInfo, UserInfo
from panelsync.schemas.panel import TrojanNodeConfig, TrojanUser
from panelsync.services.adapters.base import ExtractContext, validate_payload


class TrojanProtocol:
    node_type: ClassVar[NodeType] = NodeType.trojan
    route: ClassVar[str] = "SkyhtTrojan"
    has_config_endpoint: ClassVar[bool] = True

    def parse_node(self, source: Any, ctx: ExtractContext) -> NodeInfo:
        cfg = validate_payload(TrojanNodeConfig, source, "trojan node info")
        return NodeInfo(
            node_type=self.node_type,
            node_id=ctx.node_id,
            port=cfg.local_port,
            transport_protocol="tcp",
            enable_tls=True,
            host=cfg.ssl.sni,
        )

    def parse_user(self, record: Any, ctx: ExtractContext) -> UserInfo:
        user = validate_payload(TrojanUser, record, "trojan user")
        password = user.trojan_user.password
        # The password doubles as the display identity.
        return UserInfo(
            uid=user.id,
            uuid=password,
            email=password,
            speed_limit=ctx.effective_speed_limit(user.speed_limit),
            device_limit=ctx.device_limit,
        )
