from __future__ import annotations

import json
import re
from typing import Any, ClassVar

from panelsync.models.node import NodeType
from panelsync.models.records import DetectRule, NodeInfo, UserInfo
from panelsync.schemas.panel import Routing, V2rayInbound, V2rayUser
from panelsync.services.adapters.base import ExtractContext, SchemaError, validate_payload

RULE_PREFIX = "regexp:"
# The panel renders its block list as the second routing rule.
BLOCK_RULE_INDEX = 1


class V2rayProtocol:
    """V2ray (tunnel protocol) extractor.

    The panel returns an xray-style config. Newer panels expose a single
    ``inbound`` object; v2board 1.5.5-dev exposes an ``inbounds`` array and we
    take its first entry.
    """
    node_type: ClassVar[NodeType] = NodeType.v2ray
    route: ClassVar[str] = "SkyhtV2ray"
    has_config_endpoint: ClassVar[bool] = True

    def _find_inbound(self, tree: Any) -> Any:
        if not isinstance(tree, dict):
            raise SchemaError("node info is not a JSON object")
        if "inbound" in tree:
            return tree["inbound"]
        if "inbounds" in tree:
            inbounds = tree["inbounds"]
            if not isinstance(inbounds, list) or not inbounds:
                raise SchemaError("inbounds must be a non-empty array")
            return inbounds[0]
        raise SchemaError("unable to find inbound(s) in the node info")

    def parse_node(self, source: Any, ctx: ExtractContext) -> NodeInfo:
        inbound = validate_payload(V2rayInbound, self._find_inbound(source), "inbound")
        stream = inbound.stream_settings
        transport = stream.network

        path = ""
        host = ""
        service_name = ""
        header: bytes | None = None
        if transport == "ws":
            path = stream.ws_settings.path
            host = str(stream.ws_settings.headers.get("Host") or "")
        elif transport == "grpc":
            service_name = stream.grpc_settings.service_name or ""
        elif transport == "tcp":
            tcp = stream.tcp_settings
            if "header" in tcp.model_fields_set and tcp.header is not None:
                header = json.dumps(tcp.header, separators=(",", ":"), ensure_ascii=False).encode("utf-8")

        # AlterID is carried per user; the node value stays 0.
        return NodeInfo(
            node_type=self.node_type,
            node_id=ctx.node_id,
            port=inbound.port,
            alter_id=0,
            transport_protocol=transport,
            enable_tls=stream.security == "tls",
            path=path,
            host=host,
            service_name=service_name,
            header=header,
            enable_vless=ctx.enable_vless,
            vless_flow=ctx.vless_flow,
        )

    def parse_user(self, record: Any, ctx: ExtractContext) -> UserInfo:
        user = validate_payload(V2rayUser, record, "v2ray user")
        return UserInfo(
            uid=user.id,
            uuid=user.v2ray_user.uuid,
            email=user.v2ray_user.email,
            alter_id=user.v2ray_user.alter_id,
            speed_limit=ctx.effective_speed_limit(user.speed_limit),
            device_limit=ctx.device_limit,
        )

    def parse_detect_rules(self, tree: Any) -> list[DetectRule]:
        """Panel block rules from a cached node config, ids starting at 0."""
        raw_routing = tree.get("routing") if isinstance(tree, dict) else None
        routing = validate_payload(Routing, raw_routing or {}, "routing")
        if len(routing.rules) <= BLOCK_RULE_INDEX:
            return []
        out: list[DetectRule] = []
        for i, raw in enumerate(routing.rules[BLOCK_RULE_INDEX].domain):
            expr = raw[len(RULE_PREFIX):] if raw.startswith(RULE_PREFIX) else raw
            try:
                out.append(DetectRule(id=i, pattern=re.compile(expr)))
            except re.error as e:
                raise SchemaError(f"invalid panel rule #{i} {raw!r}: {e}") from e
        return out
