from __future__ import annotations

from panelsync.models.node import NodeType
from panelsync.services.adapters.base import PanelProtocol, UnsupportedProtocolError
from panelsync.services.adapters.shadowsocks import ShadowsocksProtocol
from panelsync.services.adapters.trojan import TrojanProtocol
from panelsync.services.adapters.v2ray import V2rayProtocol


def get_protocol(node_type: NodeType | str) -> PanelProtocol:
    try:
        nt = NodeType(node_type)
    except ValueError:
        raise UnsupportedProtocolError(f"unsupported Node type: {node_type}") from None

    if nt == NodeType.v2ray:
        return V2rayProtocol()
    if nt == NodeType.trojan:
        return TrojanProtocol()
    if nt == NodeType.shadowsocks:
        return ShadowsocksProtocol()

    raise UnsupportedProtocolError(f"unsupported Node type: {node_type}")
