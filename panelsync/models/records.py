from __future__ import annotations

import re
from dataclasses import dataclass

from panelsync.models.node import NodeType


@dataclass(frozen=True)
class NodeInfo:
    """Uniform node configuration consumed by the proxy engine.

    header is the tcp header object as compact JSON bytes, passed through verbatim.
    """
    node_type: NodeType
    node_id: int
    port: int
    transport_protocol: str = "tcp"
    enable_tls: bool = False
    host: str = ""
    path: str = ""
    service_name: str = ""
    cipher_method: str = ""
    alter_id: int = 0
    header: bytes | None = None
    enable_vless: bool = False
    vless_flow: str = ""


@dataclass(frozen=True)
class UserInfo:
    uid: int
    email: str = ""
    uuid: str = ""
    passwd: str = ""
    method: str = ""
    alter_id: int = 0
    speed_limit: int = 0   # bytes/sec, 0 = unlimited
    device_limit: int = 0  # 0 = unlimited
    port: int = 0


@dataclass(frozen=True)
class OnlineUser:
    uid: int
    ip: str


@dataclass(frozen=True)
class UserTraffic:
    uid: int
    upload: int
    download: int


@dataclass(frozen=True)
class DetectRule:
    id: int
    pattern: re.Pattern[str]


@dataclass(frozen=True)
class DetectResult:
    uid: int
    rule_id: int


@dataclass(frozen=True)
class NodeStatus:
    cpu: float = 0.0
    mem: float = 0.0
    disk: float = 0.0
    uptime: int = 0


@dataclass(frozen=True)
class ClientInfo:
    api_host: str
    node_id: int
    key: str
    node_type: str
