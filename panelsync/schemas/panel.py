from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class _PanelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @model_validator(mode="before")
    @classmethod
    def _null_means_absent(cls, data: Any) -> Any:
        # An explicit null on a defaulted field gets the default; required fields still fail.
        if not isinstance(data, dict):
            return data
        defaulted: set[str] = set()
        for name, f in cls.model_fields.items():
            if f.is_required():
                continue
            defaulted.add(name)
            if f.alias:
                defaulted.add(f.alias)
        return {k: v for k, v in data.items() if not (v is None and k in defaulted)}


# --- V2ray node config (xray-style inbound) ---

class WsSettings(_PanelModel):
    path: str = ""
    headers: dict[str, Any] = Field(default_factory=dict)


class GrpcSettings(_PanelModel):
    service_name: Optional[str] = Field(None, alias="serviceName")


class TcpSettings(_PanelModel):
    # Opaque to us; the proxy engine reads it verbatim.
    header: Any = None


class StreamSettings(_PanelModel):
    network: str
    security: Optional[str] = None
    ws_settings: WsSettings = Field(default_factory=WsSettings, alias="wsSettings")
    grpc_settings: GrpcSettings = Field(default_factory=GrpcSettings, alias="grpcSettings")
    tcp_settings: TcpSettings = Field(default_factory=TcpSettings, alias="tcpSettings")


class V2rayInbound(_PanelModel):
    port: int = Field(..., ge=0, le=65535)
    stream_settings: StreamSettings = Field(..., alias="streamSettings")


class RoutingRule(_PanelModel):
    domain: list[str] = Field(default_factory=list)


class Routing(_PanelModel):
    rules: list[RoutingRule] = Field(default_factory=list)


# --- Trojan node config ---

class TrojanSsl(_PanelModel):
    sni: str = ""


class TrojanNodeConfig(_PanelModel):
    local_port: int = Field(..., ge=0, le=65535)
    ssl: TrojanSsl = Field(default_factory=TrojanSsl)


# --- user lists ---

class UserListResponse(_PanelModel):
    data: list[Any]


class PanelUser(_PanelModel):
    id: int
    speed_limit: Optional[float] = None


class V2rayUserCredentials(_PanelModel):
    uuid: str
    email: str = ""
    alter_id: int = Field(0, ge=0, le=65535)


class V2rayUser(PanelUser):
    v2ray_user: V2rayUserCredentials


class TrojanUserCredentials(_PanelModel):
    password: str


class TrojanUser(PanelUser):
    trojan_user: TrojanUserCredentials


class ShadowsocksUser(PanelUser):
    secret: str
    cipher: str
    port: int = Field(..., ge=0, le=65535)


# --- report bodies ---

class OnlineUserPayload(_PanelModel):
    user_id: int
    ip: str


class UserTrafficPayload(_PanelModel):
    user_id: int
    u: int
    d: int
