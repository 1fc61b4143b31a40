from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, Protocol, TypeVar

from pydantic import BaseModel, ValidationError

from panelsync.models.node import NodeType
from panelsync.models.records import NodeInfo, UserInfo


class PanelSyncError(Exception):
    """Generic panel sync error (network/panel response/local state)."""


class TransportError(PanelSyncError):
    """Connection-level failure after the transport exhausted its retries."""


class RemoteError(PanelSyncError):
    def __init__(self, message: str, status: int, body: str):
        super().__init__(message)
        self.status = status
        self.body = body


class DecodeError(PanelSyncError):
    """Panel returned a body that is not valid JSON."""


class SchemaError(PanelSyncError):
    """Well-formed JSON missing or mistyping a required key."""

    def __init__(self, message: str, body: str | None = None):
        super().__init__(message)
        self.body = body


class EmptyUserListError(PanelSyncError):
    pass


class PreconditionError(PanelSyncError):
    pass


class UnsupportedProtocolError(PanelSyncError):
    pass


class RuleListError(PanelSyncError):
    pass


M = TypeVar("M", bound=BaseModel)


def validate_payload(model: type[M], data: Any, what: str) -> M:
    """Decode one panel object into its wire schema or raise SchemaError."""
    try:
        return model.model_validate(data)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or '<root>'}: {err['msg']}" for err in e.errors()
        )
        raise SchemaError(f"invalid {what}: {problems}") from e


@dataclass(frozen=True)
class ExtractContext:
    """Local settings the extractors fold into every record."""
    node_id: int
    enable_vless: bool = False
    vless_flow: str = ""
    speed_limit: float = 0
    device_limit: int = 0

    def effective_speed_limit(self, panel_speed_limit: float | None) -> int:
        """Mbps -> bytes/sec. A configured limit always wins over the panel value."""
        if self.speed_limit > 0:
            return int(self.speed_limit * 1000000 / 8)
        return int((panel_speed_limit or 0) * 1000000 / 8)


class PanelProtocol(Protocol):
    node_type: ClassVar[NodeType]
    route: ClassVar[str]
    # False when node info is synthesized from the user list instead of /config.
    # parse_node then receives the parsed list[UserInfo] rather than a JSON tree.
    has_config_endpoint: ClassVar[bool]

    def parse_node(self, source: Any, ctx: ExtractContext) -> NodeInfo: ...

    def parse_user(self, record: Any, ctx: ExtractContext) -> UserInfo: ...
