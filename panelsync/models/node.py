import enum

class NodeType(str, enum.Enum):
    v2ray = "V2ray"
    trojan = "Trojan"
    shadowsocks = "Shadowsocks"
