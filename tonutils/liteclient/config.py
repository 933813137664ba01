"""Global network configuration and its loading from JSON."""

import dataclasses
import json
import typing
import urllib.request
from dataclasses import dataclass, field
from typing import Any, Optional


class NoConnectionsError(RuntimeError):
    """Raised when a configuration lists no servers to connect to."""

    def __init__(self, message: str = "no connections established") -> None:
        super().__init__(message)


def _json(name: str) -> dict:
    return {"json": name}


@dataclass
class ServerID:
    type: str = field(default="", metadata=_json("@type"))
    key: str = ""


@dataclass
class LiteserverConfig:
    ip: int = 0
    port: int = 0
    id: ServerID = field(default_factory=ServerID)


@dataclass
class DHTAddress:
    type: str = field(default="", metadata=_json("@type"))
    ip: int = 0
    port: int = 0


@dataclass
class DHTAddressList:
    type: str = field(default="", metadata=_json("@type"))
    addrs: list[DHTAddress] = field(default_factory=list)
    version: int = 0
    reinit_date: int = 0
    priority: int = 0
    expire_at: int = 0


@dataclass
class DHTNode:
    type: str = field(default="", metadata=_json("@type"))
    id: ServerID = field(default_factory=ServerID)
    addr_list: DHTAddressList = field(default_factory=DHTAddressList)
    version: int = 0
    signature: str = ""


@dataclass
class DHTNodes:
    type: str = field(default="", metadata=_json("@type"))
    nodes: list[DHTNode] = field(default_factory=list)


@dataclass
class DHTConfig:
    type: str = field(default="", metadata=_json("@type"))
    k: int = 0
    a: int = 0
    static_nodes: DHTNodes = field(default_factory=DHTNodes)


@dataclass
class ValidatorZeroState:
    workchain: int = 0
    shard: int = 0
    seqno: int = 0
    root_hash: str = ""
    file_hash: str = ""


@dataclass
class ValidatorInitBlock:
    root_hash: str = ""
    seqno: int = 0
    file_hash: str = ""
    workchain: int = 0
    shard: int = 0


@dataclass
class ValidatorHardfork:
    file_hash: str = ""
    seqno: int = 0
    root_hash: str = ""
    workchain: int = 0
    shard: int = 0


@dataclass
class ValidatorConfig:
    type: str = field(default="", metadata=_json("@type"))
    zero_state: ValidatorZeroState = field(default_factory=ValidatorZeroState)
    init_block: ValidatorInitBlock = field(default_factory=ValidatorInitBlock)
    hardforks: list[ValidatorHardfork] = field(default_factory=list)


@dataclass
class GlobalConfig:
    type: str = field(default="", metadata=_json("@type"))
    dht: DHTConfig = field(default_factory=DHTConfig)
    liteservers: list[LiteserverConfig] = field(default_factory=list)
    validator: ValidatorConfig = field(default_factory=ValidatorConfig)


def _convert(hint: Any, value: Any, where: str) -> Any:
    if isinstance(hint, type) and dataclasses.is_dataclass(hint):
        return _load(hint, value, where)
    if typing.get_origin(hint) is list:
        if not isinstance(value, list):
            raise ValueError(f"{where}: expected a list")
        (item_hint,) = typing.get_args(hint)
        return [_convert(item_hint, item, f"{where}[{n}]") for n, item in enumerate(value)]
    if hint is int:
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError(f"{where}: expected an integer")
        return value
    if hint is str:
        if not isinstance(value, str):
            raise ValueError(f"{where}: expected a string")
        return value
    raise ValueError(f"{where}: unsupported field type")


def _load(cls: type, data: Any, where: str) -> Any:
    if not isinstance(data, dict):
        raise ValueError(f"{where}: expected an object")
    values = {}
    for f in dataclasses.fields(cls):
        name = f.metadata.get("json", f.name)
        raw = data.get(name)
        if raw is None:
            continue
        values[f.name] = _convert(f.type, raw, f"{where}.{name}")
    return cls(**values)


def config_from_dict(data: Any) -> GlobalConfig:
    """Build a configuration from decoded JSON; unknown keys are ignored."""
    return _load(GlobalConfig, data, "config")


def get_config_from_url(url: str, timeout: Optional[float] = None) -> GlobalConfig:
    """Download and decode a global configuration."""
    with urllib.request.urlopen(url, timeout=timeout) as response:
        data = json.load(response)
    return config_from_dict(data)


def int_to_ip4(ip_int: int) -> str:
    """Render the integer form of an IPv4 address as dotted quads."""
    return ".".join(str((ip_int >> shift) & 0xFF) for shift in (24, 16, 8, 0))