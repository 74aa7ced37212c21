"""Configuration of the node the parser reads chain data from."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

TYPE_REMOTE = "remote"
TYPE_LOCAL = "local"
TYPE_NONE = "none"


class NodeConfigError(ValueError):
    """Raised when a node configuration is invalid or cannot be decoded."""


def _str(value: Any) -> str:
    return "" if value is None else str(value)


def _int(value: Any) -> int:
    return 0 if value is None else int(value)


def _bool(value: Any) -> bool:
    return False if value is None else bool(value)


def _section(data: Any, name: str) -> Mapping[str, Any] | None:
    if data is None:
        return None
    if not isinstance(data, Mapping):
        raise NodeConfigError(f"{name} configuration must be a mapping")
    return data


@dataclass
class LocalDetails:
    """Details of a node whose data is read from a local home directory."""

    home: str = ""

    def validate(self) -> None:
        """Raise NodeConfigError if the details are unusable."""
        if not self.home.strip():
            raise NodeConfigError("home path cannot be empty")

    def to_dict(self) -> dict[str, Any]:
        """Return the details as a plain mapping."""
        return {"home": self.home}


@dataclass
class RPCConfig:
    """Configuration of the RPC endpoint."""

    client_name: str = ""
    address: str = ""
    max_connections: int = 0


@dataclass
class GRPCConfig:
    """Configuration of the gRPC endpoint."""

    address: str = ""
    insecure: bool = False


@dataclass
class APIConfig:
    """Configuration of the REST API endpoint."""

    address: str = ""


@dataclass
class RemoteDetails:
    """Details of a node reached over the network."""

    rpc: RPCConfig | None = None
    grpc: GRPCConfig | None = None
    api: APIConfig | None = None

    def validate(self) -> None:
        """Raise NodeConfigError if a required endpoint is missing."""
        if self.rpc is None:
            raise NodeConfigError("rpc config cannot be null")
        if self.grpc is None:
            raise NodeConfigError("grpc config cannot be null")

    def to_dict(self) -> dict[str, Any]:
        """Return the details as a plain mapping."""
        return {
            "rpc": None
            if self.rpc is None
            else {
                "client_name": self.rpc.client_name,
                "address": self.rpc.address,
                "max_connections": self.rpc.max_connections,
            },
            "grpc": None
            if self.grpc is None
            else {"address": self.grpc.address, "insecure": self.grpc.insecure},
            "api": None if self.api is None else {"address": self.api.address},
        }


Details = LocalDetails | RemoteDetails


@dataclass
class NodeConfig:
    """The node type together with its type-specific details."""

    type: str = ""
    details: Details | None = field(default=None)

    def to_dict(self) -> dict[str, Any]:
        """Return the configuration as a plain mapping."""
        return {
            "type": self.type,
            "config": None if self.details is None else self.details.to_dict(),
        }


def default_local_details() -> LocalDetails:
    """Return local details pointing at the default home directory."""
    return LocalDetails(home=str(Path.home() / ".simd"))


def default_remote_details() -> RemoteDetails:
    """Return remote details pointing at the default local endpoints."""
    return RemoteDetails(
        rpc=RPCConfig("juno", "http://localhost:26657", 20),
        grpc=GRPCConfig("localhost:9090", True),
        api=APIConfig("http://localhost:1317"),
    )


def default_node_config() -> NodeConfig:
    """Return the default node configuration, a remote node."""
    return NodeConfig(type=TYPE_REMOTE, details=default_remote_details())


def _local_from_dict(data: Mapping[str, Any] | None) -> LocalDetails:
    data = data or {}
    return LocalDetails(home=_str(data.get("home")))


def _remote_from_dict(data: Mapping[str, Any] | None) -> RemoteDetails:
    data = data or {}
    rpc = _section(data.get("rpc"), "rpc")
    grpc = _section(data.get("grpc"), "grpc")
    api = _section(data.get("api"), "api")
    return RemoteDetails(
        rpc=None
        if rpc is None
        else RPCConfig(
            client_name=_str(rpc.get("client_name")),
            address=_str(rpc.get("address")),
            max_connections=_int(rpc.get("max_connections")),
        ),
        grpc=None
        if grpc is None
        else GRPCConfig(address=_str(grpc.get("address")), insecure=_bool(grpc.get("insecure"))),
        api=None if api is None else APIConfig(address=_str(api.get("address"))),
    )


def node_config_from_dict(data: Mapping[str, Any]) -> NodeConfig:
    """Build a NodeConfig from its mapping form, choosing details by type."""
    if not isinstance(data, Mapping):
        raise NodeConfigError("node configuration must be a mapping")
    node_type = _str(data.get("type"))
    details_data = _section(data.get("config"), "node details")
    if node_type == TYPE_REMOTE:
        details: Details = _remote_from_dict(details_data)
    elif node_type == TYPE_LOCAL:
        details = _local_from_dict(details_data)
    else:
        raise NodeConfigError(f"unknown node type: {node_type!r}")
    return NodeConfig(type=node_type, details=details)


def load_node_config(text: str | bytes) -> NodeConfig:
    """Parse a node configuration from YAML."""
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as err:
        raise NodeConfigError(f"invalid node configuration: {err}") from err
    return node_config_from_dict(data)


def dump_node_config(config: NodeConfig) -> str:
    """Serialise a node configuration as YAML."""
    return yaml.safe_dump(
        config.to_dict(),
        sort_keys=False,
        indent=4,
        default_flow_style=False,
        allow_unicode=True,
    )