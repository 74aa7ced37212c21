import os

import pytest

from juno.node.config import (
    APIConfig,
    GRPCConfig,
    LocalDetails,
    NodeConfig,
    NodeConfigError,
    RemoteDetails,
    RPCConfig,
    default_local_details,
    default_node_config,
    default_remote_details,
    dump_node_config,
    load_node_config,
    node_config_from_dict,
)

REMOTE_DATA = """
type: "remote"
config:
  rpc:
    client_name: "juno"
    max_connections: 1
    address: "http://localhost:26657"

  grpc:
    insecure: true
    address: "http://localhost:9090"

  api:
    address: "http://localhost:1317"
"""

LOCAL_DATA = """
type: "local"
config: 
  home: /home/user/.cosmos
"""


def test_unmarshal_remote():
    config = load_node_config(REMOTE_DATA)
    assert isinstance(config.details, RemoteDetails)
    assert config.type == "remote"
    assert config.details.rpc == RPCConfig("juno", "http://localhost:26657", 1)
    assert config.details.grpc == GRPCConfig("http://localhost:9090", True)
    assert config.details.api == APIConfig("http://localhost:1317")


def test_unmarshal_local():
    config = load_node_config(LOCAL_DATA)
    assert isinstance(config.details, LocalDetails)
    assert config.details.home == "/home/user/.cosmos"


def test_marshal_local():
    config = NodeConfig(type="local", details=LocalDetails(home="/home/user/.cosmos"))
    expected = "type: local\nconfig:\n    home: /home/user/.cosmos\n"
    assert dump_node_config(config) == expected


def test_marshal_remote():
    config = NodeConfig(
        type="remote",
        details=RemoteDetails(
            rpc=RPCConfig(client_name="juno", address="http://localhost:26657", max_connections=10),
            grpc=GRPCConfig(address="http://localhost:9090", insecure=True),
            api=APIConfig(address="http://localhost:1317"),
        ),
    )
    expected = (
        "type: remote\n"
        "config:\n"
        "    rpc:\n"
        "        client_name: juno\n"
        "        address: http://localhost:26657\n"
        "        max_connections: 10\n"
        "    grpc:\n"
        "        address: http://localhost:9090\n"
        "        insecure: true\n"
        "    api:\n"
        "        address: http://localhost:1317\n"
    )
    assert dump_node_config(config) == expected


@pytest.mark.parametrize("config", [default_node_config(), load_node_config(LOCAL_DATA)])
def test_round_trip(config):
    assert load_node_config(dump_node_config(config)) == config


def test_unknown_type_raises():
    with pytest.raises(NodeConfigError):
        load_node_config('type: "none"\n')
    with pytest.raises(NodeConfigError):
        node_config_from_dict({"config": {"home": "/tmp"}})


def test_non_mapping_raises():
    with pytest.raises(NodeConfigError):
        node_config_from_dict(["remote"])


def test_missing_details_are_zero_valued():
    config = node_config_from_dict({"type": "remote"})
    assert config.details == RemoteDetails()
    local = node_config_from_dict({"type": "local"})
    assert local.details == LocalDetails(home="")


def test_local_validate():
    with pytest.raises(NodeConfigError, match="home path cannot be empty"):
        LocalDetails(home="   ").validate()
    details = LocalDetails(home="/home/user/.cosmos")
    details.validate()
    assert details.to_dict() == {"home": "/home/user/.cosmos"}


def test_remote_validate():
    with pytest.raises(NodeConfigError, match="rpc config cannot be null"):
        RemoteDetails(grpc=GRPCConfig()).validate()
    with pytest.raises(NodeConfigError, match="grpc config cannot be null"):
        RemoteDetails(rpc=RPCConfig()).validate()


def test_defaults():
    remote = default_remote_details()
    assert remote.rpc == RPCConfig("juno", "http://localhost:26657", 20)
    assert remote.grpc == GRPCConfig("localhost:9090", True)
    assert remote.api == APIConfig("http://localhost:1317")
    assert default_node_config().type == "remote"
    assert os.path.basename(default_local_details().home) == ".simd"


def test_to_dict_with_missing_endpoints():
    assert NodeConfig(type="remote", details=RemoteDetails()).to_dict() == {
        "type": "remote",
        "config": {"rpc": None, "grpc": None, "api": None},
    }