import os
from datetime import timedelta

import pytest

from juno.config import (
    ChainConfig,
    Config,
    ConfigError,
    default_chain_config,
    default_config,
    default_config_parser,
    get_avg_block_time,
    get_config_file_path,
    read,
)
from juno.node.config import RemoteDetails
from juno.parser.config import ParsingConfig

DATA = """
chain:
  bech32_prefix: cosmos
  modules:
    - pruning

node: 
  type: remote
  rpc:
    client_name: juno
    address: http://localhost:26657

  grpc:
    address: localhost:9090
    insecure: true

logging:
  format: text
  level: debug

parser:
  workers: 5
  listen_new_blocks: true
  parse_old_blocks: true
  parse_genesis: true
  start_height: 1
  fast_sync: false

database:
  host: localhost
  name: juno
  password: password
  port: 5432
  schema: public
  ssl_mode: 
  user: user
"""


def test_default_config_parser():
    cfg = default_config_parser(DATA.encode())
    assert cfg.raw
    assert cfg.raw == DATA.encode()
    assert cfg.chain.bech32_prefix == "cosmos"
    assert cfg.chain.modules == ["pruning"]


def test_parser_sections_of_sample():
    cfg = default_config_parser(DATA)
    assert cfg.node.type == "remote"
    assert cfg.node.details == RemoteDetails()
    assert cfg.parser == ParsingConfig()
    assert cfg.logging == {"format": "text", "level": "debug"}
    assert cfg.database["port"] == 5432


def test_default_config_round_trip():
    cfg = default_config()
    assert cfg.raw == cfg.to_yaml().encode()
    parsed = default_config_parser(cfg.raw)
    assert parsed == cfg
    assert parsed.chain == default_chain_config()


def test_empty_document_is_zero_valued():
    cfg = default_config_parser(b"")
    assert cfg == Config()


@pytest.mark.parametrize("text", ["chain: [1, 2]\n", "- a\n- b\n", "node:\n  type: bogus\n", "a: [\n"])
def test_parser_errors(text):
    with pytest.raises(ConfigError):
        default_config_parser(text)


def test_read_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(DATA)
    cfg = read(str(path))
    assert cfg.chain.modules == ["pruning"]
    assert cfg.raw == DATA.encode()


def test_read_uses_given_parser(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("ignored")
    marker = Config(chain=ChainConfig("custom", []))
    assert read(str(path), lambda data: marker).chain.bech32_prefix == "custom"


def test_read_errors(tmp_path):
    with pytest.raises(ConfigError, match="empty configuration path"):
        read("", default_config_parser)
    with pytest.raises(ConfigError, match="failed to read config"):
        read(str(tmp_path / "missing.yaml"), default_config_parser)


def test_get_config_file_path():
    assert get_config_file_path("") == "config.yaml"
    assert get_config_file_path("/srv/juno") == os.path.join("/srv/juno", "config.yaml")


def test_get_avg_block_time():
    assert get_avg_block_time(ParsingConfig()) == timedelta(seconds=3)
    assert get_avg_block_time(ParsingConfig(avg_block_time=timedelta(seconds=5))) == timedelta(
        seconds=5
    )


def test_is_module_enabled():
    chain = ChainConfig("cosmos", ["Pruning", "auth"])
    assert chain.is_module_enabled("pruning")
    assert chain.is_module_enabled("AUTH")
    assert not chain.is_module_enabled("bank")
    assert not default_chain_config().is_module_enabled("pruning")