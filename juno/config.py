"""The whole parser configuration and how it is read from disk."""

from __future__ import annotations

import os
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any

import yaml

from juno.node.config import (
    NodeConfig,
    NodeConfigError,
    default_node_config,
    node_config_from_dict,
)
from juno.parser.config import (
    ParsingConfig,
    default_parsing_config,
    parsing_config_from_dict,
)

_DEFAULT_AVG_BLOCK_TIME = timedelta(seconds=3)


class ConfigError(ValueError):
    """Raised when a configuration cannot be read or parsed."""


@dataclass
class ChainConfig:
    """The chain's address prefix and the enabled modules."""

    bech32_prefix: str = ""
    modules: list[str] = field(default_factory=list)

    def is_module_enabled(self, module_name: str) -> bool:
        """Tell whether a module is enabled, ignoring case."""
        wanted = module_name.casefold()
        return any(module.casefold() == wanted for module in self.modules)


@dataclass
class Config:
    """All parser configuration, together with the raw text it came from."""

    chain: ChainConfig = field(default_factory=ChainConfig)
    node: NodeConfig = field(default_factory=NodeConfig)
    parser: ParsingConfig = field(default_factory=ParsingConfig)
    database: dict[str, Any] = field(default_factory=dict)
    logging: dict[str, Any] = field(default_factory=dict)
    raw: bytes = field(default=b"", compare=False, repr=False)

    def to_yaml(self) -> str:
        """Serialise the configuration as YAML."""
        data = {
            "chain": {
                "bech32_prefix": self.chain.bech32_prefix,
                "modules": list(self.chain.modules),
            },
            "node": self.node.to_dict(),
            "parsing": self.parser.to_dict(),
            "database": dict(self.database),
            "logging": dict(self.logging),
        }
        return yaml.safe_dump(
            data, sort_keys=False, indent=4, default_flow_style=False, allow_unicode=True
        )


def default_chain_config() -> ChainConfig:
    """Return the default chain configuration."""
    return ChainConfig(bech32_prefix="cosmos", modules=[])


def default_config() -> Config:
    """Return the default configuration with its YAML form as raw bytes."""
    cfg = Config(
        chain=default_chain_config(),
        node=default_node_config(),
        parser=default_parsing_config(),
    )
    cfg.raw = cfg.to_yaml().encode()
    return cfg


def _mapping(data: Any, name: str) -> Mapping[str, Any]:
    if data is None:
        return {}
    if not isinstance(data, Mapping):
        raise ConfigError(f"{name} configuration must be a mapping")
    return data


def default_config_parser(config_data: bytes | str) -> Config:
    """Parse a configuration from YAML, keeping the input as raw bytes."""
    raw = config_data.encode() if isinstance(config_data, str) else bytes(config_data)
    try:
        data = _mapping(yaml.safe_load(raw), "root")
        chain = _mapping(data.get("chain"), "chain")
        node_data = data.get("node")
        node = NodeConfig() if node_data is None else node_config_from_dict(node_data)
        parser = parsing_config_from_dict(_mapping(data.get("parsing"), "parsing"))
    except (yaml.YAMLError, NodeConfigError, ValueError, TypeError) as err:
        if isinstance(err, ConfigError):
            raise
        raise ConfigError(f"failed to parse config: {err}") from err
    return Config(
        chain=ChainConfig(
            bech32_prefix=str(chain.get("bech32_prefix") or ""),
            modules=[str(module) for module in chain.get("modules") or []],
        ),
        node=node,
        parser=parser,
        database=dict(_mapping(data.get("database"), "database")),
        logging=dict(_mapping(data.get("logging"), "logging")),
        raw=raw,
    )


def read(
    config_path: str | os.PathLike[str],
    parser: Callable[[bytes], Config] = default_config_parser,
) -> Config:
    """Read the configuration file at config_path and parse it."""
    if not str(config_path):
        raise ConfigError("empty configuration path")
    try:
        with open(config_path, "rb") as handle:
            data = handle.read()
    except OSError as err:
        raise ConfigError(f"failed to read config: {err}") from err
    return parser(data)


def get_config_file_path(home_path: str) -> str:
    """Return the path of the configuration file inside the home directory."""
    return os.path.join(home_path, "config.yaml")


def get_avg_block_time(parser_config: ParsingConfig) -> timedelta:
    """Return the configured average block time, or three seconds when unset."""
    if parser_config.avg_block_time is None:
        return _DEFAULT_AVG_BLOCK_TIME
    return parser_config.avg_block_time