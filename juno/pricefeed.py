"""Configuration of the tokens whose prices are tracked."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any


@dataclass
class Coin:
    """One denomination of a token and its decimal exponent."""

    denom: str
    exponent: int
    price_id: str = ""


@dataclass
class Token:
    """A token with all of its denominations."""

    name: str
    units: list[Coin] = field(default_factory=list)


@dataclass
class PricefeedConfig:
    """The list of tracked tokens."""

    tokens: list[Token] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Return the configuration as a plain mapping."""
        return {
            "tokens": [
                {
                    "name": token.name,
                    "units": [_coin_to_dict(unit) for unit in token.units],
                }
                for token in self.tokens
            ]
        }


def _coin_to_dict(coin: Coin) -> dict[str, Any]:
    data: dict[str, Any] = {"denom": coin.denom, "exponent": coin.exponent}
    if coin.price_id:
        data["price_id"] = coin.price_id
    return data


def default_pricefeed_config() -> PricefeedConfig:
    """Return the default configuration tracking a single token."""
    token = Token(
        name="desmos",
        units=[
            Coin(denom="udesmos", exponent=0),
            Coin(denom="desmos", exponent=6, price_id="desmos"),
        ],
    )
    return PricefeedConfig(tokens=[token])


def pricefeed_config_from_dict(data: Mapping[str, Any] | None) -> PricefeedConfig:
    """Build a PricefeedConfig from its mapping form."""
    if data is None:
        return PricefeedConfig()
    if not isinstance(data, Mapping):
        raise ValueError("pricefeed configuration must be a mapping")
    return PricefeedConfig(
        tokens=[
            Token(
                name=str(token.get("name") or ""),
                units=[
                    Coin(
                        denom=str(unit.get("denom") or ""),
                        exponent=int(unit.get("exponent") or 0),
                        price_id=str(unit.get("price_id") or ""),
                    )
                    for unit in token.get("units") or []
                ],
            )
            for token in data.get("tokens") or []
        ]
    )