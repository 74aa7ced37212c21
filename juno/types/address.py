"""Bech32 encoding and validator address helpers."""

from __future__ import annotations

from dataclasses import dataclass

_CHARSET = "qpzry9x8gf2tvdw0s3jn54khce6mua7l"
_GENERATOR = (0x3B6A57B2, 0x26508E6D, 0x1EA119FA, 0x3D4233DD, 0x2A1462B3)
_MAX_DECODE_LENGTH = 1023


@dataclass
class _PrefixConfig:
    account: str = "cosmos"

    @property
    def consensus_address(self) -> str:
        return f"{self.account}valcons"

    @property
    def consensus_pubkey(self) -> str:
        return f"{self.account}valconspub"


_PREFIXES = _PrefixConfig()


def _polymod(values: list[int]) -> int:
    chk = 1
    for value in values:
        top = chk >> 25
        chk = (chk & 0x1FFFFFF) << 5 ^ value
        for i, gen in enumerate(_GENERATOR):
            if (top >> i) & 1:
                chk ^= gen
    return chk


def _hrp_expand(hrp: str) -> list[int]:
    return [ord(c) >> 5 for c in hrp] + [0] + [ord(c) & 31 for c in hrp]


def _create_checksum(hrp: str, data: list[int]) -> list[int]:
    polymod = _polymod(_hrp_expand(hrp) + data + [0] * 6) ^ 1
    return [(polymod >> 5 * (5 - i)) & 31 for i in range(6)]


def _convert_bits(data: bytes | list[int], from_bits: int, to_bits: int, pad: bool) -> list[int]:
    acc = 0
    bits = 0
    result: list[int] = []
    max_value = (1 << to_bits) - 1
    for value in data:
        if value < 0 or value >> from_bits:
            raise ValueError(f"invalid data value {value} for {from_bits}-bit groups")
        acc = (acc << from_bits) | value
        bits += from_bits
        while bits >= to_bits:
            bits -= to_bits
            result.append((acc >> bits) & max_value)
    if pad:
        if bits:
            result.append((acc << (to_bits - bits)) & max_value)
    elif bits >= from_bits or ((acc << (to_bits - bits)) & max_value):
        raise ValueError("invalid padding in bech32 data")
    return result


def bech32_encode(hrp: str, data: list[int]) -> str:
    """Encode 5-bit groups under the given human-readable part."""
    if not hrp:
        raise ValueError("human-readable part cannot be empty")
    hrp = hrp.lower()
    data = list(data)
    if any(not 0 <= value < 32 for value in data):
        raise ValueError("bech32 data values must be 5-bit integers")
    combined = data + _create_checksum(hrp, data)
    return hrp + "1" + "".join(_CHARSET[value] for value in combined)


def bech32_decode(bech: str) -> tuple[str, list[int]]:
    """Decode a bech32 string into its human-readable part and 5-bit groups."""
    if len(bech) > _MAX_DECODE_LENGTH:
        raise ValueError(f"bech32 string too long: {len(bech)}")
    if any(ord(c) < 33 or ord(c) > 126 for c in bech):
        raise ValueError("bech32 string contains invalid characters")
    if bech.lower() != bech and bech.upper() != bech:
        raise ValueError("bech32 string uses mixed case")
    bech = bech.lower()
    pos = bech.rfind("1")
    if pos < 1 or pos + 7 > len(bech):
        raise ValueError("invalid bech32 separator position")
    hrp = bech[:pos]
    try:
        data = [_CHARSET.index(c) for c in bech[pos + 1:]]
    except ValueError:
        raise ValueError("bech32 data contains invalid characters") from None
    if _polymod(_hrp_expand(hrp) + data) != 1:
        raise ValueError("invalid bech32 checksum")
    return hrp, data[:-6]


def convert_and_encode(hrp: str, data: bytes) -> str:
    """Encode raw bytes as a bech32 string."""
    return bech32_encode(hrp, _convert_bits(bytes(data), 8, 5, True))


def decode_and_convert(bech: str) -> tuple[str, bytes]:
    """Decode a bech32 string back into its human-readable part and raw bytes."""
    hrp, data = bech32_decode(bech)
    return hrp, bytes(_convert_bits(data, 5, 8, False))


def set_bech32_prefix(prefix: str) -> None:
    """Set the account prefix from which the consensus prefixes are derived."""
    if not prefix.strip():
        raise ValueError("bech32 prefix cannot be empty")
    _PREFIXES.account = prefix


def consensus_address_prefix() -> str:
    """Return the prefix used for validator consensus addresses."""
    return _PREFIXES.consensus_address


def consensus_pubkey_prefix() -> str:
    """Return the prefix used for validator consensus public keys."""
    return _PREFIXES.consensus_pubkey


def convert_validator_address_to_bech32_string(address: bytes) -> str:
    """Return the bech32 consensus address for raw address bytes."""
    if not address:
        return ""
    return convert_and_encode(consensus_address_prefix(), address)


def convert_validator_pubkey_to_bech32_string(pubkey: bytes) -> str:
    """Return the bech32 consensus public key for raw public key bytes."""
    return convert_and_encode(consensus_pubkey_prefix(), pubkey)