"""Configuration of the block parser."""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import timedelta
from fractions import Fraction
from typing import Any

_NANOS_PER_UNIT = {
    "ns": 1,
    "us": 1_000,
    "\u00b5s": 1_000,
    "\u03bcs": 1_000,
    "ms": 1_000_000,
    "s": 1_000_000_000,
    "m": 60_000_000_000,
    "h": 3_600_000_000_000,
}
_DURATION_PART = re.compile(r"(\d*)(?:\.(\d*))?(ns|us|\u00b5s|\u03bcs|ms|s|m|h)")
_SECOND = 1_000_000_000


def _parse_duration(value: Any) -> timedelta:
    if isinstance(value, timedelta):
        return value
    if not isinstance(value, str):
        raise ValueError(f"invalid duration: {value!r}")
    text = value
    sign = 1
    if text[:1] in "+-" and text:
        sign = -1 if text[0] == "-" else 1
        text = text[1:]
    if text == "0":
        return timedelta(0)
    if not text:
        raise ValueError(f"invalid duration: {value!r}")
    total = Fraction(0)
    pos = 0
    while pos < len(text):
        match = _DURATION_PART.match(text, pos)
        if match is None or not (match[1] or match[2]):
            raise ValueError(f"invalid duration: {value!r}")
        amount = Fraction(int(match[1] or 0))
        if match[2]:
            amount += Fraction(int(match[2]), 10 ** len(match[2]))
        total += amount * _NANOS_PER_UNIT[match[3]]
        pos = match.end()
    return timedelta(microseconds=round(sign * total / 1000))


def _fraction(value: int, unit: int) -> str:
    whole, rest = divmod(value, unit)
    if not rest:
        return str(whole)
    digits = str(rest).rjust(len(str(unit)) - 1, "0").rstrip("0")
    return f"{whole}.{digits}"


def _format_duration(value: timedelta) -> str:
    nanos = (value // timedelta(microseconds=1)) * 1000
    if nanos == 0:
        return "0s"
    sign = "-" if nanos < 0 else ""
    nanos = abs(nanos)
    if nanos < _SECOND:
        if nanos < 1_000:
            return f"{sign}{nanos}ns"
        if nanos < 1_000_000:
            return f"{sign}{_fraction(nanos, 1_000)}\u00b5s"
        return f"{sign}{_fraction(nanos, 1_000_000)}ms"
    hours, rest = divmod(nanos, 3600 * _SECOND)
    minutes, rest = divmod(rest, 60 * _SECOND)
    seconds = f"{_fraction(rest, _SECOND)}s"
    if hours:
        return f"{sign}{hours}h{minutes}m{seconds}"
    if minutes:
        return f"{sign}{minutes}m{seconds}"
    return f"{sign}{seconds}"


@dataclass
class ParsingConfig:
    """How and which blocks the parser processes."""

    workers: int = 0
    parse_new_blocks: bool = False
    parse_old_blocks: bool = False
    parse_genesis: bool = False
    genesis_file_path: str = ""
    start_height: int = 0
    fast_sync: bool = False
    avg_block_time: timedelta | None = None

    def to_dict(self) -> dict[str, Any]:
        """Return the configuration as a plain mapping with durations as text."""
        data: dict[str, Any] = {}
        if self.genesis_file_path:
            data["genesis_file_path"] = self.genesis_file_path
        data["workers"] = self.workers
        data["start_height"] = self.start_height
        data["average_block_time"] = (
            None if self.avg_block_time is None else _format_duration(self.avg_block_time)
        )
        data["listen_new_blocks"] = self.parse_new_blocks
        data["parse_old_blocks"] = self.parse_old_blocks
        data["parse_genesis"] = self.parse_genesis
        if self.fast_sync:
            data["fast_sync"] = self.fast_sync
        return data


def default_parsing_config() -> ParsingConfig:
    """Return the default parsing configuration."""
    return ParsingConfig(
        workers=1,
        parse_new_blocks=True,
        parse_old_blocks=True,
        parse_genesis=True,
        genesis_file_path="",
        start_height=1,
        fast_sync=False,
        avg_block_time=timedelta(seconds=5),
    )


def parsing_config_from_dict(data: Mapping[str, Any] | None) -> ParsingConfig:
    """Build a ParsingConfig from its mapping form; missing keys take zero values."""
    if data is None:
        return ParsingConfig()
    if not isinstance(data, Mapping):
        raise ValueError("parsing configuration must be a mapping")
    avg = data.get("average_block_time")
    return ParsingConfig(
        workers=int(data.get("workers") or 0),
        parse_new_blocks=bool(data.get("listen_new_blocks") or False),
        parse_old_blocks=bool(data.get("parse_old_blocks") or False),
        parse_genesis=bool(data.get("parse_genesis") or False),
        genesis_file_path=str(data.get("genesis_file_path") or ""),
        start_height=int(data.get("start_height") or 0),
        fast_sync=bool(data.get("fast_sync") or False),
        avg_block_time=None if avg is None else _parse_duration(avg),
    )