"""Block, commit and transaction data as read from a chain node."""

from __future__ import annotations

import json
import queue
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from juno.types.address import convert_validator_address_to_bech32_string
from juno.types.events import Event, EventNotFoundError, parse_event

_TIME_PATTERN = re.compile(
    r"^(?P<base>\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2})(?:\.(?P<frac>\d+))?(?P<tz>Z|[+-]\d{2}:\d{2})$"
)


def _parse_time(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    match = _TIME_PATTERN.match(str(value))
    if match is None:
        raise ValueError(f"invalid timestamp: {value!r}")
    frac = (match["frac"] or "").ljust(6, "0")[:6]
    tz = "+00:00" if match["tz"] == "Z" else match["tz"]
    return datetime.fromisoformat(f"{match['base']}.{frac}{tz}").astimezone(timezone.utc)


def _uint(value: Any) -> int:
    if value is None or value == "":
        return 0
    number = int(value)
    if number < 0:
        raise ValueError(f"expected an unsigned integer, got {value!r}")
    return number


@dataclass(frozen=True)
class Validator:
    """A validator's consensus address and consensus public key."""

    cons_addr: str
    cons_pubkey: str


@dataclass(frozen=True)
class CommitSig:
    """A single validator's signature of a block commit."""

    validator_address: str
    voting_power: int
    proposer_priority: int
    height: int
    timestamp: datetime


@dataclass(frozen=True)
class Block:
    """The stored data of a single chain block."""

    height: int
    hash: str
    tx_num: int
    total_gas: int
    proposer_address: str
    timestamp: datetime


def new_block_from_tm_block(result_block: Mapping[str, Any], total_gas: int) -> Block:
    """Build a Block from a node's block query result."""
    block = result_block["block"]
    header = block["header"]
    txs = (block.get("data") or {}).get("txs") or []
    return Block(
        height=int(header["height"]),
        hash=str(result_block["block_id"]["hash"]),
        tx_num=len(txs),
        total_gas=total_gas,
        proposer_address=convert_validator_address_to_bech32_string(
            bytes.fromhex(header["proposer_address"])
        ),
        timestamp=_parse_time(header["time"]),
    )


@dataclass(frozen=True)
class StandardMessage:
    """A transaction message kept as its raw JSON together with its type URL."""

    index: int
    type: str
    raw: bytes

    def to_json(self) -> bytes:
        """Return the message's raw JSON."""
        return self.raw


def unmarshal_message(index: int, raw_msg: bytes | str) -> StandardMessage:
    """Build a StandardMessage at the given index from its raw JSON."""
    raw = raw_msg.encode() if isinstance(raw_msg, str) else bytes(raw_msg)
    try:
        decoded = json.loads(raw)
    except ValueError as err:
        raise ValueError(f"failed to unmarshal StandardMessage: {err}") from err
    if decoded is None:
        msg_type = ""
    elif isinstance(decoded, dict):
        msg_type = decoded.get("@type", "")
        if not isinstance(msg_type, str):
            raise ValueError("failed to unmarshal StandardMessage: @type must be a string")
    else:
        raise ValueError("failed to unmarshal StandardMessage: message must be an object")
    return StandardMessage(index=index, type=msg_type, raw=raw)


@dataclass(frozen=True)
class SignerInfo:
    """Signing data of one transaction signer."""

    public_key: Any = None
    mode_info: Any = None
    sequence: int = 0


@dataclass(frozen=True)
class Fee:
    """The fee paid by a transaction."""

    amount: list[dict[str, Any]] = field(default_factory=list)
    gas_limit: int = 0
    payer: str = ""
    granter: str = ""


@dataclass(frozen=True)
class AuthInfo:
    """Signer information and fee of a transaction."""

    signer_infos: list[SignerInfo] = field(default_factory=list)
    fee: Fee | None = None


@dataclass(frozen=True)
class TxBody:
    """The body of a transaction, holding its messages."""

    messages: list[StandardMessage] = field(default_factory=list)
    memo: str = ""
    timeout_height: int = 0
    extension_options: list[Any] = field(default_factory=list)
    non_critical_extension_options: list[Any] = field(default_factory=list)


@dataclass(frozen=True)
class Tx:
    """A decoded transaction."""

    body: TxBody = field(default_factory=TxBody)
    auth_info: AuthInfo = field(default_factory=AuthInfo)
    signatures: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class _MessageLog:
    msg_index: int
    log: str
    events: tuple[Event, ...]


@dataclass(frozen=True)
class TxResponse:
    """The execution result of a transaction."""

    height: int = 0
    txhash: str = ""
    codespace: str = ""
    code: int = 0
    data: str = ""
    raw_log: str = ""
    logs: list[_MessageLog] = field(default_factory=list)
    info: str = ""
    gas_wanted: int = 0
    gas_used: int = 0
    tx: Tx | None = None
    timestamp: str = ""
    events: list[Event] = field(default_factory=list)


@dataclass(frozen=True)
class Transaction:
    """A transaction already included in the chain, with its result."""

    tx_response: TxResponse
    tx: Tx

    def find_event_by_type(self, index: int, event_type: str) -> Event:
        """Return the first event of the given type emitted by the message at index."""
        for event in self.tx_response.logs[index].events:
            if event.type == event_type:
                return event
        raise EventNotFoundError(
            f"no {event_type} event found inside tx with hash {self.tx_response.txhash}"
        )

    def find_attribute_by_key(self, event: Event, attr_key: str) -> str:
        """Return the value of the event attribute having the given key."""
        for attr in event.attributes:
            if attr.key == attr_key:
                return attr.value
        raise EventNotFoundError(
            f"no event with attribute {attr_key} found inside tx with hash {self.tx_response.txhash}"
        )

    def successful(self) -> bool:
        """Tell whether the transaction succeeded."""
        return self.tx_response.code == 0


def _parse_body(data: Mapping[str, Any]) -> TxBody:
    messages = []
    for index, msg in enumerate(data.get("messages") or []):
        try:
            messages.append(
                unmarshal_message(index, json.dumps(msg, separators=(",", ":")).encode())
            )
        except ValueError as err:
            raise ValueError(f"failed to create message: {err}") from err
    return TxBody(
        messages=messages,
        memo=str(data.get("memo") or ""),
        timeout_height=_uint(data.get("timeout_height")),
        extension_options=list(data.get("extension_options") or []),
        non_critical_extension_options=list(data.get("non_critical_extension_options") or []),
    )


def _parse_fee(data: Mapping[str, Any] | None) -> Fee | None:
    if data is None:
        return None
    return Fee(
        amount=list(data.get("amount") or []),
        gas_limit=_uint(data.get("gas_limit")),
        payer=str(data.get("payer") or ""),
        granter=str(data.get("granter") or ""),
    )


def _parse_auth_info(data: Mapping[str, Any]) -> AuthInfo:
    return AuthInfo(
        signer_infos=[
            SignerInfo(
                public_key=info.get("public_key"),
                mode_info=info.get("mode_info"),
                sequence=_uint(info.get("sequence")),
            )
            for info in data.get("signer_infos") or []
        ],
        fee=_parse_fee(data.get("fee")),
    )


def _parse_tx(data: Mapping[str, Any]) -> Tx:
    return Tx(
        body=_parse_body(data.get("body") or {}),
        auth_info=_parse_auth_info(data.get("auth_info") or {}),
        signatures=list(data.get("signatures") or []),
    )


def _parse_tx_response(data: Mapping[str, Any]) -> TxResponse:
    inner_tx = data.get("tx")
    return TxResponse(
        height=_uint(data.get("height")),
        txhash=str(data.get("txhash") or ""),
        codespace=str(data.get("codespace") or ""),
        code=int(data.get("code") or 0),
        data=str(data.get("data") or ""),
        raw_log=str(data.get("raw_log") or ""),
        logs=[
            _MessageLog(
                msg_index=int(log.get("msg_index") or 0),
                log=str(log.get("log") or ""),
                events=tuple(parse_event(ev) for ev in log.get("events") or []),
            )
            for log in data.get("logs") or []
        ],
        info=str(data.get("info") or ""),
        gas_wanted=_uint(data.get("gas_wanted")),
        gas_used=_uint(data.get("gas_used")),
        tx=_parse_tx(inner_tx) if isinstance(inner_tx, Mapping) else None,
        timestamp=str(data.get("timestamp") or ""),
        events=[parse_event(ev) for ev in data.get("events") or []],
    )


def parse_transaction(data: Mapping[str, Any] | bytes | str) -> Transaction:
    """Build a Transaction from a transaction service response."""
    if isinstance(data, (bytes, str)):
        data = json.loads(data)
    if not isinstance(data, Mapping):
        raise ValueError("transaction data must be a JSON object")
    return Transaction(
        tx_response=_parse_tx_response(data.get("tx_response") or {}),
        tx=_parse_tx(data.get("tx") or {}),
    )


def new_queue(size: int) -> queue.Queue:
    """Return a FIFO queue of block heights holding at most size items."""
    if size < 0:
        raise ValueError(f"queue size cannot be negative: {size}")
    # A zero-sized queue would be unbounded here; keep it at a single slot instead.
    return queue.Queue(maxsize=max(size, 1))