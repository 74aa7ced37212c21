"""Workers that fetch blocks from a node and export them to a database."""

from __future__ import annotations

import base64
import binascii
import logging
import queue
import re
import threading
import time
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from juno.config import get_avg_block_time
from juno.parser.config import ParsingConfig, default_parsing_config
from juno.types.address import (
    convert_validator_address_to_bech32_string,
    convert_validator_pubkey_to_bech32_string,
)
from juno.types.cosmos import (
    CommitSig,
    StandardMessage,
    Transaction,
    Validator,
    new_block_from_tm_block,
)
from juno.types.genesis import get_genesis_doc_and_state

_TIMESTAMP = re.compile(
    r"^(?P<base>\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2})(?:\.(?P<frac>\d+))?(?P<tz>Z|[+-]\d{2}:\d{2})$"
)


class ExportError(Exception):
    """Raised when a block, its commit or its transactions cannot be exported."""


@dataclass
class Context:
    """What the workers share: the node, the database, the logger and the modules."""

    node: Any
    database: Any
    logger: logging.Logger = field(default_factory=lambda: logging.getLogger("juno.parser"))
    modules: list[Any] = field(default_factory=list)
    parsing: ParsingConfig = field(default_factory=default_parsing_config)


def _address_bytes(value: Any) -> bytes:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    return bytes.fromhex(str(value or ""))


def _parse_timestamp(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    match = _TIMESTAMP.match(str(value))
    if match is None:
        raise ValueError(f"invalid timestamp: {value!r}")
    frac = (match["frac"] or "").ljust(6, "0")[:6]
    tz = "+00:00" if match["tz"] == "Z" else match["tz"]
    return datetime.fromisoformat(f"{match['base']}.{frac}{tz}").astimezone(timezone.utc)


def _module_name(module: Any) -> str:
    name = getattr(module, "name", None)
    if callable(name):
        name = name()
    return str(name) if name else type(module).__name__


def find_validator_by_addr(
    cons_addr: str, vals: Mapping[str, Any]
) -> Mapping[str, Any] | None:
    """Return the validator whose consensus address matches, or None."""
    for val in vals.get("validators") or []:
        address = convert_validator_address_to_bech32_string(_address_bytes(val.get("address")))
        if address == cons_addr:
            return val
    return None


def sum_gas_txs(txs: Iterable[Transaction]) -> int:
    """Return the total gas used by the transactions."""
    return sum(tx.tx_response.gas_used for tx in txs)


class Worker:
    """Consumes block heights from a queue and exports each block to the database."""

    def __init__(self, context: Context, height_queue: queue.Queue, index: int) -> None:
        self.index = index
        self.queue = height_queue
        self.node = context.node
        self.db = context.database
        self.logger = context.logger
        self.modules = list(context.modules)
        self.parsing = context.parsing

    def start(self) -> None:
        """Process heights from the queue until None is taken from it.

        A height that fails is re-enqueued after the average block time.
        """
        try:
            chain_id = self.node.chain_id()
        except Exception as err:
            self.logger.error("error while getting chain ID from the node: %s", err)
            chain_id = ""

        while (height := self.queue.get()) is not None:
            try:
                self.process_if_not_exists(height)
            except Exception as err:
                time.sleep(get_avg_block_time(self.parsing).total_seconds())
                self.logger.error("re-enqueueing failed block %s: %s", height, err)
                threading.Thread(target=self.queue.put, args=(height,), daemon=True).start()
            self.logger.debug("worker %d on chain %s reached height %s", self.index, chain_id, height)

    def process_if_not_exists(self, height: int) -> None:
        """Export the block at height unless the database already holds it."""
        try:
            exists = self.db.has_block(height)
        except Exception as err:
            raise ExportError(f"error while searching for block: {err}") from err
        if exists:
            self.logger.debug("skipping already exported block %d", height)
            return
        self.process(height)

    def process(self, height: int) -> None:
        """Fetch the block at height with its metadata and export it."""
        if height == 0:
            try:
                doc, state = get_genesis_doc_and_state(self.parsing.genesis_file_path, self.node)
            except Exception as err:
                raise ExportError(f"failed to get genesis: {err}") from err
            self.handle_genesis(doc, state)
            return

        self.logger.debug("processing block %d", height)
        block = self._fetch("failed to get block from node", self.node.block, height)
        results = self._fetch(
            "failed to get block results from node", self.node.block_results, height
        )
        txs = self._fetch("failed to get transactions for block", self.node.txs, block)
        vals = self._fetch("failed to get validators for block", self.node.validators, height)
        self.export_block(block, results, txs, vals)

    def process_transactions(self, height: int) -> None:
        """Fetch the transactions of the block at height and export them."""
        block = self._fetch("failed to get block from node", self.node.block, height)
        txs = self._fetch("failed to get transactions for block", self.node.txs, block)
        self.export_txs(txs)

    @staticmethod
    def _fetch(message: str, query: Any, argument: Any) -> Any:
        try:
            return query(argument)
        except Exception as err:
            raise ExportError(f"{message}: {err}") from err

    def handle_genesis(self, genesis_doc: Mapping[str, Any], app_state: Mapping[str, Any]) -> None:
        """Pass the genesis to every module that handles it, in registration order."""
        for module in self.modules:
            handler = getattr(module, "handle_genesis", None)
            if not callable(handler):
                continue
            try:
                handler(genesis_doc, app_state)
            except Exception as err:
                self.logger.error("error while handling genesis in module %s: %s",
                                  _module_name(module), err)

    def save_validators(self, vals: Sequence[Mapping[str, Any]]) -> None:
        """Store the consensus address and public key of every validator."""
        validators = []
        for val in vals:
            cons_addr = convert_validator_address_to_bech32_string(_address_bytes(val.get("address")))
            try:
                pubkey = base64.b64decode((val.get("pub_key") or {}).get("value") or "", validate=True)
                cons_pubkey = convert_validator_pubkey_to_bech32_string(pubkey)
            except (binascii.Error, ValueError, AttributeError) as err:
                raise ExportError(
                    f"failed to convert validator public key for validators {cons_addr}: {err}"
                ) from err
            validators.append(Validator(cons_addr=cons_addr, cons_pubkey=cons_pubkey))
        try:
            self.db.save_validators(validators)
        except Exception as err:
            raise ExportError(f"error while saving validators: {err}") from err

    def export_block(
        self,
        block: Mapping[str, Any],
        results: Mapping[str, Any],
        txs: list[Transaction],
        vals: Mapping[str, Any],
    ) -> None:
        """Store the block, its validators, commit and transactions, then run the modules."""
        self.save_validators(vals.get("validators") or [])

        header = block["block"]["header"]
        proposer = convert_validator_address_to_bech32_string(
            _address_bytes(header.get("proposer_address"))
        )
        if find_validator_by_addr(proposer, vals) is None:
            raise ExportError(f"failed to find validator by proposer address {proposer}")

        try:
            self.db.save_block(new_block_from_tm_block(block, sum_gas_txs(txs)))
        except Exception as err:
            raise ExportError(f"failed to persist block: {err}") from err

        self.export_commit(block["block"].get("last_commit") or {}, vals)

        for module in self.modules:
            handler = getattr(module, "handle_block", None)
            if not callable(handler):
                continue
            try:
                handler(block, results, txs, vals)
            except Exception as err:
                self.logger.error("error while handling block %s in module %s: %s",
                                  header.get("height"), _module_name(module), err)

        self.export_txs(txs)

    def export_commit(self, commit: Mapping[str, Any], vals: Mapping[str, Any]) -> None:
        """Store the signatures of a block commit, skipping empty ones."""
        signatures = []
        height = int(commit.get("height") or 0)
        for commit_sig in commit.get("signatures") or []:
            if commit_sig.get("signature") is None:
                continue
            address = _address_bytes(commit_sig.get("validator_address"))
            cons_addr = convert_validator_address_to_bech32_string(address)
            val = find_validator_by_addr(cons_addr, vals)
            if val is None:
                raise ExportError(
                    f"failed to find validator by commit validator address {cons_addr}"
                )
            signatures.append(
                CommitSig(
                    validator_address=cons_addr,
                    voting_power=int(val.get("voting_power") or 0),
                    proposer_priority=int(val.get("proposer_priority") or 0),
                    height=height,
                    timestamp=_parse_timestamp(commit_sig.get("timestamp")),
                )
            )
        try:
            self.db.save_commit_signatures(signatures)
        except Exception as err:
            raise ExportError(f"error while saving commit signatures: {err}") from err

    def _save_tx(self, tx: Transaction) -> None:
        try:
            self.db.save_tx(tx)
        except Exception as err:
            raise ExportError(
                f"failed to handle transaction with hash {tx.tx_response.txhash}: {err}"
            ) from err

    def _handle_tx(self, tx: Transaction) -> None:
        for module in self.modules:
            handler = getattr(module, "handle_tx", None)
            if not callable(handler):
                continue
            try:
                handler(tx)
            except Exception as err:
                self.logger.error("error while handling tx %s in module %s: %s",
                                  tx.tx_response.txhash, _module_name(module), err)

    def _handle_message(self, index: int, msg: StandardMessage, tx: Transaction) -> None:
        for module in self.modules:
            handler = getattr(module, "handle_msg", None)
            if not callable(handler):
                continue
            try:
                handler(index, msg, tx)
            except Exception as err:
                self.logger.error("error while handling message %s of tx %s in module %s: %s",
                                  msg.type, tx.tx_response.txhash, _module_name(module), err)

    def export_txs(self, txs: Iterable[Transaction]) -> None:
        """Store each transaction and pass it and its messages to the modules."""
        for tx in txs:
            try:
                self._save_tx(tx)
            except ExportError as err:
                raise ExportError(f"error while storing txs: {err}") from err
            self._handle_tx(tx)
            for index, msg in enumerate(tx.tx.body.messages):
                self._handle_message(index, msg, tx)

        total_blocks = self.db.get_total_blocks()
        latest_height = self.db.get_last_block_height()
        self.logger.debug("database holds %s blocks up to height %s", total_blocks, latest_height)