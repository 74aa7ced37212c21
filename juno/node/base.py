"""Interfaces of the chain nodes and data sources the parser reads from."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterator, Mapping
from enum import Enum
from typing import Any

from juno.types.cosmos import Transaction


class SourceKind(str, Enum):
    """Where a data source reads module state from."""

    LOCAL = "local"
    REMOTE = "remote"


class Node(ABC):
    """A chain node that blocks, transactions and validators are read from.

    Query results are the JSON mappings returned by the node.
    """

    @abstractmethod
    def genesis(self) -> Mapping[str, Any]:
        """Return the genesis, as a mapping holding the document under "genesis"."""

    @abstractmethod
    def consensus_state(self) -> Mapping[str, Any]:
        """Return the consensus round state of the chain."""

    @abstractmethod
    def latest_height(self) -> int:
        """Return the latest block height on the chain."""

    @abstractmethod
    def chain_id(self) -> str:
        """Return the network identifier."""

    @abstractmethod
    def validators(self, height: int) -> Mapping[str, Any]:
        """Return all the validators known at the given height."""

    @abstractmethod
    def block(self, height: int) -> Mapping[str, Any]:
        """Return the block at the given height."""

    @abstractmethod
    def block_results(self, height: int) -> Mapping[str, Any]:
        """Return the execution results of the block at the given height."""

    @abstractmethod
    def tx(self, tx_hash: str) -> Transaction:
        """Return the transaction with the given hash."""

    @abstractmethod
    def txs(self, block: Mapping[str, Any]) -> list[Transaction]:
        """Return every transaction of the given block."""

    @abstractmethod
    def tx_search(
        self, query: str, page: int | None, per_page: int | None, order_by: str
    ) -> Mapping[str, Any]:
        """Return a page of the transactions matching the event query."""

    @abstractmethod
    def subscribe_events(self, subscriber: str, query: str) -> Iterator[Mapping[str, Any]]:
        """Subscribe to events matching the query; the caller cancels the subscription."""

    @abstractmethod
    def subscribe_new_blocks(self, subscriber: str) -> Iterator[Mapping[str, Any]]:
        """Subscribe to new block events; the caller cancels the subscription."""

    @abstractmethod
    def stop(self) -> None:
        """Release the resources held by the node client."""


class Source(ABC):
    """A source of the state of a chain's modules."""

    @abstractmethod
    def type(self) -> SourceKind:
        """Tell whether the source is local or remote."""