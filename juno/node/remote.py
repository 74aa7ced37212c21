"""A node reached through its RPC, REST and gRPC endpoints."""

from __future__ import annotations

import base64
import binascii
import hashlib
import itertools
import json
import re
from collections.abc import Iterator, Mapping
from typing import Any

import grpc
import requests
import websocket
from requests.adapters import HTTPAdapter

from juno.node.base import Node, Source, SourceKind
from juno.node.config import GRPCConfig, NodeConfigError, RemoteDetails
from juno.types.cosmos import Transaction, parse_transaction

_HTTP_PROTOCOLS = re.compile(r"https?://")
_GRPC_BLOCK_HEIGHT_HEADER = "x-cosmos-block-height"
_NEW_BLOCK_QUERY = "tm.event = 'NewBlock'"
_GENESIS_CHUNKED_HINT = "use the genesis_chunked API instead"
_VALIDATORS_PER_PAGE = 100
_SUBSCRIBE_TIMEOUT = 5.0


class RPCError(Exception):
    """Raised when a node query fails or returns an error."""

    def __init__(self, message: str, code: int | None = None, data: Any = None) -> None:
        super().__init__(message)
        self.code = code
        self.data = data

    @classmethod
    def _from_payload(cls, method: str, payload: Any) -> RPCError:
        if not isinstance(payload, Mapping):
            return cls(f"{method} failed: {payload}")
        message = str(payload.get("message") or "unknown error")
        data = payload.get("data")
        text = f"{method} failed: {message}" + (f": {data}" if data else "")
        return cls(text, code=payload.get("code"), data=data)


def strip_http_protocol(address: str) -> str:
    """Remove every http:// and https:// scheme from the address."""
    return _HTTP_PROTOCOLS.sub("", address)


def get_height_request_metadata(height: int) -> list[tuple[str, str]]:
    """Return the gRPC metadata that queries state at the given height."""
    return [(_GRPC_BLOCK_HEIGHT_HEADER, str(height))]


def create_grpc_channel(config: GRPCConfig) -> grpc.Channel:
    """Open a gRPC channel to the configured address."""
    address = strip_http_protocol(config.address)
    if config.insecure:
        return grpc.insecure_channel(address)
    return grpc.secure_channel(address, grpc.ssl_channel_credentials())


def _websocket_url(address: str) -> str:
    base = address.rstrip("/")
    if base.startswith("https://"):
        base = "wss://" + base[len("https://"):]
    elif base.startswith("http://"):
        base = "ws://" + base[len("http://"):]
    elif "://" not in base:
        base = "ws://" + base
    return base + "/websocket"


class _Subscription:
    """An iterator over the events of a websocket subscription."""

    def __init__(self, connection: Any) -> None:
        self._connection = connection
        self._closed = False

    def __iter__(self) -> Iterator[Mapping[str, Any]]:
        return self

    def __next__(self) -> Mapping[str, Any]:
        while not self._closed:
            try:
                message = self._connection.recv()
            except (websocket.WebSocketConnectionClosedException, OSError):
                self.cancel()
                break
            payload = json.loads(message)
            if payload.get("error"):
                self.cancel()
                raise RPCError._from_payload("subscribe", payload["error"])
            result = payload.get("result")
            if result:
                return result
        raise StopIteration

    def cancel(self) -> None:
        """Close the subscription."""
        if not self._closed:
            self._closed = True
            self._connection.close()

    def __enter__(self) -> _Subscription:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.cancel()


class RemoteNode(Node):
    """A node queried over JSON-RPC, with transactions read from its REST API."""

    def __init__(
        self,
        details: RemoteDetails,
        session: requests.Session | None = None,
        timeout: float = 30.0,
    ) -> None:
        details.validate()
        if details.api is None:
            raise NodeConfigError("api config cannot be null")
        rpc = details.rpc
        self._rpc_url = rpc.address.rstrip("/") + "/"
        self._ws_url = _websocket_url(rpc.address)
        self._api = details.api.address.rstrip("/")
        self._timeout = timeout
        self._ids = itertools.count(1)
        if session is None:
            session = requests.Session()
            if rpc.max_connections > 0:
                adapter = HTTPAdapter(pool_maxsize=rpc.max_connections, pool_block=True)
                session.mount("http://", adapter)
                session.mount("https://", adapter)
        self._session = session

    def _call(self, method: str, **params: Any) -> Any:
        payload = {"jsonrpc": "2.0", "id": next(self._ids), "method": method, "params": params}
        try:
            response = self._session.post(self._rpc_url, json=payload, timeout=self._timeout)
        except requests.RequestException as err:
            raise RPCError(f"{method} request failed: {err}") from err
        try:
            body = response.json()
        except ValueError:
            raise RPCError(
                f"invalid response to {method}: status {response.status_code}"
            ) from None
        if not isinstance(body, Mapping):
            raise RPCError(f"invalid response to {method}")
        if body.get("error"):
            raise RPCError._from_payload(method, body["error"])
        if "result" not in body:
            raise RPCError(f"response to {method} holds no result")
        return body["result"]

    def genesis(self) -> Mapping[str, Any]:
        """Return the genesis, falling back to the chunked API for large ones."""
        try:
            return self._call("genesis")
        except RPCError as err:
            if _GENESIS_CHUNKED_HINT in str(err):
                return self._genesis_chunked()
            raise

    def _genesis_chunked(self) -> Mapping[str, Any]:
        chunks: list[bytes] = []
        for chunk_id in itertools.count():
            try:
                result = self._call("genesis_chunked", chunk=str(chunk_id))
            except RPCError as err:
                raise RPCError(f"error while getting genesis chunk {chunk_id}: {err}") from err
            total = int(result.get("total") or 0)
            try:
                chunks.append(base64.b64decode(result.get("data") or "", validate=True))
            except (binascii.Error, ValueError) as err:
                raise RPCError(
                    f"error while decoding genesis chunk {chunk_id} out of {total}"
                ) from err
            if chunk_id >= total - 1:
                break
        try:
            doc = json.loads(b"".join(chunks))
        except ValueError as err:
            raise RPCError(f"invalid genesis document: {err}") from err
        return {"genesis": doc}

    def consensus_state(self) -> Mapping[str, Any]:
        """Return the consensus round state."""
        return self._call("consensus_state")["round_state"]

    def _status(self) -> Mapping[str, Any]:
        return self._call("status")

    def latest_height(self) -> int:
        """Return the latest block height known to the node."""
        return int(self._status()["sync_info"]["latest_block_height"])

    def chain_id(self) -> str:
        """Return the network the node belongs to."""
        return str(self._status()["node_info"]["network"])

    def validators(self, height: int) -> Mapping[str, Any]:
        """Return every validator at the height, reading all result pages."""
        validators: list[Any] = []
        count = 0
        for page in itertools.count(1):
            result = self._call(
                "validators",
                height=str(height),
                page=str(page),
                per_page=str(_VALIDATORS_PER_PAGE),
            )
            batch = list(result.get("validators") or [])
            validators.extend(batch)
            count += int(result.get("count") or 0)
            total = int(result.get("total") or 0)
            if count == total:
                break
            if not batch:
                raise RPCError(
                    f"validators page {page} at height {height} is empty "
                    f"with {count} of {total} read"
                )
        return {"block_height": height, "validators": validators, "count": count, "total": total}

    def block(self, height: int) -> Mapping[str, Any]:
        """Return the block at the given height."""
        return self._call("block", height=str(height))

    def block_results(self, height: int) -> Mapping[str, Any]:
        """Return the execution results of the block at the given height."""
        return self._call("block_results", height=str(height))

    def tx(self, tx_hash: str) -> Transaction:
        """Return the transaction with the given hash from the REST API."""
        url = f"{self._api}/cosmos/tx/v1beta1/txs/{tx_hash}"
        try:
            response = self._session.get(url, timeout=self._timeout)
        except requests.RequestException as err:
            raise RPCError(f"transaction request failed: {err}") from err
        if response.status_code != 200:
            raise RPCError(f"request failed with status code: {response.status_code}")
        try:
            return parse_transaction(response.content)
        except (ValueError, TypeError) as err:
            raise RPCError(f"error converting transaction: {err}") from err

    def txs(self, block: Mapping[str, Any]) -> list[Transaction]:
        """Return every transaction of the block, in block order."""
        raw_txs = ((block.get("block") or {}).get("data") or {}).get("txs") or []
        return [
            self.tx(hashlib.sha256(base64.b64decode(raw)).hexdigest().upper())
            for raw in raw_txs
        ]

    def tx_search(
        self, query: str, page: int | None, per_page: int | None, order_by: str
    ) -> Mapping[str, Any]:
        """Return a page of transactions matching the event query."""
        params: dict[str, Any] = {"query": query, "prove": False, "order_by": order_by}
        if page is not None:
            params["page"] = str(page)
        if per_page is not None:
            params["per_page"] = str(per_page)
        return self._call("tx_search", **params)

    def subscribe_events(self, subscriber: str, query: str) -> _Subscription:
        """Subscribe over the websocket to events matching the query."""
        try:
            connection = websocket.create_connection(self._ws_url, timeout=_SUBSCRIBE_TIMEOUT)
        except (websocket.WebSocketException, OSError) as err:
            raise RPCError(f"failed to connect to {self._ws_url}: {err}") from err
        try:
            connection.send(
                json.dumps(
                    {
                        "jsonrpc": "2.0",
                        "id": subscriber,
                        "method": "subscribe",
                        "params": {"query": query},
                    }
                )
            )
            ack = json.loads(connection.recv())
            if ack.get("error"):
                raise RPCError._from_payload("subscribe", ack["error"])
            connection.settimeout(None)
        except (websocket.WebSocketException, OSError, ValueError) as err:
            connection.close()
            raise RPCError(f"failed to subscribe to {query!r}: {err}") from err
        except RPCError:
            connection.close()
            raise
        return _Subscription(connection)

    def subscribe_new_blocks(self, subscriber: str) -> _Subscription:
        """Subscribe over the websocket to new block events."""
        return self.subscribe_events(subscriber, _NEW_BLOCK_QUERY)

    def stop(self) -> None:
        """Close the HTTP session."""
        self._session.close()


class RemoteSource(Source):
    """A source of module state read over gRPC."""

    def __init__(self, config: GRPCConfig, channel: grpc.Channel | None = None) -> None:
        self.channel = channel if channel is not None else create_grpc_channel(config)

    def type(self) -> SourceKind:
        """Return SourceKind.REMOTE."""
        return SourceKind.REMOTE