"""Reading the genesis document and the application state it holds."""

from __future__ import annotations

import json
import os
from collections.abc import Mapping
from typing import Any

from juno.node.base import Node


class GenesisError(ValueError):
    """Raised when the genesis cannot be read or decoded."""


def read_genesis_file(genesis_path: str | os.PathLike[str]) -> dict[str, Any]:
    """Read and decode the genesis document at the given path."""
    try:
        with open(genesis_path, "rb") as handle:
            data = handle.read()
    except OSError as err:
        raise GenesisError(f"failed to read genesis file: {err}") from err
    try:
        doc = json.loads(data)
    except ValueError as err:
        raise GenesisError(f"failed to unmarshal genesis doc: {err}") from err
    if not isinstance(doc, Mapping):
        raise GenesisError("failed to unmarshal genesis doc: document must be an object")
    return dict(doc)


def get_genesis_state(doc: Mapping[str, Any]) -> dict[str, Any]:
    """Return the application state of the genesis, keyed by module."""
    if "app_state" not in doc:
        raise GenesisError("failed to unmarshal genesis state: app_state is missing")
    app_state = doc["app_state"]
    if isinstance(app_state, (bytes, str)):
        try:
            app_state = json.loads(app_state)
        except ValueError as err:
            raise GenesisError(f"failed to unmarshal genesis state: {err}") from err
    if app_state is None:
        return {}
    if not isinstance(app_state, Mapping):
        raise GenesisError("failed to unmarshal genesis state: app_state must be an object")
    return dict(app_state)


def get_genesis_doc_and_state(
    genesis_path: str | None, node: Node
) -> tuple[dict[str, Any], dict[str, Any]]:
    """Read the genesis from the file if a path is given, else from the node."""
    if genesis_path and genesis_path.strip():
        try:
            doc = read_genesis_file(genesis_path)
        except GenesisError as err:
            raise GenesisError(f"error while reading genesis file: {err}") from err
    else:
        try:
            response = node.genesis()
        except Exception as err:
            raise GenesisError(f"failed to get genesis: {err}") from err
        doc = response.get("genesis") if isinstance(response, Mapping) else None
        if not isinstance(doc, Mapping):
            raise GenesisError("failed to get genesis: response holds no genesis document")
        doc = dict(doc)
    return doc, get_genesis_state(doc)