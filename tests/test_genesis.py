import json

import pytest

from juno.types.genesis import (
    GenesisError,
    get_genesis_doc_and_state,
    get_genesis_state,
    read_genesis_file,
)

DOC = {
    "chain_id": "test-chain",
    "initial_height": "1",
    "app_state": {"bank": {"balances": []}, "staking": {"params": {}}},
}


class FakeNode:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = 0

    def genesis(self):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture
def genesis_file(tmp_path):
    path = tmp_path / "genesis.json"
    path.write_text(json.dumps(DOC))
    return path


def test_read_genesis_file_round_trip(genesis_file):
    assert read_genesis_file(genesis_file) == DOC


def test_read_missing_file(tmp_path):
    with pytest.raises(GenesisError, match="failed to read genesis file"):
        read_genesis_file(tmp_path / "missing.json")


def test_read_invalid_json(tmp_path):
    path = tmp_path / "genesis.json"
    path.write_text("{not json")
    with pytest.raises(GenesisError, match="failed to unmarshal genesis doc"):
        read_genesis_file(path)


def test_get_genesis_state():
    assert get_genesis_state(DOC) == DOC["app_state"]


def test_get_genesis_state_from_raw_json():
    doc = {"app_state": json.dumps({"bank": {"x": 1}})}
    assert get_genesis_state(doc) == {"bank": {"x": 1}}


def test_get_genesis_state_null_is_empty():
    assert get_genesis_state({"app_state": None}) == {}


def test_get_genesis_state_invalid():
    with pytest.raises(GenesisError):
        get_genesis_state({"app_state": [1, 2]})
    with pytest.raises(GenesisError):
        get_genesis_state({"chain_id": "test-chain"})


def test_doc_and_state_from_file(genesis_file):
    node = FakeNode(response={"genesis": {"chain_id": "other", "app_state": {}}})
    doc, state = get_genesis_doc_and_state(str(genesis_file), node)
    assert doc == DOC
    assert state == DOC["app_state"]
    assert node.calls == 0


def test_doc_and_state_from_node_when_path_blank():
    node = FakeNode(response={"genesis": DOC})
    doc, state = get_genesis_doc_and_state("   ", node)
    assert doc == DOC
    assert state == DOC["app_state"]
    assert node.calls == 1


def test_doc_and_state_file_error(tmp_path):
    with pytest.raises(GenesisError, match="error while reading genesis file"):
        get_genesis_doc_and_state(str(tmp_path / "missing.json"), FakeNode())


def test_doc_and_state_node_error():
    node = FakeNode(error=RuntimeError("unreachable"))
    with pytest.raises(GenesisError, match="failed to get genesis"):
        get_genesis_doc_and_state("", node)