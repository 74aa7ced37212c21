import pytest

from juno.node.base import Node, Source, SourceKind

NODE_METHODS = [
    "genesis",
    "consensus_state",
    "latest_height",
    "chain_id",
    "validators",
    "block",
    "block_results",
    "tx_search",
    "txs",
    "subscribe_events",
    "subscribe_new_blocks",
    "stop",
]


def test_node_cannot_be_instantiated():
    with pytest.raises(TypeError):
        Node()


@pytest.mark.parametrize("method", NODE_METHODS)
def test_node_reports_abstract_method(method):
    with pytest.raises(TypeError) as info:
        Node()
    assert method in str(info.value)


def test_source_requires_type():
    with pytest.raises(TypeError) as info:
        Source()
    assert "type" in str(info.value)


def test_source_kind_from_string():
    assert SourceKind("local") is SourceKind.LOCAL
    assert SourceKind("remote") is SourceKind.REMOTE
    assert SourceKind.REMOTE == "remote"


def test_unknown_source_kind():
    with pytest.raises(ValueError):
        SourceKind("elsewhere")