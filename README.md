# juno

`juno` reads the data of a Cosmos SDK based chain from a node and hands it
to a database object and to any number of modules that react to what it
finds: blocks, commit signatures, validators, transactions and their
messages.

## What is inside

- `juno.config` – the top-level YAML configuration (`chain`, `node`,
  `parsing`, `database`, `logging`) with defaults, a parser and `read`.
- `juno.node.config` – the node section: a `remote` node reached over RPC,
  gRPC and the REST API, or a `local` node described by a home directory.
- `juno.node.base` – the abstract `Node` and `Source` interfaces and the
  `SourceKind` enumeration.
- `juno.node.remote` – `RemoteNode`, a client speaking JSON-RPC to a node's
  RPC endpoint and reading transactions from its REST service;
  `RemoteSource` and `create_grpc_channel` for gRPC.
- `juno.node.pagination` – page, page-size and height checks, and
  `sort_and_paginate` for ordering and paging indexed transactions.
- `juno.parser.config` – the `parsing` section (`ParsingConfig`).
- `juno.parser.worker` – `Worker` and `Context`: take block heights from a
  queue, fetch everything belonging to each block and export it.
- `juno.types.cosmos` – `Block`, `CommitSig`, `Validator`, `Transaction`,
  `StandardMessage` and friends, `parse_transaction` and `new_queue`.
- `juno.types.events`, `juno.types.address`, `juno.types.genesis`,
  `juno.types.env` – event lookups, Bech32 encoding, genesis reading and
  environment variable lookup.
- `juno.pricefeed` – the token list used for price tracking.

Install with the test extra to run the tests:

```
pip install -e ".[test]"
pytest
```

## Configuration

A configuration file is read with `read` and a parser, by default
`default_config_parser`. Errors are raised as `ConfigError`.

```python
from juno.config import default_config_parser, read

config = read("config.yaml", default_config_parser)
config.chain.bech32_prefix
config.chain.is_module_enabled("pruning")   # case-insensitive
```

`default_config()` builds the default configuration and `Config.to_yaml()`
writes it back out. `get_avg_block_time(config.parser)` gives the configured
average block time, or three seconds when it is not set.

The node section can also be handled on its own. Its `type` must be
`remote` or `local`; anything else raises `NodeConfigError`.

```python
from juno.node.config import dump_node_config, load_node_config

node_config = load_node_config("""
type: "local"
config:
  home: /home/user/.cosmos
""")

print(dump_node_config(node_config))
# type: local
# config:
#     home: /home/user/.cosmos
```

`default_node_config()` gives a remote node pointing at
`http://localhost:26657`, `localhost:9090` and `http://localhost:1317`.

## Talking to a node

```python
from juno.node.config import default_remote_details
from juno.node.remote import RemoteNode

node = RemoteNode(default_remote_details())
height = node.latest_height()
block = node.block(height)
txs = node.txs(block)

with node.subscribe_new_blocks("juno") as events:
    for event in events:
        ...
node.stop()
```

Query results are the JSON mappings the node returns; failures raise
`RPCError`. Large genesis documents are fetched through the chunked API
automatically.

## Addresses

Validator consensus addresses and public keys are written in Bech32 with the
chain's prefix:

```python
from juno.types.address import (
    convert_validator_address_to_bech32_string,
    set_bech32_prefix,
)

set_bech32_prefix("cosmos")
address = convert_validator_address_to_bech32_string(bytes(20))  # cosmosvalcons1...
```

## Events

```python
from juno.types.events import EventNotFoundError, find_event_by_type

try:
    event = find_event_by_type(events, "transfer")
except EventNotFoundError:
    event = None
```

## Transaction search pagination

```python
from juno.node.pagination import validate_per_page

validate_per_page(None)   # 30
validate_per_page(500)    # 100
```

## Parsing blocks

A `Worker` is built from a `Context` holding the node, the database, a
logger, the modules and the parsing configuration, together with a height
queue made by `new_queue`. `Worker.start()` takes heights from the queue
until it takes `None`. Each height is exported unless the database already
has it; height `0` stands for the genesis. Heights that fail are put back on
the queue after the average block time.

The database is any object with `has_block`, `save_validators`,
`save_block`, `save_commit_signatures`, `save_tx`, `get_total_blocks` and
`get_last_block_height`. A module takes part by having any of
`handle_genesis`, `handle_block`, `handle_tx` and `handle_msg`; errors raised
by a module are logged and do not stop the export.

## What this package does not do

- It ships no database backend: the worker writes to whatever database
  object it is given.
- It has no command-line program; workers are started from your own code.
- A `local` node can be configured, but there is no client that reads chain
  data from a local home directory; only `RemoteNode` queries a node.
- It does not record metrics; worker progress is written to the logger.