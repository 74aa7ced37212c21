"""Chain data aggregator handing blocks, transactions and validators to a database."""

__version__ = "5.0.0"