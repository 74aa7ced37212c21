"""Environment variable names and lookup."""

from __future__ import annotations

import os

DATABASE_URI = "JUNO_DATABASE_URL"
DATABASE_SSL_MODE_ENABLE = "JUNO_DATABASE_SSL_MODE_ENABLED"
DATABASE_SSL_ROOT_CERT = "JUNO_DATABASE_SSL_ROOT_CERT"
DATABASE_SSL_CERT = "JUNO_DATABASE_SSL_CERT"
DATABASE_SSL_KEY = "JUNO_DATABASE_SSL_KEY"


def get_env_or(env_key: str, or_value: str) -> str:
    """Return the environment variable's value, or or_value when unset or empty."""
    return os.environ.get(env_key) or or_value