"""Store backend configuration.

Two backends exist:

    memory:   in-process dictionaries, seeded from RELAY_DEV_CREDENTIALS.
              Suitable for local development and tests only.
    dynamodb: the AUTH / WS_CONNECTIONS / USERS tables used in production.

RELAY_DEV_CREDENTIALS format: ``credential:identity:remaining`` entries
separated by commas, e.g. ``devkey:user-1:10,otherkey:user-2:0``.
"""

from __future__ import annotations

import os

from ..utils.env import env_choice

STORE_BACKENDS = {"memory", "dynamodb"}

RELAY_STORE_BACKEND = env_choice("RELAY_STORE_BACKEND", "memory", STORE_BACKENDS)
RELAY_DEV_CREDENTIALS = os.getenv("RELAY_DEV_CREDENTIALS", "")

AWS_REGION = os.getenv("AWS_REGION") or os.getenv("AWS_DEFAULT_REGION") or None

# ============================================================================
# DynamoDB tables
# ============================================================================

AUTH_TABLE = os.getenv("RELAY_AUTH_TABLE", "AUTH")
AUTH_KEY_ATTR = "key"
AUTH_IDENTITY_ATTR = "user_hash"

CONNECTIONS_TABLE = os.getenv("RELAY_CONNECTIONS_TABLE", "WS_CONNECTIONS")
CONNECTIONS_KEY_ATTR = "connection_id"
CONNECTIONS_IDENTITY_ATTR = "user_hash"

USERS_TABLE = os.getenv("RELAY_USERS_TABLE", "USERS")
USERS_KEY_ATTR = "user_hash"
USERS_QUOTA_ATTR = "remaining_requests"

__all__ = [
    "STORE_BACKENDS",
    "RELAY_STORE_BACKEND",
    "RELAY_DEV_CREDENTIALS",
    "AWS_REGION",
    "AUTH_TABLE",
    "AUTH_KEY_ATTR",
    "AUTH_IDENTITY_ATTR",
    "CONNECTIONS_TABLE",
    "CONNECTIONS_KEY_ATTR",
    "CONNECTIONS_IDENTITY_ATTR",
    "USERS_TABLE",
    "USERS_KEY_ATTR",
    "USERS_QUOTA_ATTR",
]
