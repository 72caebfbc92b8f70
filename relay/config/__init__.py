"""Aggregator of configuration modules.

This module re-exports the config API from smaller modules:
- upstream: streaming endpoint URL, key, model, version
- relay: relay deadline, client frame format, close messages
- stores: store backend selection and DynamoDB table layout
- prompts: prompt template environment variables
- websocket: idle timeouts and close codes
- limits: connection admission
"""

from .upstream import (
    UPSTREAM_URL,
    UPSTREAM_API_KEY,
    UPSTREAM_MODEL,
    UPSTREAM_VERSION,
    UPSTREAM_MAX_TOKENS,
    UPSTREAM_CONNECT_TIMEOUT_S,
)
from .relay import RELAY_TIMEOUT_S, RELAY_FRAME_FORMAT
from .stores import RELAY_STORE_BACKEND, RELAY_DEV_CREDENTIALS
from .limits import MAX_CONCURRENT_CONNECTIONS
from .websocket import (
    WS_IDLE_TIMEOUT_S,
    WS_WATCHDOG_TICK_S,
    WS_HANDSHAKE_ACQUIRE_TIMEOUT_S,
)


def validate_env() -> None:
    """Validate required configuration once during startup."""
    errors: list[str] = []
    if not UPSTREAM_API_KEY:
        errors.append("ANTHROPIC_KEY environment variable is required")
    if not UPSTREAM_URL.startswith(("http://", "https://")):
        errors.append(f"ANTHROPIC_URL must be an http(s) URL, got: {UPSTREAM_URL!r}")
    if UPSTREAM_MAX_TOKENS <= 0:
        errors.append("UPSTREAM_MAX_TOKENS must be positive")
    if RELAY_TIMEOUT_S <= 0:
        errors.append("RELAY_TIMEOUT_S must be positive")
    if MAX_CONCURRENT_CONNECTIONS <= 0:
        errors.append("MAX_CONCURRENT_CONNECTIONS must be positive")
    if errors:
        raise ValueError("; ".join(errors))


__all__ = [
    "validate_env",
    # upstream
    "UPSTREAM_URL",
    "UPSTREAM_API_KEY",
    "UPSTREAM_MODEL",
    "UPSTREAM_VERSION",
    "UPSTREAM_MAX_TOKENS",
    "UPSTREAM_CONNECT_TIMEOUT_S",
    # relay
    "RELAY_TIMEOUT_S",
    "RELAY_FRAME_FORMAT",
    # stores
    "RELAY_STORE_BACKEND",
    "RELAY_DEV_CREDENTIALS",
    # limits
    "MAX_CONCURRENT_CONNECTIONS",
    # websocket
    "WS_IDLE_TIMEOUT_S",
    "WS_WATCHDOG_TICK_S",
    "WS_HANDSHAKE_ACQUIRE_TIMEOUT_S",
]
