"""WebSocket-specific runtime configuration values.

Timeouts:
    WS_IDLE_TIMEOUT_S: Close connections after this many seconds without a
        client frame. A relay in flight does not count as idle time because
        the message loop is parked inside the Coordinator while it streams.

    WS_WATCHDOG_TICK_S: How often the idle watchdog checks activity.

    WS_HANDSHAKE_ACQUIRE_TIMEOUT_S: Max time to wait for a connection slot.

Close Codes (RFC 6455):
    1000: Normal closure (relay finished or client requested)
    1008: Policy violation (authentication / quota / validation failure)
    1011: Internal error (upstream or store failure)
    1013: Try again later (server at capacity)
    4000+: Application-defined (idle timeout)

Sentinel Values:
    Plain strings that can be sent instead of JSON control frames.
"""

from __future__ import annotations

import os

# ============================================================================
# Timeout Configuration
# ============================================================================

WS_IDLE_TIMEOUT_S = float(os.getenv("WS_IDLE_TIMEOUT_S", "60"))
WS_WATCHDOG_TICK_S = float(os.getenv("WS_WATCHDOG_TICK_S", "5"))
WS_HANDSHAKE_ACQUIRE_TIMEOUT_S = float(os.getenv("WS_HANDSHAKE_ACQUIRE_TIMEOUT_S", "0.5"))

# ============================================================================
# WebSocket Close Codes
# ============================================================================

WS_CLOSE_NORMAL_CODE = int(os.getenv("WS_CLOSE_NORMAL_CODE", "1000"))
WS_CLOSE_POLICY_CODE = int(os.getenv("WS_CLOSE_POLICY_CODE", "1008"))
WS_CLOSE_INTERNAL_CODE = int(os.getenv("WS_CLOSE_INTERNAL_CODE", "1011"))
WS_CLOSE_BUSY_CODE = int(os.getenv("WS_CLOSE_BUSY_CODE", "1013"))
WS_CLOSE_IDLE_CODE = int(os.getenv("WS_CLOSE_IDLE_CODE", "4000"))
WS_CLOSE_IDLE_REASON = os.getenv("WS_CLOSE_IDLE_REASON", "idle_timeout")

# ============================================================================
# Credential sources
# ============================================================================

WS_CREDENTIAL_SUBPROTOCOL_HEADER = "sec-websocket-protocol"
WS_CREDENTIAL_HEADER = "x-api-key"
WS_CREDENTIAL_QUERY_PARAM = "api_key"

# ============================================================================
# Sentinel Values
# ============================================================================

WS_END_SENTINEL = os.getenv("WS_END_SENTINEL", "__END__")
WS_PING_SENTINEL = os.getenv("WS_PING_SENTINEL", "__PING__")

__all__ = [
    "WS_IDLE_TIMEOUT_S",
    "WS_WATCHDOG_TICK_S",
    "WS_HANDSHAKE_ACQUIRE_TIMEOUT_S",
    "WS_CLOSE_NORMAL_CODE",
    "WS_CLOSE_POLICY_CODE",
    "WS_CLOSE_INTERNAL_CODE",
    "WS_CLOSE_BUSY_CODE",
    "WS_CLOSE_IDLE_CODE",
    "WS_CLOSE_IDLE_REASON",
    "WS_CREDENTIAL_SUBPROTOCOL_HEADER",
    "WS_CREDENTIAL_HEADER",
    "WS_CREDENTIAL_QUERY_PARAM",
    "WS_END_SENTINEL",
    "WS_PING_SENTINEL",
]
