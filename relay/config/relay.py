"""Relay behavior configuration.

RELAY_TIMEOUT_S bounds one whole relay (first upstream byte to terminal
event). RELAY_FRAME_FORMAT selects how increments and errors are framed for
the client:

    json: {"type": "token", "text": ...} / {"type": "error", ...} / {"type": "done"}
    text: raw increment text and raw error messages, no done frame
"""

from __future__ import annotations

import os

from ..utils.env import env_choice

FRAME_FORMATS = {"json", "text"}

RELAY_TIMEOUT_S = float(os.getenv("RELAY_TIMEOUT_S", "120"))
RELAY_FRAME_FORMAT = env_choice("RELAY_FRAME_FORMAT", "json", FRAME_FORMATS)

# Human-readable messages delivered before the connection is closed
MSG_AUTH_REQUIRED = "Authentication required"
MSG_AUTH_FAILED = "Failed to authenticate user"
MSG_NO_QUOTA = "You have no remaining tokens available"
MSG_TIMEOUT = "Request timeout"
MSG_STORE_FAILED = "Failed to store connection"
MSG_SESSION_LOOKUP_FAILED = "Failed to retrieve user"
MSG_QUOTA_CHECK_FAILED = "Failed to check remaining tokens"
MSG_UPSTREAM_PREFIX = "Error calling upstream"

__all__ = [
    "FRAME_FORMATS",
    "RELAY_TIMEOUT_S",
    "RELAY_FRAME_FORMAT",
    "MSG_AUTH_REQUIRED",
    "MSG_AUTH_FAILED",
    "MSG_NO_QUOTA",
    "MSG_TIMEOUT",
    "MSG_STORE_FAILED",
    "MSG_SESSION_LOOKUP_FAILED",
    "MSG_QUOTA_CHECK_FAILED",
    "MSG_UPSTREAM_PREFIX",
]
