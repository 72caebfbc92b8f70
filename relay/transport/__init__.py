"""Push transports that deliver relay frames to clients."""

from .base import PushTransport
from .websocket import WebSocketPushTransport
from .disconnects import is_expected_disconnect

__all__ = [
    "PushTransport",
    "WebSocketPushTransport",
    "is_expected_disconnect",
]
