"""WebSocket handler exports."""

from .connections import ConnectionHandler
from .lifecycle import WebSocketLifecycle
from .websocket import handle_websocket_connection
from .auth import ConnectionCredential, extract_credential

__all__ = [
    "ConnectionHandler",
    "ConnectionCredential",
    "extract_credential",
    "handle_websocket_connection",
    "WebSocketLifecycle",
]
