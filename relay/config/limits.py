"""Connection admission limits."""

import os


# Maximum simultaneously open WebSocket connections per process
MAX_CONCURRENT_CONNECTIONS = int(os.getenv("MAX_CONCURRENT_CONNECTIONS", "256"))


__all__ = ["MAX_CONCURRENT_CONNECTIONS"]
