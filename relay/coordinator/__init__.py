"""Relay Coordinator and its supporting types."""

from .frames import FrameEncoder
from .coordinator import RelayCoordinator
from .channel import RelayChannel, StreamFailure
from .states import RelayState, RelayResult, RelayOutcome

__all__ = [
    "RelayCoordinator",
    "RelayChannel",
    "StreamFailure",
    "FrameEncoder",
    "RelayState",
    "RelayOutcome",
    "RelayResult",
]
