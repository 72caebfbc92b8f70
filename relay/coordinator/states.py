"""Relay lifecycle states and the results returned to connection drivers.

    CONNECTED -> AUTHENTICATED -> QUOTA_CHECKED -> STREAMING
                                                   -> COMPLETING -> CLOSED
                                                   -> FAILING    -> CLOSED

Authentication, quota and validation failures jump straight to FAILING.
CLOSED is terminal and reached exactly once per connection.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass


class RelayState(str, enum.Enum):
    CONNECTED = "connected"
    AUTHENTICATED = "authenticated"
    QUOTA_CHECKED = "quota_checked"
    STREAMING = "streaming"
    COMPLETING = "completing"
    FAILING = "failing"
    CLOSED = "closed"


class RelayOutcome(str, enum.Enum):
    COMPLETED = "completed"
    UPSTREAM_ERROR = "upstream_error"
    CLIENT_SEND_ERROR = "client_send_error"
    TIMEOUT = "timeout"
    VALIDATION_ERROR = "validation_error"
    # connection-level outcomes
    ACCEPTED = "accepted"
    AUTHENTICATION_FAILED = "authentication_failed"
    QUOTA_EXHAUSTED = "quota_exhausted"
    STORE_ERROR = "store_error"
    DISCONNECTED = "disconnected"


@dataclass(frozen=True, slots=True)
class RelayResult:
    """Acknowledgement of one Coordinator operation."""

    outcome: RelayOutcome
    state: RelayState
    error_code: str | None = None
    message: str = ""
    increments_sent: int = 0

    @property
    def ok(self) -> bool:
        return self.outcome in (RelayOutcome.COMPLETED, RelayOutcome.ACCEPTED, RelayOutcome.DISCONNECTED)

    @property
    def closed(self) -> bool:
        return self.state is RelayState.CLOSED


__all__ = ["RelayState", "RelayOutcome", "RelayResult"]
