"""Upstream streaming failures.

Both kinds abort the relay in flight. Text already forwarded to the client is
never retracted, and neither kind is ever followed by a terminal done signal.
"""

from .base import RelayError


class UpstreamFailure(RelayError):
    """Common parent for failures on the upstream side of a relay."""

    default_error_code = "upstream_error"


class UpstreamTransportFailure(UpstreamFailure):
    """Connection failure, read failure, or a non-success HTTP status.

    Attributes:
        status_code: HTTP status when the upstream answered, else None.
    """

    default_error_code = "upstream_transport_error"

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class UpstreamProtocolFailure(UpstreamFailure):
    """Undecodable event payload, or a stream that ended without a terminal event."""

    default_error_code = "upstream_protocol_error"


__all__ = [
    "UpstreamFailure",
    "UpstreamTransportFailure",
    "UpstreamProtocolFailure",
]
