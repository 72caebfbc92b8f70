"""Push transport failures."""

from .base import RelayError


class ClientSendFailure(RelayError):
    """A frame could not be delivered to, or the handle released for, a client connection."""

    default_error_code = "client_send_error"


__all__ = ["ClientSendFailure"]
