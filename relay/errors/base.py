"""Root of the relay exception hierarchy.

Every failure the Coordinator knows how to report derives from RelayError,
which carries a machine-readable ``error_code`` next to the human-readable
message so handlers can build structured client frames without string
matching.
"""


class RelayError(Exception):
    """Base class for failures with a client-facing error code.

    Attributes:
        error_code: Machine-parseable error identifier.
        message: Human-readable error description.
    """

    default_error_code = "relay_error"

    def __init__(self, message: str, *, error_code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.default_error_code


class QuotaExhausted(RelayError):
    """Raised when an identity has no remaining relays."""

    default_error_code = "quota_exhausted"


class RelayTimeout(RelayError, TimeoutError):
    """Raised when a relay outlives its deadline."""

    default_error_code = "timeout"


__all__ = ["RelayError", "QuotaExhausted", "RelayTimeout"]
