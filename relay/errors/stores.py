"""Persistence failures for session and quota stores."""

from .base import RelayError


class StoreFailure(RelayError):
    """A session, quota or identity store call failed.

    Attributes:
        operation: Short label of the failed call (e.g. ``quota.decrement``).
    """

    default_error_code = "store_error"

    def __init__(self, message: str, *, operation: str = "") -> None:
        super().__init__(message)
        self.operation = operation


__all__ = ["StoreFailure"]
