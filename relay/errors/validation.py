"""Input validation exceptions with structured error codes.

This module provides validation exceptions that carry both a human-readable
message and a machine-parseable error code for client error frames.
"""

from .base import RelayError


class ValidationFailure(RelayError):
    """Structured validation failure with error code metadata.

    Raised for malformed or missing request fields, unknown request types and
    prompt templates that cannot be rendered. Always detected before any
    upstream call is made.
    """

    default_error_code = "validation_error"

    def __init__(self, error_code: str, message: str) -> None:
        super().__init__(message, error_code=error_code)


__all__ = ["ValidationFailure"]
