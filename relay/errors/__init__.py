"""Centralized exception classes for the relay.

This module re-exports all domain-specific exceptions from their respective
modules, providing a single import point for error handling.

Organization:
    - base.py: RelayError root, quota exhaustion, relay timeout
    - auth.py: identity resolution failures
    - validation.py: request validation errors with error codes
    - upstream.py: transport and protocol failures of the upstream stream
    - transport.py: client push failures
    - stores.py: session / quota persistence failures
    - classify.py: exception-to-telemetry label mapping
"""

from .stores import StoreFailure
from .classify import classify_error
from .transport import ClientSendFailure
from .validation import ValidationFailure
from .auth import AuthenticationFailure, IdentityNotFound
from .base import QuotaExhausted, RelayError, RelayTimeout
from .upstream import UpstreamFailure, UpstreamProtocolFailure, UpstreamTransportFailure

__all__ = [
    "RelayError",
    # Authentication
    "AuthenticationFailure",
    "IdentityNotFound",
    # Quota / deadline
    "QuotaExhausted",
    "RelayTimeout",
    # Validation
    "ValidationFailure",
    # Upstream
    "UpstreamFailure",
    "UpstreamTransportFailure",
    "UpstreamProtocolFailure",
    # Client / stores
    "ClientSendFailure",
    "StoreFailure",
    # Classification
    "classify_error",
]
