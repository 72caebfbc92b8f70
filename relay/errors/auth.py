"""Authentication failures raised while resolving a connection credential."""

from .base import RelayError


class AuthenticationFailure(RelayError):
    """The connection could not be tied to an identity."""

    default_error_code = "authentication_failed"


class IdentityNotFound(AuthenticationFailure):
    """The credential is unknown to the identity resolver."""

    default_error_code = "identity_not_found"


__all__ = ["AuthenticationFailure", "IdentityNotFound"]
