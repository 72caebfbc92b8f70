"""Upstream streaming endpoint configuration.

The relay speaks to a single upstream text-generation endpoint that accepts a
JSON body and answers with an event stream. Values are read from the same
environment variables the Lambda deployment always used, so existing stacks
keep working unchanged.

Environment Variables:
    ANTHROPIC_URL: Full URL of the streaming messages endpoint.
    ANTHROPIC_KEY: API key sent in the ``X-API-Key`` header (required).
    ANTHROPIC_MODEL: Model identifier placed in every request body.
    ANTHROPIC_VERSION: Protocol version sent in ``anthropic-version``.
    UPSTREAM_MAX_TOKENS: ``max_tokens`` for every request.
    UPSTREAM_CONNECT_TIMEOUT_S: TCP/TLS connect timeout for the HTTP client.
"""

from __future__ import annotations

import os

DEFAULT_UPSTREAM_URL = "https://api.anthropic.com/v1/messages"
DEFAULT_UPSTREAM_MODEL = "claude-3-5-sonnet-20240620"
DEFAULT_UPSTREAM_VERSION = "2023-06-01"

UPSTREAM_URL = os.getenv("ANTHROPIC_URL") or DEFAULT_UPSTREAM_URL
UPSTREAM_API_KEY = os.getenv("ANTHROPIC_KEY", "")
UPSTREAM_MODEL = os.getenv("ANTHROPIC_MODEL") or DEFAULT_UPSTREAM_MODEL
UPSTREAM_VERSION = os.getenv("ANTHROPIC_VERSION") or DEFAULT_UPSTREAM_VERSION

UPSTREAM_MAX_TOKENS = int(os.getenv("UPSTREAM_MAX_TOKENS", "1024"))
UPSTREAM_CONNECT_TIMEOUT_S = float(os.getenv("UPSTREAM_CONNECT_TIMEOUT_S", "10"))

# Header names expected by the upstream
UPSTREAM_API_KEY_HEADER = "X-API-Key"
UPSTREAM_VERSION_HEADER = "anthropic-version"

__all__ = [
    "DEFAULT_UPSTREAM_URL",
    "DEFAULT_UPSTREAM_MODEL",
    "DEFAULT_UPSTREAM_VERSION",
    "UPSTREAM_URL",
    "UPSTREAM_API_KEY",
    "UPSTREAM_MODEL",
    "UPSTREAM_VERSION",
    "UPSTREAM_MAX_TOKENS",
    "UPSTREAM_CONNECT_TIMEOUT_S",
    "UPSTREAM_API_KEY_HEADER",
    "UPSTREAM_VERSION_HEADER",
]
