"""AWS Lambda entry point for an API Gateway WebSocket API.

Routes:
    $connect     credential from the Sec-WebSocket-Protocol header; echoed
                 back on success so browsers complete the handshake
    $disconnect  session removal
    $default     one relay, streamed back through the management API

Each invocation runs its own event loop. Store and management API clients
are cached per container since boto3 clients are expensive to build.
"""

from __future__ import annotations

import base64
import asyncio
import binascii
import logging
from typing import Any

from .prompts import PromptBuilder
from .upstream import UpstreamClient
from .logging import configure_logging
from .config.relay import RELAY_TIMEOUT_S
from .stores import ConnectionSessionStore
from .coordinator import RelayOutcome, RelayCoordinator
from .stores.dynamodb import build_dynamodb_stores
from .transport.apigateway import (
    ApiGatewayPushTransport,
    management_endpoint,
    create_management_client,
)

logger = logging.getLogger(__name__)

SUBPROTOCOL_HEADER = "Sec-WebSocket-Protocol"

# Seconds kept in reserve so the close path can run before Lambda kills the invocation
_DEADLINE_MARGIN_S = 2.0

_CONNECT_STATUS: dict[RelayOutcome, int] = {
    RelayOutcome.ACCEPTED: 200,
    RelayOutcome.AUTHENTICATION_FAILED: 401,
    RelayOutcome.STORE_ERROR: 500,
}

_stores: tuple[Any, Any, Any] | None = None
_management_clients: dict[str, Any] = {}


def _get_stores() -> tuple[Any, Any, Any]:
    global _stores  # noqa: PLW0603
    if _stores is None:
        _stores = build_dynamodb_stores()
    return _stores


def _get_management_client(endpoint: str) -> Any:
    client = _management_clients.get(endpoint)
    if client is None:
        client = create_management_client(endpoint)
        _management_clients[endpoint] = client
    return client


def _header(event: dict[str, Any], name: str) -> str | None:
    headers = event.get("headers") or {}
    wanted = name.lower()
    for key, value in headers.items():
        if key.lower() == wanted and value:
            return str(value)
    return None


def _first_subprotocol(value: str | None) -> str | None:
    if not value:
        return None
    for candidate in value.split(","):
        candidate = candidate.strip()
        if candidate:
            return candidate
    return None


def _body(event: dict[str, Any]) -> str | bytes:
    """Raw frame payload; left undecoded so bad UTF-8 surfaces as invalid JSON."""
    body = event.get("body") or ""
    if not event.get("isBase64Encoded"):
        return body
    try:
        return base64.b64decode(body, validate=True)
    except binascii.Error as exc:
        logger.warning("undecodable base64 body: %s", exc)
        return b""


def _relay_timeout(context: Any) -> float:
    get_remaining = getattr(context, "get_remaining_time_in_millis", None)
    if get_remaining is None:
        return RELAY_TIMEOUT_S
    available = get_remaining() / 1000.0 - _DEADLINE_MARGIN_S
    return max(0.0, min(RELAY_TIMEOUT_S, available))


def _response(status_code: int, headers: dict[str, str] | None = None) -> dict[str, Any]:
    response: dict[str, Any] = {"statusCode": status_code}
    if headers:
        response["headers"] = headers
    return response


async def _dispatch(event: dict[str, Any], context: Any) -> dict[str, Any]:
    request_context = event.get("requestContext") or {}
    route = request_context.get("routeKey", "$default")
    connection_id = request_context.get("connectionId", "")
    endpoint = management_endpoint(request_context.get("domainName", ""), request_context.get("stage", ""))

    identity_resolver, quota_store, session_backend = _get_stores()
    upstream = UpstreamClient()
    coordinator = RelayCoordinator(
        identity_resolver=identity_resolver,
        quota_store=quota_store,
        sessions=ConnectionSessionStore(session_backend),
        transport=ApiGatewayPushTransport(_get_management_client(endpoint)),
        upstream=upstream,
        prompt_builder=PromptBuilder(),
        relay_timeout_s=_relay_timeout(context),
    )

    try:
        if route == "$connect":
            credential = _first_subprotocol(_header(event, SUBPROTOCOL_HEADER))
            result = await coordinator.on_connect(connection_id, credential)
            if result.outcome is RelayOutcome.ACCEPTED and credential:
                return _response(200, {SUBPROTOCOL_HEADER: credential})
            return _response(_CONNECT_STATUS.get(result.outcome, 500))

        if route == "$disconnect":
            await coordinator.on_disconnect(connection_id)
            return _response(200)

        result = await coordinator.on_message(connection_id, _body(event))
        logger.info(
            "relay finished outcome=%s increments=%s",
            result.outcome.value,
            result.increments_sent,
        )
        return _response(200)
    finally:
        await upstream.aclose()


def handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    """Lambda handler for all WebSocket routes."""
    configure_logging()
    return asyncio.run(_dispatch(event, context))


__all__ = ["handler"]
