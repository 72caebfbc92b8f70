"""Push transport backed by the API Gateway WebSocket management API.

Used by the Lambda entry point: the connection lives in API Gateway and the
function reaches it through ``post_to_connection`` / ``delete_connection`` on
the ``https://{domainName}/{stage}`` callback endpoint.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError, BotoCoreError

from ..errors import ClientSendFailure
from ..config.stores import AWS_REGION

logger = logging.getLogger(__name__)

_GONE = "GoneException"


def management_endpoint(domain_name: str, stage: str) -> str:
    return f"https://{domain_name}/{stage}"


def create_management_client(endpoint_url: str, region: str | None = AWS_REGION) -> Any:
    return boto3.client(
        "apigatewaymanagementapi",
        endpoint_url=endpoint_url,
        region_name=region,
        config=Config(retries={"max_attempts": 2, "mode": "standard"}),
    )


def _is_gone(exc: ClientError) -> bool:
    return exc.response.get("Error", {}).get("Code") == _GONE


class ApiGatewayPushTransport:
    def __init__(self, client: Any) -> None:
        self._client = client

    async def send(self, connection_id: str, data: str) -> None:
        try:
            await asyncio.to_thread(
                self._client.post_to_connection,
                ConnectionId=connection_id,
                Data=data.encode("utf-8"),
            )
        except (BotoCoreError, ClientError) as exc:
            raise ClientSendFailure(f"post_to_connection {connection_id} failed: {exc}") from exc

    async def close(self, connection_id: str, *, code: int | None = None) -> None:
        # the management API has no close codes; delete_connection always closes normally
        try:
            await asyncio.to_thread(self._client.delete_connection, ConnectionId=connection_id)
        except ClientError as exc:
            if _is_gone(exc):
                logger.debug("connection %s already gone", connection_id)
                return
            raise ClientSendFailure(f"delete_connection {connection_id} failed: {exc}") from exc
        except BotoCoreError as exc:
            raise ClientSendFailure(f"delete_connection {connection_id} failed: {exc}") from exc


__all__ = [
    "ApiGatewayPushTransport",
    "create_management_client",
    "management_endpoint",
]
