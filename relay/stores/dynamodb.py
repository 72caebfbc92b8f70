"""DynamoDB store backends.

Table layout:

    AUTH            key            -> user_hash
    WS_CONNECTIONS  connection_id  -> user_hash
    USERS           user_hash      -> remaining_requests (N)

boto3 is synchronous, so every call is pushed to a worker thread with
``asyncio.to_thread`` to keep the event loop free while DynamoDB answers.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError, BotoCoreError

from ..errors import QuotaExhausted, StoreFailure, IdentityNotFound
from ..config.stores import (
    AUTH_TABLE,
    AWS_REGION,
    USERS_TABLE,
    AUTH_KEY_ATTR,
    USERS_KEY_ATTR,
    USERS_QUOTA_ATTR,
    CONNECTIONS_TABLE,
    AUTH_IDENTITY_ATTR,
    CONNECTIONS_KEY_ATTR,
    CONNECTIONS_IDENTITY_ATTR,
)

logger = logging.getLogger(__name__)

_CONDITIONAL_CHECK_FAILED = "ConditionalCheckFailedException"


def create_dynamodb_client(region: str | None = AWS_REGION) -> Any:
    return boto3.client(
        "dynamodb",
        region_name=region,
        config=Config(retries={"max_attempts": 3, "mode": "standard"}),
    )


def _error_code(exc: ClientError) -> str:
    return str(exc.response.get("Error", {}).get("Code", ""))


def _string_attr(item: dict[str, Any], name: str) -> str | None:
    value = item.get(name)
    if isinstance(value, dict) and isinstance(value.get("S"), str):
        return value["S"]
    return None


def _number_attr(item: dict[str, Any], name: str) -> int | None:
    value = item.get(name)
    if not isinstance(value, dict) or "N" not in value:
        return None
    try:
        return int(value["N"])
    except (TypeError, ValueError):
        return None


class DynamoIdentityResolver:
    def __init__(self, client: Any, *, table: str = AUTH_TABLE) -> None:
        self._client = client
        self._table = table

    async def resolve(self, credential: str) -> str:
        try:
            resp = await asyncio.to_thread(
                self._client.get_item,
                TableName=self._table,
                Key={AUTH_KEY_ATTR: {"S": credential}},
            )
        except (BotoCoreError, ClientError) as exc:
            raise StoreFailure(f"failed reading {self._table}: {exc}", operation="identity.resolve") from exc

        item = resp.get("Item")
        if not item:
            raise IdentityNotFound("unknown credential")
        identity = _string_attr(item, AUTH_IDENTITY_ATTR)
        if not identity:
            raise StoreFailure(f"{self._table} record has no {AUTH_IDENTITY_ATTR}", operation="identity.resolve")
        return identity


class DynamoQuotaStore:
    def __init__(self, client: Any, *, table: str = USERS_TABLE) -> None:
        self._client = client
        self._table = table

    async def get(self, identity: str) -> int:
        try:
            resp = await asyncio.to_thread(
                self._client.get_item,
                TableName=self._table,
                Key={USERS_KEY_ATTR: {"S": identity}},
                ConsistentRead=True,
            )
        except (BotoCoreError, ClientError) as exc:
            raise StoreFailure(f"failed reading {self._table}: {exc}", operation="quota.get") from exc

        item = resp.get("Item")
        if not item:
            raise StoreFailure(f"no quota record for identity {identity!r}", operation="quota.get")
        remaining = _number_attr(item, USERS_QUOTA_ATTR)
        if remaining is None:
            raise StoreFailure(f"{self._table} record has no numeric {USERS_QUOTA_ATTR}", operation="quota.get")
        return remaining

    async def decrement(self, identity: str, amount: int = 1) -> None:
        """Atomically subtract ``amount``; the condition keeps the counter non-negative."""
        try:
            await asyncio.to_thread(
                self._client.update_item,
                TableName=self._table,
                Key={USERS_KEY_ATTR: {"S": identity}},
                UpdateExpression="SET #rem = #rem - :decr",
                ConditionExpression="#rem >= :decr",
                ExpressionAttributeNames={"#rem": USERS_QUOTA_ATTR},
                ExpressionAttributeValues={":decr": {"N": str(amount)}},
            )
        except ClientError as exc:
            if _error_code(exc) == _CONDITIONAL_CHECK_FAILED:
                raise QuotaExhausted(f"remaining below {amount} for identity {identity!r}") from exc
            raise StoreFailure(f"failed updating {self._table}: {exc}", operation="quota.decrement") from exc
        except BotoCoreError as exc:
            raise StoreFailure(f"failed updating {self._table}: {exc}", operation="quota.decrement") from exc


class DynamoSessionBackend:
    def __init__(self, client: Any, *, table: str = CONNECTIONS_TABLE) -> None:
        self._client = client
        self._table = table

    async def put(self, connection_id: str, identity: str) -> None:
        try:
            await asyncio.to_thread(
                self._client.put_item,
                TableName=self._table,
                Item={
                    CONNECTIONS_KEY_ATTR: {"S": connection_id},
                    CONNECTIONS_IDENTITY_ATTR: {"S": identity},
                },
            )
        except (BotoCoreError, ClientError) as exc:
            raise StoreFailure(f"failed writing {self._table}: {exc}", operation="session.put") from exc

    async def get(self, connection_id: str) -> str | None:
        try:
            resp = await asyncio.to_thread(
                self._client.get_item,
                TableName=self._table,
                Key={CONNECTIONS_KEY_ATTR: {"S": connection_id}},
            )
        except (BotoCoreError, ClientError) as exc:
            raise StoreFailure(f"failed reading {self._table}: {exc}", operation="session.get") from exc
        item = resp.get("Item")
        if not item:
            return None
        return _string_attr(item, CONNECTIONS_IDENTITY_ATTR)

    async def delete(self, connection_id: str) -> None:
        # delete_item on a missing key succeeds, so repeated deletes are harmless
        try:
            await asyncio.to_thread(
                self._client.delete_item,
                TableName=self._table,
                Key={CONNECTIONS_KEY_ATTR: {"S": connection_id}},
            )
        except (BotoCoreError, ClientError) as exc:
            raise StoreFailure(f"failed deleting from {self._table}: {exc}", operation="session.delete") from exc


def build_dynamodb_stores(client: Any | None = None) -> tuple[DynamoIdentityResolver, DynamoQuotaStore, DynamoSessionBackend]:
    client = client or create_dynamodb_client()
    logger.info(
        "dynamodb stores: auth=%s connections=%s users=%s",
        AUTH_TABLE,
        CONNECTIONS_TABLE,
        USERS_TABLE,
    )
    return DynamoIdentityResolver(client), DynamoQuotaStore(client), DynamoSessionBackend(client)


__all__ = [
    "create_dynamodb_client",
    "DynamoIdentityResolver",
    "DynamoQuotaStore",
    "DynamoSessionBackend",
    "build_dynamodb_stores",
]
