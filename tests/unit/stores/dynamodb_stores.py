"""Unit tests for the DynamoDB store backends against a fake low-level client."""

from __future__ import annotations

import asyncio

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError

from relay.errors import QuotaExhausted, StoreFailure, IdentityNotFound
from relay.stores.dynamodb import (
    DynamoQuotaStore,
    DynamoSessionBackend,
    DynamoIdentityResolver,
    build_dynamodb_stores,
)


def _client_error(code: str, operation: str) -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": code}}, operation)


class _FakeDynamo:
    def __init__(self) -> None:
        self.tables: dict[str, dict[str, dict]] = {"AUTH": {}, "WS_CONNECTIONS": {}, "USERS": {}}
        self.calls: list[tuple[str, dict]] = []
        self.fail_with: Exception | None = None

    def _key(self, key: dict) -> str:
        ((_, value),) = key.items()
        return value["S"]

    def _check(self, name: str, kwargs: dict) -> None:
        self.calls.append((name, kwargs))
        if self.fail_with is not None:
            raise self.fail_with

    def get_item(self, **kwargs):
        self._check("get_item", kwargs)
        item = self.tables[kwargs["TableName"]].get(self._key(kwargs["Key"]))
        return {"Item": item} if item is not None else {}

    def put_item(self, **kwargs):
        self._check("put_item", kwargs)
        item = kwargs["Item"]
        self.tables[kwargs["TableName"]][item["connection_id"]["S"]] = item
        return {}

    def delete_item(self, **kwargs):
        self._check("delete_item", kwargs)
        self.tables[kwargs["TableName"]].pop(self._key(kwargs["Key"]), None)
        return {}

    def update_item(self, **kwargs):
        self._check("update_item", kwargs)
        item = self.tables[kwargs["TableName"]].get(self._key(kwargs["Key"]))
        amount = int(kwargs["ExpressionAttributeValues"][":decr"]["N"])
        current = int(item["remaining_requests"]["N"]) if item else None
        if current is None or current < amount:
            raise _client_error("ConditionalCheckFailedException", "UpdateItem")
        item["remaining_requests"] = {"N": str(current - amount)}
        return {}


def test_identity_resolver_reads_auth_table() -> None:
    async def _run() -> None:
        client = _FakeDynamo()
        client.tables["AUTH"]["key-1"] = {"key": {"S": "key-1"}, "user_hash": {"S": "u1"}}
        resolver = DynamoIdentityResolver(client)

        assert await resolver.resolve("key-1") == "u1"
        with pytest.raises(IdentityNotFound):
            await resolver.resolve("other")

        client.tables["AUTH"]["broken"] = {"key": {"S": "broken"}}
        with pytest.raises(StoreFailure):
            await resolver.resolve("broken")

    asyncio.run(_run())


def test_quota_get_uses_consistent_read() -> None:
    async def _run() -> None:
        client = _FakeDynamo()
        client.tables["USERS"]["u1"] = {"user_hash": {"S": "u1"}, "remaining_requests": {"N": "3"}}
        store = DynamoQuotaStore(client)

        assert await store.get("u1") == 3
        name, kwargs = client.calls[-1]
        assert name == "get_item"
        assert kwargs["ConsistentRead"] is True

        with pytest.raises(StoreFailure):
            await store.get("ghost")

    asyncio.run(_run())


def test_quota_decrement_is_conditional() -> None:
    async def _run() -> None:
        client = _FakeDynamo()
        client.tables["USERS"]["u1"] = {"user_hash": {"S": "u1"}, "remaining_requests": {"N": "1"}}
        store = DynamoQuotaStore(client)

        await store.decrement("u1")
        assert client.tables["USERS"]["u1"]["remaining_requests"] == {"N": "0"}
        _, kwargs = client.calls[-1]
        assert kwargs["ConditionExpression"] == "#rem >= :decr"
        assert kwargs["ExpressionAttributeNames"] == {"#rem": "remaining_requests"}

        with pytest.raises(QuotaExhausted):
            await store.decrement("u1")

    asyncio.run(_run())


def test_quota_decrement_other_errors_are_store_failures() -> None:
    async def _run() -> None:
        client = _FakeDynamo()
        store = DynamoQuotaStore(client)

        client.fail_with = _client_error("ProvisionedThroughputExceededException", "UpdateItem")
        with pytest.raises(StoreFailure) as exc_info:
            await store.decrement("u1")
        assert exc_info.value.operation == "quota.decrement"

        client.fail_with = EndpointConnectionError(endpoint_url="https://dynamodb.test")
        with pytest.raises(StoreFailure):
            await store.decrement("u1")

    asyncio.run(_run())


def test_session_backend_round_trip_and_errors() -> None:
    async def _run() -> None:
        client = _FakeDynamo()
        backend = DynamoSessionBackend(client)

        await backend.put("c1", "u1")
        assert await backend.get("c1") == "u1"
        await backend.delete("c1")
        await backend.delete("c1")
        assert await backend.get("c1") is None

        client.fail_with = _client_error("InternalServerError", "PutItem")
        with pytest.raises(StoreFailure) as exc_info:
            await backend.put("c2", "u1")
        assert exc_info.value.operation == "session.put"

    asyncio.run(_run())


def test_build_dynamodb_stores_shares_client() -> None:
    client = _FakeDynamo()

    resolver, quota, sessions = build_dynamodb_stores(client)

    assert isinstance(resolver, DynamoIdentityResolver)
    assert isinstance(quota, DynamoQuotaStore)
    assert isinstance(sessions, DynamoSessionBackend)
