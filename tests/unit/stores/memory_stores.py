"""Unit tests for the in-process store backends."""

from __future__ import annotations

import asyncio

import pytest

from relay.errors import QuotaExhausted, StoreFailure, IdentityNotFound
from relay.stores.memory import (
    MemoryQuotaStore,
    MemorySessionBackend,
    MemoryIdentityResolver,
    build_memory_stores,
    parse_dev_credentials,
)


def test_parse_dev_credentials() -> None:
    credentials, remaining = parse_dev_credentials(" devkey:user-1:10, otherkey:user-2:0 ,")

    assert credentials == {"devkey": "user-1", "otherkey": "user-2"}
    assert remaining == {"user-1": 10, "user-2": 0}


def test_parse_dev_credentials_empty() -> None:
    assert parse_dev_credentials("") == ({}, {})


@pytest.mark.parametrize("raw", ["devkey:user-1", "devkey::3", "devkey:user-1:many"])
def test_parse_dev_credentials_rejects_malformed_entries(raw: str) -> None:
    with pytest.raises(ValueError, match="RELAY_DEV_CREDENTIALS"):
        parse_dev_credentials(raw)


def test_identity_resolver() -> None:
    async def _run() -> None:
        resolver = MemoryIdentityResolver({"k": "u1"})
        assert await resolver.resolve("k") == "u1"
        with pytest.raises(IdentityNotFound):
            await resolver.resolve("missing")

    asyncio.run(_run())


def test_quota_decrement_never_goes_below_zero() -> None:
    async def _run() -> None:
        store = MemoryQuotaStore({"u1": 1})

        await store.decrement("u1")
        assert await store.get("u1") == 0

        with pytest.raises(QuotaExhausted):
            await store.decrement("u1")
        assert store.remaining("u1") == 0

    asyncio.run(_run())


def test_concurrent_decrements_only_one_wins() -> None:
    async def _run() -> list:
        store = MemoryQuotaStore({"u1": 1})
        return await asyncio.gather(
            store.decrement("u1"),
            store.decrement("u1"),
            store.decrement("u1"),
            return_exceptions=True,
        )

    results = asyncio.run(_run())
    assert results.count(None) == 1
    assert sum(isinstance(r, QuotaExhausted) for r in results) == 2


def test_quota_unknown_identity_is_store_failure() -> None:
    async def _run() -> None:
        store = MemoryQuotaStore()
        with pytest.raises(StoreFailure) as exc_info:
            await store.get("ghost")
        assert exc_info.value.operation == "quota.get"
        with pytest.raises(StoreFailure):
            await store.decrement("ghost")

    asyncio.run(_run())


def test_session_backend_delete_is_idempotent() -> None:
    async def _run() -> None:
        backend = MemorySessionBackend()
        await backend.put("c1", "u1")
        assert await backend.get("c1") == "u1"
        assert "c1" in backend

        await backend.delete("c1")
        await backend.delete("c1")

        assert await backend.get("c1") is None
        assert len(backend) == 0

    asyncio.run(_run())


def test_build_memory_stores_wires_seed_into_each_store() -> None:
    async def _run() -> None:
        resolver, quota, sessions = build_memory_stores("devkey:user-1:4")
        identity = await resolver.resolve("devkey")
        assert identity == "user-1"
        assert await quota.get(identity) == 4
        assert len(sessions) == 0

    asyncio.run(_run())
