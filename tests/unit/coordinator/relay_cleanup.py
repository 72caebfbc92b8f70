"""Close-path, cleanup and cancellation behaviour of the Coordinator."""

from __future__ import annotations

import asyncio

from relay.coordinator import RelayState, RelayOutcome
from relay.config.relay import MSG_TIMEOUT, MSG_STORE_FAILED, MSG_QUOTA_CHECK_FAILED, MSG_SESSION_LOOKUP_FAILED
from tests.helpers.fakes import (
    MESSAGE_STOP,
    FakeTransport,
    LineUpstream,
    FailingQuotaStore,
    FailingSessionBackend,
    delta,
    event_lines,
    trip_request,
    build_harness,
)


def test_timeout_fails_relay_and_cancels_producer() -> None:
    async def _run() -> None:
        upstream = LineUpstream(event_lines(delta("slow")), hang=True)
        h = build_harness(upstream=upstream, remaining=1, relay_timeout_s=0.05)

        await h.coordinator.on_connect("c1", "key-1")
        result = await h.coordinator.on_message("c1", trip_request())

        assert result.outcome is RelayOutcome.TIMEOUT
        assert result.error_code == "timeout"
        assert h.transport.payloads("c1") == ["slow", MSG_TIMEOUT]
        assert upstream.streams_finalized == 1
        assert h.quota.remaining("u1") == 1
        assert "c1" not in h.sessions
        assert h.transport.closes == [("c1", 1011)]

    asyncio.run(_run())


def test_client_send_failure_stops_forwarding_and_releases_blocked_producer() -> None:
    async def _run() -> None:
        blocks = [delta(str(i)) for i in range(20)] + [MESSAGE_STOP]
        upstream = LineUpstream(event_lines(*blocks))
        transport = FakeTransport(fail_send_after=1)
        h = build_harness(upstream=upstream, transport=transport, remaining=1)

        await h.coordinator.on_connect("c1", "key-1")
        result = await h.coordinator.on_message("c1", trip_request())

        assert result.outcome is RelayOutcome.CLIENT_SEND_ERROR
        assert result.increments_sent == 1
        # no error frame is attempted after a failed send
        assert transport.payloads("c1") == ["0"]
        assert upstream.streams_finalized == 1
        assert h.quota.remaining("u1") == 1
        assert transport.closes == [("c1", 1011)]
        assert "c1" not in h.sessions

    asyncio.run(_run())


def test_close_path_runs_once_per_connection() -> None:
    async def _run() -> None:
        upstream = LineUpstream(event_lines(delta("x"), MESSAGE_STOP))
        backend = FailingSessionBackend()
        h = build_harness(upstream=upstream, sessions=backend)

        await h.coordinator.on_connect("c1", "key-1")
        await h.coordinator.on_message("c1", trip_request())
        late = await h.coordinator.on_message("c1", trip_request())
        await h.coordinator.on_disconnect("c1")

        assert late.outcome is RelayOutcome.DISCONNECTED
        assert upstream.streams_started == 1
        assert h.transport.closes == [("c1", 1000)]
        assert backend.delete_calls == 1

    asyncio.run(_run())


def test_cleanup_continues_when_close_and_delete_fail() -> None:
    async def _run() -> None:
        upstream = LineUpstream(event_lines(delta("x"), MESSAGE_STOP))
        transport = FakeTransport(fail_close=True)
        backend = FailingSessionBackend(fail_delete=True)
        h = build_harness(upstream=upstream, transport=transport, sessions=backend, remaining=2)

        await h.coordinator.on_connect("c1", "key-1")
        result = await h.coordinator.on_message("c1", trip_request())

        assert result.outcome is RelayOutcome.COMPLETED
        assert result.state is RelayState.CLOSED
        assert transport.closes == [("c1", 1000)]
        assert backend.delete_calls == 1
        assert h.quota.remaining("u1") == 1

    asyncio.run(_run())


def test_decrement_failure_after_completion_is_logged_not_escalated() -> None:
    async def _run() -> None:
        quota = FailingQuotaStore({"u1": 1}, fail_decrement=True)
        upstream = LineUpstream(event_lines(delta("x"), MESSAGE_STOP))
        h = build_harness(upstream=upstream, quota=quota)

        await h.coordinator.on_connect("c1", "key-1")
        result = await h.coordinator.on_message("c1", trip_request())

        assert result.outcome is RelayOutcome.COMPLETED
        assert quota.decrement_calls == 1
        assert h.transport.closes == [("c1", 1000)]
        assert "c1" not in h.sessions

    asyncio.run(_run())


def test_failed_relays_never_attempt_a_decrement() -> None:
    async def _run() -> None:
        quota = FailingQuotaStore({"u1": 5})
        upstream = LineUpstream(event_lines(delta("x")))
        h = build_harness(upstream=upstream, quota=quota)

        await h.coordinator.on_connect("c1", "key-1")
        result = await h.coordinator.on_message("c1", trip_request())

        assert result.outcome is RelayOutcome.UPSTREAM_ERROR
        assert quota.decrement_calls == 0

    asyncio.run(_run())


def test_quota_read_failure_is_store_error() -> None:
    async def _run() -> None:
        quota = FailingQuotaStore({"u1": 5}, fail_get=True)
        upstream = LineUpstream(event_lines(MESSAGE_STOP))
        h = build_harness(upstream=upstream, quota=quota)

        await h.coordinator.on_connect("c1", "key-1")
        result = await h.coordinator.on_message("c1", trip_request())

        assert result.outcome is RelayOutcome.STORE_ERROR
        assert result.message == MSG_QUOTA_CHECK_FAILED
        assert upstream.streams_started == 0
        assert "c1" not in h.sessions

    asyncio.run(_run())


def test_session_write_failure_rejects_connection() -> None:
    async def _run() -> None:
        backend = FailingSessionBackend(fail_put=True)
        h = build_harness(sessions=backend)

        result = await h.coordinator.on_connect("c1", "key-1")

        assert result.outcome is RelayOutcome.STORE_ERROR
        assert result.message == MSG_STORE_FAILED
        assert result.closed
        assert h.transport.closes == [("c1", 1011)]

    asyncio.run(_run())


def test_session_lookup_failure_is_store_error() -> None:
    async def _run() -> None:
        backend = FailingSessionBackend()
        h = build_harness(sessions=backend)

        await h.coordinator.on_connect("c1", "key-1")
        backend.fail_get = True
        result = await h.coordinator.on_message("c1", trip_request())

        assert result.outcome is RelayOutcome.STORE_ERROR
        assert result.message == MSG_SESSION_LOOKUP_FAILED
        assert h.upstream.streams_started == 0

    asyncio.run(_run())


def test_message_without_session_requires_authentication() -> None:
    async def _run() -> None:
        h = build_harness()

        result = await h.coordinator.on_message("stranger", trip_request())

        assert result.outcome is RelayOutcome.AUTHENTICATION_FAILED
        assert result.error_code == "authentication_required"
        assert h.upstream.streams_started == 0
        assert h.transport.closes == [("stranger", 1008)]

    asyncio.run(_run())


def test_on_disconnect_removes_session_and_is_idempotent() -> None:
    async def _run() -> None:
        h = build_harness()

        await h.coordinator.on_connect("c1", "key-1")
        assert "c1" in h.sessions

        first = await h.coordinator.on_disconnect("c1")
        second = await h.coordinator.on_disconnect("c1")

        assert first.outcome is RelayOutcome.DISCONNECTED
        assert second.outcome is RelayOutcome.DISCONNECTED
        assert second.closed
        assert "c1" not in h.sessions
        assert h.coordinator.state_of("c1") is None
        # the driver already lost the socket; nothing is pushed to it
        assert h.transport.sends == []
        assert h.transport.closes == []

    asyncio.run(_run())


def test_on_disconnect_tolerates_delete_failure() -> None:
    async def _run() -> None:
        backend = FailingSessionBackend(fail_delete=True)
        h = build_harness(sessions=backend)

        await h.coordinator.on_connect("c1", "key-1")
        result = await h.coordinator.on_disconnect("c1")

        assert result.outcome is RelayOutcome.DISCONNECTED
        assert backend.delete_calls == 1

    asyncio.run(_run())


def test_harness_keeps_an_empty_session_backend() -> None:
    backend = FailingSessionBackend(fail_put=True)
    h = build_harness(sessions=backend)

    assert len(backend) == 0
    assert h.sessions is backend


def test_on_disconnect_retries_delete_that_failed_on_close() -> None:
    async def _run() -> None:
        upstream = LineUpstream(event_lines(delta("x"), MESSAGE_STOP))
        backend = FailingSessionBackend(fail_delete=True)
        h = build_harness(upstream=upstream, sessions=backend, remaining=2)

        await h.coordinator.on_connect("c1", "key-1")
        result = await h.coordinator.on_message("c1", trip_request())
        assert result.state is RelayState.CLOSED
        assert "c1" in backend

        backend.fail_delete = False
        await h.coordinator.on_disconnect("c1")

        assert backend.delete_calls == 2
        assert "c1" not in backend
        assert h.transport.closes == [("c1", 1000)]

    asyncio.run(_run())
