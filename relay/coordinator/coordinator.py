"""Relay Coordinator: connection lifecycle, quota gate and streaming relay.

The Coordinator is the single owner of per-connection state. Connection
drivers (the FastAPI WebSocket handler, the API Gateway Lambda) call three
entry points and get a ``RelayResult`` back from each:

    on_connect(connection_id, credential)
        Resolve the credential to an identity and persist the session.

    on_message(connection_id, raw_request)
        Check quota, validate and render the request, then relay the upstream
        stream to the client until completion, failure or the deadline.
        Every relay ends by closing the connection.

    on_disconnect(connection_id)
        Remove the session. Safe to call any number of times.

Streaming runs the decoder as a producer task feeding a one-slot channel;
this coroutine is the only consumer and the only code that touches the push
transport and the stores for the connection. Whatever ends the relay, the
producer is cancelled and awaited before the close path runs, and the close
path itself runs exactly once per connection.
"""

from __future__ import annotations

import time
import uuid
import asyncio
import logging
from typing import Any, Protocol
from dataclasses import dataclass
from collections.abc import AsyncIterator

from ..logging import log_context
from ..prompts import PromptParts
from .frames import FrameEncoder
from ..stores.base import QuotaState, QuotaStore, IdentityResolver
from ..transport.base import PushTransport
from ..stores.sessions import ConnectionSessionStore
from .channel import RelayChannel, StreamFailure
from ..telemetry import get_metrics, capture_error, add_breadcrumb
from .states import RelayState, RelayResult, RelayOutcome
from ..upstream.types import StreamItem, RelayRequest, TextIncrement
from ..errors import (
    StoreFailure,
    QuotaExhausted,
    ClientSendFailure,
    ValidationFailure,
    AuthenticationFailure,
)
from ..config.relay import (
    MSG_TIMEOUT,
    MSG_NO_QUOTA,
    RELAY_TIMEOUT_S,
    MSG_AUTH_FAILED,
    MSG_STORE_FAILED,
    MSG_AUTH_REQUIRED,
    RELAY_FRAME_FORMAT,
    MSG_UPSTREAM_PREFIX,
    MSG_QUOTA_CHECK_FAILED,
    MSG_SESSION_LOOKUP_FAILED,
)
from ..config.websocket import (
    WS_CLOSE_NORMAL_CODE,
    WS_CLOSE_POLICY_CODE,
    WS_CLOSE_INTERNAL_CODE,
)

logger = logging.getLogger(__name__)


class UpstreamStreamer(Protocol):
    def build_request(self, content: str, system: str) -> RelayRequest: ...

    def stream(self, request: RelayRequest) -> AsyncIterator[StreamItem]: ...


class PromptSource(Protocol):
    def build(self, raw_request: str | bytes) -> PromptParts: ...


_CLOSE_CODES: dict[RelayOutcome, int] = {
    RelayOutcome.COMPLETED: WS_CLOSE_NORMAL_CODE,
    RelayOutcome.AUTHENTICATION_FAILED: WS_CLOSE_POLICY_CODE,
    RelayOutcome.QUOTA_EXHAUSTED: WS_CLOSE_POLICY_CODE,
    RelayOutcome.VALIDATION_ERROR: WS_CLOSE_POLICY_CODE,
}


@dataclass(slots=True)
class _ConnectionRecord:
    connection_id: str
    state: RelayState = RelayState.CONNECTED
    identity: str | None = None
    closed: bool = False
    session_removed: bool = False


class RelayCoordinator:
    """Drives one relay per connection from authentication to close."""

    def __init__(
        self,
        *,
        identity_resolver: IdentityResolver,
        quota_store: QuotaStore,
        sessions: ConnectionSessionStore,
        transport: PushTransport,
        upstream: UpstreamStreamer,
        prompt_builder: PromptSource,
        relay_timeout_s: float = RELAY_TIMEOUT_S,
        frame_format: str = RELAY_FRAME_FORMAT,
    ) -> None:
        self._identity_resolver = identity_resolver
        self._quota_store = quota_store
        self._sessions = sessions
        self._transport = transport
        self._upstream = upstream
        self._prompt_builder = prompt_builder
        self._relay_timeout_s = relay_timeout_s
        self._frames = FrameEncoder(frame_format)
        self._records: dict[str, _ConnectionRecord] = {}

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def state_of(self, connection_id: str) -> RelayState | None:
        record = self._records.get(connection_id)
        return record.state if record is not None else None

    def _record(self, connection_id: str) -> _ConnectionRecord:
        record = self._records.get(connection_id)
        if record is None:
            record = _ConnectionRecord(connection_id=connection_id)
            self._records[connection_id] = record
        return record

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    async def on_connect(self, connection_id: str, credential: str | None) -> RelayResult:
        with log_context(connection_id=connection_id):
            record = _ConnectionRecord(connection_id=connection_id)
            self._records[connection_id] = record

            if not credential:
                logger.info("connect rejected: no credential")
                return await self._fail(
                    record,
                    RelayOutcome.AUTHENTICATION_FAILED,
                    "authentication_required",
                    MSG_AUTH_REQUIRED,
                )

            try:
                identity = await self._identity_resolver.resolve(credential)
            except AuthenticationFailure as exc:
                logger.info("connect rejected: %s", exc.message)
                return await self._fail(record, RelayOutcome.AUTHENTICATION_FAILED, exc.error_code, MSG_AUTH_FAILED)
            except StoreFailure as exc:
                logger.warning("identity lookup failed: %s", exc.message)
                self._count_store_error(exc)
                return await self._fail(record, RelayOutcome.AUTHENTICATION_FAILED, exc.error_code, MSG_AUTH_FAILED)

            with log_context(identity=identity):
                try:
                    await self._sessions.create(connection_id, identity)
                except StoreFailure as exc:
                    logger.warning("session write failed: %s", exc.message)
                    self._count_store_error(exc)
                    return await self._fail(record, RelayOutcome.STORE_ERROR, exc.error_code, MSG_STORE_FAILED)

                record.identity = identity
                record.state = RelayState.AUTHENTICATED
                logger.info("connection authenticated")
                return RelayResult(outcome=RelayOutcome.ACCEPTED, state=record.state)

    async def on_message(self, connection_id: str, raw_request: str | bytes) -> RelayResult:
        with log_context(connection_id=connection_id, request_id=uuid.uuid4().hex[:12]):
            record = self._record(connection_id)
            if record.closed:
                logger.debug("message ignored on closed connection")
                return RelayResult(outcome=RelayOutcome.DISCONNECTED, state=RelayState.CLOSED)

            try:
                session = await self._sessions.lookup(connection_id)
            except StoreFailure as exc:
                logger.warning("session lookup failed: %s", exc.message)
                self._count_store_error(exc)
                return await self._fail(record, RelayOutcome.STORE_ERROR, exc.error_code, MSG_SESSION_LOOKUP_FAILED)
            if session is None:
                logger.info("message rejected: no session for connection")
                return await self._fail(
                    record,
                    RelayOutcome.AUTHENTICATION_FAILED,
                    "authentication_required",
                    MSG_AUTH_REQUIRED,
                )

            record.identity = session.identity
            record.state = RelayState.AUTHENTICATED
            with log_context(identity=session.identity):
                return await self._relay(record, raw_request)

    async def on_disconnect(self, connection_id: str) -> RelayResult:
        with log_context(connection_id=connection_id):
            record = self._records.pop(connection_id, None)
            if record is not None and record.closed and record.session_removed:
                return RelayResult(outcome=RelayOutcome.DISCONNECTED, state=RelayState.CLOSED)

            if record is not None:
                record.closed = True
                record.state = RelayState.CLOSED
            try:
                await self._sessions.remove(connection_id)
            except StoreFailure as exc:
                logger.warning("session delete on disconnect failed: %s", exc.message)
                self._count_store_error(exc)
            logger.info("client disconnected")
            return RelayResult(outcome=RelayOutcome.DISCONNECTED, state=RelayState.CLOSED)

    # ------------------------------------------------------------------
    # Relay
    # ------------------------------------------------------------------

    async def _relay(self, record: _ConnectionRecord, raw_request: str | bytes) -> RelayResult:
        identity = record.identity or ""
        try:
            remaining = await self._quota_store.get(identity)
        except StoreFailure as exc:
            logger.warning("quota read failed: %s", exc.message)
            self._count_store_error(exc)
            return await self._fail(record, RelayOutcome.STORE_ERROR, exc.error_code, MSG_QUOTA_CHECK_FAILED)

        quota = QuotaState(identity=identity, remaining=remaining)
        if quota.exhausted:
            logger.info("relay rejected: quota exhausted")
            return await self._fail(record, RelayOutcome.QUOTA_EXHAUSTED, QuotaExhausted.default_error_code, MSG_NO_QUOTA)
        record.state = RelayState.QUOTA_CHECKED

        try:
            parts = self._prompt_builder.build(raw_request)
        except ValidationFailure as exc:
            logger.info("relay rejected: %s (%s)", exc.message, exc.error_code)
            return await self._fail(record, RelayOutcome.VALIDATION_ERROR, exc.error_code, exc.message)

        request = self._upstream.build_request(parts.content, parts.system)
        logger.info("relay starting type=%s remaining=%s", parts.request_type, quota.remaining)
        add_breadcrumb("relay started", category="relay", data={"request_type": parts.request_type})
        return await self._stream(record, request)

    async def _stream(self, record: _ConnectionRecord, request: RelayRequest) -> RelayResult:
        record.state = RelayState.STREAMING
        metrics = get_metrics()
        loop = asyncio.get_running_loop()
        started = loop.time()
        deadline = started + self._relay_timeout_s
        sent = 0
        terminal: Any = None

        channel = RelayChannel()
        channel.start(self._upstream.stream(request))
        try:
            while True:
                try:
                    item = await channel.receive(deadline - loop.time())
                except asyncio.TimeoutError:
                    terminal = asyncio.TimeoutError()
                    break

                if isinstance(item, TextIncrement):
                    try:
                        await self._transport.send(record.connection_id, self._frames.token(item.text))
                    except ClientSendFailure as exc:
                        terminal = exc
                        break
                    if sent == 0:
                        metrics.ttft.record(loop.time() - started)
                    sent += 1
                    continue

                terminal = item
                break
        finally:
            await channel.aclose()

        metrics.relay_latency.record(loop.time() - started)
        if sent:
            metrics.increments_forwarded_total.add(sent)

        if isinstance(terminal, asyncio.TimeoutError):
            logger.warning("relay timed out after %.1fs increments=%s", self._relay_timeout_s, sent)
            return await self._fail(record, RelayOutcome.TIMEOUT, "timeout", MSG_TIMEOUT, sent=sent)
        if isinstance(terminal, ClientSendFailure):
            logger.info("client send failed: %s increments=%s", terminal.message, sent)
            return await self._fail(
                record,
                RelayOutcome.CLIENT_SEND_ERROR,
                terminal.error_code,
                terminal.message,
                sent=sent,
                notify=False,
            )
        if isinstance(terminal, StreamFailure):
            error = terminal.error
            logger.warning("upstream failed: %s increments=%s", error, sent)
            capture_error(error, extra={"increments_sent": sent})
            error_code = getattr(error, "error_code", "upstream_error")
            return await self._fail(
                record,
                RelayOutcome.UPSTREAM_ERROR,
                error_code,
                f"{MSG_UPSTREAM_PREFIX}: {error}",
                sent=sent,
            )
        return await self._complete(record, sent)

    async def _complete(self, record: _ConnectionRecord, sent: int) -> RelayResult:
        record.state = RelayState.COMPLETING
        metrics = get_metrics()
        try:
            await self._quota_store.decrement(record.identity or "", 1)
        except (StoreFailure, QuotaExhausted) as exc:
            logger.warning("quota decrement failed after completed relay: %s", exc.message)
            metrics.quota_decrements_total.add(1, {"status": "error"})
            if isinstance(exc, StoreFailure):
                self._count_store_error(exc)
        else:
            metrics.quota_decrements_total.add(1, {"status": "ok"})

        logger.info("relay completed increments=%s", sent)
        await self._close(record, self._frames.done(), WS_CLOSE_NORMAL_CODE)
        metrics.relays_total.add(1, {"outcome": RelayOutcome.COMPLETED.value})
        return RelayResult(
            outcome=RelayOutcome.COMPLETED,
            state=record.state,
            increments_sent=sent,
        )

    # ------------------------------------------------------------------
    # Failure and close path
    # ------------------------------------------------------------------

    async def _fail(
        self,
        record: _ConnectionRecord,
        outcome: RelayOutcome,
        error_code: str,
        message: str,
        *,
        sent: int = 0,
        notify: bool = True,
    ) -> RelayResult:
        record.state = RelayState.FAILING
        frame = self._frames.error(error_code, message) if notify else None
        await self._close(record, frame, _CLOSE_CODES.get(outcome, WS_CLOSE_INTERNAL_CODE))
        get_metrics().relays_total.add(1, {"outcome": outcome.value})
        return RelayResult(
            outcome=outcome,
            state=record.state,
            error_code=error_code,
            message=message,
            increments_sent=sent,
        )

    async def _close(self, record: _ConnectionRecord, frame: str | None, code: int) -> None:
        """Send the final frame, release the client and drop the session, once."""
        if record.closed:
            return
        record.closed = True
        cid = record.connection_id
        t0 = time.monotonic()

        if frame is not None:
            try:
                await self._transport.send(cid, frame)
            except ClientSendFailure as exc:
                logger.debug("final frame not delivered: %s", exc.message)

        try:
            await self._transport.close(cid, code=code)
        except Exception as exc:  # noqa: BLE001
            logger.warning("transport close failed: %s", exc)

        try:
            await self._sessions.remove(cid)
            record.session_removed = True
        except Exception as exc:  # noqa: BLE001
            logger.warning("session delete failed: %s", exc)
            if isinstance(exc, StoreFailure):
                self._count_store_error(exc)

        record.state = RelayState.CLOSED
        logger.debug("connection closed code=%s cleanup=%.3fs", code, time.monotonic() - t0)

    @staticmethod
    def _count_store_error(exc: StoreFailure) -> None:
        get_metrics().store_errors_total.add(1, {"operation": exc.operation or "unknown"})


__all__ = ["RelayCoordinator", "UpstreamStreamer", "PromptSource"]
