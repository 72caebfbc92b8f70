"""Unit tests for logging context fields and error reporting."""

from __future__ import annotations

import logging

import pytest

import relay.telemetry.sentry as sentry_mod
from relay.errors import ClientSendFailure, UpstreamTransportFailure
from relay.logging import log_context, current_log_context, install_log_context


def test_log_context_nests_and_resets() -> None:
    assert current_log_context() == {"connection_id": "-", "request_id": "-", "identity": "-"}

    with log_context(connection_id="c1"):
        with log_context(request_id="r1", identity="u1"):
            assert current_log_context() == {"connection_id": "c1", "request_id": "r1", "identity": "u1"}
        assert current_log_context()["request_id"] == "-"
        assert current_log_context()["connection_id"] == "c1"

    assert current_log_context()["connection_id"] == "-"


def test_installed_record_factory_adds_context_fields() -> None:
    install_log_context()
    install_log_context()

    with log_context(connection_id="c9", identity="u9"):
        record = logging.getLogRecordFactory()("relay", logging.INFO, __file__, 1, "msg", (), None)

    assert record.connection_id == "c9"
    assert record.identity == "u9"
    assert record.request_id == "-"


def test_capture_error_is_noop_until_initialized(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: list[BaseException] = []
    monkeypatch.setattr(sentry_mod, "_initialized", False)
    monkeypatch.setattr("sentry_sdk.capture_exception", captured.append)

    sentry_mod.capture_error(RuntimeError("boom"))

    assert captured == []


def test_capture_error_rate_limits_per_error_class(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: list[BaseException] = []
    monkeypatch.setattr(sentry_mod, "_initialized", True)
    monkeypatch.setattr(sentry_mod, "_error_timestamps", {})
    monkeypatch.setattr(sentry_mod, "SENTRY_RATE_LIMIT_S", 60.0)
    monkeypatch.setattr("sentry_sdk.capture_exception", captured.append)

    first = RuntimeError("first")
    sentry_mod.capture_error(first, connection_id="c1", extra={"increments_sent": 2})
    sentry_mod.capture_error(RuntimeError("second"))
    other = ValueError("other class")
    sentry_mod.capture_error(other)

    assert captured == [first, other]


def test_client_disconnects_are_never_reported(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: list[BaseException] = []
    monkeypatch.setattr(sentry_mod, "_initialized", True)
    monkeypatch.setattr(sentry_mod, "_error_timestamps", {})
    monkeypatch.setattr("sentry_sdk.capture_exception", captured.append)

    sentry_mod.capture_error(ClientSendFailure("client went away"))

    assert captured == []
    assert sentry_mod._error_timestamps == {}


def test_before_send_drops_client_disconnect_events() -> None:
    event = {"message": "x"}
    gone = ClientSendFailure("client went away")
    upstream = UpstreamTransportFailure("connect refused")

    assert sentry_mod._before_send(event, {"exc_info": (type(gone), gone, None)}) is None
    assert sentry_mod._before_send(event, {"exc_info": (type(upstream), upstream, None)}) is event
    assert sentry_mod._before_send(event, {}) is event


def test_capture_error_throttles_by_category(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: list[BaseException] = []
    monkeypatch.setattr(sentry_mod, "_initialized", True)
    monkeypatch.setattr(sentry_mod, "_error_timestamps", {})
    monkeypatch.setattr(sentry_mod, "SENTRY_RATE_LIMIT_S", 60.0)
    monkeypatch.setattr("sentry_sdk.capture_exception", captured.append)

    sentry_mod.capture_error(UpstreamTransportFailure("first"))
    sentry_mod.capture_error(UpstreamTransportFailure("second"))

    assert len(captured) == 1
    assert ("upstream_transport", "UpstreamTransportFailure") in sentry_mod._error_timestamps
