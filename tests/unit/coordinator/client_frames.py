"""Unit tests for client frame encoding."""

from __future__ import annotations

import orjson
import pytest

from relay.coordinator import FrameEncoder


def test_json_frames() -> None:
    frames = FrameEncoder("json")

    assert orjson.loads(frames.token("Hel\"lo")) == {"type": "token", "text": "Hel\"lo"}
    assert orjson.loads(frames.error("timeout", "Request timeout")) == {
        "type": "error",
        "error_code": "timeout",
        "message": "Request timeout",
    }
    assert orjson.loads(frames.done()) == {"type": "done"}


def test_text_frames_are_verbatim_and_have_no_done() -> None:
    frames = FrameEncoder("text")

    assert frames.token(" world") == " world"
    assert frames.error("quota_exhausted", "no tokens") == "no tokens"
    assert frames.done() is None


def test_unknown_format_is_rejected() -> None:
    with pytest.raises(ValueError):
        FrameEncoder("xml")
